"""End-to-end tests for the click command."""

import json

import pytest
from click.testing import CliRunner

import cc_session_stats
from cc_session_stats import cli
from conftest import make_transcript

PROJECT = "-home-alice-projects-foo"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def populated(claude_dir):
    """Three sessions on the same day in project foo."""
    make_transcript(claude_dir, PROJECT, "a.jsonl", "2026-01-05T09:00:00Z", "2026-01-05T10:30:00Z")
    make_transcript(claude_dir, PROJECT, "b.jsonl", "2026-01-05T09:00:00Z", "2026-01-05T09:05:00Z")
    make_transcript(claude_dir, PROJECT, "c.jsonl", "2026-01-05T14:00:00Z", "2026-01-05T14:00:00Z")
    return claude_dir


def _run(runner, *args):
    return runner.invoke(cli, [*args, "--tz", "UTC"])


class TestJsonMode:

    def test_end_to_end(self, runner, populated):
        result = _run(runner, "--json", "--claude-dir", str(populated))
        assert result.exit_code == 0, result.output
        out = json.loads(result.stdout)
        assert out["totalSessions"] == 3
        assert out["totalHours"] == 1.58
        assert out["topProjects"] == [{"name": "foo", "hours": 1.58}]
        assert out["streak"] == 1
        assert out["activeDays"] == 1
        assert out["totalDaysSpan"] == 1
        assert out["longestSession"] == {"hours": 1.5, "date": "2026-01-05", "project": "foo"}
        assert out["healthWarnings"] == []

    def test_no_sessions(self, runner, claude_dir):
        result = _run(runner, "--json", "--claude-dir", str(claude_dir))
        assert result.exit_code == 1
        assert json.loads(result.stdout) == {"error": "No sessions found"}

    def test_missing_root(self, runner, tmp_path):
        result = _run(runner, "--json", "--claude-dir", str(tmp_path / "nope"))
        assert result.exit_code == 1
        assert json.loads(result.stdout) == {"error": "No sessions found"}


class TestHumanMode:

    def test_report(self, runner, populated):
        result = _run(runner, "--claude-dir", str(populated))
        assert result.exit_code == 0, result.output
        assert "Claude Code Session Stats" in result.output
        assert "Sessions:     3" in result.output
        assert "Longest consecutive days: 1" in result.output
        assert "My Claude Code Stats: 3 sessions" in result.output

    def test_no_sessions(self, runner, claude_dir):
        result = _run(runner, "--claude-dir", str(claude_dir))
        assert result.exit_code == 1
        assert "No Claude Code sessions found" in result.output

    def test_claude_dir_from_env(self, runner, populated):
        result = runner.invoke(
            cli, ["--json", "--tz", "UTC"], env={"CLAUDE_CONFIG_DIR": str(populated)}
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["totalSessions"] == 3


class TestErrors:

    def test_unexpected_failure(self, runner, populated, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(cc_session_stats, "scan_sessions", boom)
        result = _run(runner, "--claude-dir", str(populated))
        assert result.exit_code == 1
        assert "Error: disk on fire" in result.output

    def test_unknown_timezone(self, runner, populated):
        result = runner.invoke(cli, ["--claude-dir", str(populated), "--tz", "Mars/Olympus"])
        assert result.exit_code == 2
        assert "unknown timezone" in result.output

    def test_jobs_must_be_positive(self, runner, populated):
        result = _run(runner, "--claude-dir", str(populated), "--jobs", "0")
        assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert cc_session_stats.__version__ in result.output
