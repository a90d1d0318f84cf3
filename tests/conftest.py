"""Shared fixtures and builders for cc_session_stats tests."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cc_session_stats import Session

UTC = timezone.utc


@pytest.fixture
def claude_dir(tmp_path):
    """An empty Claude config directory with a projects/ folder."""
    (tmp_path / "projects").mkdir()
    return tmp_path


def entry(timestamp, key="timestamp", **extra):
    """A transcript line dict carrying a timestamp."""
    data = {"type": "user", "message": {"content": "hello there"}}
    data[key] = timestamp
    data.update(extra)
    return data


def write_transcript(path: Path, entries, trailing_newline=True):
    """Write dicts (or raw strings) as JSONL and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [e if isinstance(e, str) else json.dumps(e) for e in entries]
    text = "\n".join(lines)
    if trailing_newline:
        text += "\n"
    path.write_text(text, encoding="utf-8")
    return path


def make_transcript(claude_dir, project_dir, name, start, end, subagent_of=None):
    """Write a transcript whose first/last lines are ``start``/``end`` ISO strings."""
    base = claude_dir / "projects" / project_dir
    if subagent_of:
        base = base / subagent_of / "subagents"
    return write_transcript(
        base / name,
        [entry(start), entry(start, type="assistant"), entry(end)],
    )


def make_session(start, hours, project="foo", size=1000):
    """A Session starting at ``start`` lasting ``hours``."""
    return Session(
        project=project,
        start=start,
        end=start + timedelta(hours=hours),
        duration_hours=hours,
        size_bytes=size,
    )


def at(year, month, day, hour=12, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=UTC)
