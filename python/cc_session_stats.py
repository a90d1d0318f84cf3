# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "click>=8.0",
# ]
# ///
"""
Claude Code Session Stats - See how much time you spend with Claude Code.

Scans the session transcripts Claude Code leaves in ~/.claude/projects/ and
reports how long, how often and on which projects you work with it. Only the
first and last line of every transcript is read, so even years of history are
summarised in a second or two.

USAGE:
    # Run directly with uv (no install needed):
    uv run python/cc_session_stats.py

    # Machine-readable output:
    uv run python/cc_session_stats.py --json

    # Bucket days and hours in a specific timezone:
    uv run python/cc_session_stats.py --tz Europe/Berlin

    # Point at another Claude config directory:
    uv run python/cc_session_stats.py --claude-dir /mnt/backup/.claude

ANALYZES:
    - ~/.claude/projects/<project>/*.jsonl                  (sessions)
    - ~/.claude/projects/<project>/<session>/subagents/*.jsonl (sub-agent runs)

OUTPUT:
    - Session count, total and average hours, active days
    - Longest session, longest streak of consecutive days
    - Hours by day of week, hour of day and project
    - Health warnings and tips
"""

from __future__ import annotations

import json
import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click

__version__ = "1.0.1"

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JSON_SCHEMA_VERSION = "1.0"

CLAUDE_DIR = Path.home() / ".claude"
TRANSCRIPT_SUFFIX = ".jsonl"
SUBAGENTS_DIR = "subagents"

HEAD_READ_BYTES = 8192
TAIL_READ_BYTES = 65536
MIN_FILE_BYTES = 50
MAX_SESSION_HOURS = 7 * 24

MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=1)
MAX_TIMESTAMP = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=1)

DEFAULT_JOBS = 8

DOW_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
TOP_PROJECTS = 7

TMP_PROJECT = "/tmp"
HOME_PROJECT = "~"


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    project: str
    start: datetime
    end: datetime
    duration_hours: float
    size_bytes: int


@dataclass(frozen=True)
class HealthWarning:
    level: str  # "info" < "warn" < "alert"
    message: str


@dataclass
class DayBucket:
    sessions: list[Session] = field(default_factory=list)
    hours: float = 0.0


@dataclass(frozen=True)
class StatsConfig:
    """Thresholds used by :func:`analyze`."""

    # Longer sessions are continuous autonomous runs, not a human sitting still
    max_interactive_session_hours: float = 8.0
    health_warn_session_hours: float = 3.0
    health_warn_consecutive_days: int = 7
    health_info_avg_session_hours: float = 2.0
    health_alert_daily_hours: float = 6.0
    recent_window_days: int = 7


@dataclass
class AnalysisResult:
    total_sessions: int
    total_hours: float
    avg_duration: float
    avg_daily_hours: float
    max_session: Session
    max_session_day: str
    has_autonomous_sessions: bool
    active_days: list[str]
    by_date: dict[str, DayBucket]
    dow_hours: list[float]
    hour_buckets: list[float]
    project_hours: dict[str, float]
    max_streak: int
    warnings: list[HealthWarning]
    first_day: str
    last_day: str
    total_days_span: int
    recent_7_days: int
    recent_7_hours: float


class EdgeLines(NamedTuple):
    first_line: str
    last_line: str


@dataclass(frozen=True)
class FileScan:
    """Outcome of scanning one transcript: a session, or why there is none."""

    path: Path
    session: Session | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def log(message: str, verbose: bool = True, level: str = "INFO"):
    """Log message to stderr if verbose or if error."""
    if verbose or level == "ERROR":
        click.echo(f"[{level}] {message}", err=True)


def _parse_timestamp_value(value) -> datetime | None:
    # bool is an int subclass
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            ts = value.strip()
            if ts.endswith("Z"):
                ts = ts[:-1] + "+00:00"
            parsed = datetime.fromisoformat(ts)
            if parsed.tzinfo is None:
                # No offset means wall-clock time on this machine
                parsed = parsed.astimezone()
            parsed = parsed.astimezone(timezone.utc)
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None
    # Must stay convertible to any reporting timezone
    if not MIN_TIMESTAMP <= parsed <= MAX_TIMESTAMP:
        return None
    return parsed


def extract_timestamp(line: str | None) -> datetime | None:
    """Return the ``timestamp`` (or ``ts``) of one JSON transcript line.

    Accepts ISO 8601 strings and epoch milliseconds.  Anything else, including
    invalid JSON, yields ``None``.
    """
    if not line:
        return None
    try:
        data = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    value = data.get("timestamp") or data.get("ts")
    if not value:
        return None
    return _parse_timestamp_value(value)


def read_edge_lines(path: Path) -> EdgeLines | None:
    """Read the first line and the last non-empty line of a file.

    Only a bounded head (8 KiB) and tail (64 KiB) are read.  A first line
    longer than the head is truncated.  Returns ``None`` for an empty file.
    """
    with open(path, "rb") as f:
        head = f.read(HEAD_READ_BYTES)
        if not head:
            return None
        first_line = head.decode("utf-8", errors="replace").split("\n", 1)[0]

        size = os.fstat(f.fileno()).st_size
        if size < 2:
            return EdgeLines(first_line, first_line)

        read_size = min(TAIL_READ_BYTES, size)
        f.seek(size - read_size)
        tail = f.read(read_size).decode("utf-8", errors="replace")

    lines = [line for line in tail.split("\n") if line.strip()]
    last_line = lines[-1] if lines else first_line
    return EdgeLines(first_line, last_line)


def clean_project_name(dir_name: str) -> str:
    """Turn an encoded project directory name into a short label.

    ``-home-alice-projects-cc-loop`` -> ``cc-loop``, ``-home-alice`` -> ``~``,
    ``-tmp-something`` -> ``/tmp``.  Unknown shapes are returned unchanged.
    """
    if dir_name.startswith("-tmp"):
        return TMP_PROJECT
    parts = [p for p in dir_name.split("-") if p]
    if parts and parts[0] == "home" and len(parts) >= 2:
        rest = parts[2:]
        if rest and rest[0] == "projects":
            rest = rest[1:]
        return "-".join(rest) or HOME_PROJECT
    return dir_name


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def _list_dir(path: Path) -> list[Path]:
    """List a directory; unreadable or missing directories are empty."""
    try:
        return sorted(path.iterdir())
    except OSError:
        return []


def _local_day(dt: datetime, tz: tzinfo | None) -> str:
    return dt.astimezone(tz).date().isoformat()


def _round2(value: float) -> float:
    """Round to 2 decimals, halves away from zero (0.125 -> 0.13)."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def discover_transcripts(claude_dir: Path) -> list[tuple[Path, str]]:
    """Find transcript files and the project label each belongs to.

    Sub-agent transcripts live in ``<project>/<session>/subagents/`` and are
    attributed to the parent project.
    """
    found: list[tuple[Path, str]] = []

    for project_dir in _list_dir(claude_dir / "projects"):
        if not _is_dir(project_dir):
            continue
        project = clean_project_name(project_dir.name)
        entries = _list_dir(project_dir)

        for item in entries:
            if item.name.endswith(TRANSCRIPT_SUFFIX) and not _is_dir(item):
                found.append((item, project))

        for item in entries:
            sub_dir = item / SUBAGENTS_DIR
            if not _is_dir(sub_dir):
                continue
            for sub_item in _list_dir(sub_dir):
                if sub_item.name.endswith(TRANSCRIPT_SUFFIX) and not _is_dir(sub_item):
                    found.append((sub_item, project))

    return found


def scan_file(path: Path, project: str) -> FileScan:
    """Derive a session from one transcript file."""
    try:
        size = path.stat().st_size
    except OSError:
        return FileScan(path, reason="unreadable")
    if size < MIN_FILE_BYTES:
        return FileScan(path, reason="too-small")

    try:
        edges = read_edge_lines(path)
    except OSError:
        return FileScan(path, reason="unreadable")
    if edges is None:
        return FileScan(path, reason="empty")

    start = extract_timestamp(edges.first_line)
    end = extract_timestamp(edges.last_line)
    if start is None or end is None:
        return FileScan(path, reason="no-timestamp")

    duration_hours = (end - start).total_seconds() / 3600
    if duration_hours < 0:
        return FileScan(path, reason="negative-duration")
    if duration_hours >= MAX_SESSION_HOURS:
        return FileScan(path, reason="too-long")

    return FileScan(path, session=Session(project, start, end, duration_hours, size))


def scan_sessions(
    claude_dir: Path,
    max_workers: int = DEFAULT_JOBS,
    verbose: bool = False,
) -> list[Session]:
    """Scan ``claude_dir/projects`` and return valid sessions sorted by start."""
    transcripts = discover_transcripts(claude_dir)
    log(f"Found {len(transcripts)} transcript files in {claude_dir / 'projects'}", verbose)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(lambda t: scan_file(*t), transcripts))

    sessions = [r.session for r in results if r.session is not None]

    if verbose:
        skipped = Counter(r.reason for r in results if r.reason)
        for reason, count in sorted(skipped.items()):
            log(f"Skipped {count} file(s): {reason}", verbose)
        log(f"Kept {len(sessions)} sessions", verbose)

    sessions.sort(key=lambda s: s.start)
    return sessions


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def longest_streak(active_days: list[str]) -> int:
    """Longest run of consecutive calendar days in a sorted list of dates."""
    if not active_days:
        return 0
    days = [date.fromisoformat(d) for d in active_days]
    best = current = 1
    for prev, curr in zip(days, days[1:]):
        if (curr - prev).days == 1:
            current += 1
            best = max(best, current)
        else:
            current = 1
    return best


def health_warnings(
    sessions: list[Session],
    max_streak: int,
    avg_duration: float,
    avg_daily_hours: float,
    config: StatsConfig,
) -> list[HealthWarning]:
    warnings: list[HealthWarning] = []

    long_sessions = [
        s for s in sessions if s.duration_hours >= config.health_warn_session_hours
    ]
    if long_sessions:
        warnings.append(
            HealthWarning(
                "warn",
                f"{len(long_sessions)} session(s) over "
                f"{config.health_warn_session_hours:g}h without a break. "
                "Your spine has opinions.",
            )
        )
    if max_streak >= config.health_warn_consecutive_days:
        warnings.append(
            HealthWarning(
                "warn",
                f"{max_streak} consecutive days of AI usage. "
                "Rest days exist for a reason.",
            )
        )
    if avg_duration > config.health_info_avg_session_hours:
        warnings.append(
            HealthWarning(
                "info",
                f"Average session is {avg_duration:.1f}h. "
                "The 90-minute focus/break cycle is backed by research.",
            )
        )
    if avg_daily_hours > config.health_alert_daily_hours:
        warnings.append(
            HealthWarning(
                "alert",
                f"{avg_daily_hours:.1f}h/day average. "
                "That's a full workday of sitting. Stretch. Now.",
            )
        )
    return warnings


def analyze(
    sessions: list[Session],
    config: StatsConfig | None = None,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> AnalysisResult | None:
    """Fold sessions into aggregate statistics.

    ``tz`` is the timezone used for calendar days, weekdays and hours; ``None``
    means the local timezone of this machine.  ``now`` anchors the last-7-days
    window.  Returns ``None`` when there is nothing to analyze.
    """
    if not sessions:
        return None
    config = config or StatsConfig()

    total_hours = sum(s.duration_hours for s in sessions)
    avg_duration = total_hours / len(sessions)

    interactive = [
        s for s in sessions if s.duration_hours <= config.max_interactive_session_hours
    ]
    max_session = max(interactive or sessions, key=lambda s: s.duration_hours)
    has_autonomous_sessions = any(
        s.duration_hours > config.max_interactive_session_hours for s in sessions
    )

    by_date: dict[str, DayBucket] = {}
    dow_hours = [0.0] * 7
    hour_buckets = [0.0] * 24
    project_hours: dict[str, float] = {}

    for s in sessions:
        local_start = s.start.astimezone(tz)
        bucket = by_date.setdefault(local_start.date().isoformat(), DayBucket())
        bucket.sessions.append(s)
        bucket.hours += s.duration_hours
        # weekday() is Monday-based, the histogram starts on Sunday
        dow_hours[(local_start.weekday() + 1) % 7] += s.duration_hours
        hour_buckets[local_start.hour] += s.duration_hours
        project_hours[s.project] = project_hours.get(s.project, 0.0) + s.duration_hours

    active_days = sorted(by_date)
    first_day, last_day = active_days[0], active_days[-1]
    total_days_span = (
        date.fromisoformat(last_day) - date.fromisoformat(first_day)
    ).days + 1
    avg_daily_hours = total_hours / len(active_days)

    max_streak = longest_streak(active_days)
    warnings = health_warnings(
        sessions, max_streak, avg_duration, avg_daily_hours, config
    )

    # The window start is a fixed 7x24h before now, not a calendar subtraction
    now = now or datetime.now(timezone.utc)
    today = _local_day(now, tz)
    window_start = _local_day(
        now.astimezone(timezone.utc) - timedelta(days=config.recent_window_days), tz
    )
    recent = [d for d in active_days if window_start < d <= today]

    return AnalysisResult(
        total_sessions=len(sessions),
        total_hours=total_hours,
        avg_duration=avg_duration,
        avg_daily_hours=avg_daily_hours,
        max_session=max_session,
        max_session_day=_local_day(max_session.start, tz),
        has_autonomous_sessions=has_autonomous_sessions,
        active_days=active_days,
        by_date=by_date,
        dow_hours=dow_hours,
        hour_buckets=hour_buckets,
        project_hours=project_hours,
        max_streak=max_streak,
        warnings=warnings,
        first_day=first_day,
        last_day=last_day,
        total_days_span=total_days_span,
        recent_7_days=len(recent),
        recent_7_hours=sum(by_date[d].hours for d in recent),
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def top_projects(stats: AnalysisResult) -> list[tuple[str, float]]:
    return sorted(stats.project_hours.items(), key=lambda x: -x[1])


def build_json_output(stats: AnalysisResult) -> dict:
    """Build the machine-readable report.  Hours are rounded to 2 decimals."""
    ms = stats.max_session
    return {
        "version": JSON_SCHEMA_VERSION,
        "totalSessions": stats.total_sessions,
        "totalHours": _round2(stats.total_hours),
        "activeDays": len(stats.active_days),
        "totalDaysSpan": stats.total_days_span,
        "firstSeen": stats.first_day,
        "lastSeen": stats.last_day,
        "averages": {
            "perSession": _round2(stats.avg_duration),
            "perDay": _round2(stats.avg_daily_hours),
        },
        "longestSession": {
            "hours": _round2(ms.duration_hours),
            "date": stats.max_session_day,
            "project": ms.project,
        },
        "hoursByDayOfWeek": {
            name: _round2(hours) for name, hours in zip(DOW_NAMES, stats.dow_hours)
        },
        "topProjects": [
            {"name": name, "hours": _round2(hours)} for name, hours in top_projects(stats)
        ],
        "streak": stats.max_streak,
        "healthWarnings": [w.message for w in stats.warnings],
        "last7Days": {
            "hours": _round2(stats.recent_7_hours),
            "activeDays": stats.recent_7_days,
        },
    }


def bar(pct: float, width: int = 20) -> str:
    """Horizontal bar of ``width`` cells, ``pct`` (0-1) of them filled."""
    filled = int(pct * width + 0.5)
    return "█" * filled + "░" * (width - filled)


def _heat_char(value: float, peak: float) -> str:
    if peak == 0:
        return "░"
    pct = value / peak
    if pct > 0.75:
        return "█"
    if pct > 0.5:
        return "▓"
    if pct > 0.25:
        return "▒"
    if pct > 0:
        return "░"
    return " "


def _display_path(path: Path) -> str:
    try:
        return f"~/{path.relative_to(Path.home())}"
    except ValueError:
        return str(path)


def share_text(stats: AnalysisResult) -> str:
    return (
        f"My Claude Code Stats: {stats.total_sessions} sessions / "
        f"{stats.total_hours:.0f}h total / {len(stats.active_days)} active days / "
        f"longest streak: {stats.max_streak} days\n#ClaudeCode"
    )


def tips(stats: AnalysisResult) -> list[str]:
    result = []
    if stats.avg_duration > 1.5:
        result.append("Set a timer for 90-minute focus blocks with 10-minute breaks.")
    if stats.max_streak >= 5:
        result.append("Schedule at least one AI-free day per week.")
    if stats.avg_daily_hours > 4:
        result.append("Standing desk or walking meetings for non-AI tasks.")
    result.append("Stretch your hip flexors. They're angry. Trust me.")
    return result


def render_text(stats: AnalysisResult, claude_dir: Path = CLAUDE_DIR) -> str:
    """Render the console report.  Colors are stripped by click when piped."""

    def bold(s) -> str:
        return click.style(str(s), bold=True)

    def dim(s) -> str:
        return click.style(str(s), dim=True)

    def section(title: str, **style) -> str:
        return click.style(f"  ▸ {title}", bold=True, **style)

    lines = [
        "",
        "  " + click.style(f"Claude Code Session Stats v{__version__}", fg="cyan", bold=True),
        "  " + "═" * 39,
        "  " + dim(f"Scanning: {_display_path(claude_dir / 'projects')}/"),
        "",
        section("Overview"),
        f"    Sessions:     {bold(stats.total_sessions)}",
        f"    Total hours:  {bold(f'{stats.total_hours:.1f}h')}",
        f"    Active days:  {bold(len(stats.active_days))} / {stats.total_days_span} days",
        f"    First seen:   {stats.first_day}",
        f"    Last seen:    {stats.last_day}",
        "",
        section("Averages"),
        f"    Per session:  {stats.avg_duration:.1f}h",
        f"    Per day:      {stats.avg_daily_hours:.1f}h",
        f"    Last 7 days:  {stats.recent_7_hours:.1f}h across {stats.recent_7_days} days",
        "",
    ]

    ms = stats.max_session
    lines.append(section("Longest Session"))
    lines.append(
        "    "
        + click.style(f"{ms.duration_hours:.1f}h", fg="yellow")
        + f" on {stats.max_session_day} - {dim(ms.project)}"
    )
    if stats.has_autonomous_sessions:
        lines.append("    " + dim("(sessions >8h excluded - likely continuous autonomous runs)"))
    lines.append("")

    lines.append(section("Hours by Day of Week"))
    max_dow = max(stats.dow_hours)
    for name, hours in zip(DOW_NAMES, stats.dow_hours):
        pct = hours / max_dow if max_dow > 0 else 0
        lines.append(f"    {name}  {bar(pct, 15)} {hours:6.1f}h")
    lines.append("")

    lines.append(section("Active Hours"))
    max_hour = max(stats.hour_buckets)
    lines.append("    " + "".join(_heat_char(h, max_hour) for h in stats.hour_buckets))
    lines.append("    " + dim("0  2  4  6  8  10 12 14 16 18 20 22"))
    lines.append("")

    lines.append(section("Top Projects"))
    projects = top_projects(stats)[:TOP_PROJECTS]
    max_proj = projects[0][1] if projects and projects[0][1] > 0 else 1
    for name, hours in projects:
        label = name[:22] + "..." if len(name) > 25 else name.ljust(25)
        lines.append(f"    {label} {bar(hours / max_proj, 12)} {hours:.1f}h")
    lines.append("")

    lines.append(section("Streak"))
    lines.append(f"    Longest consecutive days: {bold(stats.max_streak)}")
    lines.append("")

    if stats.warnings:
        lines.append(section("Health Warnings", fg="yellow"))
        icons = {
            "alert": click.style(" ! ", fg="white", bg="red"),
            "warn": click.style(" ⚠ ", fg="yellow"),
        }
        for w in stats.warnings:
            icon = icons.get(w.level, click.style(" ℹ ", fg="blue"))
            lines.append(f"   {icon} {w.message}")
        lines.append("")

    lines.append(section("Tips"))
    lines.extend(f"    → {tip}" for tip in tips(stats))
    lines.append("")

    lines.append("  " + dim("─── Share ───"))
    lines.extend("  " + dim(line) for line in share_text(stats).split("\n"))
    lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _resolve_timezone(ctx, param, value: str | None) -> tzinfo | None:
    if value is None:
        return None
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise click.BadParameter(f"unknown timezone: {value}") from e


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--json", "as_json", is_flag=True, help="Print a JSON report instead of the console report")
@click.option(
    "--claude-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=CLAUDE_DIR,
    envvar="CLAUDE_CONFIG_DIR",
    show_default=True,
    help="Claude Code config directory containing projects/",
)
@click.option(
    "--tz",
    default=None,
    callback=_resolve_timezone,
    help="IANA timezone for days and hours (default: local timezone)",
)
@click.option(
    "-j",
    "--jobs",
    default=DEFAULT_JOBS,
    type=click.IntRange(min=1),
    show_default=True,
    help="Worker threads for reading transcripts",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    as_json: bool,
    claude_dir: Path,
    tz: tzinfo | None,
    jobs: int,
    verbose: bool,
):
    """See how much time you spend with Claude Code."""
    # Progress goes to stderr so --json keeps stdout clean
    if not as_json and not verbose:
        click.echo("  Scanning sessions...", nl=False, err=True)
    try:
        sessions = scan_sessions(claude_dir, max_workers=jobs, verbose=verbose)
        stats = analyze(sessions, tz=tz)
    except Exception as e:
        raise click.ClickException(str(e)) from e
    if not as_json and not verbose:
        click.echo("\r" + " " * 24 + "\r", nl=False, err=True)

    if not sessions:
        if as_json:
            click.echo(json.dumps({"error": "No sessions found"}, indent=2))
        else:
            click.echo(f"  No Claude Code sessions found in {_display_path(claude_dir / 'projects')}/")
            click.echo("  Run Claude Code at least once to generate session data.")
        ctx.exit(1)

    if stats is None:
        if as_json:
            click.echo(json.dumps({"error": "Could not analyze sessions"}, indent=2))
        else:
            click.echo("  Could not analyze sessions.")
        ctx.exit(1)

    if as_json:
        click.echo(json.dumps(build_json_output(stats), indent=2, ensure_ascii=False))
    else:
        click.echo(render_text(stats, claude_dir))


if __name__ == "__main__":
    cli()
