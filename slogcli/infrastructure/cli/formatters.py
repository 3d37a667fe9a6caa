"""Builds Rich renderables and JSON-ready data from Sentry records.

Pure functions: nothing here writes to the console. ConsoleDisplay prints
what these return.
"""

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from rich.console import Group
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from slogcli.domain.models.sentry import (
    BreadcrumbData, ExceptionData, SentryEvent, SentryIssue, StackFrame,
)
from slogcli.infrastructure.redaction.redactor import filter_fields, parse_fields, redact

MAX_FRAMES = 5
MAX_BREADCRUMBS = 5

LEVEL_STYLES = {
    "fatal": "red",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}


# --- Helpers ---

def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parses Sentry's ISO 8601 timestamps ('2024-01-15T10:30:00.123Z')."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_time_ago(value: Optional[str], now: Optional[datetime] = None) -> str:
    timestamp = parse_timestamp(value)
    if timestamp is None:
        return "-"
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - timestamp).total_seconds()))
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return f"{seconds}s ago"


def format_clock(value: Optional[str]) -> str:
    """HH:MM:SS in UTC, or '??:??:??'."""
    timestamp = parse_timestamp(value)
    if timestamp is None:
        return "??:??:??"
    return timestamp.astimezone(timezone.utc).strftime("%H:%M:%S")


def truncate(value: str, max_len: int) -> str:
    if len(value) <= max_len:
        return value
    return value[: max_len - 3] + "..."


def level_text(level: Optional[str]) -> Text:
    level = level or "-"
    return Text(level, style=LEVEL_STYLES.get(level.lower(), "bright_black"))


def find_entry(event: Mapping[str, Any], entry_type: str) -> Optional[Any]:
    """Data of the first entry of `entry_type` in an event, if any."""
    for entry in event.get("entries") or []:
        if isinstance(entry, Mapping) and entry.get("type") == entry_type:
            return entry.get("data")
    return None


def get_exception_type(event: SentryEvent) -> str:
    exception: Optional[ExceptionData] = find_entry(event, "exception")
    values = (exception or {}).get("values") or []
    if values and values[0].get("type"):
        return values[0]["type"]
    return str((event.get("metadata") or {}).get("type") or "-")


def format_frame_location(frame: StackFrame) -> str:
    filename = frame.get("filename") or frame.get("absPath") or frame.get("module") or "?"
    function = frame.get("function") or "?"
    line = f":{frame['lineNo']}" if frame.get("lineNo") else ""
    column = f":{frame['colNo']}" if frame.get("colNo") else ""
    return f"{filename}{line}{column} in {function}"


# --- Data preparation ---

def prepare_records(
    records: Sequence[Mapping[str, Any]],
    redact_data: bool = False,
    fields: Optional[str] = None,
) -> List[Any]:
    """Applies `--redact` then `--fields` to records destined for JSON output."""
    data: List[Any] = list(records)
    if redact_data:
        data = redact(data)
    field_list = parse_fields(fields)
    if field_list:
        data = [filter_fields(record, field_list) for record in data]
    return data


def to_json(data: Any, compact: bool = False) -> str:
    if compact:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(data, ensure_ascii=False, indent=2)


# --- Tables ---

def build_issues_table(issues: Iterable[SentryIssue]) -> Table:
    table = Table(header_style="cyan")
    table.add_column("ID", width=12, no_wrap=True)
    table.add_column("Level", width=8)
    table.add_column("Title", width=50)
    table.add_column("Events", width=8, justify="right")
    table.add_column("Users", width=7, justify="right")
    table.add_column("Last Seen", width=12)

    for issue in issues:
        user_count = issue.get("userCount")
        table.add_row(
            str(issue.get("shortId") or issue.get("id") or "-"),
            level_text(issue.get("level")),
            truncate(issue.get("title") or "-", 47),
            str(issue.get("count") or "0"),
            str(user_count) if user_count is not None else "-",
            format_time_ago(issue.get("lastSeen")),
        )
    return table


def build_events_table(events: Iterable[SentryEvent]) -> Table:
    table = Table(header_style="cyan")
    table.add_column("Event ID", width=14, no_wrap=True)
    table.add_column("Time", width=12)
    table.add_column("Exception", width=25)
    table.add_column("Message", width=40)

    for event in events:
        message = event.get("title") or event.get("message") or "-"
        table.add_row(
            str(event.get("eventID") or event.get("id") or "-")[:12],
            format_time_ago(event.get("dateCreated")),
            truncate(get_exception_type(event), 22),
            truncate(message, 37),
        )
    return table


# --- Event detail ---

def render_event_detail(event: SentryEvent) -> Text:
    """Multi-line summary: metadata, exception with last frames, last breadcrumbs."""
    text = Text()
    text.append(f"Event: {event.get('eventID') or event.get('id') or '-'}\n", style="bold")
    timestamp = parse_timestamp(event.get("dateCreated"))
    text.append(f"Time: {timestamp.isoformat() if timestamp else '-'}\n")

    if event.get("environment"):
        text.append(f"Environment: {event['environment']}\n")
    release = event.get("release") or {}
    if release.get("version"):
        text.append(f"Release: {release['version']}\n")

    user = event.get("user") or {}
    user_parts = [
        f"{label}:{user[key]}"
        for key, label in (("id", "id"), ("email", "email"), ("username", "user"))
        if user.get(key)
    ]
    if user_parts:
        text.append(f"User: {' '.join(user_parts)}\n")

    exception: Optional[ExceptionData] = find_entry(event, "exception")
    if exception:
        text.append("\nException:\n", style="bold")
        for value in exception.get("values") or []:
            text.append(f"  {value.get('type', '?')}: {value.get('value', '')}\n", style="red")
            frames = (value.get("stacktrace") or {}).get("frames") or []
            if frames:
                text.append("  Stacktrace (most recent last):\n", style="bright_black")
                for frame in frames[-MAX_FRAMES:]:
                    marker = Text("●", style="green") if frame.get("inApp") else Text("○", style="bright_black")
                    text.append("    ")
                    text.append_text(marker)
                    text.append(f" {format_frame_location(frame)}\n")
                if len(frames) > MAX_FRAMES:
                    text.append(f"    ... {len(frames) - MAX_FRAMES} more frames\n", style="bright_black")

    breadcrumbs: Optional[BreadcrumbData] = find_entry(event, "breadcrumbs")
    crumbs = (breadcrumbs or {}).get("values") or []
    if crumbs:
        text.append(f"\nBreadcrumbs (last {MAX_BREADCRUMBS}):\n", style="bold")
        for crumb in crumbs[-MAX_BREADCRUMBS:]:
            category = crumb.get("category") or crumb.get("type") or "default"
            message = crumb.get("message") or (json.dumps(crumb["data"]) if crumb.get("data") else "")
            text.append(f"  [{format_clock(crumb.get('timestamp'))}]", style="bright_black")
            text.append(f" {category}: {truncate(message, 50)}\n")

    text.rstrip()
    return text


def build_events_view(events: Sequence[SentryEvent], expand: bool = False) -> Group:
    """Events table, followed by a detail block per event when expanded."""
    parts: List[Any] = [build_events_table(events)]
    if expand:
        parts.append(Text("\nEvent Details:", style="bold"))
        for event in events:
            parts.append(render_event_detail(event))
            parts.append(Rule(style="bright_black"))
    return Group(*parts)


def format_tail_line(event: SentryEvent) -> Text:
    """One compact line per event for `tail`."""
    line = Text()
    line.append(format_clock(event.get("dateCreated")), style="bright_black")
    line.append(" ")
    line.append(get_exception_type(event), style="yellow")
    line.append(" ")
    line.append(f"[{event.get('environment') or '-'}]", style="blue")
    line.append(" ")
    line.append(truncate(event.get("title") or event.get("message") or "-", 60))
    return line
