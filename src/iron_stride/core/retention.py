"""
Rolling retention window for completed-workout history.

History entries older than MAX_HISTORY_DAYS are dropped.  Entries whose
completion timestamp is missing or cannot be parsed are always kept.
"""

from datetime import datetime, timedelta, timezone
from typing import Sequence, TypeVar

from .config import MAX_HISTORY_DAYS

_Entry = TypeVar("_Entry")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC timestamp with millisecond precision.

    Example: 2026-10-19T04:48:00.000Z
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp; return None when missing or unparsable.

    Naive values are taken as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def retention_cutoff(now: datetime | None = None) -> datetime:
    """Oldest completion time still inside the retention window."""
    if now is None:
        now = utc_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=MAX_HISTORY_DAYS)


def prune_history(
    entries: Sequence[_Entry],
    now: datetime | None = None,
) -> list[_Entry]:
    """
    Drop entries completed before the retention window.

    Works on any object with a ``date_completed`` attribute (workout days)
    or a ``"dateCompleted"`` key (raw persisted dicts).

    Args:
        entries: History entries in their stored order
        now: Reference time (default: current UTC time)

    Returns:
        New list with the surviving entries, order preserved
    """
    cutoff = retention_cutoff(now)
    kept: list[_Entry] = []
    for entry in entries:
        if isinstance(entry, dict):
            raw = entry.get("dateCompleted")
        else:
            raw = getattr(entry, "date_completed", None)
        completed_at = parse_timestamp(raw)
        if completed_at is None or completed_at >= cutoff:
            kept.append(entry)
    return kept
