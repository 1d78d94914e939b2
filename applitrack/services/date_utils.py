"""
Lenient parsing helpers for the free-form date and salary strings stored on
records.

Every helper returns None instead of raising, so callers decide how a value
that does not parse affects their result.
"""
import re
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or timestamp into an aware UTC datetime.

    Date-only values ("2024-01-15") are midnight UTC. Naive timestamps are
    taken as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def timestamp_or_epoch(value: Optional[str]) -> float:
    """Seconds since the epoch, or 0 when the value is missing or invalid."""
    parsed = parse_date(value)
    return parsed.timestamp() if parsed else 0.0


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored (negative when end is earlier)."""
    return int((end - start).total_seconds() // SECONDS_PER_DAY)


def parse_leading_int(value: Optional[str]) -> Optional[int]:
    """
    Integer prefix of a string: "85000" -> 85000, "85k" -> 85, "abc" -> None.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")
