"""Date and time helpers for working-hour arithmetic.

All arithmetic happens on naive wall-clock datetimes. Values carrying a UTC
offset are converted to UTC first; the ``timeZone`` preference is metadata only.
"""

import re
from datetime import UTC, date, datetime, time, timedelta

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` 24-hour string."""
    match = _CLOCK_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time of day '{value}'. Use HH:MM (24-hour)")
    return time(int(match.group(1)), int(match.group(2)))


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime string into a naive UTC datetime.

    Accepts a trailing ``Z``, explicit offsets and bare ``YYYY-MM-DD`` dates
    (which mean midnight).
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def parse_iso_date(value: str) -> date:
    """Parse a calendar date. Datetime strings are truncated to their date."""
    text = value.strip()
    if _DATE_RE.match(text):
        return date.fromisoformat(text)
    return parse_iso_datetime(text).date()


def format_iso_datetime(moment: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    millis = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def weekday_name(day: date) -> str:
    """Lower-case English weekday name."""
    return WEEKDAY_NAMES[day.weekday()]


def at_clock(day: date, clock: time) -> datetime:
    """Combine a calendar day with a time of day."""
    return datetime.combine(day, clock)


def next_working_day(
    moment: datetime,
    working_days: frozenset[str],
    day_start: time,
    max_days: int,
) -> datetime | None:
    """Roll ``moment`` forward until it falls on a working day.

    Each advance lands on ``day_start`` of the following day. A moment already on
    a working day is returned unchanged.

    Args:
        moment: Starting point
        working_days: Lower-case weekday names that accept work
        day_start: Time of day applied on every advance
        max_days: Maximum number of advances before giving up

    Returns:
        The rolled moment, or None if no working day was reached within max_days
    """
    current = moment
    for _ in range(max_days + 1):
        if weekday_name(current.date()) in working_days:
            return current
        current = at_clock(current.date() + timedelta(days=1), day_start)
    return None


def minutes_between(start: datetime, end: datetime) -> float:
    """Length of ``[start, end)`` in minutes (negative when end precedes start)."""
    return (end - start) / timedelta(minutes=1)
