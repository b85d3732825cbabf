"""Shared time helpers used across the engine and the services."""

import re
from datetime import date, datetime, timedelta, timezone, tzinfo

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

WEEKDAY_CODES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def time_to_minutes(value: str) -> int:
    """Convert an "HH:MM" wall-clock time to minutes since midnight.

    Examples:
        >>> time_to_minutes("00:00")
        0
        >>> time_to_minutes("22:30")
        1350
    """
    match = _TIME_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def weekday_code(day: date) -> str:
    """Three-letter weekday code ("Mon".."Sun") for a date."""
    return WEEKDAY_CODES[day.weekday()]


def to_utc(value: datetime, tz: tzinfo) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes are wall-clock times in ``tz``.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc)


def next_day(day: date) -> date:
    return day + timedelta(days=1)
