"""Datetime utility functions for consistent timezone handling.

Quota windows and ``created_at`` columns are both computed here, in UTC, so a
record written at the edge of a window is counted against the same boundary
it was written with.
"""

from datetime import datetime, timezone


def get_current_utc_datetime() -> datetime:
    """
    Get current datetime in UTC timezone.

    Returns:
        datetime: Current UTC datetime with timezone info

    Example:
        >>> now = get_current_utc_datetime()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(now: datetime) -> datetime:
    """Midnight (UTC) of the calendar day containing ``now``."""
    now = ensure_utc(now)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now: datetime) -> datetime:
    """First instant (UTC) of the calendar month containing ``now``."""
    return start_of_day(now).replace(day=1)
