"""Date and time helpers.

All timestamps handled by taskdeck are timezone-aware in the local zone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

END_OF_DAY = time(23, 59, 59)


def now_local() -> datetime:
    """Current time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def is_same_local_day(value: datetime, reference: datetime) -> bool:
    return value.astimezone().date() == reference.astimezone().date()


def within_trailing_window(value: datetime, reference: datetime, days: int) -> bool:
    """True if *value* is no older than *days* x 24h before *reference*."""
    return value >= reference - timedelta(days=days)


def parse_due_date(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string from user input.

    A bare date (``2025-01-31`` or ``20250131``) means the end of that
    local day.

    Raises:
        ValueError: If *value* is not ISO-8601
    """
    value = value.strip()
    try:
        day = date.fromisoformat(value)
    except ValueError:
        parsed = datetime.fromisoformat(value)
    else:
        parsed = datetime.combine(day, END_OF_DAY)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed
