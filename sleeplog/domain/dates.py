"""Calendar-date helpers.

Every function here works on `datetime.date` values and steps with
`timedelta(days=n)`. Nothing reads the system clock: callers pass `today`
explicitly, usually from the service clock.
"""

import calendar
from datetime import date, datetime, timedelta

ONE_DAY = timedelta(days=1)
_SECONDS_PER_HOUR = 3600


def parse_iso_date(value: str | date) -> date:
    """Parse a strict ISO `YYYY-MM-DD` string. Dates pass through unchanged.

    Raises ValueError for anything else, including `2024-1-5` and datetimes.
    """
    if isinstance(value, datetime):
        raise ValueError(f"expected a calendar date, got datetime {value!r}")
    if isinstance(value, date):
        return value
    if len(value) != 10 or value[4] != "-" or value[7] != "-":
        raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
    return date.fromisoformat(value)


def date_range(days: int, today: date) -> tuple[date, date]:
    """Inclusive (start, end) window of `days` calendar days ending at `today`."""
    if days < 1:
        raise ValueError("days must be at least 1")
    return today - timedelta(days=days - 1), today


def days_between(start: date, end: date) -> int:
    """Signed number of calendar days from `start` to `end`."""
    return (end - start).days


def relative_day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - ONE_DAY:
        return "Yesterday"
    return f"{calendar.day_abbr[day.weekday()]}, {calendar.month_abbr[day.month]} {day.day}"


def sleep_duration_hours(bedtime: datetime, wake_time: datetime) -> float:
    """Hours slept between two timestamps.

    A wake time earlier than bedtime is treated as the following morning.
    """
    if wake_time < bedtime:
        wake_time = wake_time + ONE_DAY
    return (wake_time - bedtime).total_seconds() / _SECONDS_PER_HOUR


def format_duration(hours: float) -> str:
    """Render hours as `7h 30m`, `8h` or `45m`."""
    whole_hours = int(hours)
    minutes = round((hours - whole_hours) * 60)
    if minutes == 60:
        whole_hours, minutes = whole_hours + 1, 0

    if whole_hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{whole_hours}h"
    return f"{whole_hours}h {minutes}m"
