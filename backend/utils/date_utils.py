"""
Date utilities.

Timestamps are stored as naive UTC datetimes. Anything arriving from a
client with a timezone is converted before it is compared or stored.
"""

from datetime import datetime, timezone
from typing import Optional

MONTH_NAMES_SHORT = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are shifted to UTC and stripped; naive ones are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_label(year: int, month: int) -> str:
    """Chart label for a month, e.g. 'Mar 2026'."""
    return f"{MONTH_NAMES_SHORT[month - 1]} {year}"


def shift_months(value: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months, clamping the day.

    Examples:
        >>> shift_months(datetime(2026, 3, 31), -1)
        datetime.datetime(2026, 2, 28, 0, 0)
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    if month == 12:
        last_day = 31
    else:
        last_day = (datetime(year, month + 1, 1) - datetime(year, month, 1)).days
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of full days from start to end (truncated toward zero)."""
    return int((end - start).total_seconds() / 86400)
