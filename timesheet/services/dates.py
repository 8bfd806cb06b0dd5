from __future__ import annotations

import calendar
from datetime import date

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def days_in_month(year: int, month: int) -> list[date]:
    """Every day of a month in ascending order.

    ``month`` is zero-based (0 = January) to match the configuration's period
    selector. Stops on the last day, so December 9999 is still representable.
    """
    _, count = calendar.monthrange(year, month + 1)
    return [date(year, month + 1, day) for day in range(1, count + 1)]


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


def format_date_iso(day: date) -> str:
    return day.isoformat()


def format_date_long(day: date) -> str:
    """Short weekday and day of month, e.g. "Mon 6"."""
    return f"{_WEEKDAY_ABBR[day.weekday()]} {day.day}"


def format_date_short(day: date) -> str:
    """Weekday, month and day, e.g. "Mon, Jan 6"."""
    return f"{_WEEKDAY_ABBR[day.weekday()]}, {_MONTH_NAMES[day.month - 1][:3]} {day.day}"


# English names regardless of the process locale; the mail subject depends on it.
def month_name(month: int) -> str:
    """Name of a zero-based month."""
    return _MONTH_NAMES[month]
