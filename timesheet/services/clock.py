"""Clock-time arithmetic for timesheet rows.

Clock values are "HH:MM" strings as entered by the user. An empty string means
"not logged" and is handled by each calculator; anything else that does not
parse raises InvalidTimeFormat.
"""

from __future__ import annotations

import re

from timesheet.exceptions import InvalidTimeFormat

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_MINUTES_PER_HOUR = 60


def parse_time(clock: str) -> int:
    """Convert an "HH:MM" string into minutes after midnight."""
    match = _CLOCK_RE.match(clock.strip()) if isinstance(clock, str) else None
    if match is None:
        raise InvalidTimeFormat(clock)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(clock)
    return hours * _MINUTES_PER_HOUR + minutes


def is_valid_time(value: str) -> bool:
    """Return True for an empty value or a parseable clock string."""
    if value == "":
        return True
    try:
        parse_time(value)
    except InvalidTimeFormat:
        return False
    return True


def format_time(minutes: int) -> str:
    """Convert minutes after midnight back into "HH:MM"."""
    hours, mins = divmod(minutes, _MINUTES_PER_HOUR)
    return f"{hours:02d}:{mins:02d}"


def format_time_12h(clock: str) -> str:
    """Render a clock string as "h:MM AM/PM". Empty input gives empty output."""
    if not clock:
        return ""
    hours, minutes = divmod(parse_time(clock), _MINUTES_PER_HOUR)
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def calculate_hours(start: str, break_start: str, break_end: str, end: str) -> float:
    """Worked hours for a day, never negative.

    A day without both start and end logged has zero hours. The break is only
    subtracted when both of its boundaries are present.
    """
    if not start or not end:
        return 0.0

    start_minutes = parse_time(start)
    end_minutes = parse_time(end)
    break_minutes = parse_time(break_end) - parse_time(break_start) if break_start and break_end else 0

    total_minutes = end_minutes - start_minutes - break_minutes
    return max(0.0, total_minutes / _MINUTES_PER_HOUR)


def calculate_break_hours(break_start: str, break_end: str) -> float:
    """Break length in hours; zero when either boundary is missing."""
    if not break_start or not break_end:
        return 0.0
    minutes = parse_time(break_end) - parse_time(break_start)
    return max(0.0, minutes / _MINUTES_PER_HOUR)


def calculate_overtime(hours_worked: float, expected_hours: float) -> float:
    """Hours worked beyond the expected daily hours."""
    return max(0.0, hours_worked - expected_hours)
