from __future__ import annotations

from typing import TYPE_CHECKING

from timesheet.models.enums import HolidayKind, RowMode
from timesheet.schemas.row import DayRow, RowHours, Totals
from timesheet.services.clock import calculate_break_hours, calculate_hours, calculate_overtime
from timesheet.services.dates import days_in_month, format_date_iso, is_weekend

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from timesheet.schemas.holiday import Holiday
    from timesheet.schemas.settings import Configuration

_TIME_FIELDS = ("start", "break_start", "break_end", "end")

_MODE_LABELS: dict[RowMode, str] = {
    RowMode.PUBLIC_HOLIDAY: "public holiday",
    RowMode.COMPANY_HOLIDAY: "company holiday",
    RowMode.PTO: "PTO",
}


def _default_times(config: Configuration) -> dict[str, str]:
    return {name: getattr(config, name) for name in _TIME_FIELDS}


def build_rows(
    year: int,
    month: int,
    config: Configuration,
    holidays: Mapping[str, Holiday],
) -> list[DayRow]:
    """Build one row per day of the month.

    Weekends win over holidays. Holiday rows are seeded with the holiday name
    as notes. Only workday rows receive the configured default times.
    """
    rows: list[DayRow] = []

    for day in days_in_month(year, month):
        holiday = holidays.get(format_date_iso(day))
        mode = RowMode.WORKDAY
        notes = ""

        if is_weekend(day):
            mode = RowMode.WEEKEND
        elif holiday is not None:
            mode = RowMode.PUBLIC_HOLIDAY if holiday.kind == HolidayKind.PUBLIC else RowMode.COMPANY_HOLIDAY
            notes = holiday.name

        times = _default_times(config) if mode == RowMode.WORKDAY else dict.fromkeys(_TIME_FIELDS, "")
        rows.append(DayRow(date=day, mode=mode, notes=notes, **times))

    return rows


def change_mode(row: DayRow, mode: RowMode, config: Configuration) -> DayRow:
    """Return ``row`` switched to ``mode``.

    Switching to workday fills only the empty times from the defaults. Any
    other mode clears all four times.
    """
    if mode == RowMode.WORKDAY:
        defaults = _default_times(config)
        times = {name: getattr(row, name) or defaults[name] for name in _TIME_FIELDS}
    else:
        times = dict.fromkeys(_TIME_FIELDS, "")
    return row.model_copy(update={"mode": mode, **times})


def row_hours(row: DayRow, expected_hours: float) -> RowHours:
    """Worked, break and overtime hours for a row; zero unless it is a workday."""
    if not row.is_workday:
        return RowHours()
    worked = calculate_hours(row.start, row.break_start, row.break_end, row.end)
    return RowHours(
        worked=worked,
        breaks=calculate_break_hours(row.break_start, row.break_end),
        overtime=calculate_overtime(worked, expected_hours),
    )


def calculate_totals(rows: Iterable[DayRow], expected_hours: float) -> Totals:
    totals = Totals()
    for row in rows:
        totals.add(row_hours(row, expected_hours))
    return totals


def mode_label(mode: RowMode) -> str:
    """Type column text for a row mode; empty for workdays and weekends."""
    return _MODE_LABELS.get(mode, "")
