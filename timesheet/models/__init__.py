from timesheet.models.enums import HolidayKind, RowMode

__all__ = [
    "HolidayKind",
    "RowMode",
]
