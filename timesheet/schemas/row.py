# ruff: noqa: TC003
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, ConfigDict, field_validator

from timesheet.models.enums import RowMode
from timesheet.services.clock import parse_time


class DayRow(BaseModel):
    """One editable record per calendar day of the active month."""

    model_config = ConfigDict(validate_assignment=True)

    date: date
    mode: RowMode = RowMode.WORKDAY
    start: str = ""
    break_start: str = ""
    break_end: str = ""
    end: str = ""
    notes: str = ""

    @field_validator("start", "break_start", "break_end", "end")
    @classmethod
    def _validate_clock(cls, value: str) -> str:
        if value:
            parse_time(value)
        return value

    @property
    def is_workday(self) -> bool:
        return self.mode == RowMode.WORKDAY


@dataclass(frozen=True)
class RowHours:
    """Derived hours for a single row."""

    worked: float = 0.0
    breaks: float = 0.0
    overtime: float = 0.0


@dataclass
class Totals:
    """Aggregate hours across a month."""

    worked: float = 0.0
    breaks: float = 0.0
    overtime: float = 0.0

    def add(self, hours: RowHours) -> None:
        self.worked += hours.worked
        self.breaks += hours.breaks
        self.overtime += hours.overtime
