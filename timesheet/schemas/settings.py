from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timesheet.services.clock import parse_time

# Fields never written to the URL; re-derived to the previous month on every load.
EPHEMERAL_KEYS: frozenset[str] = frozenset({"month", "year"})


class Configuration(BaseModel):
    """User-controlled preferences driving row generation and holiday resolution.

    Instances are immutable snapshots; use ``model_copy(update=...)`` or
    ``Configuration.model_validate`` to derive a new one. Aliases are the keys
    used in the URL query string and the stored blob.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    company: str = ""
    month: int = Field(ge=0, le=11)
    year: int = Field(ge=1, le=9999)
    country: str = ""
    region: str = ""
    start: str = ""
    break_start: str = Field(default="", alias="breakStart")
    break_end: str = Field(default="", alias="breakEnd")
    end: str = ""
    workday_hours: float = Field(default=8.0, ge=0, allow_inf_nan=False, alias="workdayHours")
    ics_url: str = Field(default="", alias="icsUrl")
    email_to: str = Field(default="", alias="emailTo")

    @field_validator("start", "break_start", "break_end", "end")
    @classmethod
    def _validate_clock(cls, value: str) -> str:
        if value:
            parse_time(value)
        return value

    def to_external(self) -> dict[str, object]:
        """Serialize by external key, the shape stored and encoded into URLs."""
        return self.model_dump(by_alias=True, mode="json")


def external_keys() -> dict[str, str]:
    """Map of external key to field name for every configuration field."""
    return {(info.alias or name): name for name, info in Configuration.model_fields.items()}
