from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from timesheet.models.enums import HolidayKind


class Holiday(BaseModel):
    """A resolved holiday, keyed by its ISO date within a resolved set."""

    model_config = ConfigDict(frozen=True)

    date: str
    name: str
    kind: HolidayKind


class PublicHoliday(BaseModel):
    """A public holiday as returned by the holiday data source."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    local_name: str = Field(default="", alias="localName")
    name: str = ""
    country_code: str = Field(default="", alias="countryCode")
    is_global: bool = Field(default=False, alias="global")
    counties: list[str] | None = None  # sub-national region codes, e.g. "DE-BY"

    @property
    def display_name(self) -> str:
        return self.local_name or self.name


class Country(BaseModel):
    """A country offered by the holiday data source."""

    model_config = ConfigDict(populate_by_name=True)

    country_code: str = Field(alias="countryCode")
    name: str
