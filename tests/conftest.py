from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import httpx
import pytest

from timesheet.schemas.holiday import Country, PublicHoliday
from timesheet.services.holiday import InMemoryHolidaySource
from timesheet.services.settings import compute_defaults
from timesheet.services.storage import InMemoryLocation, InMemoryStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from timesheet.schemas.settings import Configuration

# Defaults as computed on 2025-02-10 with an en-US locale: January 2025.
TODAY = date(2025, 2, 10)

ICS_2025 = (
    "BEGIN:VCALENDAR\r\n"
    "VERSION:2.0\r\n"
    "BEGIN:VEVENT\r\n"
    "DTSTART;VALUE=DATE:20250102\r\n"
    "SUMMARY:Company Holiday - Winter Break\r\n"
    "END:VEVENT\r\n"
    "BEGIN:VEVENT\r\n"
    "DTSTART;VALUE=DATE:20250106\r\n"
    "SUMMARY:Epiphany\\, observed\r\n"
    "END:VEVENT\r\n"
    "END:VCALENDAR\r\n"
)


def public_holiday(
    day: str,
    name: str,
    *,
    is_global: bool = True,
    counties: list[str] | None = None,
) -> PublicHoliday:
    return PublicHoliday(
        date=day,
        local_name=name,
        name=name,
        country_code="DE",
        is_global=is_global,
        counties=counties,
    )


@pytest.fixture
def defaults() -> Configuration:
    return compute_defaults(today=TODAY, locale_tag="en-US")


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def location() -> InMemoryLocation:
    return InMemoryLocation("/timesheet")


@pytest.fixture
def source() -> InMemoryHolidaySource:
    """Holiday source with German holidays for January 2025."""
    svc = InMemoryHolidaySource(
        countries=[
            Country(country_code="US", name="United States"),
            Country(country_code="DE", name="Deutschland"),
            Country(country_code="AT", name="Österreich"),
        ]
    )
    svc.seed(
        2025,
        "DE",
        [
            public_holiday("2025-01-01", "Neujahr"),
            public_holiday("2025-01-06", "Heilige Drei Könige", is_global=False, counties=["DE-BW", "DE-BY", "DE-ST"]),
        ],
    )
    svc.seed(2024, "DE", [public_holiday("2024-12-25", "Erster Weihnachtstag")])
    return svc


def _feed_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "calendar.example.com":
        return httpx.Response(200, text=ICS_2025)
    return httpx.Response(404)


@pytest.fixture
async def client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client serving ICS_2025 from calendar.example.com and 404 elsewhere."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(_feed_handler)) as c:
        yield c
