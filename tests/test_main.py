"""Tests for the console rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from timesheet.config import Settings
from timesheet.main import render
from timesheet.services.storage import InMemoryLocation, InMemoryStore
from timesheet.services.timesheet import TimesheetSession

if TYPE_CHECKING:
    import httpx

    from timesheet.schemas.settings import Configuration
    from timesheet.services.holiday import InMemoryHolidaySource


async def test_render(source: InMemoryHolidaySource, client: httpx.AsyncClient, defaults: Configuration) -> None:
    session = TimesheetSession(
        source,
        client,
        InMemoryStore(),
        InMemoryLocation("/?country=DE&emailTo=hr@example.com"),
        settings=Settings(feed_proxies=[]),
        defaults=defaults,
    )
    await session.start()

    lines = render(session)

    assert lines[0] == "Timesheet: January 2025"
    assert lines[2].startswith("Wed 1")
    assert "public holiday" in lines[2]
    assert "Neujahr" in lines[2]
    assert lines[3].startswith("Thu 2    9:00 AM - 6:00 PM")
    assert "Total: 176.00 h worked, 22.00 h break, 0.00 h overtime" in lines
    assert lines[-1].startswith("Email: mailto:hr@example.com?subject=")
