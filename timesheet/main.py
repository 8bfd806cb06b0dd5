"""Console entry point: print the timesheet for the resolved month.

Run with:  timesheet "/?country=DE&region=DE-BY&name=Jane%20Doe"
The argument plays the role of the page URL; stored preferences are read from
and written to ``TIMESHEET_STORAGE_PATH``.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

import httpx

from timesheet.config import get_settings
from timesheet.services.clock import format_time_12h
from timesheet.services.dates import format_date_long
from timesheet.services.holiday import NagerDateSource
from timesheet.services.rows import mode_label, row_hours
from timesheet.services.settings import save_to_store, save_to_url
from timesheet.services.storage import InMemoryLocation, JsonFileStore
from timesheet.services.timesheet import TimesheetSession

if TYPE_CHECKING:
    from timesheet.schemas.row import DayRow


def _format_row(row: DayRow, expected_hours: float) -> str:
    hours = row_hours(row, expected_hours)
    span = f"{format_time_12h(row.start)} - {format_time_12h(row.end)}" if row.is_workday else ""
    return (
        f"{format_date_long(row.date):<8} {span:<20} {hours.worked:5.2f} {hours.breaks:5.2f} "
        f"{hours.overtime:5.2f}  {mode_label(row.mode):<16} {row.notes}"
    ).rstrip()


def render(session: TimesheetSession) -> list[str]:
    """Text lines for the session's title, warning, rows, totals and email link."""
    lines = [session.title(), ""]
    if session.warning:
        lines += [f"Warning: {session.warning}", ""]

    expected = session.config.workday_hours
    lines += [_format_row(row, expected) for row in session.rows]

    totals = session.totals()
    lines += [
        "",
        f"Total: {totals.worked:.2f} h worked, {totals.breaks:.2f} h break, {totals.overtime:.2f} h overtime",
    ]

    link = session.mailto_link()
    if link:
        lines.append(f"Email: {link}")
    return lines


async def run(url: str) -> None:
    settings = get_settings()
    store = JsonFileStore(settings.storage_path)
    location = InMemoryLocation(url)

    async with httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True) as client:
        session = TimesheetSession(
            NagerDateSource(client, settings.holiday_api_url),
            client,
            store,
            location,
            settings=settings,
        )
        await session.start()

    save_to_store(store, session.config, settings.storage_key)
    shareable = save_to_url(location, session.config, session.defaults)
    print("\n".join(render(session)))
    print(f"Link: {shareable}")


def main() -> None:
    """Entry point for the console script."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    url = sys.argv[1] if len(sys.argv) > 1 else "/"
    if url.startswith("?"):
        url = f"/{url}"
    asyncio.run(run(url))


if __name__ == "__main__":
    main()
