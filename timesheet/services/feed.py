"""Company holiday calendar feeds (iCalendar text).

Only the parts needed for all-day holidays are read: each VEVENT contributes
one holiday when it has a DTSTART date and a SUMMARY.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from timesheet.exceptions import FeedFetchError, FeedFormatError
from timesheet.models.enums import HolidayKind
from timesheet.schemas.holiday import Holiday

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

CALENDAR_MARKER = "BEGIN:VCALENDAR"
_EVENT_MARKER = "BEGIN:VEVENT"

# Tried in order: bare date value, plain value, then any parameterised form.
_DATE_PATTERNS = (
    re.compile(r"DTSTART;VALUE=DATE:(\d{8})"),
    re.compile(r"DTSTART:(\d{8})"),
    re.compile(r"DTSTART;[^:\r\n]*:(\d{8})"),
)
_SUMMARY_RE = re.compile(r"SUMMARY:(.+)")
_LABEL_RE = re.compile(r"^Company Holiday\s*[-–—:]\s*", re.IGNORECASE)
_FOLD_RE = re.compile(r"\r?\n[ \t]")


def _unfold(text: str) -> str:
    return _FOLD_RE.sub("", text)


def _clean_summary(summary: str) -> str:
    name = summary.strip().replace("\\,", ",")
    return _LABEL_RE.sub("", name)


def parse_feed(feed_text: str) -> list[Holiday]:
    """Parse iCalendar text into company holidays. Unusable events are skipped."""
    holidays: list[Holiday] = []
    events = _unfold(feed_text).split(_EVENT_MARKER)

    for event in events[1:]:
        date_match = next((m for p in _DATE_PATTERNS if (m := p.search(event))), None)
        summary_match = _SUMMARY_RE.search(event)
        if date_match is None or summary_match is None:
            continue

        raw = date_match.group(1)
        holidays.append(
            Holiday(
                date=f"{raw[:4]}-{raw[4:6]}-{raw[6:8]}",
                name=_clean_summary(summary_match.group(1)),
                kind=HolidayKind.COMPANY,
            )
        )

    return holidays


def feed_routes(url: str, proxies: Sequence[str]) -> list[str]:
    """The direct URL followed by each fallback route with the URL embedded."""
    encoded = quote(url, safe="")
    return [url, *(template.format(url=encoded) for template in proxies)]


async def fetch_company_holidays(
    client: httpx.AsyncClient,
    url: str,
    proxies: Sequence[str] = (),
) -> list[Holiday]:
    """Fetch and parse a calendar feed, falling back through alternate routes.

    Stops at the first route that returns a calendar document. When every
    route fails, the last failure is raised as FeedFetchError.
    """
    last_error: FeedFetchError | None = None

    for route in feed_routes(url, proxies):
        try:
            response = await client.get(route)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            last_error = FeedFetchError(f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            last_error = FeedFetchError(str(exc) or type(exc).__name__)
        else:
            content = response.text
            if CALENDAR_MARKER in content:
                return parse_feed(content)
            last_error = FeedFormatError("Invalid ICS format")
        logger.info("Calendar feed route failed (%s): %s", route, last_error)

    raise last_error or FeedFetchError("Failed to fetch company holidays")


def validate_holidays_for_year(holidays: Sequence[Holiday], year: int) -> str | None:
    """Return a warning when none of the holidays fall in ``year``."""
    prefix = str(year)
    if any(h.date.startswith(prefix) for h in holidays):
        return None
    return f"No company holidays found for {year}"
