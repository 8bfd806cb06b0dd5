"""Public holiday lookup and resolution into a date-keyed holiday map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
from pydantic import TypeAdapter, ValidationError

from timesheet.exceptions import FeedFetchError, HolidaySourceError
from timesheet.models.enums import HolidayKind
from timesheet.schemas.holiday import Country, Holiday, PublicHoliday
from timesheet.services.feed import fetch_company_holidays, validate_holidays_for_year

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from timesheet.schemas.settings import Configuration

logger = logging.getLogger(__name__)

_countries_adapter: TypeAdapter[list[Country]] = TypeAdapter(list[Country])
_holidays_adapter: TypeAdapter[list[PublicHoliday]] = TypeAdapter(list[PublicHoliday])

# Friendlier display names than the source provides for common countries.
COUNTRY_NAME_OVERRIDES: dict[str, str] = {
    "DE": "Germany",
    "AT": "Austria",
    "CH": "Switzerland",
    "NL": "Netherlands",
    "BE": "Belgium",
    "JP": "Japan",
    "KR": "South Korea",
    "CN": "China",
    "BR": "Brazil",
    "MX": "Mexico",
    "ES": "Spain",
    "PT": "Portugal",
    "IT": "Italy",
    "FR": "France",
    "PL": "Poland",
    "CZ": "Czech Republic",
    "SE": "Sweden",
    "NO": "Norway",
    "DK": "Denmark",
    "FI": "Finland",
}


# ---------------------------------------------------------------------------
# Holiday sources
# ---------------------------------------------------------------------------


@runtime_checkable
class HolidaySource(Protocol):
    """Interface for the public holiday data source."""

    async def list_countries(self) -> list[Country]:
        """List countries the source has holidays for."""
        ...

    async def get_public_holidays(self, year: int, country_code: str) -> list[PublicHoliday]:
        """Fetch public holidays for a country and year."""
        ...


class NagerDateSource:
    """Holiday source backed by the Nager.Date public API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def _get_json(self, path: str, label: str) -> object:
        try:
            response = await self._client.get(f"{self._base_url}{path}")
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise HolidaySourceError(f"Failed to fetch {label}") from exc

    async def list_countries(self) -> list[Country]:
        data = await self._get_json("/AvailableCountries", "countries")
        try:
            return _countries_adapter.validate_python(data)
        except ValidationError as exc:
            raise HolidaySourceError("Unexpected country list format") from exc

    async def get_public_holidays(self, year: int, country_code: str) -> list[PublicHoliday]:
        data = await self._get_json(f"/PublicHolidays/{year}/{country_code}", f"holidays for {country_code}")
        try:
            return _holidays_adapter.validate_python(data)
        except ValidationError as exc:
            raise HolidaySourceError(f"Unexpected holiday format for {country_code}") from exc


class InMemoryHolidaySource:
    """In-memory stub implementation for development."""

    def __init__(self, countries: list[Country] | None = None) -> None:
        self._countries: list[Country] = list(countries or [])
        self._holidays: dict[tuple[int, str], list[PublicHoliday]] = {}

    def seed(self, year: int, country_code: str, holidays: Iterable[PublicHoliday]) -> None:
        """Seed holidays for testing."""
        self._holidays[(year, country_code)] = list(holidays)

    async def list_countries(self) -> list[Country]:
        return list(self._countries)

    async def get_public_holidays(self, year: int, country_code: str) -> list[PublicHoliday]:
        return list(self._holidays.get((year, country_code), []))


async def fetch_countries(source: HolidaySource) -> list[Country]:
    """Countries with display-name overrides applied, sorted by name."""
    return apply_country_names(await source.list_countries())


def apply_country_names(countries: Iterable[Country]) -> list[Country]:
    named = [
        c.model_copy(update={"name": COUNTRY_NAME_OVERRIDES.get(c.country_code, c.name)}) for c in countries
    ]
    return sorted(named, key=lambda c: c.name.casefold())


# ---------------------------------------------------------------------------
# Region handling and merge
# ---------------------------------------------------------------------------


def get_regions(holidays: Iterable[PublicHoliday]) -> list[str]:
    """Sorted, de-duplicated region codes across all holidays' scope lists."""
    regions: set[str] = set()
    for holiday in holidays:
        if holiday.counties:
            regions.update(holiday.counties)
    return sorted(regions)


def filter_by_region(holidays: Iterable[PublicHoliday], region: str) -> list[PublicHoliday]:
    """Keep global and unscoped holidays, plus those scoped to ``region`` when one is selected."""
    return [
        h
        for h in holidays
        if h.is_global or not h.counties or (region and region in h.counties)
    ]


def merge_holidays(
    public_holidays: Iterable[PublicHoliday],
    company_holidays: Iterable[Holiday],
) -> dict[str, Holiday]:
    """Merge public and company holidays into one map keyed by ISO date.

    A company holiday on a date that is already taken is folded into the
    existing record's name; the existing kind is kept.
    """
    merged: dict[str, Holiday] = {}

    for ph in public_holidays:
        merged[ph.date] = Holiday(date=ph.date, name=ph.display_name, kind=HolidayKind.PUBLIC)

    for ch in company_holidays:
        existing = merged.get(ch.date)
        if existing is None:
            merged[ch.date] = ch
        else:
            merged[ch.date] = existing.model_copy(
                update={"name": f"Company: {ch.name}; Public: {existing.name}"},
            )

    return merged


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass
class HolidayResolution:
    """Result of resolving holidays for a year, country, region and feed."""

    holidays: dict[str, Holiday] = field(default_factory=dict)
    regions: list[str] = field(default_factory=list)
    warning: str | None = None


async def resolve_holidays(
    source: HolidaySource,
    client: httpx.AsyncClient,
    year: int,
    country: str,
    region: str = "",
    ics_url: str = "",
    proxies: Sequence[str] = (),
) -> HolidayResolution:
    """Resolve the holiday map. Fetch failures degrade to partial data, never raise."""
    result = HolidayResolution()

    # 1. Public holidays; a failure leaves the public set empty.
    public_holidays: list[PublicHoliday] = []
    try:
        public_holidays = await source.get_public_holidays(year, country)
    except Exception:
        logger.exception("Failed to fetch public holidays for %s %s", country, year)

    # 2. Regions offered by this country's holidays.
    result.regions = get_regions(public_holidays)

    # 3. Company holidays from the calendar feed.
    company_holidays: list[Holiday] = []
    if ics_url:
        try:
            company_holidays = await fetch_company_holidays(client, ics_url, proxies)
        except FeedFetchError as exc:
            logger.warning("Failed to load company holidays from %s: %s", ics_url, exc.message)
            result.warning = exc.message
        else:
            result.warning = validate_holidays_for_year(company_holidays, year)

    # 4. Filter and merge.
    filtered = filter_by_region(public_holidays, region)
    result.holidays = merge_holidays(filtered, company_holidays)
    logger.debug(
        "Resolved %d holidays for %s %s (region=%r, company=%d)",
        len(result.holidays),
        country,
        year,
        region,
        len(company_holidays),
    )
    return result


class HolidayLoader:
    """Runs holiday resolutions and discards results superseded by a newer run.

    Each ``load`` call takes the next generation number. A run that finishes
    after a newer run has started returns None instead of its result.
    """

    def __init__(
        self,
        source: HolidaySource,
        client: httpx.AsyncClient,
        proxies: Sequence[str] = (),
    ) -> None:
        self._source = source
        self._client = client
        self._proxies = tuple(proxies)
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def load(self, config: Configuration) -> HolidayResolution | None:
        self._generation += 1
        generation = self._generation

        result = await resolve_holidays(
            self._source,
            self._client,
            config.year,
            config.country,
            config.region,
            config.ics_url,
            self._proxies,
        )

        if generation != self._generation:
            logger.debug("Discarding stale holiday resolution (generation %d < %d)", generation, self._generation)
            return None
        return result
