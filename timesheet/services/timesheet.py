"""Timesheet session: wires settings, holidays and rows together.

The session owns the active configuration snapshot and every side effect
around it. Persistence happens through explicit ``save_to_store`` and
``save_to_url`` calls on each accepted settings change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from timesheet.config import get_settings
from timesheet.exceptions import AppError, HolidaySourceError
from timesheet.schemas.row import DayRow
from timesheet.schemas.settings import Configuration
from timesheet.services.dates import month_name
from timesheet.services.holiday import HolidayLoader, fetch_countries
from timesheet.services.mailto import build_mailto_link
from timesheet.services.rows import build_rows, calculate_totals, change_mode
from timesheet.services.settings import compute_defaults, resolve, save_to_store, save_to_url

if TYPE_CHECKING:
    import httpx

    from timesheet.config import Settings
    from timesheet.models.enums import RowMode
    from timesheet.schemas.holiday import Country, Holiday
    from timesheet.schemas.row import Totals
    from timesheet.services.holiday import HolidaySource
    from timesheet.services.storage import KeyValueStore, Location

logger = logging.getLogger(__name__)

# Changing any of these regenerates rows from scratch, so unsaved edits need confirmation.
DESTRUCTIVE_KEYS: frozenset[str] = frozenset({"month", "year", "country", "region"})
# Changing any of these requires a new holiday resolution.
HOLIDAY_KEYS: frozenset[str] = frozenset({"year", "country", "region", "ics_url"})


@runtime_checkable
class DiscardConfirmer(Protocol):
    """Asks whether unsaved row edits may be discarded."""

    def confirm_discard(self) -> bool: ...


class AlwaysDiscard:
    def confirm_discard(self) -> bool:
        return True


class NeverDiscard:
    def confirm_discard(self) -> bool:
        return False


class TimesheetSession:
    """State of one open timesheet: configuration, holidays, rows and the dirty flag."""

    def __init__(
        self,
        source: HolidaySource,
        client: httpx.AsyncClient,
        store: KeyValueStore,
        location: Location,
        confirmer: DiscardConfirmer | None = None,
        settings: Settings | None = None,
        defaults: Configuration | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.defaults = defaults or compute_defaults()
        self._source = source
        self._store = store
        self._location = location
        self._confirmer = confirmer or AlwaysDiscard()
        self._loader = HolidayLoader(source, client, self.settings.feed_proxies)
        self._dirty = False

        self.config: Configuration = self.defaults
        self.countries: list[Country] = []
        self.regions: list[str] = []
        self.holidays: dict[str, Holiday] = {}
        self.warning: str | None = None
        self.rows: list[DayRow] = []

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    async def start(self) -> None:
        """Resolve the configuration and load everything derived from it."""
        self.config = resolve(self._store, self._location, self.defaults, self.settings.storage_key)
        logger.info(
            "Opening timesheet for %s %s (%s)",
            month_name(self.config.month),
            self.config.year,
            self.config.country,
        )
        self.countries = await self.load_countries()
        if await self.reload_holidays():
            self.rebuild_rows()

    async def load_countries(self) -> list[Country]:
        try:
            return await fetch_countries(self._source)
        except HolidaySourceError:
            logger.exception("Failed to fetch countries")
            return []

    async def reload_holidays(self) -> bool:
        """Resolve holidays for the current configuration. False when superseded."""
        result = await self._loader.load(self.config)
        if result is None:
            return False
        self.holidays = result.holidays
        self.regions = result.regions
        self.warning = result.warning
        return True

    def rebuild_rows(self) -> None:
        self.rows = build_rows(self.config.year, self.config.month, self.config, self.holidays)
        self._dirty = False

    # -----------------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------------

    async def update_settings(self, **changes: Any) -> bool:
        """Apply configuration changes by field name.

        Returns False when the change touches the period or locale while rows
        have unsaved edits and the confirmer declines to discard them.
        """
        unknown = changes.keys() - Configuration.model_fields.keys()
        if unknown:
            raise AppError(f"Unknown settings: {', '.join(sorted(unknown))}")

        if DESTRUCTIVE_KEYS & changes.keys() and self._dirty and not self._confirmer.confirm_discard():
            logger.info("Settings change declined; keeping unsaved edits")
            return False

        previous = self.config
        self.config = Configuration.model_validate({**previous.model_dump(), **changes})

        save_to_store(self._store, self.config, self.settings.storage_key)
        save_to_url(self._location, self.config, self.defaults)

        holidays_changed = any(getattr(previous, k) != getattr(self.config, k) for k in HOLIDAY_KEYS)
        if holidays_changed and not await self.reload_holidays():
            return True

        self.rebuild_rows()
        return True

    # -----------------------------------------------------------------------
    # Rows
    # -----------------------------------------------------------------------

    def edit_row(self, index: int, **fields: Any) -> DayRow:
        """Apply edits to a row. Invalid values reject the whole edit.

        A ``mode`` edit goes through ``change_mode`` first, so clock times are
        cleared or refilled before the remaining fields apply.
        """
        unknown = fields.keys() - DayRow.model_fields.keys()
        if unknown:
            raise AppError(f"Unknown row fields: {', '.join(sorted(unknown))}")

        row = self.rows[index]
        if "mode" in fields:
            row = change_mode(row, fields.pop("mode"), self.config)
        updated = DayRow.model_validate({**row.model_dump(), **fields})
        self.rows[index] = updated
        self._dirty = True
        return updated

    def set_mode(self, index: int, mode: RowMode) -> DayRow:
        updated = change_mode(self.rows[index], mode, self.config)
        self.rows[index] = updated
        self._dirty = True
        return updated

    def totals(self) -> Totals:
        return calculate_totals(self.rows, self.config.workday_hours)

    # -----------------------------------------------------------------------
    # Presentation helpers
    # -----------------------------------------------------------------------

    def title(self) -> str:
        title = f"Timesheet: {month_name(self.config.month)} {self.config.year}"
        who = ", ".join(part for part in (self.config.name, self.config.company) if part)
        if who:
            title += f" | {who}"
        return title

    def mailto_link(self) -> str | None:
        return build_mailto_link(self.config)
