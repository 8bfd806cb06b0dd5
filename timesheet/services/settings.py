"""Settings resolution: defaults, stored preferences and URL overrides.

Precedence is defaults < stored preferences < URL, merged shallowly per field.
Persistence is asymmetric: the store receives the full configuration, the URL
only the fields that differ from their defaults and are non-empty, never the
month or year.
"""

from __future__ import annotations

import json
import locale
import logging
import os
from datetime import date
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode

from pydantic import ValidationError

from timesheet.config import get_settings
from timesheet.schemas.settings import EPHEMERAL_KEYS, Configuration, external_keys

if TYPE_CHECKING:
    from timesheet.services.storage import KeyValueStore, Location

logger = logging.getLogger(__name__)

# Default working day.
DEFAULT_START = "09:00"
DEFAULT_BREAK_START = "12:00"
DEFAULT_BREAK_END = "13:00"
DEFAULT_END = "18:00"
DEFAULT_WORKDAY_HOURS = 8.0

_STRING_URL_KEYS = (
    "name",
    "company",
    "country",
    "region",
    "start",
    "breakStart",
    "breakEnd",
    "end",
    "icsUrl",
    "emailTo",
)
_INT_URL_KEYS = ("month", "year")
_FLOAT_URL_KEYS = ("workdayHours",)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def detect_locale_tag() -> str:
    """Return the host locale as a language tag such as "en-US" (may be empty)."""
    try:
        tag = locale.getlocale()[0]
    except ValueError:
        tag = None
    tag = tag or os.environ.get("LC_ALL") or os.environ.get("LANG") or ""
    return tag.split(".")[0].replace("_", "-")


def country_from_locale(tag: str) -> str:
    """Region segment of a language tag, uppercased. Empty when the tag has none."""
    parts = tag.replace("_", "-").split("-")
    if len(parts) < 2:
        return ""
    return parts[1].upper()


def previous_month(today: date) -> tuple[int, int]:
    """Return (zero-based month, year) of the calendar month before ``today``."""
    if today.month == 1:
        return 11, today.year - 1
    return today.month - 2, today.year


def compute_defaults(today: date | None = None, locale_tag: str | None = None) -> Configuration:
    """Build the default configuration for the host locale and current date."""
    month, year = previous_month(today or date.today())
    tag = detect_locale_tag() if locale_tag is None else locale_tag
    country = country_from_locale(tag) or get_settings().fallback_country

    return Configuration(
        name="",
        company="",
        month=month,
        year=year,
        country=country,
        region="",
        start=DEFAULT_START,
        break_start=DEFAULT_BREAK_START,
        break_end=DEFAULT_BREAK_END,
        end=DEFAULT_END,
        workday_hours=DEFAULT_WORKDAY_HOURS,
        ics_url="",
        email_to="",
    )


def _sanitize(partial: dict[str, Any], defaults: Configuration) -> dict[str, Any]:
    """Drop unknown keys and any value that would not validate on top of the defaults."""
    known = external_keys()
    cleaned = {k: v for k, v in partial.items() if k in known}
    base = defaults.to_external()

    while cleaned:
        try:
            Configuration.model_validate({**base, **cleaned})
        except ValidationError as exc:
            invalid = {err["loc"][0] for err in exc.errors() if err["loc"]}
            if not invalid & cleaned.keys():
                return {}
            logger.debug("Ignoring invalid settings values: %s", sorted(invalid & cleaned.keys()))
            cleaned = {k: v for k, v in cleaned.items() if k not in invalid}
        else:
            break
    return cleaned


# ---------------------------------------------------------------------------
# Stored preferences
# ---------------------------------------------------------------------------


def load_from_store(
    store: KeyValueStore,
    key: str | None = None,
    defaults: Configuration | None = None,
) -> dict[str, Any]:
    """Read the stored preferences blob. Never raises; bad data reads as empty.

    Month and year are stored but not restored, so a fresh load always opens
    on the previous calendar month.
    """
    key = key or get_settings().storage_key
    try:
        raw = store.get_item(key)
        data = json.loads(raw) if raw else {}
    except (OSError, ValueError):
        logger.debug("Stored settings under %r are unreadable", key, exc_info=True)
        return {}
    if not isinstance(data, dict):
        return {}

    data = {k: v for k, v in data.items() if k not in EPHEMERAL_KEYS}
    return _sanitize(data, defaults or compute_defaults())


def save_to_store(store: KeyValueStore, config: Configuration, key: str | None = None) -> None:
    """Write the full configuration to the store. Failures are swallowed."""
    key = key or get_settings().storage_key
    try:
        store.set_item(key, json.dumps(config.to_external()))
    except (OSError, TypeError, ValueError):
        logger.debug("Could not save settings under %r", key, exc_info=True)


# ---------------------------------------------------------------------------
# Shareable state (URL)
# ---------------------------------------------------------------------------


def load_from_url(location: Location, defaults: Configuration | None = None) -> dict[str, Any]:
    """Read recognized settings from the URL query string."""
    params: dict[str, str] = {}
    for k, v in parse_qsl(location.query, keep_blank_values=True):
        params.setdefault(k, v)

    settings: dict[str, Any] = {}
    for k in _STRING_URL_KEYS:
        if k in params:
            settings[k] = params[k]

    for k in _INT_URL_KEYS:
        if k in params:
            try:
                settings[k] = int(params[k])
            except ValueError:
                logger.debug("Ignoring non-integer %s=%r in URL", k, params[k])

    for k in _FLOAT_URL_KEYS:
        if k in params:
            try:
                settings[k] = float(params[k])
            except ValueError:
                logger.debug("Ignoring non-numeric %s=%r in URL", k, params[k])

    return _sanitize(settings, defaults or compute_defaults())


def _format_param(value: object) -> str:
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def encode_shareable_state(config: Configuration, defaults: Configuration) -> dict[str, str]:
    """Return the minimal set of URL parameters describing ``config``."""
    default_values = defaults.to_external()
    params: dict[str, str] = {}

    for k, value in config.to_external().items():
        if k in EPHEMERAL_KEYS:
            continue
        if value is None or value == "" or value == default_values.get(k):
            continue
        params[k] = _format_param(value)

    return params


def save_to_url(location: Location, config: Configuration, defaults: Configuration | None = None) -> str:
    """Replace the current URL with the shareable state of ``config``. Returns the new URL."""
    query = urlencode(encode_shareable_state(config, defaults or compute_defaults()))
    url = f"{location.path}?{query}" if query else location.path
    location.replace_state(url)
    return url


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve(
    store: KeyValueStore,
    location: Location,
    defaults: Configuration | None = None,
    key: str | None = None,
) -> Configuration:
    """Resolve the active configuration: defaults < stored < URL."""
    defaults = defaults or compute_defaults()
    stored = load_from_store(store, key, defaults)
    from_url = load_from_url(location, defaults)

    return Configuration.model_validate({**defaults.to_external(), **stored, **from_url})
