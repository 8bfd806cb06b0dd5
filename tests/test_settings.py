"""Tests for settings defaults, storage, URL state and resolution."""

from __future__ import annotations

import json
from datetime import date
from typing import TYPE_CHECKING

import pytest

from timesheet.services.settings import (
    compute_defaults,
    country_from_locale,
    encode_shareable_state,
    load_from_store,
    load_from_url,
    previous_month,
    resolve,
    save_to_store,
    save_to_url,
)
from timesheet.services.storage import InMemoryLocation, InMemoryStore

if TYPE_CHECKING:
    from timesheet.schemas.settings import Configuration

KEY = "timesheet-settings"


def _store_with(data: object) -> InMemoryStore:
    return InMemoryStore({KEY: json.dumps(data)})


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_defaults_work_hours(defaults: Configuration) -> None:
    assert defaults.start == "09:00"
    assert defaults.break_start == "12:00"
    assert defaults.break_end == "13:00"
    assert defaults.end == "18:00"
    assert defaults.workday_hours == 8


def test_defaults_empty_user_fields(defaults: Configuration) -> None:
    assert defaults.name == ""
    assert defaults.company == ""
    assert defaults.ics_url == ""
    assert defaults.email_to == ""
    assert defaults.region == ""


def test_defaults_previous_month(defaults: Configuration) -> None:
    assert (defaults.month, defaults.year) == (0, 2025)


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2025, 1, 15), (11, 2024)),
        (date(2025, 2, 1), (0, 2025)),
        (date(2025, 12, 31), (10, 2025)),
    ],
)
def test_previous_month(today: date, expected: tuple[int, int]) -> None:
    assert previous_month(today) == expected


@pytest.mark.parametrize(
    ("tag", "expected"),
    [("de-DE", "DE"), ("en_gb", "GB"), ("en", ""), ("", "")],
)
def test_country_from_locale(tag: str, expected: str) -> None:
    assert country_from_locale(tag) == expected


def test_defaults_country_from_locale() -> None:
    assert compute_defaults(date(2025, 3, 1), "de-AT").country == "AT"
    assert compute_defaults(date(2025, 3, 1), "de").country == "US"


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def test_load_from_store_empty(defaults: Configuration) -> None:
    assert load_from_store(InMemoryStore(), KEY, defaults) == {}


def test_load_from_store_values(defaults: Configuration) -> None:
    store = _store_with({"name": "Test User", "company": "Test Co", "breakStart": "11:30"})
    assert load_from_store(store, KEY, defaults) == {
        "name": "Test User",
        "company": "Test Co",
        "breakStart": "11:30",
    }


def test_load_from_store_invalid_json(defaults: Configuration) -> None:
    store = InMemoryStore({KEY: "not valid json"})
    assert load_from_store(store, KEY, defaults) == {}


def test_load_from_store_non_object(defaults: Configuration) -> None:
    assert load_from_store(_store_with(["a", "b"]), KEY, defaults) == {}


def test_load_from_store_drops_period_unknown_and_invalid(defaults: Configuration) -> None:
    store = _store_with({"month": 5, "year": 2020, "theme": "dark", "start": "9am", "name": "Jane"})
    assert load_from_store(store, KEY, defaults) == {"name": "Jane"}


def test_load_from_store_read_failure(defaults: Configuration) -> None:
    class _BrokenStore(InMemoryStore):
        def get_item(self, key: str) -> str | None:
            raise OSError("disk gone")

    assert load_from_store(_BrokenStore(), KEY, defaults) == {}


def test_save_to_store_full_configuration(defaults: Configuration) -> None:
    store = InMemoryStore()
    save_to_store(store, defaults.model_copy(update={"name": "Jane"}), KEY)

    data = json.loads(store.get_item(KEY) or "")
    assert data["name"] == "Jane"
    assert data["month"] == 0
    assert data["year"] == 2025
    assert data["breakStart"] == "12:00"
    assert data["workdayHours"] == 8


def test_save_to_store_swallows_failures(defaults: Configuration) -> None:
    class _FullStore(InMemoryStore):
        def set_item(self, key: str, value: str) -> None:
            raise OSError("quota exceeded")

    save_to_store(_FullStore(), defaults, KEY)


# ---------------------------------------------------------------------------
# URL
# ---------------------------------------------------------------------------


def test_load_from_url_strings(defaults: Configuration) -> None:
    location = InMemoryLocation("/?name=Jane+Doe&company=Acme&breakEnd=13:30&emailTo=a%40x.com,b%40x.com")
    assert load_from_url(location, defaults) == {
        "name": "Jane Doe",
        "company": "Acme",
        "breakEnd": "13:30",
        "emailTo": "a@x.com,b@x.com",
    }


def test_load_from_url_numbers(defaults: Configuration) -> None:
    location = InMemoryLocation("/?month=5&year=2023&workdayHours=7.5")
    assert load_from_url(location, defaults) == {"month": 5, "year": 2023, "workdayHours": 7.5}


def test_load_from_url_ignores_unknown_and_invalid(defaults: Configuration) -> None:
    location = InMemoryLocation("/?foo=bar&month=abc&year=2023&workdayHours=lots&start=25:00")
    assert load_from_url(location, defaults) == {"year": 2023}


def test_load_from_url_month_out_of_range(defaults: Configuration) -> None:
    assert load_from_url(InMemoryLocation("/?month=12"), defaults) == {}


def test_load_from_url_first_value_wins(defaults: Configuration) -> None:
    assert load_from_url(InMemoryLocation("/?name=A&name=B"), defaults) == {"name": "A"}


def test_load_from_url_keeps_empty_string(defaults: Configuration) -> None:
    assert load_from_url(InMemoryLocation("/?region="), defaults) == {"region": ""}


def test_encode_excludes_defaults_empty_and_period(defaults: Configuration) -> None:
    config = defaults.model_copy(
        update={"name": "Jane", "month": 6, "year": 2021, "start": "09:00", "region": "", "workday_hours": 7.5},
    )
    assert encode_shareable_state(config, defaults) == {"name": "Jane", "workdayHours": "7.5"}


def test_encode_defaults_is_empty(defaults: Configuration) -> None:
    assert encode_shareable_state(defaults, defaults) == {}


def test_encode_whole_number_hours(defaults: Configuration) -> None:
    config = defaults.model_copy(update={"workday_hours": 6.0})
    assert encode_shareable_state(config, defaults) == {"workdayHours": "6"}


def test_save_to_url_bare_path(defaults: Configuration, location: InMemoryLocation) -> None:
    assert save_to_url(location, defaults, defaults) == "/timesheet"
    assert location.url == "/timesheet"
    assert location.history == ["/timesheet"]


def test_save_to_url_query(defaults: Configuration, location: InMemoryLocation) -> None:
    config = defaults.model_copy(update={"name": "Jane Doe", "country": "DE", "region": "DE-BY"})
    url = save_to_url(location, config, defaults)

    assert url == "/timesheet?name=Jane+Doe&country=DE&region=DE-BY"
    assert location.query == "name=Jane+Doe&country=DE&region=DE-BY"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def test_resolve_defaults_only(defaults: Configuration) -> None:
    assert resolve(InMemoryStore(), InMemoryLocation(), defaults, KEY).model_dump() == defaults.model_dump()


def test_resolve_precedence(defaults: Configuration) -> None:
    store = _store_with({"name": "Stored", "company": "Stored Co", "end": "17:00"})
    location = InMemoryLocation("/?name=Url&end=16:00")

    config = resolve(store, location, defaults, KEY)

    assert config.name == "Url"
    assert config.company == "Stored Co"
    assert config.end == "16:00"
    assert config.start == "09:00"


def test_resolve_period_from_url_only(defaults: Configuration) -> None:
    store = _store_with({"month": 7, "year": 2022})
    config = resolve(store, InMemoryLocation(), defaults, KEY)
    assert (config.month, config.year) == (0, 2025)

    config = resolve(store, InMemoryLocation("/?month=3&year=2024"), defaults, KEY)
    assert (config.month, config.year) == (3, 2024)


def test_store_round_trip_through_resolve(defaults: Configuration) -> None:
    store = InMemoryStore()
    saved = defaults.model_copy(update={"name": "Jane", "workday_hours": 7.5, "ics_url": "https://x.test/c.ics"})
    save_to_store(store, saved, KEY)

    assert resolve(store, InMemoryLocation(), defaults, KEY).model_dump() == saved.model_dump()
