"""Tests for the key-value store and URL location primitives."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from timesheet.services.storage import InMemoryLocation, InMemoryStore, JsonFileStore, KeyValueStore, Location

if TYPE_CHECKING:
    from pathlib import Path


def test_in_memory_store() -> None:
    store = InMemoryStore()
    assert isinstance(store, KeyValueStore)
    assert store.get_item("k") is None
    store.set_item("k", "v")
    assert store.get_item("k") == "v"


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "nested" / "storage.json")
    assert store.get_item("k") is None

    store.set_item("k", '{"name": "Jane"}')
    store.set_item("other", "1")

    assert store.get_item("k") == '{"name": "Jane"}'
    assert json.loads((tmp_path / "nested" / "storage.json").read_text()) == {
        "k": '{"name": "Jane"}',
        "other": "1",
    }


def test_json_file_store_replaces_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{broken")
    store = JsonFileStore(path)

    store.set_item("k", "v")
    assert store.get_item("k") == "v"


def test_in_memory_location() -> None:
    location = InMemoryLocation("/sheet?name=Jane")
    assert isinstance(location, Location)
    assert location.path == "/sheet"
    assert location.query == "name=Jane"

    location.replace_state("/sheet")
    assert location.url == "/sheet"
    assert location.query == ""
    assert location.history == ["/sheet"]
