"""Persistence primitives: a string key-value store and a shareable URL location.

Both are opaque to the settings resolver. The in-memory implementations back
tests and one-off runs; ``JsonFileStore`` keeps preferences for the current user
profile on disk.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Interface for a persistent string store."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or None if absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a value under key, replacing any previous one."""
        ...


class InMemoryStore:
    """In-memory store for development and tests."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStore:
    """Store backed by a single JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read()
        except ValueError:
            logger.warning("Replacing unreadable store at %s", self.path)
            items = {}
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")


@runtime_checkable
class Location(Protocol):
    """Interface for the shareable URL: a path, a query string and history replacement."""

    @property
    def path(self) -> str: ...

    @property
    def query(self) -> str:
        """Query string without the leading "?"."""
        ...

    def replace_state(self, url: str) -> None:
        """Replace the current URL without a reload."""
        ...


class InMemoryLocation:
    """Location held in memory, starting from an optional URL."""

    def __init__(self, url: str = "/") -> None:
        self._path = "/"
        self._query = ""
        self.history: list[str] = []
        self._apply(url)

    def _apply(self, url: str) -> None:
        parts = urlsplit(url)
        self._path = parts.path or "/"
        self._query = parts.query

    @property
    def path(self) -> str:
        return self._path

    @property
    def query(self) -> str:
        return self._query

    @property
    def url(self) -> str:
        return f"{self._path}?{self._query}" if self._query else self._path

    def replace_state(self, url: str) -> None:
        self._apply(url)
        self.history.append(url)
