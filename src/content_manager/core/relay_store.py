"""Persisted list of saved relay URLs.

The list is a JSON array of strings, rewritten wholesale on every mutation.
Entries are distinct under case-sensitive string equality and keep their
insertion order. On first use (no file yet) the list is seeded with one
default relay and written immediately.

Note:
    The store assumes a single writer: two handlers sharing one file will
    overwrite each other's changes.

Examples:
    ```python
    store = RelayListStore("relays.json")
    store.load()                       # ["wss://ammetronics.com"]
    store.add("wss://relay.example.com")
    store.relays                       # [..., "wss://relay.example.com"]
    ```
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from content_manager.models.constants import DEFAULT_RELAY_URL, DEFAULT_RELAYS_PATH

from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class RelayListStore:
    """Ordered, deduplicated relay URLs backed by a JSON file.

    Args:
        path: Location of the JSON file.
        default_relay: URL seeded when the file does not exist.
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_RELAYS_PATH,
        default_relay: str = DEFAULT_RELAY_URL,
    ) -> None:
        self._path = Path(path)
        self._default_relay = default_relay
        # Until load() succeeds the in-memory list holds only the default.
        self._relays: list[str] = [default_relay]

    @property
    def path(self) -> Path:
        return self._path

    @property
    def relays(self) -> list[str]:
        """Copy of the in-memory list."""
        return list(self._relays)

    def load(self) -> list[str]:
        """Read the persisted list, seeding and saving the default on first run.

        Duplicate entries in the file are collapsed, keeping the first.

        Raises:
            ConfigurationError: If the file is unreadable, not valid JSON,
                or not an array of strings.
        """
        if not self._path.exists():
            logger.info("relay_list_seeded path=%s relay=%s", self._path, self._default_relay)
            self.save([self._default_relay])
            return self.relays

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read relay list {self._path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(url, str) for url in data):
            raise ConfigurationError(f"Relay list {self._path} must be a JSON array of strings")

        self._relays = list(dict.fromkeys(data))
        return self.relays

    def save(self, relays: list[str] | None = None) -> None:
        """Overwrite the file with *relays* (or the current list).

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        new_relays = list(self._relays if relays is None else relays)
        try:
            if self._path.parent != Path():
                self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(new_relays), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot write relay list {self._path}: {e}") from e
        self._relays = new_relays

    def add(self, url: str) -> None:
        """Append *url* and persist, unless it is already saved.

        The in-memory list changes only once the file write succeeds.
        """
        if url in self._relays:
            return
        self.save([*self._relays, url])

    def remove(self, url: str) -> None:
        """Remove the first occurrence of *url* (if any) and persist.

        The in-memory list changes only once the file write succeeds.
        """
        relays = list(self._relays)
        if url in relays:
            relays.remove(url)
        self.save(relays)
