"""Relay handler: the facade called by the GUI binding layer and the CLI.

Composes the [RelayListStore][content_manager.core.relay_store.RelayListStore]
for saved relays, one [RelayConnection][content_manager.utils.transport.RelayConnection]
for network calls, and [derive_key_pair()][content_manager.utils.keys.derive_key_pair]
plus [content_manager.nips.nip01][] for signing.

Every caller-facing operation returns a
[HandlerResult][content_manager.services.handler.service.HandlerResult]: the
operation's value on success, or the error that stopped it. No exception
crosses this boundary, so the GUI can show ``result.message`` verbatim.

Connection replacement is explicit: connecting closes the current session
before the new one is opened, and a failed connect leaves the handler with
no connection at all.

Examples:
    ```python
    async with RelayHandler.from_yaml("config/handler.yaml") as handler:
        result = await handler.connect_relay("wss://relay.example.com")
        if not result.ok:
            print(result.message)

        notes = await handler.subscribe_to_relay([{"kinds": [1], "limit": 10}])
        sent = await handler.send_note(os.environ["NOSTR_PRIVATE_KEY"], "hello")
        print(f"Published: {sent.value}")
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Any, Generic, Self, TypeVar

from content_manager.core.exceptions import (
    ContentManagerError,
    InvalidRelayUrlError,
    NotConnectedError,
    VerificationFaultError,
)
from content_manager.core.logger import Logger
from content_manager.core.relay_store import RelayListStore
from content_manager.core.yaml import load_yaml
from content_manager.models.event import Event
from content_manager.models.filter import Filter, translate_filters
from content_manager.models.relay import SECURE_SCHEMES, validate_relay_url
from content_manager.nips.nip01 import build_event, sign_event, verify_event
from content_manager.utils.keys import derive_key_pair
from content_manager.utils.transport import RelayConnection

from .configs import HandlerConfig


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class HandlerResult(Generic[T]):
    """Outcome of a handler operation.

    Attributes:
        value: The operation's result; ``None`` on failure or for operations
            without a value.
        error: The error that stopped the operation, ``None`` on success.
    """

    value: T | None = None
    error: ContentManagerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        """Error text suitable for showing to the user."""
        return None if self.error is None else str(self.error)


class RelayHandler:
    """Facade over relay persistence, the relay session and note signing.

    Args:
        config: Handler settings; defaults to
            [HandlerConfig][content_manager.services.handler.configs.HandlerConfig]
            defaults.
        store: Relay list store; built from ``config`` when omitted.
        connection_factory: Callable returning a fresh, disconnected
            [RelayConnection][content_manager.utils.transport.RelayConnection].

    Note:
        The saved relay list is loaded on construction, which seeds and
        writes the default relay on first run. A corrupt list file is logged
        and the in-memory default is used instead.
    """

    def __init__(
        self,
        config: HandlerConfig | None = None,
        *,
        store: RelayListStore | None = None,
        connection_factory: Callable[[], RelayConnection] = RelayConnection,
    ) -> None:
        self._config = config or HandlerConfig()
        self._store = store or RelayListStore(self._config.relays_path, self._config.default_relay)
        self._connection_factory = connection_factory
        self._connection: RelayConnection | None = None
        self._swap_lock = asyncio.Lock()
        self._logger = Logger("relay_handler")

        try:
            self._store.load()
        except ContentManagerError as e:
            self._logger.error("relay_list_load_failed", path=str(self._store.path), error=str(e))

    @classmethod
    def from_yaml(cls, config_path: str | Path, **kwargs: Any) -> Self:
        """Create a handler from a YAML configuration file."""
        return cls.from_dict(load_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> Self:
        """Create a handler from a configuration dictionary."""
        return cls(config=HandlerConfig(**data), **kwargs)

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def connected_url(self) -> str | None:
        """URL of the live session, or ``None``."""
        if self._connection is not None and self._connection.is_connected:
            return self._connection.url
        return None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    # -------------------------------------------------------------------------
    # Error boundary
    # -------------------------------------------------------------------------

    def _failure(self, operation: str, error: Exception, **fields: Any) -> HandlerResult[Any]:
        if not isinstance(error, ContentManagerError):
            self._logger.exception(f"{operation}_crashed", error=str(error), **fields)
            wrapped = ContentManagerError(f"Unexpected error: {error}")
            wrapped.__cause__ = error
            return HandlerResult(error=wrapped)
        if isinstance(error, VerificationFaultError):
            self._logger.error(f"{operation}_fault", error=str(error), **fields)
        else:
            self._logger.warning(f"{operation}_failed", error=str(error), **fields)
        return HandlerResult(error=error)

    def _require_connection(self) -> RelayConnection:
        connection = self._connection
        if connection is None or not connection.is_connected:
            raise NotConnectedError("No relay connected")
        return connection

    # -------------------------------------------------------------------------
    # Saved relays
    # -------------------------------------------------------------------------

    def add_relay(self, url: str) -> HandlerResult[None]:
        """Save *url* (``wss://`` only). Saving an existing URL is a no-op."""
        try:
            try:
                url = validate_relay_url(url, schemes=SECURE_SCHEMES)
            except ValueError as e:
                raise InvalidRelayUrlError(str(e)) from None
            self._store.add(url)
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("add_relay", e, url=url)
        self._logger.info("relay_saved", url=url)
        return HandlerResult()

    def remove_relay(self, url: str) -> HandlerResult[None]:
        """Remove *url* from the saved list; the list is persisted either way."""
        try:
            self._store.remove(url)
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("remove_relay", e, url=url)
        self._logger.info("relay_removed", url=url)
        return HandlerResult()

    def get_saved_relays(self) -> list[str]:
        """Return the saved relay URLs in insertion order."""
        return self._store.relays

    # -------------------------------------------------------------------------
    # Relay session
    # -------------------------------------------------------------------------

    async def connect_relay(self, url: str) -> HandlerResult[None]:
        """Close the current session (if any) and connect to *url*."""
        try:
            async with self._swap_lock:
                await self._close_current()
                connection = self._connection_factory()
                await connection.connect(url, timeout=self._config.connect_timeout)
                self._connection = connection
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("connect_relay", e, url=url)
        self._logger.info("relay_connected", url=connection.url)
        return HandlerResult()

    async def disconnect(self) -> HandlerResult[None]:
        """Close the current session. Succeeds when nothing is connected."""
        try:
            async with self._swap_lock:
                await self._close_current()
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("disconnect", e)
        return HandlerResult()

    async def _close_current(self) -> None:
        previous, self._connection = self._connection, None
        if previous is not None:
            await previous.close()
            self._logger.info("relay_disconnected", url=previous.url)

    async def subscribe_to_relay(
        self,
        filter_specs: Iterable[Any] | None,
        window: float | None = None,
    ) -> HandlerResult[list[Event]]:
        """Collect events matching *filter_specs* from the connected relay.

        Each spec is translated leniently (see
        [translate_filter()][content_manager.models.filter.translate_filter]).
        No specs at all means a single unconstrained filter.

        Args:
            filter_specs: Loosely typed filter mappings.
            window: Collection window in seconds; defaults to
                ``config.collect_window``.
        """
        try:
            connection = self._require_connection()
            filters = translate_filters(filter_specs) or [Filter()]
            if window is None:
                window = self._config.collect_window
            events = await connection.subscribe_collect(filters, window=window)
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("subscribe", e)
        self._logger.info(
            "subscription_collected",
            url=connection.url,
            filters=len(filters),
            events=len(events),
        )
        return HandlerResult(events)

    async def send_note(self, private_key: str, message: str) -> HandlerResult[str]:
        """Sign *message* as a kind-1 note with *private_key* and publish it.

        The key is re-derived from *private_key* on every call and never
        stored. Returns the 64-character hex event id.
        """
        try:
            connection = self._require_connection()
            key_pair = derive_key_pair(private_key)
            event = sign_event(build_event(key_pair.pubkey, message), key_pair.secret)
            if not verify_event(event):
                raise VerificationFaultError(
                    f"Locally signed event {event.id} failed verification"
                )
            await connection.publish(event, timeout=self._config.publish_timeout)
        except Exception as e:  # Intentionally broad: GUI error boundary
            return self._failure("send_note", e)
        self._logger.info("note_published", id=event.id, url=connection.url)
        return HandlerResult(event.id)
