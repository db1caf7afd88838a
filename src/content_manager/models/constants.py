"""Shared constants for the models layer.

Kept separate from the model modules so that ``utils``, ``core`` and
``services`` can import them without pulling in pydantic or nostr-sdk.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


DEFAULT_RELAY_URL = "wss://ammetronics.com"
"""Relay seeded into an empty relay list on first run."""

DEFAULT_RELAYS_PATH = "relays.json"
"""Relative path of the persisted relay list."""

DEFAULT_COLLECT_WINDOW = 2.0
"""Seconds a subscription collects events before it is cancelled."""

MAX_KIND = 65535


class EventKind(IntEnum):
    """Well-known NIP-01 / NIP-28 event kinds.

    Only ``TEXT_NOTE`` is constructed by this client; the others are named
    so that filters and logs can refer to them.
    """

    METADATA = 0
    TEXT_NOTE = 1
    RECOMMEND_RELAY = 2
    CONTACTS = 3
    ENCRYPTED_DIRECT_MESSAGE = 4
    EVENT_DELETION = 5
    REACTION = 7
    CHANNEL_CREATION = 40
    CHANNEL_METADATA = 41
    CHANNEL_MESSAGE = 42
    CHANNEL_HIDE_MESSAGE = 43
    CHANNEL_MUTE_USER = 44


class ConnectionState(StrEnum):
    """Lifecycle of a [RelayConnection][content_manager.utils.transport.RelayConnection].

    ``DISCONNECTED`` is both the initial state and the state after an
    explicit close or a transport failure. There is no automatic reconnect.
    """

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
