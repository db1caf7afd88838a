"""Frozen dataclasses and the lenient filter boundary.

The models layer is the foundation of the diamond DAG and performs no I/O.
Every dataclass uses ``@dataclass(frozen=True, slots=True)``; validation
happens in ``__post_init__`` so invalid instances never escape the
constructor.

Attributes:
    Event: Immutable NIP-01 event (id, pubkey, created_at, kind, tags,
        content, sig).
    Filter: Immutable NIP-01 subscription filter with local ``matches()``.
    FilterSpec: Pydantic edge model that coerces loosely typed queries.
    EventKind: Well-known event kinds.
    ConnectionState: ``DISCONNECTED`` / ``CONNECTED``.

See Also:
    [content_manager.nips.nip01][]: Computes ids, signs and verifies events.
"""

from .constants import (
    DEFAULT_COLLECT_WINDOW,
    DEFAULT_RELAY_URL,
    DEFAULT_RELAYS_PATH,
    ConnectionState,
    EventKind,
)
from .event import Event
from .filter import Filter, FilterSpec, translate_filter, translate_filters
from .relay import validate_relay_url


__all__ = [
    "DEFAULT_COLLECT_WINDOW",
    "DEFAULT_RELAYS_PATH",
    "DEFAULT_RELAY_URL",
    "ConnectionState",
    "Event",
    "EventKind",
    "Filter",
    "FilterSpec",
    "translate_filter",
    "translate_filters",
    "validate_relay_url",
]
