"""Nostr protocol rules implemented by this client.

Attributes:
    nip01: Canonical serialization, event ids, Schnorr signing and
        verification, and the ``EVENT``/``REQ``/``CLOSE`` wire frames.
"""

from .nip01 import (
    build_event,
    close_message,
    compute_id,
    event_message,
    parse_relay_message,
    req_message,
    serialize_event,
    sign_event,
    verify_event,
)


__all__ = [
    "build_event",
    "close_message",
    "compute_id",
    "event_message",
    "parse_relay_message",
    "req_message",
    "serialize_event",
    "sign_event",
    "verify_event",
]
