"""NIP-01: canonical event serialization, signing, verification and wire frames.

The event id is the SHA-256 of the compact JSON array
``[0, pubkey, created_at, kind, tags, content]`` encoded as UTF-8 with no
whitespace and non-ASCII characters left unescaped. Field order and types
are fixed; the id of an event received over the wire is always recomputed
from its fields, never trusted.

Signatures are BIP-340 Schnorr signatures over the 32 id bytes, produced
and checked through nostr-sdk.

Client-to-relay frames built here: ``EVENT``, ``REQ``, ``CLOSE``.
Relay-to-client frames (``EVENT``, ``OK``, ``EOSE``, ``CLOSED``, ``NOTICE``)
are decoded by [parse_relay_message()][content_manager.nips.nip01.parse_relay_message].

See Also:
    [Event][content_manager.models.event.Event]: The record these functions
        operate on.
    [RelayConnection][content_manager.utils.transport.RelayConnection]:
        Sends the frames and verifies incoming events.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from nostr_sdk import Event as NostrEvent
from nostr_sdk import Keys, NostrSdkError

from content_manager.core.exceptions import SigningError
from content_manager.models.constants import EventKind
from content_manager.models.event import Event


if TYPE_CHECKING:
    from nostr_sdk import SecretKey

    from content_manager.models.filter import Filter


logger = logging.getLogger(__name__)


# =============================================================================
# Canonical serialization
# =============================================================================


def serialize_event(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """Return the exact bytes hashed to produce the event id."""
    data = [0, pubkey, created_at, kind, [list(tag) for tag in tags], content]
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> str:
    """Return the hex SHA-256 event id for the given fields."""
    return hashlib.sha256(serialize_event(pubkey, created_at, kind, tags, content)).hexdigest()


def build_event(
    pubkey: str,
    content: str,
    *,
    kind: int = EventKind.TEXT_NOTE,
    tags: Sequence[Sequence[str]] = (),
    created_at: int | None = None,
) -> Event:
    """Build an unsigned event with its id already computed.

    Args:
        pubkey: Author public key (hex), normally from
            [derive_key_pair()][content_manager.utils.keys.derive_key_pair].
        content: Note body.
        kind: Event kind (defaults to a kind-1 text note).
        tags: Tag entries; empty for plain notes.
        created_at: Unix timestamp; defaults to now.
    """
    if created_at is None:
        created_at = int(time.time())
    kind = int(kind)
    return Event(
        id=compute_id(pubkey, created_at, kind, tags, content),
        pubkey=pubkey,
        created_at=created_at,
        kind=kind,
        tags=tuple(tuple(tag) for tag in tags),
        content=content,
    )


# =============================================================================
# Signing and verification
# =============================================================================


def sign_event(event: Event, secret: SecretKey) -> Event:
    """Sign *event* and return a copy carrying the signature.

    Raises:
        SigningError: If *secret* is not a usable secret key or signing fails.
    """
    try:
        keys = Keys(secret)
        sig = keys.sign_schnorr(bytes.fromhex(event.id))
    except (NostrSdkError, TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign event {event.id[:16]}...: {e}") from e
    return event.with_signature(sig)


def verify_event(event: Event) -> bool:
    """Check that *event* is complete, its id matches and its signature is valid.

    Returns ``False`` instead of raising for any mismatch or malformed
    signature.
    """
    if not event.is_complete:
        return False

    expected = compute_id(event.pubkey, event.created_at, event.kind, event.tags, event.content)
    if expected != event.id:
        logger.debug("event_id_mismatch id=%s expected=%s", event.id, expected)
        return False

    try:
        return bool(NostrEvent.from_json(json.dumps(event.to_dict())).verify())
    except NostrSdkError as e:
        logger.debug("event_signature_invalid id=%s error=%s", event.id, e)
        return False


# =============================================================================
# Wire frames
# =============================================================================


def event_message(event: Event) -> str:
    """``["EVENT", <event>]`` -- publish an event."""
    return json.dumps(["EVENT", event.to_dict()], ensure_ascii=False)


def req_message(subscription_id: str, filters: Iterable[Filter]) -> str:
    """``["REQ", <subscription_id>, <filter>...]`` -- open a subscription.

    Raises:
        ValueError: If *filters* is empty.
    """
    payload = [f.to_dict() for f in filters]
    if not payload:
        raise ValueError("REQ requires at least one filter")
    return json.dumps(["REQ", subscription_id, *payload], ensure_ascii=False)


def close_message(subscription_id: str) -> str:
    """``["CLOSE", <subscription_id>]`` -- cancel a subscription."""
    return json.dumps(["CLOSE", subscription_id])


def parse_relay_message(text: str) -> list[Any] | None:
    """Decode a relay frame into a list whose first item is the message type.

    Returns ``None`` for frames that are not JSON arrays starting with a
    string.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, list) or not data or not isinstance(data[0], str):
        return None
    return data
