"""
Immutable Nostr event record.

An [Event][content_manager.models.event.Event] holds the seven NIP-01 fields.
Construction only checks shapes (hex lengths, integer ranges, tag types);
whether ``id`` matches the other fields and whether ``sig`` is valid is
decided by [verify_event()][content_manager.nips.nip01.verify_event], never
trusted from input.

See Also:
    [content_manager.nips.nip01][]: Builds events with a computed id, signs
        and verifies them.
    [Filter.matches()][content_manager.models.filter.Filter.matches]: Local
        evaluation of a filter against an event.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ._validation import (
    freeze_tags,
    validate_hex,
    validate_instance,
    validate_int_range,
)
from .constants import MAX_KIND


EVENT_ID_LENGTH = 64
PUBKEY_LENGTH = 64
SIGNATURE_LENGTH = 128


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable Nostr event.

    Attributes:
        id: Hex SHA-256 of the canonical serialization.
        pubkey: Author's x-only public key, 64 lowercase hex characters.
        created_at: Unix timestamp in seconds.
        kind: Event kind (0..65535).
        tags: Ordered tag entries, each an ordered tuple of strings.
        content: Opaque UTF-8 text.
        sig: Schnorr signature over ``id`` (128 hex characters), or ``None``
            for an event that has not been signed yet.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a hex field has the wrong length or case, or an
            integer is out of range.

    Examples:
        ```python
        from content_manager.nips.nip01 import build_event, sign_event

        unsigned = build_event(pubkey, "hello")
        signed = sign_event(unsigned, key_pair.secret)
        signed.is_complete  # True
        signed.to_dict()["sig"]
        ```
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str | None = None

    def __post_init__(self) -> None:
        validate_hex(self.id, "id", EVENT_ID_LENGTH)
        validate_hex(self.pubkey, "pubkey", PUBKEY_LENGTH)
        validate_int_range(self.created_at, "created_at")
        validate_int_range(self.kind, "kind", high=MAX_KIND)
        validate_instance(self.content, str, "content")
        if self.sig is not None:
            validate_hex(self.sig, "sig", SIGNATURE_LENGTH)
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    @property
    def is_complete(self) -> bool:
        """Whether id, pubkey and sig are all populated."""
        return bool(self.id and self.pubkey and self.sig)

    def with_signature(self, sig: str) -> Event:
        """Return a copy of this event carrying *sig*."""
        return dataclasses.replace(self, sig=sig)

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object form.

        ``sig`` is omitted while the event is unsigned.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
        }
        if self.sig is not None:
            data["sig"] = self.sig
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        """Build an event from a NIP-01 JSON object received over the wire.

        Raises:
            TypeError: If *data* is not a mapping or a field has the wrong type.
            ValueError: If a required field is missing or malformed.
        """
        validate_instance(data, Mapping, "event")
        try:
            return cls(
                id=data["id"],
                pubkey=data["pubkey"],
                created_at=data["created_at"],
                kind=data["kind"],
                tags=data.get("tags", []),
                content=data["content"],
                sig=data.get("sig"),
            )
        except KeyError as e:
            raise ValueError(f"event is missing field {e.args[0]!r}") from None
