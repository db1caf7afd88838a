"""
Unit tests for nips.nip01 module.

Tests:
- serialize_event() / compute_id() - canonical form
- build_event() - unsigned event with id computed
- sign_event() / verify_event() - Schnorr signatures via nostr-sdk
- Wire frames: event_message, req_message, close_message, parse_relay_message
"""

import dataclasses
import hashlib
import json
from collections.abc import Callable
from unittest.mock import patch

import pytest

from content_manager.core.exceptions import SigningError
from content_manager.models.event import Event
from content_manager.models.filter import Filter
from content_manager.nips.nip01 import (
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
from content_manager.utils.keys import KeyPair


PUBKEY = "b" * 64


# =============================================================================
# Canonical serialization
# =============================================================================


class TestSerializeEvent:
    """serialize_event() canonical form."""

    def test_compact_array(self) -> None:
        data = serialize_event(PUBKEY, 1_700_000_000, 1, [], "hello")
        assert data == f'[0,"{PUBKEY}",1700000000,1,[],"hello"]'.encode()

    def test_tags_included(self) -> None:
        data = serialize_event(PUBKEY, 1, 1, [("e", "x"), ("p", "y")], "")
        assert b'[["e","x"],["p","y"]]' in data

    def test_non_ascii_not_escaped(self) -> None:
        data = serialize_event(PUBKEY, 1, 1, [], "café \U0001f600")
        assert "café \U0001f600".encode() in data
        assert b"\\u" not in data

    def test_control_characters_escaped(self) -> None:
        data = serialize_event(PUBKEY, 1, 1, [], 'line\n"quoted"\\')
        assert b'"line\\n\\"quoted\\"\\\\"' in data

    def test_compute_id_is_sha256(self) -> None:
        expected = hashlib.sha256(serialize_event(PUBKEY, 5, 1, [], "x")).hexdigest()
        assert compute_id(PUBKEY, 5, 1, [], "x") == expected

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("pubkey", "c" * 64),
            ("created_at", 1_700_000_001),
            ("kind", 7),
            ("tags", [("t", "nostr")]),
            ("content", "hello!"),
        ],
    )
    def test_each_field_changes_id(self, field: str, value: object) -> None:
        base = {
            "pubkey": PUBKEY,
            "created_at": 1_700_000_000,
            "kind": 1,
            "tags": [],
            "content": "hello",
        }
        assert compute_id(**{**base, field: value}) != compute_id(**base)

    def test_tag_order_changes_id(self) -> None:
        first = compute_id(PUBKEY, 1, 1, [("e", "x"), ("p", "y")], "")
        second = compute_id(PUBKEY, 1, 1, [("p", "y"), ("e", "x")], "")
        assert first != second


class TestBuildEvent:
    """build_event()."""

    def test_defaults(self) -> None:
        event = build_event(PUBKEY, "hello", created_at=42)
        assert event.kind == 1
        assert event.tags == ()
        assert event.sig is None
        assert event.id == compute_id(PUBKEY, 42, 1, [], "hello")

    def test_created_at_defaults_to_now(self) -> None:
        with patch("content_manager.nips.nip01.time.time", return_value=1_700_000_123.9):
            event = build_event(PUBKEY, "hello")
        assert event.created_at == 1_700_000_123

    def test_custom_kind_and_tags(self) -> None:
        event = build_event(PUBKEY, "", kind=7, tags=[["e", "a" * 64]], created_at=1)
        assert event.kind == 7
        assert event.tags == (("e", "a" * 64),)

    def test_empty_content_allowed(self) -> None:
        assert build_event(PUBKEY, "", created_at=1).content == ""


# =============================================================================
# Signing and verification
# =============================================================================


class TestSignAndVerify:
    """sign_event() and verify_event() with real keys."""

    def test_sign_produces_verifiable_event(self, key_pair: KeyPair) -> None:
        signed = sign_event(build_event(key_pair.pubkey, "hello"), key_pair.secret)
        assert signed.sig is not None
        assert len(signed.sig) == 128
        assert verify_event(signed) is True

    def test_unicode_content_verifies(self, make_event: Callable[..., Event]) -> None:
        assert verify_event(make_event("gm ☕ 日本")) is True

    def test_unsigned_fails(self, key_pair: KeyPair) -> None:
        assert verify_event(build_event(key_pair.pubkey, "hello")) is False

    def test_tampered_content_fails(self, make_event: Callable[..., Event]) -> None:
        event = dataclasses.replace(make_event("original"), content="tampered")
        assert verify_event(event) is False

    def test_tampered_created_at_fails(self, make_event: Callable[..., Event]) -> None:
        event = make_event()
        assert verify_event(dataclasses.replace(event, created_at=event.created_at + 1)) is False

    def test_tampered_kind_fails(self, make_event: Callable[..., Event]) -> None:
        event = make_event()
        assert verify_event(dataclasses.replace(event, kind=event.kind + 1)) is False

    def test_tampered_tags_fails(self, make_event: Callable[..., Event]) -> None:
        event = make_event()
        tampered = dataclasses.replace(event, tags=(*event.tags, ("t", "injected")))
        assert verify_event(tampered) is False

    def test_garbage_signature_fails(self, make_event: Callable[..., Event]) -> None:
        event = make_event().with_signature("0" * 128)
        assert verify_event(event) is False

    def test_signature_from_other_event_fails(self, make_event: Callable[..., Event]) -> None:
        first, second = make_event("one"), make_event("two")
        assert second.sig is not None
        assert verify_event(first.with_signature(second.sig)) is False

    def test_wrong_pubkey_fails(self, make_event: Callable[..., Event]) -> None:
        event = make_event()
        forged_id = compute_id(PUBKEY, event.created_at, event.kind, event.tags, event.content)
        forged = dataclasses.replace(event, pubkey=PUBKEY, id=forged_id)
        assert verify_event(forged) is False

    def test_signing_failure_wrapped(self, key_pair: KeyPair) -> None:
        with patch("content_manager.nips.nip01.Keys", side_effect=ValueError("bad scalar")):
            with pytest.raises(SigningError, match="Failed to sign event") as exc_info:
                sign_event(build_event(key_pair.pubkey, "x"), key_pair.secret)
        assert isinstance(exc_info.value.__cause__, ValueError)


# =============================================================================
# Wire frames
# =============================================================================


class TestClientFrames:
    """Client-to-relay frames."""

    def test_event_message(self, make_event: Callable[..., Event]) -> None:
        event = make_event()
        assert json.loads(event_message(event)) == ["EVENT", event.to_dict()]

    def test_req_message(self) -> None:
        frame = json.loads(req_message("sub1", [Filter(kinds=(1,)), Filter(limit=5)]))
        assert frame == ["REQ", "sub1", {"kinds": [1]}, {"limit": 5}]

    def test_req_with_empty_filter(self) -> None:
        assert json.loads(req_message("sub1", [Filter()])) == ["REQ", "sub1", {}]

    def test_req_requires_filters(self) -> None:
        with pytest.raises(ValueError, match="at least one filter"):
            req_message("sub1", [])

    def test_close_message(self) -> None:
        assert json.loads(close_message("sub1")) == ["CLOSE", "sub1"]


class TestParseRelayMessage:
    """parse_relay_message()."""

    def test_event_frame(self) -> None:
        assert parse_relay_message('["EOSE","sub1"]') == ["EOSE", "sub1"]

    def test_ok_frame(self) -> None:
        assert parse_relay_message('["OK","ab",true,""]') == ["OK", "ab", True, ""]

    @pytest.mark.parametrize("text", ["not json", "{}", "[]", "[1, 2]", '"EVENT"', "null"])
    def test_invalid_frames(self, text: str) -> None:
        assert parse_relay_message(text) is None

    def test_non_string_input(self) -> None:
        assert parse_relay_message(None) is None  # type: ignore[arg-type]
