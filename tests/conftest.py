"""
Pytest configuration and shared fixtures for content-manager tests.

Provides:
- Test key material (NIP-19 example secret in hex and nsec form)
- Signed event factory
- FakeWebSocket: scripted stand-in for an aiohttp client WebSocket
- Patched aiohttp.ClientSession returning the fake socket
"""

import asyncio
import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from content_manager.models.event import Event
from content_manager.nips.nip01 import build_event, sign_event
from content_manager.utils.keys import KeyPair, derive_key_pair


# Valid secp256k1 test keys from NIP-19 (DO NOT USE IN PRODUCTION)
VALID_HEX_KEY = (
    "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
)
VALID_NSEC_KEY = (
    "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret
)

Responder = Callable[[list[Any]], list[list[Any]] | None]


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Keys and Events
# ============================================================================


@pytest.fixture
def hex_key() -> str:
    return VALID_HEX_KEY


@pytest.fixture
def nsec_key() -> str:
    return VALID_NSEC_KEY


@pytest.fixture
def key_pair() -> KeyPair:
    return derive_key_pair(VALID_HEX_KEY)


@pytest.fixture
def make_event(key_pair: KeyPair) -> Callable[..., Event]:
    """Factory for events signed with the test key."""

    def _make(
        content: str = "hello",
        *,
        kind: int = 1,
        created_at: int = 1_700_000_000,
        tags: tuple[tuple[str, ...], ...] = (),
    ) -> Event:
        unsigned = build_event(
            key_pair.pubkey, content, kind=kind, tags=tags, created_at=created_at
        )
        return sign_event(unsigned, key_pair.secret)

    return _make


@pytest.fixture
def relays_path(tmp_path: Path) -> Path:
    return tmp_path / "relays.json"


# ============================================================================
# Fake Relay
# ============================================================================


class FakeWebSocket:
    """Scripted stand-in for ``aiohttp.ClientWebSocketResponse``.

    Frames sent by the client are decoded into ``sent``. A ``responder``
    callable may return relay frames to push back for each sent frame.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.sent: list[list[Any]] = []
        self.closed = False
        self.responder = responder
        self.send_error: Exception | None = None
        self._incoming: asyncio.Queue[SimpleNamespace] = asyncio.Queue()

    def push(self, *frame: Any) -> None:
        self.push_text(json.dumps(list(frame)))

    def push_text(self, text: str) -> None:
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=text))

    def drop(self) -> None:
        """Simulate the relay closing the socket."""
        self._incoming.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None))

    def sent_types(self) -> list[str]:
        return [frame[0] for frame in self.sent]

    async def send_str(self, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        frame = json.loads(text)
        self.sent.append(frame)
        if self.responder is not None:
            for reply in self.responder(frame) or ():
                self.push(*reply)

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.drop()

    def exception(self) -> None:
        return None

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> SimpleNamespace:
        return await self._incoming.get()


def relay_responder(
    events: list[Event] | None = None,
    *,
    accept: bool = True,
    ok_message: str = "",
) -> Responder:
    """Build a responder that answers REQ with *events* + EOSE and EVENT with OK."""

    def respond(frame: list[Any]) -> list[list[Any]]:
        if frame[0] == "REQ":
            replies = [["EVENT", frame[1], event.to_dict()] for event in events or []]
            return [*replies, ["EOSE", frame[1]]]
        if frame[0] == "EVENT":
            return [["OK", frame[1]["id"], accept, ok_message]]
        return []

    return respond


@pytest.fixture
def responder() -> Callable[..., Responder]:
    return relay_responder


@pytest.fixture
def fake_ws() -> FakeWebSocket:
    return FakeWebSocket()


@pytest.fixture
def mock_session_cls(fake_ws: FakeWebSocket) -> Iterator[MagicMock]:
    """Patch ``aiohttp.ClientSession`` so ``ws_connect`` returns ``fake_ws``."""
    with patch("content_manager.utils.transport.aiohttp.ClientSession") as session_cls:
        session = MagicMock()
        session.ws_connect = AsyncMock(return_value=fake_ws)
        session.close = AsyncMock()
        session_cls.return_value = session
        yield session_cls
