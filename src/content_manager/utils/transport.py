"""WebSocket session to a single Nostr relay.

[RelayConnection][content_manager.utils.transport.RelayConnection] owns one
aiohttp ``ClientSession`` and WebSocket. A background reader task decodes
every incoming text frame with
[parse_relay_message()][content_manager.nips.nip01.parse_relay_message] and
puts it on an inbox queue; operations consume the inbox. When the socket
closes or errors, the reader puts a ``None`` sentinel and the connection
moves to ``DISCONNECTED``.

Subscriptions are bulk collections, not streams:
[subscribe_collect()][content_manager.utils.transport.RelayConnection.subscribe_collect]
sends one ``REQ`` covering every filter, then races "next frame arrived"
against "window elapsed" until the window fires, sends ``CLOSE`` and returns
everything collected in arrival order. Because frames are buffered by the
reader, cancelling the pending "next frame" wait never drops a frame.

All network operations on one connection are serialized by an
``asyncio.Lock`` so ``REQ``/``EVENT`` frames of concurrent callers never
interleave.

Examples:
    ```python
    conn = RelayConnection()
    await conn.connect("wss://relay.example.com")
    events = await conn.subscribe_collect([Filter(kinds=(1,), limit=10)], window=2.0)
    await conn.publish(signed_event)
    await conn.close()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import ssl
import uuid
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import aiohttp

from content_manager.core.exceptions import (
    NotConnectedError,
    PublishingError,
    RelayConnectionError,
)
from content_manager.models.constants import DEFAULT_COLLECT_WINDOW, ConnectionState
from content_manager.models.event import Event
from content_manager.models.relay import validate_relay_url
from content_manager.nips.nip01 import (
    close_message,
    event_message,
    parse_relay_message,
    req_message,
    verify_event,
)


if TYPE_CHECKING:
    from content_manager.models.filter import Filter


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 10.0
_WS_HEARTBEAT = 30.0
_WS_CLOSE_TIMEOUT = 5.0


class RelayConnection:
    """One WebSocket session to one relay.

    States: ``DISCONNECTED`` (initial) -> ``CONNECTED`` after a successful
    handshake -> ``DISCONNECTED`` after [close()][content_manager.utils.transport.RelayConnection.close]
    or a transport failure. There is no automatic reconnect.

    Attributes:
        url: Endpoint of the current or last session, ``None`` before the
            first connect.
        state: Current [ConnectionState][content_manager.models.constants.ConnectionState].
    """

    def __init__(self) -> None:
        self._url: str | None = None
        self._state = ConnectionState.DISCONNECTED
        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._inbox: asyncio.Queue[list[Any] | None] = asyncio.Queue()
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def connect(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> None:  # noqa: ASYNC109
        """Open a WebSocket session to *url*.

        A session that is already open is closed first, so connecting again
        (to the same or a different URL) re-establishes the session.

        Args:
            url: Relay URL (``wss://`` or ``ws://``).
            timeout: Seconds allowed for the TCP/TLS/WebSocket handshake.

        Raises:
            RelayConnectionError: If the URL is invalid or the handshake
                fails. The state is ``DISCONNECTED`` afterwards.
        """
        async with self._lock:
            await self._teardown()

            try:
                url = validate_relay_url(url)
            except ValueError as e:
                raise RelayConnectionError(str(e)) from None

            self._url = url
            client_timeout = aiohttp.ClientTimeout(
                total=None, connect=timeout, sock_connect=timeout, sock_read=None
            )
            session = aiohttp.ClientSession(timeout=client_timeout)

            try:
                ws = await session.ws_connect(url, heartbeat=_WS_HEARTBEAT)
            except asyncio.CancelledError:
                await session.close()
                raise
            except TimeoutError:
                await session.close()
                logger.debug("ws_connect_timeout url=%s", url)
                raise RelayConnectionError(f"Connection timeout: {url}") from None
            except (aiohttp.ClientError, ssl.SSLError, OSError) as e:
                await session.close()
                logger.debug("ws_connect_failed url=%s error=%s", url, e)
                raise RelayConnectionError(f"Connection failed: {url} ({e})") from e

            self._session = session
            self._ws = ws
            self._inbox = asyncio.Queue()
            self._state = ConnectionState.CONNECTED
            self._reader = asyncio.create_task(self._read_frames(ws, self._inbox))
            logger.debug("ws_connected url=%s", url)

    async def close(self) -> None:
        """Close the session. Safe to call when already disconnected."""
        async with self._lock:
            await self._teardown()

    async def _teardown(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        reader, ws, session = self._reader, self._ws, self._session
        self._reader = self._ws = self._session = None

        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
        # aiohttp can raise ClientError, ServerDisconnectedError, etc. during
        # close; teardown must always complete.
        if ws is not None:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(ws.close(), timeout=_WS_CLOSE_TIMEOUT)
        if session is not None:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(session.close(), timeout=_WS_CLOSE_TIMEOUT)
            logger.debug("ws_closed url=%s", self._url)

    async def _read_frames(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        inbox: asyncio.Queue[list[Any] | None],
    ) -> None:
        """Pump decoded text frames into *inbox* until the socket ends."""
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    frame = parse_relay_message(msg.data)
                    if frame is None:
                        logger.debug("relay_frame_ignored url=%s", self._url)
                        continue
                    inbox.put_nowait(frame)
                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                    break
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.debug("ws_error url=%s error=%s", self._url, ws.exception())
                    break
        except aiohttp.ClientError as e:
            logger.debug("ws_read_failed url=%s error=%s", self._url, e)
        finally:
            if self._ws is ws:
                self._state = ConnectionState.DISCONNECTED
            inbox.put_nowait(None)

    def _require_connected(self) -> tuple[aiohttp.ClientWebSocketResponse, asyncio.Queue[Any]]:
        if self._state != ConnectionState.CONNECTED or self._ws is None:
            raise NotConnectedError("No relay connected")
        return self._ws, self._inbox

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    async def subscribe_collect(
        self,
        filters: Sequence[Filter],
        window: float = DEFAULT_COLLECT_WINDOW,
    ) -> list[Event]:
        """Collect the events the relay pushes for *filters* during *window* seconds.

        One subscription covers all filters (logical OR). Pushed events are
        filtered locally as well: an event is kept only if its id and
        signature verify and it matches at least one filter, so events a
        relay sends outside the requested filters are dropped. When
        every filter carries a ``limit``, no more than the sum of the limits
        is collected. A ``CLOSED`` from the relay ends collection early.

        Args:
            filters: Filters for the single ``REQ``; at least one.
            window: Collection time in seconds. ``<= 0`` cancels immediately
                and returns an empty list.

        Returns:
            Events in arrival order, without dedup or sorting.

        Raises:
            NotConnectedError: If no session is open.
            RelayConnectionError: If the transport fails mid-collection.
            ValueError: If *filters* is empty.
        """
        filters = list(filters)
        async with self._lock:
            ws, inbox = self._require_connected()
            subscription_id = uuid.uuid4().hex
            request = req_message(subscription_id, filters)
            cap = (
                sum(f.limit for f in filters if f.limit is not None)
                if all(f.limit is not None for f in filters)
                else None
            )

            await self._send(ws, request, RelayConnectionError)
            logger.debug(
                "subscription_opened url=%s sub=%s filters=%d window=%s",
                self._url,
                subscription_id,
                len(filters),
                window,
            )

            events: list[Event] = []
            if window > 0:
                relay_closed = await self._collect(
                    inbox, subscription_id, filters, window, events, cap
                )
            else:
                relay_closed = False

            if not relay_closed:
                await self._send(ws, close_message(subscription_id), RelayConnectionError)
            logger.debug(
                "subscription_closed url=%s sub=%s events=%d",
                self._url,
                subscription_id,
                len(events),
            )
            return events

    async def _collect(
        self,
        inbox: asyncio.Queue[list[Any] | None],
        subscription_id: str,
        filters: list[Filter],
        window: float,
        events: list[Event],
        cap: int | None,
    ) -> bool:
        """Race frame arrival against the deadline, appending matches to *events*.

        Returns ``True`` if the relay closed the subscription itself.
        """
        deadline = asyncio.ensure_future(asyncio.sleep(window))
        try:
            while not deadline.done():
                arrival = asyncio.ensure_future(inbox.get())
                done, _ = await asyncio.wait(
                    {arrival, deadline}, return_when=asyncio.FIRST_COMPLETED
                )
                if arrival not in done:
                    arrival.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await arrival
                    break

                frame = arrival.result()
                if frame is None:
                    self._state = ConnectionState.DISCONNECTED
                    raise RelayConnectionError(f"Connection lost: {self._url}")

                kind = frame[0]
                if len(frame) < 2 or frame[1] != subscription_id:
                    if kind == "NOTICE":
                        logger.info("relay_notice url=%s message=%s", self._url, frame[1:])
                    continue

                if kind == "EVENT" and len(frame) >= 3:
                    event = self._accept_event(frame[2], filters)
                    if event is not None and (cap is None or len(events) < cap):
                        events.append(event)
                elif kind == "EOSE":
                    logger.debug("subscription_eose url=%s sub=%s", self._url, subscription_id)
                elif kind == "CLOSED":
                    reason = frame[2] if len(frame) > 2 else ""
                    logger.info("subscription_closed_by_relay url=%s reason=%s", self._url, reason)
                    return True
        finally:
            deadline.cancel()
        return False

    def _accept_event(self, data: Any, filters: list[Filter]) -> Event | None:
        try:
            event = Event.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.debug("event_malformed url=%s error=%s", self._url, e)
            return None
        if not verify_event(event):
            logger.debug("event_rejected url=%s id=%s", self._url, event.id)
            return None
        if not any(f.matches(event) for f in filters):
            logger.debug("event_unmatched url=%s id=%s", self._url, event.id)
            return None
        return event

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    async def publish(self, event: Event, timeout: float = DEFAULT_TIMEOUT) -> None:  # noqa: ASYNC109
        """Send *event* and wait for the relay's ``OK``.

        Raises:
            NotConnectedError: If no session is open.
            PublishingError: If the relay answers ``OK false``, does not
                acknowledge within *timeout*, or the transport fails.
        """
        async with self._lock:
            ws, inbox = self._require_connected()
            await self._send(ws, event_message(event), PublishingError)

            try:
                async with asyncio.timeout(timeout):
                    accepted, message = await self._wait_for_ok(inbox, event.id)
            except TimeoutError:
                raise PublishingError(
                    f"No acknowledgement from {self._url} within {timeout}s"
                ) from None

            if not accepted:
                raise PublishingError(f"Relay rejected event: {message or 'no reason given'}")
            logger.debug("event_published url=%s id=%s", self._url, event.id)

    async def _wait_for_ok(
        self,
        inbox: asyncio.Queue[list[Any] | None],
        event_id: str,
    ) -> tuple[bool, str]:
        while True:
            frame = await inbox.get()
            if frame is None:
                self._state = ConnectionState.DISCONNECTED
                raise PublishingError(f"Connection lost while publishing to {self._url}")
            if frame[0] == "OK" and len(frame) >= 3 and frame[1] == event_id:
                message = frame[3] if len(frame) > 3 and isinstance(frame[3], str) else ""
                return frame[2] is True, message
            if frame[0] == "NOTICE":
                logger.info("relay_notice url=%s message=%s", self._url, frame[1:])

    async def _send(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        text: str,
        error_cls: type[Exception],
    ) -> None:
        try:
            await ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            self._state = ConnectionState.DISCONNECTED
            raise error_cls(f"Send failed: {self._url} ({e})") from e
