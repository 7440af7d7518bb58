"""WebSocket transport to a single Nostr relay.

[RelayConnection][relaypool.utils.transport.RelayConnection] wraps one
aiohttp WebSocket. It speaks JSON text frames only: outbound frames are
plain lists serialized here, inbound frames are parsed once by
[parse_relay_message()][relaypool.models.frames.parse_relay_message] and
malformed ones are dropped before they reach a caller.

Overlay relays (Tor, I2P) are reached through a SOCKS5 proxy via
``aiohttp_socks.ProxyConnector`` when ``proxy_url`` is set.

Example:
    >>> async with RelayConnection("wss://nos.lol", open_timeout=5.0) as conn:
    ...     await conn.send(["REQ", "sub", {"kinds": [1], "limit": 5}])
    ...     async for message in conn.messages():
    ...         print(message)
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import aiohttp
from aiohttp_socks import ProxyConnector, ProxyError

from relaypool.core.exceptions import RelayConnectionError
from relaypool.core.logger import Logger
from relaypool.models import RelayMessage, parse_relay_message


logger = Logger("utils.transport")

_CLOSE_TIMEOUT = 5.0


class RelayConnection:
    """One WebSocket session to one relay.

    The connection owns its aiohttp session unless one is passed in.
    ``close()`` is idempotent and never raises, so coordinators can call it
    unconditionally during cleanup.

    Attributes:
        url: The relay URL.
        open_timeout: Seconds allowed for the WebSocket handshake.
        proxy_url: Optional SOCKS5 proxy URL.
    """

    def __init__(
        self,
        url: str,
        *,
        open_timeout: float = 10.0,
        proxy_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self.open_timeout = open_timeout
        self.proxy_url = proxy_url
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._closed = False
        self._closing: asyncio.Future[None] | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed and not self._closed

    async def open(self) -> None:
        """Perform the WebSocket handshake.

        Raises:
            RelayConnectionError: If the relay is unreachable, refuses the
                upgrade, or does not answer within ``open_timeout``.
        """
        if self._closed:
            raise RelayConnectionError(self.url, "connection already closed")

        try:
            if self._session is None:
                connector = ProxyConnector.from_url(self.proxy_url) if self.proxy_url else None
                self._session = aiohttp.ClientSession(connector=connector)
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(self.url, autoping=True),
                timeout=self.open_timeout,
            )
        except TimeoutError:
            await self.close()
            logger.debug("ws_open_timeout", url=self.url, timeout=self.open_timeout)
            message = f"open timed out after {self.open_timeout}s"
            raise RelayConnectionError(self.url, message) from None
        except (aiohttp.ClientError, ProxyError, OSError, ValueError) as e:
            await self.close()
            logger.debug("ws_open_failed", url=self.url, error=str(e))
            raise RelayConnectionError(self.url, f"open failed: {e}") from e

        logger.debug("ws_opened", url=self.url)

    async def send(self, frame: list[Any]) -> None:
        """Serialize *frame* as compact JSON and send it as a text frame.

        Raises:
            RelayConnectionError: If the connection is not open or the write fails.
        """
        if not self.is_open or self._ws is None:
            raise RelayConnectionError(self.url, "connection is not open")
        text = json.dumps(frame, separators=(",", ":"), ensure_ascii=False)
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            raise RelayConnectionError(self.url, f"send failed: {e}") from e

    async def messages(self) -> AsyncIterator[RelayMessage]:
        """Yield parsed inbound frames until the socket closes.

        Binary frames and malformed text frames are skipped. The iterator
        ends normally when the relay closes the connection or the socket
        errors.
        """
        if self._ws is None:
            return
        ws = self._ws
        while not self._closed:
            msg = await ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                parsed = parse_relay_message(msg.data)
                if parsed is None:
                    logger.debug("frame_dropped", url=self.url, raw=msg.data)
                    continue
                yield parsed
            elif msg.type == aiohttp.WSMsgType.BINARY:
                continue
            else:
                # CLOSE, CLOSING, CLOSED, ERROR
                logger.debug("ws_ended", url=self.url, type=msg.type.name)
                return

    async def close(self) -> None:
        """Close the socket and, if owned, the session. Safe to call repeatedly.

        Teardown runs in its own task, so a caller cancelled mid-close does
        not leave the session open and a later call waits for the same task.
        """
        if self._closing is None:
            self._closed = True
            self._closing = asyncio.ensure_future(self._teardown())
        await asyncio.shield(self._closing)

    async def _teardown(self) -> None:
        if self._ws is not None:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(self._ws.close(), timeout=_CLOSE_TIMEOUT)
        if self._session is not None and self._owns_session:
            with contextlib.suppress(Exception):
                await asyncio.wait_for(self._session.close(), timeout=_CLOSE_TIMEOUT)
        logger.debug("ws_closed", url=self.url)

    async def __aenter__(self) -> RelayConnection:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()


ConnectionFactory = Callable[[str], RelayConnection]
"""Builds an unopened connection for a relay URL. Coordinators call
``open()`` themselves; a factory that raises counts that relay as failed."""
