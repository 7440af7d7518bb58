"""In-memory relay connections for exercising the fan-out coordinators."""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from relaypool.core.exceptions import RelayConnectionError
from relaypool.models import RelayMessage, parse_relay_message


CLOSE = "__close__"
"""Script reply that ends the connection's message stream."""

Script = Callable[[list[Any]], list[Any]]


class FakeConnection:
    """Stands in for ``RelayConnection``; replies come from a script.

    Each sent frame is passed to ``respond``; the returned replies are
    queued as inbound frames. A reply that is a ``str`` is delivered raw
    (so malformed frames can be tested), ``CLOSE`` ends the stream, and
    anything else is JSON-encoded.
    """

    def __init__(
        self,
        url: str,
        respond: Script | None = None,
        *,
        fail_open: bool = False,
        initial: list[Any] | None = None,
    ) -> None:
        self.url = url
        self.respond = respond or (lambda frame: [])
        self.fail_open = fail_open
        self.sent: list[list[Any]] = []
        self.opened = False
        self.closed = False
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()
        for reply in initial or []:
            self._inbox.put_nowait(reply)

    async def open(self) -> None:
        if self.fail_open:
            raise RelayConnectionError(self.url, "open failed: refused")
        self.opened = True

    async def send(self, frame: list[Any]) -> None:
        if not self.opened or self.closed:
            raise RelayConnectionError(self.url, "connection is not open")
        self.sent.append(frame)
        for reply in self.respond(frame):
            self._inbox.put_nowait(reply)

    async def messages(self) -> AsyncIterator[RelayMessage]:
        while not self.closed:
            reply = await self._inbox.get()
            if isinstance(reply, str) and reply == CLOSE:
                return
            raw = reply if isinstance(reply, str) else json.dumps(reply)
            parsed = parse_relay_message(raw)
            if parsed is not None:
                yield parsed

    async def close(self) -> None:
        self.closed = True


class FakeRelayNetwork:
    """Connection factory keyed by URL.

    ``relays`` maps a URL to a ``FakeConnection``, or to an exception the
    factory raises for that URL. Unknown URLs get a silent connection.
    """

    CLOSE = CLOSE

    def __init__(self) -> None:
        self.relays: dict[str, FakeConnection | Exception] = {}
        self.created: list[FakeConnection] = []

    def add(self, url: str, respond: Script | None = None, **kwargs: Any) -> FakeConnection:
        conn = FakeConnection(url, respond, **kwargs)
        self.relays[url] = conn
        return conn

    def __call__(self, url: str) -> FakeConnection:
        entry = self.relays.get(url)
        if isinstance(entry, Exception):
            raise entry
        conn = entry if entry is not None else FakeConnection(url)
        self.created.append(conn)
        return conn


@pytest.fixture
def network() -> FakeRelayNetwork:
    return FakeRelayNetwork()
