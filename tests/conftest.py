"""
Pytest configuration and shared fixtures for relaypool tests.

Provides:
- A fixed secret key and its derived public key
- Factories for signed events and shape-valid unsigned events
- An in-process scripted WebSocket relay
"""

import json
import logging
import socket
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import WSMsgType, web

from relaypool.models import Event, EventDraft
from relaypool.utils.keys import derive_public_key, sign_event


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Key Fixtures
# ============================================================================

SECRET_KEY = "7f7ff03d123792d6ac594bfa67bf6d0c0ab55b6b1fdb6249303fe861f1ccba9a"  # pragma: allowlist secret


@pytest.fixture
def secret_key() -> str:
    """A fixed, valid secret key in hex."""
    return SECRET_KEY


@pytest.fixture
def public_key(secret_key: str) -> str:
    """The x-only public key derived from ``secret_key``."""
    return derive_public_key(secret_key)


# ============================================================================
# Event Factories
# ============================================================================


@pytest.fixture
def signed_event(secret_key: str) -> Callable[..., Event]:
    """Factory producing events genuinely signed with ``secret_key``."""

    def _make(
        content: str = "hello",
        *,
        kind: int = 1,
        tags: Any = (),
        created_at: int = 1_700_000_000,
    ) -> Event:
        draft = EventDraft(kind=kind, content=content, tags=tags, created_at=created_at)
        return sign_event(draft, secret_key)

    return _make


def make_event(
    seed: int,
    *,
    created_at: int = 1_700_000_000,
    kind: int = 1,
    content: str = "",
    tags: Any = (),
) -> Event:
    """Build a shape-valid event whose id is derived from *seed*.

    The id and signature are not cryptographically meaningful; use
    ``signed_event`` when a test verifies signatures.
    """
    return Event(
        id=f"{seed:064x}",
        pubkey="ab" * 32,
        created_at=created_at,
        kind=kind,
        tags=tags,
        content=content or f"event {seed}",
        sig="cd" * 64,
    )


@pytest.fixture
def event_factory() -> Callable[..., Event]:
    """Expose ``make_event`` as a fixture."""
    return make_event


# ============================================================================
# In-process Relay
# ============================================================================


class ScriptedRelay:
    """WebSocket relay served by aiohttp.web that answers from a script.

    ``respond`` maps each inbound frame (decoded JSON) to a list of replies;
    a reply is sent as-is if it is a ``str``, closes the socket if it is
    ``None``, and is JSON-encoded otherwise.
    """

    def __init__(self) -> None:
        self.url = ""
        self.received: list[Any] = []
        self.respond: Callable[[Any], list[Any]] = lambda frame: []
        self.sockets: set[web.WebSocketResponse] = set()

    async def handle(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.sockets.add(ws)
        try:
            async for msg in ws:
                if msg.type != WSMsgType.TEXT:
                    continue
                frame = json.loads(msg.data)
                self.received.append(frame)
                for reply in self.respond(frame):
                    if reply is None:
                        await ws.close()
                        return ws
                    await ws.send_str(reply if isinstance(reply, str) else json.dumps(reply))
        finally:
            self.sockets.discard(ws)
        return ws


@pytest_asyncio.fixture
async def relay_server() -> AsyncIterator[ScriptedRelay]:
    """A ``ScriptedRelay`` listening on an ephemeral localhost port."""
    relay = ScriptedRelay()
    app = web.Application()
    app.router.add_get("/", relay.handle)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    relay.url = f"ws://{host}:{port}"
    try:
        yield relay
    finally:
        for ws in list(relay.sockets):
            await ws.close()
        await runner.cleanup()


@pytest.fixture
def unused_url() -> str:
    """A ws:// URL on a localhost port nothing is listening on."""
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return f"ws://127.0.0.1:{port}"
