"""Fan-out read coordinator.

[read()][relaypool.pool.read.read] sends one subscription to many relays at
once and returns the union of what they send back, deduplicated by event id
and ordered newest first.

A relay is *done* the first time any of these happens: it sends ``EOSE``
or ``CLOSED`` for the subscription, its connection cannot be built or
opened, or its socket closes or errors. The read returns once every relay
is done or the deadline passes, whichever comes first. Events that arrive
after a relay's ``EOSE`` but before the read returns are still collected.

Examples:
    ```python
    events = await read(
        ["wss://relay.damus.io", "wss://nos.lol"],
        [Filter(kinds=(1,), authors=(pubkey,), limit=20)],
        timeout_ms=5000,
    )
    ```
"""

from __future__ import annotations

import secrets
from collections.abc import Iterable, Sequence

from relaypool.core.logger import Logger
from relaypool.models import (
    ClosedMessage,
    EoseMessage,
    Event,
    EventMessage,
    Filter,
    NoticeMessage,
    req_frame,
)
from relaypool.utils.keys import verify_event
from relaypool.utils.transport import ConnectionFactory, RelayConnection

from ._fanout import _Completion, distinct_relays, run_fanout, validate_timeout


logger = Logger("pool.read")

DEFAULT_TIMEOUT_MS = 10_000


def new_subscription_id() -> str:
    """Return a short random subscription id, unique per read."""
    return "r" + secrets.token_hex(4)


class _ReadState:
    """Per-call aggregation: first-seen events plus relay completion."""

    def __init__(self, relays: list[str], *, verify: bool) -> None:
        self.completion = _Completion(relays)
        self.seen: dict[str, Event] = {}
        self.verify = verify
        self.rejected = 0

    def add(self, event: Event) -> None:
        if event.id in self.seen:
            return
        if self.verify and not verify_event(event):
            self.rejected += 1
            return
        self.seen[event.id] = event

    def results(self) -> list[Event]:
        # stable: equal timestamps keep arrival order
        return sorted(self.seen.values(), key=lambda e: e.created_at, reverse=True)


async def read(
    relays: Iterable[str],
    filters: Sequence[Filter],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    verify: bool = False,
    connection_factory: ConnectionFactory = RelayConnection,
) -> list[Event]:
    """Query every relay with *filters* and merge the results.

    Args:
        relays: Relay URLs; duplicates are queried once.
        filters: Filters sent in a single ``REQ``.
        timeout_ms: Overall deadline in milliseconds.
        verify: Drop events whose id or signature does not check out.
        connection_factory: Builds an unopened connection for a URL.

    Returns:
        Unique events sorted by ``created_at`` descending. Relay failures
        are never raised; an unreachable relay simply contributes nothing.

    Raises:
        ValueError: If *timeout_ms* is not positive.
    """
    timeout = validate_timeout(timeout_ms)
    urls = distinct_relays(relays)
    if not urls:
        return []

    sub_id = new_subscription_id()
    frame = req_frame(sub_id, list(filters))
    state = _ReadState(urls, verify=verify)
    connections: list[RelayConnection] = []

    logger.debug("read_started", sub_id=sub_id, relays=len(urls), filters=len(filters))

    async def drive(url: str) -> None:
        try:
            conn = connection_factory(url)
        except Exception as e:
            logger.debug("relay_failed", url=url, stage="create", error=str(e))
            state.completion.mark_done(url)
            return
        connections.append(conn)
        try:
            await conn.open()
            await conn.send(frame)
            async for message in conn.messages():
                if isinstance(message, EventMessage):
                    if message.subscription_id == sub_id:
                        state.add(message.event)
                elif isinstance(message, EoseMessage):
                    if message.subscription_id == sub_id:
                        state.completion.mark_done(url)
                elif isinstance(message, ClosedMessage):
                    if message.subscription_id == sub_id:
                        logger.debug("subscription_closed", url=url, reason=message.message)
                        break
                elif isinstance(message, NoticeMessage):
                    logger.debug("relay_notice", url=url, notice=message.message)
        except Exception as e:
            logger.debug("relay_failed", url=url, error=str(e))
        finally:
            state.completion.mark_done(url)
            await conn.close()

    timed_out = await run_fanout(urls, drive, state.completion, timeout)
    for conn in connections:
        await conn.close()

    events = state.results()
    if timed_out:
        logger.debug(
            "read_timeout",
            sub_id=sub_id,
            pending=len(state.completion.pending),
            timeout_ms=timeout_ms,
        )
    logger.debug(
        "read_completed",
        sub_id=sub_id,
        events=len(events),
        relays=len(urls),
        dropped=state.rejected,
    )
    return events
