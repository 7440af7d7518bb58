"""Shared fan-out machinery for the read and write coordinators.

Private module -- not part of the public API. One asyncio task drives each
relay; tasks report completion to a per-call
[_Completion][relaypool.pool._fanout._Completion] and the coordinator waits
for it under a single deadline.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from relaypool.core.logger import Logger


logger = Logger("pool.fanout")


def distinct_relays(relays: Iterable[str]) -> list[str]:
    """Drop duplicate URLs, keeping first-occurrence order."""
    return list(dict.fromkeys(relays))


def validate_timeout(timeout_ms: int) -> float:
    """Return *timeout_ms* in seconds, rejecting non-positive values."""
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int | float):
        raise TypeError(f"timeout_ms must be a number, got {type(timeout_ms).__name__}")
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
    return timeout_ms / 1000


class _Completion:
    """Tracks which relays are done; each relay counts at most once."""

    def __init__(self, relays: list[str]) -> None:
        self._pending = set(relays)
        self.finished: set[str] = set()
        self.all_done = asyncio.Event()
        if not self._pending:
            self.all_done.set()

    def mark_done(self, url: str) -> None:
        if url in self.finished:
            return
        self.finished.add(url)
        self._pending.discard(url)
        if not self._pending:
            self.all_done.set()

    @property
    def pending(self) -> set[str]:
        return set(self._pending)


async def run_fanout(
    relays: list[str],
    drive: Callable[[str], Awaitable[None]],
    completion: _Completion,
    timeout: float,
) -> bool:
    """Run ``drive(url)`` for every relay until all are done or *timeout* elapses.

    Every task is cancelled and awaited before returning, so no relay task
    outlives the call.

    Returns:
        True if the deadline fired before every relay was done.
    """
    tasks = [asyncio.create_task(drive(url), name=f"relay:{url}") for url in relays]
    timed_out = False
    try:
        async with asyncio.timeout(timeout):
            await completion.all_done.wait()
    except TimeoutError:
        timed_out = True
    finally:
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for url, result in zip(relays, results, strict=True):
            if isinstance(result, Exception):
                logger.debug("relay_task_error", url=url, error=str(result))
    return timed_out
