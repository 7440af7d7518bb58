"""Fan-out write coordinator.

[write()][relaypool.pool.write.write] publishes one signed event to many
relays at once and collects a verdict from each. The first ``OK`` frame
that names the event id settles a relay; later ``OK`` frames are ignored.
Relays that fail before answering are recorded as unreachable, and relays
still silent at the deadline as timed out.
"""

from __future__ import annotations

from collections.abc import Iterable

from relaypool.core.exceptions import RelayConnectionError
from relaypool.core.logger import Logger
from relaypool.models import (
    Event,
    NoticeMessage,
    OkMessage,
    OutcomeStatus,
    RelayOutcome,
    WriteResult,
    event_frame,
)
from relaypool.utils.transport import ConnectionFactory, RelayConnection

from ._fanout import _Completion, distinct_relays, run_fanout, validate_timeout


logger = Logger("pool.write")

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_REJECT_REASON = "rejected"


def _failure_reason(error: Exception) -> str:
    if isinstance(error, RelayConnectionError):
        return error.reason
    return str(error) or type(error).__name__


async def write(
    relays: Iterable[str],
    event: Event,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    connection_factory: ConnectionFactory = RelayConnection,
) -> WriteResult:
    """Publish *event* to every relay and bucket the verdicts.

    Args:
        relays: Relay URLs; duplicates are written once.
        event: A signed event.
        timeout_ms: Overall deadline in milliseconds.
        connection_factory: Builds an unopened connection for a URL.

    Returns:
        [WriteResult][relaypool.models.outcome.WriteResult] with accepting
        relay URLs in ``accepted`` and every other relay in ``rejected``,
        in the order their outcomes were settled. Relay failures are never
        raised.

    Raises:
        ValueError: If *timeout_ms* is not positive.
    """
    timeout = validate_timeout(timeout_ms)
    urls = distinct_relays(relays)
    if not urls:
        return WriteResult()

    completion = _Completion(urls)
    outcomes: dict[str, RelayOutcome] = {}
    connections: list[RelayConnection] = []
    frame = event_frame(event)

    def settle(outcome: RelayOutcome) -> None:
        if outcome.url in outcomes:
            return
        outcomes[outcome.url] = outcome
        completion.mark_done(outcome.url)

    logger.debug("write_started", id=event.id, kind=event.kind, relays=len(urls))

    async def drive(url: str) -> None:
        try:
            conn = connection_factory(url)
        except Exception as e:
            settle(RelayOutcome(url, OutcomeStatus.UNREACHABLE, _failure_reason(e)))
            return
        connections.append(conn)
        try:
            await conn.open()
            await conn.send(frame)
            async for message in conn.messages():
                if isinstance(message, OkMessage) and message.event_id == event.id:
                    if message.accepted:
                        settle(RelayOutcome(url, OutcomeStatus.ACCEPTED, message.message))
                    else:
                        reason = message.message or DEFAULT_REJECT_REASON
                        settle(RelayOutcome(url, OutcomeStatus.REJECTED, reason))
                    return
                if isinstance(message, NoticeMessage):
                    logger.debug("relay_notice", url=url, notice=message.message)
            settle(RelayOutcome(url, OutcomeStatus.UNREACHABLE, "connection closed before verdict"))
        except Exception as e:
            logger.debug("relay_failed", url=url, error=str(e))
            settle(RelayOutcome(url, OutcomeStatus.UNREACHABLE, _failure_reason(e)))
        finally:
            await conn.close()

    timed_out = await run_fanout(urls, drive, completion, timeout)
    for conn in connections:
        await conn.close()

    for url in urls:
        if url not in outcomes:
            outcomes[url] = RelayOutcome(
                url, OutcomeStatus.TIMEOUT, f"timeout: no verdict within {timeout_ms} ms"
            )

    result = WriteResult()
    for outcome in outcomes.values():
        if outcome.accepted:
            result.accepted.append(outcome.url)
        else:
            result.rejected.append(outcome)

    if timed_out:
        logger.debug("write_timeout", id=event.id, timeout_ms=timeout_ms)
    logger.debug(
        "write_completed",
        id=event.id,
        accepted=len(result.accepted),
        rejected=len(result.rejected),
    )
    return result
