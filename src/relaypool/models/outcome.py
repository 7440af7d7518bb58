"""Per-relay write outcomes and the aggregated write result."""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import OutcomeStatus


@dataclass(frozen=True, slots=True)
class RelayOutcome:
    """Terminal state of one relay after a fan-out write.

    Attributes:
        url: Relay URL.
        status: [OutcomeStatus][relaypool.models.constants.OutcomeStatus].
        reason: Relay-supplied or synthesized explanation; often empty on acceptance.
    """

    url: str
    status: OutcomeStatus
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == OutcomeStatus.ACCEPTED

    def __str__(self) -> str:
        return f"{self.url}: {self.reason}" if self.reason else self.url


@dataclass(slots=True)
class WriteResult:
    """Aggregated result of [write()][relaypool.pool.write.write].

    Rejected, unreachable and timed-out relays all land in ``rejected``;
    each entry's ``status`` keeps the distinction for diagnostics.
    """

    accepted: list[str] = field(default_factory=list)
    rejected: list[RelayOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if at least one relay accepted the event."""
        return bool(self.accepted)
