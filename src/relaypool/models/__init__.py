"""Frozen dataclasses with zero I/O for events, filters, frames and outcomes.

The models layer is the bottom of the package DAG: it depends only on the
standard library. Every value type validates in ``__post_init__`` so that
invalid instances never escape their constructor.

Attributes:
    Event: Signed, content-addressed Nostr event.
    EventDraft: Unsigned event fields awaiting a signature.
    Filter: ``REQ`` query descriptor.
    RelayMessage: Union of the typed inbound frames
        ([EventMessage][relaypool.models.frames.EventMessage],
        [EoseMessage][relaypool.models.frames.EoseMessage],
        [OkMessage][relaypool.models.frames.OkMessage],
        [NoticeMessage][relaypool.models.frames.NoticeMessage],
        [ClosedMessage][relaypool.models.frames.ClosedMessage]).
    RelayOutcome: One relay's write verdict.
    WriteResult: Accepted/rejected buckets of a fan-out write.
"""

from .constants import (
    Bech32Prefix,
    EventKind,
    MessageType,
    OutcomeStatus,
    TlvType,
)
from .event import Event, EventDraft
from .filter import Filter
from .frames import (
    ClosedMessage,
    EoseMessage,
    EventMessage,
    NoticeMessage,
    OkMessage,
    RelayMessage,
    event_frame,
    parse_relay_message,
    req_frame,
)
from .outcome import RelayOutcome, WriteResult


__all__ = [
    "Bech32Prefix",
    "ClosedMessage",
    "EoseMessage",
    "Event",
    "EventDraft",
    "EventKind",
    "EventMessage",
    "Filter",
    "MessageType",
    "NoticeMessage",
    "OkMessage",
    "OutcomeStatus",
    "RelayMessage",
    "RelayOutcome",
    "TlvType",
    "WriteResult",
    "event_frame",
    "parse_relay_message",
    "req_frame",
]
