"""
Typed NIP-01 wire frames.

Relays speak JSON arrays whose first element names the frame type. Inbound
frames are parsed exactly once, at the connection boundary, by
[parse_relay_message()][relaypool.models.frames.parse_relay_message] into
one of the frozen message classes below; the coordinators dispatch on the
class instead of on positional array access.

Relays are untrusted: anything that is not valid JSON, not an array, has
an unknown type, or has the wrong shape yields ``None`` and is dropped by
the caller.

Outbound frames are built by [req_frame()][relaypool.models.frames.req_frame]
and [event_frame()][relaypool.models.frames.event_frame] as plain lists
ready for ``json.dumps``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .constants import MessageType
from .event import Event
from .filter import Filter


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventMessage:
    """``["EVENT", <subscription_id>, <event>]``"""

    subscription_id: str
    event: Event


@dataclass(frozen=True, slots=True)
class EoseMessage:
    """``["EOSE", <subscription_id>]``"""

    subscription_id: str


@dataclass(frozen=True, slots=True)
class OkMessage:
    """``["OK", <event_id>, <accepted>, <message>]``"""

    event_id: str
    accepted: bool
    message: str = ""


@dataclass(frozen=True, slots=True)
class NoticeMessage:
    """``["NOTICE", <message>]``"""

    message: str


@dataclass(frozen=True, slots=True)
class ClosedMessage:
    """``["CLOSED", <subscription_id>, <message>]``"""

    subscription_id: str
    message: str = ""


RelayMessage = EventMessage | EoseMessage | OkMessage | NoticeMessage | ClosedMessage


def _optional_str(frame: list[Any], index: int) -> str | None:
    if len(frame) <= index:
        return ""
    value = frame[index]
    return value if isinstance(value, str) else None


def parse_relay_message(raw: str | bytes) -> RelayMessage | None:  # noqa: PLR0911
    """Parse one inbound frame, returning ``None`` if it is malformed.

    Never raises: relays may send garbage and a single bad frame must not
    disturb the operation reading from that relay.
    """
    try:
        frame = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        return None

    if not isinstance(frame, list) or not frame or not isinstance(frame[0], str):
        return None

    kind = frame[0]
    try:
        if kind == MessageType.EVENT:
            if len(frame) < 3 or not isinstance(frame[1], str):
                return None
            return EventMessage(frame[1], Event.from_dict(frame[2]))

        if kind == MessageType.EOSE:
            if len(frame) < 2 or not isinstance(frame[1], str):
                return None
            return EoseMessage(frame[1])

        if kind == MessageType.OK:
            if len(frame) < 3 or not isinstance(frame[1], str) or not isinstance(frame[2], bool):
                return None
            message = _optional_str(frame, 3)
            return OkMessage(frame[1], frame[2], message or "")

        if kind == MessageType.NOTICE:
            message = _optional_str(frame, 1)
            return NoticeMessage(message) if message is not None else None

        if kind == MessageType.CLOSED:
            if len(frame) < 2 or not isinstance(frame[1], str):
                return None
            message = _optional_str(frame, 2)
            return ClosedMessage(frame[1], message or "")
    except (TypeError, ValueError) as e:
        logger.debug("frame_rejected type=%s error=%s", kind, e)
        return None

    return None


def req_frame(subscription_id: str, filters: Sequence[Filter]) -> list[Any]:
    """Build ``["REQ", <subscription_id>, <filter>, ...]``."""
    return [MessageType.REQ.value, subscription_id, *(f.to_dict() for f in filters)]


def event_frame(event: Event) -> list[Any]:
    """Build ``["EVENT", <event>]``."""
    return [MessageType.EVENT.value, event.to_dict()]
