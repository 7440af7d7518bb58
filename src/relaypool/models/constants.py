"""Shared constants for the models layer.

Enumerations used by more than one module. Keeping them here lets
[relaypool.utils][relaypool.utils] and [relaypool.pool][relaypool.pool]
share them without importing each other.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Well-known Nostr event kinds produced by the event builders.

    Attributes:
        TEXT_NOTE: Kind 1 -- short text note (NIP-01).
        CONTACTS: Kind 3 -- follow list (NIP-02).
        REPOST: Kind 6 -- repost of a kind 1 note (NIP-18).
        REACTION: Kind 7 -- reaction (NIP-25).
    """

    TEXT_NOTE = 1
    CONTACTS = 3
    REPOST = 6
    REACTION = 7


class Bech32Prefix(StrEnum):
    """Human-readable parts of NIP-19 identifiers.

    ``NSEC``, ``NPUB`` and ``NOTE`` wrap a bare 32-byte value; ``NEVENT``
    and ``NPROFILE`` wrap a TLV sequence.
    """

    NSEC = "nsec"
    NPUB = "npub"
    NOTE = "note"
    NEVENT = "nevent"
    NPROFILE = "nprofile"


class TlvType(IntEnum):
    """Entry types inside a NIP-19 TLV payload.

    Attributes:
        SPECIAL: The primary 32-byte value (event id or pubkey).
        RELAY: UTF-8 relay URL hint; may repeat.
        AUTHOR: 32-byte author pubkey.
        KIND: 32-bit big-endian event kind.
    """

    SPECIAL = 0
    RELAY = 1
    AUTHOR = 2
    KIND = 3


class MessageType(StrEnum):
    """First element of a NIP-01 wire frame."""

    REQ = "REQ"
    EVENT = "EVENT"
    EOSE = "EOSE"
    OK = "OK"
    NOTICE = "NOTICE"
    CLOSED = "CLOSED"


class OutcomeStatus(StrEnum):
    """Terminal state of one relay in a fan-out write.

    Attributes:
        ACCEPTED: The relay answered ``OK`` with ``true``.
        REJECTED: The relay answered ``OK`` with ``false``.
        UNREACHABLE: The connection failed or closed before a verdict.
        TIMEOUT: No verdict arrived before the operation's deadline.
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
