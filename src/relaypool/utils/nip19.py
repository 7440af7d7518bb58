"""NIP-19 bech32-encoded identifiers.

Human-facing identifiers come in two shapes:

* **bare** -- ``nsec1``, ``npub1``, ``note1``: the bech32 encoding of one
  32-byte value (secret key, public key, event id).
* **TLV** -- ``nevent1``, ``nprofile1``: the bech32 encoding of a
  type-length-value sequence carrying the primary 32-byte value plus
  optional relay hints, author and kind.

[resolve()][relaypool.utils.nip19.resolve] is the single normalization
entry point: every user-supplied identifier should pass through it before
being used as a filter value or tag value.

Examples:
    ```python
    token = encode_nevent(event_id, relay_hints=["wss://nos.lol"], author_hex=pubkey)
    resolve(token) == event_id            # True
    resolve(event_id.upper()) == event_id  # True
    resolve("not-an-id")                   # 'not-an-id' (unchanged)
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import NamedTuple

from relaypool.core.exceptions import InvalidEncodingError, InvalidKeyError
from relaypool.models._validation import is_hex
from relaypool.models.constants import Bech32Prefix, TlvType

from .bech32 import bech32_decode, bech32_encode


logger = logging.getLogger(__name__)

_BARE_PREFIXES = (Bech32Prefix.NSEC, Bech32Prefix.NPUB, Bech32Prefix.NOTE)
_TLV_PREFIXES = (Bech32Prefix.NEVENT, Bech32Prefix.NPROFILE)
_MAX_TLV_LENGTH = 255


class TlvEntry(NamedTuple):
    """One decoded type-length-value entry."""

    type: int
    value: bytes


def _hex32(value: str, name: str, error: type[ValueError] = ValueError) -> bytes:
    if not isinstance(value, str) or not is_hex(value.lower(), 64):
        raise error(f"{name} must be 64 hex characters")
    return bytes.fromhex(value)


# =============================================================================
# Bare identifiers
# =============================================================================


def encode_npub(pubkey_hex: str) -> str:
    """Encode a hex public key as ``npub1...``."""
    return bech32_encode(Bech32Prefix.NPUB, _hex32(pubkey_hex, "pubkey", InvalidKeyError))


def encode_nsec(secret_hex: str) -> str:
    """Encode a hex secret key as ``nsec1...``."""
    return bech32_encode(Bech32Prefix.NSEC, _hex32(secret_hex, "secret key", InvalidKeyError))


def encode_note(event_id_hex: str) -> str:
    """Encode a hex event id as ``note1...``."""
    return bech32_encode(Bech32Prefix.NOTE, _hex32(event_id_hex, "event id"))


# =============================================================================
# TLV identifiers
# =============================================================================


def _tlv(entry_type: int, value: bytes) -> bytes:
    if len(value) > _MAX_TLV_LENGTH:
        raise ValueError(f"TLV entry of type {entry_type} exceeds {_MAX_TLV_LENGTH} bytes")
    return bytes((entry_type, len(value))) + value


def encode_tlv(
    prefix: str,
    special_hex: str,
    relay_hints: Iterable[str] = (),
    author_hex: str | None = None,
    kind: int | None = None,
) -> str:
    """Encode a TLV identifier.

    Entries are written in a fixed order: the primary value (type 0), one
    entry per relay hint (type 1), the author (type 2) and the kind
    (type 3, 4 bytes big-endian).

    Args:
        prefix: Human-readable part, e.g. ``"nevent"``.
        special_hex: Primary 32-byte value as hex (event id or pubkey).
        relay_hints: Relay URLs, each at most 255 UTF-8 bytes.
        author_hex: Optional author pubkey as hex.
        kind: Optional event kind.

    Raises:
        ValueError: On malformed hex, an oversized relay hint, or a kind
            outside the 4-byte range.
    """
    buf = bytearray(_tlv(TlvType.SPECIAL, _hex32(special_hex, "primary value")))
    for hint in relay_hints:
        buf += _tlv(TlvType.RELAY, hint.encode("utf-8"))
    if author_hex:
        buf += _tlv(TlvType.AUTHOR, _hex32(author_hex, "author"))
    if kind is not None:
        if not 0 <= kind <= 0xFFFFFFFF:
            raise ValueError(f"kind must fit in 4 bytes, got {kind}")
        buf += _tlv(TlvType.KIND, kind.to_bytes(4, "big"))
    return bech32_encode(prefix, bytes(buf))


def encode_nevent(
    event_id_hex: str,
    relay_hints: Iterable[str] = (),
    author_hex: str | None = None,
    kind: int | None = None,
) -> str:
    """Encode an event reference as ``nevent1...``."""
    return encode_tlv(Bech32Prefix.NEVENT, event_id_hex, relay_hints, author_hex, kind)


def encode_nprofile(pubkey_hex: str, relay_hints: Iterable[str] = ()) -> str:
    """Encode a profile reference as ``nprofile1...``."""
    return encode_tlv(Bech32Prefix.NPROFILE, pubkey_hex, relay_hints)


def decode_tlv(data: bytes) -> list[TlvEntry]:
    """Split a TLV payload into entries.

    Scanning stops silently at the first entry whose header or value is
    truncated; the entries before it are returned.
    """
    entries: list[TlvEntry] = []
    i = 0
    while i + 2 <= len(data):
        entry_type = data[i]
        length = data[i + 1]
        end = i + 2 + length
        if end > len(data):
            break
        entries.append(TlvEntry(entry_type, bytes(data[i + 2 : end])))
        i = end
    return entries


# =============================================================================
# Normalization
# =============================================================================


def resolve(value: str) -> str:
    """Normalize any supported identifier form to lowercase hex.

    * 64 hex characters (any case) -- returned lowercased.
    * ``nsec1`` / ``npub1`` / ``note1`` -- the decoded 32 bytes as hex.
    * ``nevent1`` / ``nprofile1`` -- the first type-0 entry of length 32.
    * Anything else, including a TLV token without a usable type-0 entry,
      is returned unchanged.

    Raises:
        InvalidEncodingError: Only when a token with a recognised prefix
            contains a character outside the bech32 alphabet.
    """
    if is_hex(value.lower(), 64):
        return value.lower()

    lowered = value.lower()

    if lowered.startswith(tuple(f"{p}1" for p in _BARE_PREFIXES)):
        _, data = bech32_decode(value)
        return data.hex()

    if lowered.startswith(tuple(f"{p}1" for p in _TLV_PREFIXES)):
        _, data = bech32_decode(value)
        for entry in decode_tlv(data):
            if entry.type == TlvType.SPECIAL and len(entry.value) == 32:
                return entry.value.hex()
        logger.debug("tlv_without_primary_value value=%s", value[:16])

    return value


def decode_nevent(token: str) -> tuple[str, list[str], str | None]:
    """Decode ``nevent1...`` into ``(event_id, relay_hints, author)``.

    Raises:
        InvalidEncodingError: If the token is not an ``nevent`` or lacks a
            32-byte primary entry.
    """
    hrp, data = bech32_decode(token)
    if hrp != Bech32Prefix.NEVENT:
        raise InvalidEncodingError(f"expected nevent, got {hrp or 'no prefix'}")
    event_id: str | None = None
    hints: list[str] = []
    author: str | None = None
    for entry in decode_tlv(data):
        if entry.type == TlvType.SPECIAL and len(entry.value) == 32 and event_id is None:
            event_id = entry.value.hex()
        elif entry.type == TlvType.RELAY:
            hints.append(entry.value.decode("utf-8", errors="replace"))
        elif entry.type == TlvType.AUTHOR and len(entry.value) == 32:
            author = entry.value.hex()
    if event_id is None:
        raise InvalidEncodingError("nevent has no event id entry")
    return event_id, hints, author
