"""Bech32 encoding (BIP-173) as used by NIP-19 identifiers.

A token is ``<hrp>1<data><checksum>``: the human-readable part, the
separator ``1``, the payload regrouped into 5-bit words, and a 6-word
BCH checksum computed over the expanded hrp and the payload. The
alphabet, the checksum and the bit regrouping come from the ``bech32``
package; this module adds the NIP-19 relaxations on top.

NIP-19 payloads (TLV entries with relay URLs) routinely exceed the
90-character limit of BIP-173, so no length limit is enforced and
``bech32.bech32_decode`` is not used.

Decoding is lenient by default: the checksum words are stripped without
being verified, and a final partial 8-bit group is dropped. Pass
``verify_checksum=True`` for strict decoding.
"""

from __future__ import annotations

from collections.abc import Iterable

from bech32 import CHARSET, bech32_verify_checksum, convertbits
from bech32 import bech32_encode as _encode_words

from relaypool.core.exceptions import InvalidEncodingError


SEPARATOR = "1"
CHECKSUM_LENGTH = 6

_CHARSET_MAP = {c: i for i, c in enumerate(CHARSET)}


def checksum_valid(hrp: str, data: list[int]) -> bool:
    """Return True if ``data`` (payload plus checksum words) is valid for ``hrp``."""
    return bech32_verify_checksum(hrp, data)


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    """Regroup a sequence of ``from_bits``-wide integers into ``to_bits``-wide ones.

    With ``pad=True`` a trailing partial group is zero-padded and emitted
    (8 -> 5 for encoding). With ``pad=False`` it is discarded whatever its
    bits are (5 -> 8 for decoding), where ``bech32.convertbits`` would
    reject non-zero padding.

    Raises:
        ValueError: If an input value does not fit in ``from_bits``.
    """
    values = list(data)
    out = convertbits(values, from_bits, to_bits, pad=True)
    if out is None:
        bad = next(v for v in values if v < 0 or v >> from_bits)
        raise ValueError(f"value {bad} does not fit in {from_bits} bits")
    if not pad:
        out = out[: len(values) * from_bits // to_bits]
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode ``data`` under human-readable prefix ``hrp``.

    Raises:
        InvalidEncodingError: If ``hrp`` is empty or contains characters
            outside printable ASCII (33-126).
    """
    if not hrp or any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise InvalidEncodingError(f"invalid human-readable part: {hrp!r}")
    return _encode_words(hrp.lower(), convert_bits(data, 8, 5, pad=True))


def bech32_decode(token: str, *, verify_checksum: bool = False) -> tuple[str, bytes]:
    """Decode a bech32 token into ``(hrp, payload)``.

    The separator is the last ``1`` in the token. Everything after it,
    minus the trailing checksum words, is the payload.

    Args:
        token: The encoded string.
        verify_checksum: Also reject missing separators, mixed case, short
            tokens and checksum mismatches.

    Raises:
        InvalidEncodingError: On a missing separator, a symbol outside the
            bech32 alphabet, or any strict-mode violation.
    """
    if verify_checksum and token.lower() != token and token.upper() != token:
        raise InvalidEncodingError("mixed-case bech32 token")
    lowered = token.lower()
    pos = lowered.rfind(SEPARATOR)
    if pos < 0:
        raise InvalidEncodingError("bech32 token has no separator")
    if verify_checksum and (pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(lowered)):
        raise InvalidEncodingError("bech32 token is too short")

    hrp = lowered[:pos]
    words: list[int] = []
    for c in lowered[pos + 1 :]:
        value = _CHARSET_MAP.get(c)
        if value is None:
            raise InvalidEncodingError(f"invalid bech32 character {c!r}")
        words.append(value)

    if verify_checksum and not checksum_valid(hrp, words):
        raise InvalidEncodingError("bech32 checksum mismatch")

    payload = words[:-CHECKSUM_LENGTH] if len(words) >= CHECKSUM_LENGTH else []
    return hrp, bytes(convert_bits(payload, 5, 8, pad=False))
