"""
Unit tests for utils.bech32 module.

Tests:
- Bit regrouping with and without padding
- Encoding against BIP-173 vectors and the reference bech32 package
- Lenient and checksum-verifying decode
"""

import pytest
from bech32 import convertbits
from bech32 import bech32_decode as reference_decode

from relaypool.core.exceptions import InvalidEncodingError
from relaypool.utils.bech32 import (
    CHARSET,
    bech32_decode,
    bech32_encode,
    checksum_valid,
    convert_bits,
)


class TestConvertBits:
    """Bit regrouping between 8 and 5 bits."""

    def test_eight_to_five_pads(self) -> None:
        assert convert_bits([0xFF], 8, 5, pad=True) == [31, 28]

    def test_five_to_eight_drops_partial_group(self) -> None:
        assert convert_bits([31, 28], 5, 8, pad=False) == [0xFF]

    def test_empty(self) -> None:
        assert convert_bits([], 8, 5, pad=True) == []

    def test_value_too_wide(self) -> None:
        with pytest.raises(ValueError, match="does not fit"):
            convert_bits([32], 5, 8, pad=False)


class TestEncode:
    """bech32_encode() output."""

    def test_bip173_empty_payload(self) -> None:
        assert bech32_encode("a", b"") == "a12uel5l"

    def test_uses_only_charset_after_separator(self) -> None:
        token = bech32_encode("npub", bytes(range(32)))
        assert token.startswith("npub1")
        assert set(token[5:]) <= set(CHARSET)

    def test_hrp_lowercased(self) -> None:
        assert bech32_encode("NOTE", bytes(32)).startswith("note1")

    @pytest.mark.parametrize("hrp", ["", "a b", "\x7f"])
    def test_invalid_hrp(self, hrp: str) -> None:
        with pytest.raises(InvalidEncodingError):
            bech32_encode(hrp, b"\x00")

    def test_long_payload_not_limited(self) -> None:
        token = bech32_encode("nevent", bytes(200))
        assert len(token) > 90
        assert bech32_decode(token, verify_checksum=True) == ("nevent", bytes(200))


class TestDecode:
    """Lenient and strict bech32_decode()."""

    def test_round_trip(self) -> None:
        data = bytes.fromhex("7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e")
        assert bech32_decode(bech32_encode("npub", data)) == ("npub", data)

    def test_nip19_npub_vector(self) -> None:
        hrp, data = bech32_decode("npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg")
        assert hrp == "npub"
        assert data.hex() == "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"

    def test_uppercase_token(self) -> None:
        assert bech32_decode("A12UEL5L", verify_checksum=True) == ("a", b"")

    def test_separator_is_last_one(self) -> None:
        token = "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw"
        hrp, _ = bech32_decode(token, verify_checksum=True)
        assert hrp == "abcdef"

    def test_invalid_symbol(self) -> None:
        with pytest.raises(InvalidEncodingError, match="invalid bech32 character"):
            bech32_decode("npub1bio")

    def test_missing_separator(self) -> None:
        with pytest.raises(InvalidEncodingError, match="no separator"):
            bech32_decode("qpzry9x8")

    def test_lenient_ignores_bad_checksum(self) -> None:
        token = bech32_encode("note", bytes(32))
        corrupted = token[:-1] + ("q" if token[-1] != "q" else "p")
        assert bech32_decode(corrupted) == ("note", bytes(32))

    def test_strict_rejects_bad_checksum(self) -> None:
        token = bech32_encode("note", bytes(32))
        corrupted = token[:-1] + ("q" if token[-1] != "q" else "p")
        with pytest.raises(InvalidEncodingError, match="checksum mismatch"):
            bech32_decode(corrupted, verify_checksum=True)

    def test_strict_rejects_mixed_case(self) -> None:
        with pytest.raises(InvalidEncodingError, match="mixed-case"):
            bech32_decode("A12uEL5L", verify_checksum=True)

    def test_strict_rejects_short_token(self) -> None:
        with pytest.raises(InvalidEncodingError, match="too short"):
            bech32_decode("a1qqq", verify_checksum=True)

    def test_lenient_short_token_yields_empty_payload(self) -> None:
        assert bech32_decode("a1qqq") == ("a", b"")


class TestChecksum:
    """checksum_valid() on good and corrupted tokens."""

    def test_valid(self) -> None:
        words = [CHARSET.index(c) for c in "2uel5l"]
        assert checksum_valid("a", words)

    def test_invalid(self) -> None:
        words = [CHARSET.index(c) for c in "2uel5q"]
        assert not checksum_valid("a", words)


class TestLibraryAgreement:
    """Tokens round-trip through the reference ``bech32`` package."""

    def test_reference_decoder_accepts_tokens(self) -> None:
        data = bytes.fromhex("7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e")
        hrp, words, spec = reference_decode(bech32_encode("npub", data))
        assert hrp == "npub"
        assert spec == Encoding.BECH32
        assert bytes(convertbits(words, 5, 8, False)) == data

    def test_non_zero_padding_dropped(self) -> None:
        assert convert_bits([31, 31], 5, 8, pad=False) == [0xFF]
