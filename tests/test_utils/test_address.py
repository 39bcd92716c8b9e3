"""
Tests for the address codec.

Tests cover:
- Decoding hex and base58check forms
- Round trips between both forms
- Rejection of malformed input
- Conversion to and from 20-byte ABI words
"""

import pytest

from trontx.errors import InvalidAddressError
from trontx.utils import address

OWNER_HEX = "418840e6c55b9ada326d211d818c34a994aeced808"
OWNER_BASE58 = "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL"


# =============================================================================
# Decoding
# =============================================================================


class TestDecode:
    """Tests for decode()."""

    def test_decode_hex(self) -> None:
        """Hex form decodes to 21 bytes with the 0x41 prefix."""
        raw = address.decode(OWNER_HEX)
        assert len(raw) == 21
        assert raw[0] == 0x41
        assert raw.hex() == OWNER_HEX

    def test_decode_hex_uppercase(self) -> None:
        """Hex decoding is case-insensitive."""
        assert address.decode(OWNER_HEX.upper()) == address.decode(OWNER_HEX)

    def test_decode_base58(self) -> None:
        """Base58check form decodes to the same bytes as the hex form."""
        assert address.decode(OWNER_BASE58) == bytes.fromhex(OWNER_HEX)

    def test_decode_raw_bytes(self) -> None:
        """Raw 21-byte input is returned unchanged."""
        raw = bytes.fromhex(OWNER_HEX)
        assert address.decode(raw) == raw

    @pytest.mark.parametrize(
        "value",
        [
            "",
            None,
            123,
            "41" + "zz" * 20,
            "42" + "11" * 20,
            "0x" + "11" * 20,
            "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeM",  # bad checksum
            "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqe",  # too short
            b"\x41" + b"\x00" * 19,
            b"\x42" + b"\x00" * 20,
        ],
    )
    def test_decode_rejects_malformed(self, value) -> None:
        """Malformed input never decodes to a default address."""
        with pytest.raises(InvalidAddressError):
            address.decode(value)

    def test_error_carries_field(self) -> None:
        """The error records the field name."""
        with pytest.raises(InvalidAddressError) as exc_info:
            address.decode("nope", field_name="recipient address")
        assert exc_info.value.field == "recipient address"
        assert exc_info.value.code == "INVALID_ADDRESS"


# =============================================================================
# Round trips
# =============================================================================


class TestRoundTrip:
    """Both text forms are lossless inverses of decode()."""

    @pytest.mark.parametrize(
        "hex_address",
        [OWNER_HEX, "41" + "00" * 20, "41" + "ff" * 20, "41" + "11" * 20],
    )
    def test_round_trip(self, hex_address: str) -> None:
        raw = address.decode(hex_address)
        assert address.decode(address.to_base58(raw)) == raw
        assert address.decode(address.to_hex(raw)) == raw

    def test_to_base58_known_pair(self) -> None:
        """The published pair maps in both directions."""
        assert address.to_base58(OWNER_HEX) == OWNER_BASE58
        assert address.to_hex(OWNER_BASE58) == OWNER_HEX

    def test_base58_length(self) -> None:
        assert len(address.to_base58("41" + "00" * 20)) == 34

    def test_same_address(self) -> None:
        assert address.same_address(OWNER_HEX, OWNER_BASE58)
        assert not address.same_address(OWNER_HEX, "41" + "11" * 20)


class TestIsAddress:
    """Tests for is_address()."""

    def test_valid(self) -> None:
        assert address.is_address(OWNER_HEX)
        assert address.is_address(OWNER_BASE58)

    def test_invalid(self) -> None:
        assert not address.is_address("")
        assert not address.is_address(None)
        assert not address.is_address("T" * 34)


# =============================================================================
# ABI words
# =============================================================================


class TestEvmConversion:
    """Tests for to_evm() and from_evm()."""

    def test_to_evm_strips_prefix(self) -> None:
        assert address.to_evm(OWNER_BASE58) == bytes.fromhex(OWNER_HEX[2:])

    def test_to_evm_accepts_0x(self) -> None:
        assert address.to_evm("0x" + OWNER_HEX[2:]) == bytes.fromhex(OWNER_HEX[2:])

    def test_from_evm(self) -> None:
        assert address.from_evm("0x" + OWNER_HEX[2:].upper()) == OWNER_HEX
        assert address.from_evm(bytes.fromhex(OWNER_HEX[2:])) == OWNER_HEX

    def test_from_evm_rejects_wrong_length(self) -> None:
        with pytest.raises(InvalidAddressError):
            address.from_evm(b"\x00" * 21)

    @pytest.mark.parametrize("suffix", ["\n", " "])
    def test_to_evm_rejects_trailing_whitespace(self, suffix: str) -> None:
        with pytest.raises(InvalidAddressError):
            address.to_evm("0x" + OWNER_HEX[2:] + suffix)
