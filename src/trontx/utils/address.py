"""
Address codec for ledger account addresses.

An address is 21 bytes: the reserved prefix byte 0x41 followed by the
20-byte account hash. Two text forms exist:

- hex: "41" followed by 40 hex characters
- base58check: 34 characters, checksum is the first 4 bytes of
  sha256(sha256(payload))

The ABI layer works with the 20-byte form, see ``to_evm`` and ``from_evm``.
"""

from __future__ import annotations

import re
from typing import Union

import base58

from trontx.constants import (
    ADDRESS_BASE58_LENGTH,
    ADDRESS_HEX_LENGTH,
    ADDRESS_PREFIX,
    ADDRESS_PREFIX_HEX,
    ADDRESS_SIZE,
)
from trontx.errors import InvalidAddressError

_HEX_RE = re.compile(r"41[0-9a-fA-F]{40}")
_EVM_HEX_RE = re.compile(r"(0x)?[0-9a-fA-F]{40}")

AddressLike = Union[str, bytes]


def decode(address: AddressLike, field_name: str = "address") -> bytes:
    """
    Decode an address in any supported form to its 21 canonical bytes.

    Args:
        address: Hex text, base58check text or raw 21 bytes.
        field_name: Field name for error messages.

    Returns:
        The 21-byte address.

    Raises:
        InvalidAddressError: On empty input, wrong length, wrong prefix or a
            checksum mismatch.
    """
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
        if len(raw) != ADDRESS_SIZE or raw[0] != ADDRESS_PREFIX:
            raise InvalidAddressError(
                raw.hex(), field=field_name, reason="must be 21 bytes starting with 0x41"
            )
        return raw

    if not isinstance(address, str):
        raise InvalidAddressError(
            address, field=field_name, reason="must be a string"
        )
    if not address:
        raise InvalidAddressError(address, field=field_name, reason="is required")

    if len(address) == ADDRESS_HEX_LENGTH:
        if not _HEX_RE.fullmatch(address):
            raise InvalidAddressError(
                address,
                field=field_name,
                reason="must be 41 followed by 40 hex characters",
            )
        return bytes.fromhex(address)

    if len(address) == ADDRESS_BASE58_LENGTH:
        try:
            raw = base58.b58decode_check(address)
        except ValueError:
            raise InvalidAddressError(
                address, field=field_name, reason="bad base58 checksum"
            ) from None
        if len(raw) != ADDRESS_SIZE or raw[0] != ADDRESS_PREFIX:
            raise InvalidAddressError(
                address, field=field_name, reason="bad address prefix"
            )
        return raw

    raise InvalidAddressError(address, field=field_name, reason="unrecognized format")


def is_address(address: object) -> bool:
    """Return True if ``address`` decodes as a valid ledger address."""
    if not isinstance(address, (str, bytes, bytearray)):
        return False
    try:
        decode(address)
    except InvalidAddressError:
        return False
    return True


def to_hex(address: AddressLike) -> str:
    """Return the lowercase hex form ("41..." , 42 characters)."""
    return decode(address).hex()


def to_base58(address: AddressLike) -> str:
    """Return the canonical base58check form."""
    return base58.b58encode_check(decode(address)).decode("ascii")


def to_evm(address: AddressLike, field_name: str = "address") -> bytes:
    """Return the 20-byte account hash used inside ABI words."""
    if isinstance(address, str) and _EVM_HEX_RE.fullmatch(address):
        if address.startswith("0x") or len(address) == 40:
            return bytes.fromhex(address[-40:])
    return decode(address, field_name)[1:]


def from_evm(address: Union[str, bytes]) -> str:
    """Convert a 20-byte account hash (bytes or 0x-hex) to the ledger hex form."""
    if isinstance(address, str):
        text = address[2:] if address.startswith(("0x", "0X")) else address
        raw = bytes.fromhex(text)
    else:
        raw = bytes(address)
    if len(raw) != ADDRESS_SIZE - 1:
        raise InvalidAddressError(
            raw.hex(), field="address", reason="must be 20 bytes"
        )
    return ADDRESS_PREFIX_HEX + raw.hex()


def same_address(left: AddressLike, right: AddressLike) -> bool:
    """Compare two addresses on their canonical bytes."""
    return decode(left) == decode(right)


__all__ = [
    "AddressLike",
    "decode",
    "is_address",
    "to_hex",
    "to_base58",
    "to_evm",
    "from_evm",
    "same_address",
]
