"""
Validation utilities for transaction parameters.

Provides input validation functions for:
- Addresses (delegating to the address codec)
- Amounts in sun, under an explicit sign policy
- Bounded integers (percentages, energy limits, durations)
- Timestamps for sale windows
- Strings, hex strings and urls
- Resource codes

All validation functions raise InputValidationError subclasses on failure
and return the normalized value on success.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type

from trontx.constants import MAX_FEE_LIMIT, MAX_INT64, MAX_URL_BYTES
from trontx.errors import (
    InputValidationError,
    InvalidAmountError,
    InvalidRangeError,
    InvalidStringError,
    InvalidTimestampError,
    MissingRequiredFieldError,
)
from trontx.utils import address as address_codec

_HEX_RE = re.compile(r"(0x)?([0-9a-fA-F]{2})*")
_URL_SCHEMES = ("https://", "http://")

RESOURCES = ("BANDWIDTH", "ENERGY")


class AmountPolicy(str, Enum):
    """Sign constraint applied by ``validate_amount``."""

    NON_NEGATIVE = "non_negative"
    POSITIVE = "positive"


def to_integer(value: Any) -> Optional[int]:
    """
    Normalize an integral numeric value, or return None if it is not one.

    Accepts int, integral finite float, integral Decimal and numeric strings.
    bool is rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            return None
        return int(value)
    return None


def validate_amount(
    amount: Any,
    policy: AmountPolicy = AmountPolicy.NON_NEGATIVE,
    field_name: str = "amount",
    *,
    maximum: int = MAX_INT64,
) -> int:
    """
    Validate an amount in sun.

    Args:
        amount: Amount as int, integral float/Decimal or numeric string.
        policy: Whether zero is allowed.
        field_name: Field name for error messages.
        maximum: Upper bound, lowered for fields stored as int32.

    Returns:
        Validated amount as integer.

    Raises:
        InvalidAmountError: If amount is non-numeric, non-integral, negative,
            zero under the POSITIVE policy, or above ``maximum``.
    """
    value = to_integer(amount)
    if value is None:
        raise InvalidAmountError(amount, field=field_name, reason="must be an integer")

    if value < 0:
        raise InvalidAmountError(amount, field=field_name, reason="cannot be negative")

    if policy is AmountPolicy.POSITIVE and value == 0:
        raise InvalidAmountError(amount, field=field_name, reason="must be greater than 0")

    if value > maximum:
        reason = "exceeds int64 maximum" if maximum == MAX_INT64 else f"must be at most {maximum}"
        raise InvalidAmountError(amount, field=field_name, reason=reason)

    return value


def validate_integer(
    value: Any,
    field_name: str,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    *,
    error: Type[InputValidationError] = InvalidRangeError,
) -> int:
    """
    Validate an integer against inclusive bounds.

    Raises:
        InvalidRangeError (or ``error``): If the value is not an integer or
            falls outside [minimum, maximum].
    """
    number = to_integer(value)
    if number is None:
        raise error(value, field=field_name, reason="must be an integer")
    if minimum is not None and number < minimum:
        raise error(value, field=field_name, reason=f"must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise error(value, field=field_name, reason=f"must be at most {maximum}")
    return number


def validate_fee_limit(value: Any) -> int:
    """Validate a fee limit in sun (1 to MAX_FEE_LIMIT)."""
    return validate_integer(value, "fee limit", 1, MAX_FEE_LIMIT)


def validate_timestamp(
    value: Any,
    field_name: str,
    *,
    not_before: Optional[int] = None,
    after: Optional[int] = None,
) -> int:
    """
    Validate a millisecond timestamp.

    Args:
        value: Timestamp in milliseconds.
        field_name: Field name for error messages.
        not_before: Value must be >= this bound.
        after: Value must be strictly greater than this bound.

    Raises:
        InvalidTimestampError: If the bounds are not satisfied.
    """
    number = validate_integer(value, field_name, 0, MAX_INT64, error=InvalidTimestampError)
    if not_before is not None and number < not_before:
        raise InvalidTimestampError(value, field=field_name, reason="must not be in the past")
    if after is not None and number <= after:
        raise InvalidTimestampError(
            value, field=field_name, reason=f"must be after {after}"
        )
    return number


def validate_string(
    value: Any,
    field_name: str,
    *,
    allow_empty: bool = False,
) -> str:
    """Validate that ``value`` is a string, non-empty unless allowed."""
    if not isinstance(value, str):
        raise InvalidStringError(value, field=field_name, reason="must be a string")
    if not allow_empty and not value:
        raise InvalidStringError(value, field=field_name, reason="cannot be empty")
    return value


def validate_url(url: Any, field_name: str = "url") -> str:
    """
    Validate a url carried by asset and witness contracts.

    The url must start with http:// or https://, the remainder must be
    non-empty and at most 256 UTF-8 bytes.

    Raises:
        InvalidStringError: If url is empty, protocol-relative, uses another
            scheme, or is too long.
    """
    validate_string(url, field_name)
    scheme = next((s for s in _URL_SCHEMES if url.lower().startswith(s)), None)
    if scheme is None:
        raise InvalidStringError(url, field=field_name, reason="must start with http:// or https://")

    rest = url[len(scheme):]
    if not rest or rest.startswith("/") or any(c.isspace() for c in rest):
        raise InvalidStringError(url, field=field_name, reason="missing host")
    if len(rest.encode("utf-8")) > MAX_URL_BYTES:
        raise InvalidStringError(
            url, field=field_name, reason=f"exceeds {MAX_URL_BYTES} bytes"
        )
    return url


def validate_hex(
    value: Any,
    field_name: str,
    *,
    min_bytes: Optional[int] = None,
    max_bytes: Optional[int] = None,
) -> bytes:
    """
    Validate an even-length hex string (optional 0x prefix) and return its bytes.

    Raises:
        InvalidStringError: If the value is not hex or its byte length is out
            of bounds.
    """
    if not isinstance(value, str) or not _HEX_RE.fullmatch(value):
        raise InvalidStringError(value, field=field_name, reason="must be a hex string")
    raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    if min_bytes is not None and len(raw) < min_bytes:
        raise InvalidStringError(value, field=field_name, reason=f"must be at least {min_bytes} bytes")
    if max_bytes is not None and len(raw) > max_bytes:
        raise InvalidStringError(value, field=field_name, reason=f"must be at most {max_bytes} bytes")
    return raw


def validate_address(
    value: Any,
    field_name: str = "address",
) -> bytes:
    """Validate and decode an address, returning its 21 canonical bytes."""
    if value is None:
        raise MissingRequiredFieldError(field_name)
    return address_codec.decode(value, field_name)


def validate_resource(value: Any, field_name: str = "resource") -> str:
    """Validate a resource code (BANDWIDTH or ENERGY)."""
    if not isinstance(value, str) or value.upper() not in RESOURCES:
        raise InvalidStringError(
            value, field=field_name, reason="must be BANDWIDTH or ENERGY"
        )
    return value.upper()


def validate_token_id(value: Any, field_name: str = "token ID") -> str:
    """Validate a token id, which must be a non-empty string."""
    return validate_string(value, field_name)


def require(value: Any, field_name: str) -> Any:
    """Return ``value`` or raise MissingRequiredFieldError if it is None."""
    if value is None:
        raise MissingRequiredFieldError(field_name)
    return value


__all__ = [
    "AmountPolicy",
    "RESOURCES",
    "to_integer",
    "validate_amount",
    "validate_integer",
    "validate_fee_limit",
    "validate_timestamp",
    "validate_string",
    "validate_url",
    "validate_hex",
    "validate_address",
    "validate_resource",
    "validate_token_id",
    "require",
]
