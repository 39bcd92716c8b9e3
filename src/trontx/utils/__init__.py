"""Utilities for the trontx SDK."""

from trontx.utils import address
from trontx.utils.logging import configure_logging, get_logger
from trontx.utils.validation import (
    AmountPolicy,
    validate_address,
    validate_amount,
    validate_hex,
    validate_integer,
    validate_resource,
    validate_string,
    validate_timestamp,
    validate_url,
)

__all__ = [
    "address",
    "configure_logging",
    "get_logger",
    "AmountPolicy",
    "validate_address",
    "validate_amount",
    "validate_hex",
    "validate_integer",
    "validate_resource",
    "validate_string",
    "validate_timestamp",
    "validate_url",
]
