"""
Exception hierarchy for the trontx SDK.

TronTxError
├── InputValidationError
│   ├── InvalidAddressError
│   ├── InvalidAmountError
│   ├── InvalidRangeError
│   ├── InvalidTimestampError
│   ├── InvalidStringError
│   ├── MissingRequiredFieldError
│   └── SameAccountError
├── EncodingError
├── TransactionIdMismatchError
├── StateMutationError
└── NodeError
"""

from trontx.errors.base import TronTxError
from trontx.errors.encoding import EncodingError, TransactionIdMismatchError
from trontx.errors.mutation import StateMutationError
from trontx.errors.node import NodeError
from trontx.errors.validation import (
    InputValidationError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidRangeError,
    InvalidStringError,
    InvalidTimestampError,
    MissingRequiredFieldError,
    SameAccountError,
)

__all__ = [
    "TronTxError",
    "InputValidationError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidRangeError",
    "InvalidTimestampError",
    "InvalidStringError",
    "MissingRequiredFieldError",
    "SameAccountError",
    "EncodingError",
    "TransactionIdMismatchError",
    "StateMutationError",
    "NodeError",
]
