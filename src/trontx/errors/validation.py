"""
Input validation exceptions.

Raised by the validators and the contract message factory before any
encoding takes place. Every subclass records the offending field, the
rejected value and a reason.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from trontx.errors.base import TronTxError


class InputValidationError(TronTxError):
    """
    Base exception for rejected caller input.

    Example:
        >>> raise InputValidationError("Invalid amount provided", field="amount")
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if reason:
            details["reason"] = reason

        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field
        self.value = value
        self.reason = reason


class InvalidAddressError(InputValidationError):
    """Raised when an address fails to decode."""

    def __init__(
        self,
        address: Any,
        *,
        field: str = "address",
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field} provided"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field=field, value=address, reason=reason)
        self.code = "INVALID_ADDRESS"
        self.address = address


class InvalidAmountError(InputValidationError):
    """Raised when an amount is negative, non-numeric or out of range."""

    def __init__(
        self,
        amount: Any,
        *,
        field: str = "amount",
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field} provided"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field=field, value=amount, reason=reason)
        self.code = "INVALID_AMOUNT"


class InvalidRangeError(InputValidationError):
    """Raised when an integer parameter falls outside its allowed bounds."""

    def __init__(
        self,
        value: Any,
        *,
        field: str,
        reason: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        if message is None:
            message = f"Invalid {field} provided"
            if reason:
                message += f" ({reason})"
        super().__init__(message, field=field, value=value, reason=reason)
        self.code = "INVALID_RANGE"


class InvalidTimestampError(InputValidationError):
    """Raised for sale windows and other time bounds that are not satisfied."""

    def __init__(
        self,
        value: Any,
        *,
        field: str,
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field} provided"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field=field, value=value, reason=reason)
        self.code = "INVALID_TIMESTAMP"


class InvalidStringError(InputValidationError):
    """Raised for empty names, malformed urls and bad hex strings."""

    def __init__(
        self,
        value: Any,
        *,
        field: str,
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field} provided"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field=field, value=value, reason=reason)
        self.code = "INVALID_STRING"


class MissingRequiredFieldError(InputValidationError):
    """Raised when a required parameter is absent and has no default."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Invalid {field} provided",
            field=field,
            reason="value is required",
        )
        self.code = "MISSING_FIELD"


class SameAccountError(InputValidationError):
    """
    Raised when the two parties of a transfer or delegation are the same.

    Example:
        >>> raise SameAccountError("Cannot transfer TRX to the same account", field="to")
    """

    def __init__(self, message: str, *, field: str, address: Any = None) -> None:
        super().__init__(message, field=field, value=address, reason="same account")
        self.code = "SAME_ACCOUNT"
