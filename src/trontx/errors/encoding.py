"""Encoding and transaction-id exceptions."""

from __future__ import annotations

from typing import Any, Dict, Optional

from trontx.errors.base import TronTxError


class EncodingError(TronTxError):
    """
    Raised when ABI or wire encoding fails.

    Example:
        >>> raise EncodingError("Tuple types require structured encoding", abi_type="(uint256,address)")
    """

    def __init__(
        self,
        message: str,
        *,
        abi_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if abi_type:
            details["abi_type"] = abi_type
        super().__init__(message, code="ENCODING_ERROR", details=details)
        self.abi_type = abi_type


class TransactionIdMismatchError(TronTxError):
    """Raised when a node-built transaction disagrees with the local encoding."""

    def __init__(
        self,
        expected: str,
        actual: str,
        *,
        reason: Optional[str] = None,
    ) -> None:
        message = "Transaction id does not match raw data"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            code="TX_ID_MISMATCH",
            tx_id=actual,
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual
