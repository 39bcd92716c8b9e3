"""
Base exception class for the trontx SDK.

All builder exceptions inherit from TronTxError, which carries a
machine-readable code, an optional transaction id and a details mapping.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TronTxError(Exception):
    """
    Base exception for all transaction-builder errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "INVALID_ADDRESS").
        tx_id: Optional transaction id related to the error.
        details: Optional dictionary with additional error context.

    Example:
        >>> raise TronTxError(
        ...     "Envelope is signed",
        ...     code="STATE_MUTATION_ERROR",
        ...     tx_id="9f2c...",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRONTX_ERROR",
        tx_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.tx_id = tx_id
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        parts = [f"[{self.code}] {self.message}"]
        if self.tx_id:
            parts.append(f"(tx: {self.tx_id[:10]}...)")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"tx_id={self.tx_id!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "tx_id": self.tx_id,
            "details": self.details,
        }
