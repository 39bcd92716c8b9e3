"""Exceptions raised while altering an assembled transaction."""

from __future__ import annotations

from typing import Any, Dict, Optional

from trontx.errors.base import TronTxError


class StateMutationError(TronTxError):
    """
    Raised when a mutation is applied to an envelope that does not allow it.

    Covers signed envelopes, malformed raw bytes and backwards transitions
    (for example extending the expiration after data was attached).
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        from_state: Optional[str] = None,
        tx_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        if from_state:
            details["from_state"] = from_state
        super().__init__(
            message,
            code="STATE_MUTATION_ERROR",
            tx_id=tx_id,
            details=details,
        )
        self.operation = operation
        self.from_state = from_state
