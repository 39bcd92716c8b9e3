"""Exceptions raised by the ledger node HTTP adapter."""

from __future__ import annotations

from typing import Any, Dict, Optional

from trontx.errors.base import TronTxError


class NodeError(TronTxError):
    """
    Raised when a ledger node request fails or returns an error payload.

    Example:
        >>> raise NodeError("Failed to fetch block: HTTP 503", endpoint="/wallet/getnowblock", status_code=503)
    """

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code="NODE_ERROR", details=details)
        self.endpoint = endpoint
        self.status_code = status_code
