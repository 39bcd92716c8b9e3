"""
Post-assembly alteration of unsigned transactions.

Each operation takes a TransactionEnvelope and returns a new one with the
raw data changed and the id recomputed. Envelope state only moves forward:

    ASSEMBLED -> EXTENDED -> DATA_ATTACHED -> RESEALED

so the expiration cannot be extended once data is attached, and nothing but
``regenerate_id`` is allowed after a reseal. Signed envelopes are rejected.
"""

from __future__ import annotations

from typing import Any, Optional

from google.protobuf.message import DecodeError, Message

from trontx.builders.transaction import EnvelopeState, TransactionEnvelope, reseal
from trontx.constants import DATA_FIELD_FEE_SUN, MAX_INT64
from trontx.errors import StateMutationError
from trontx.utils.logging import get_logger
from trontx.utils.validation import validate_hex, validate_integer, validate_string

_logger = get_logger(__name__)

DATA_FORMATS = ("utf8", "hex")

__all__ = [
    "DATA_FIELD_FEE_SUN",
    "DATA_FORMATS",
    "extend_expiration",
    "attach_data",
    "regenerate_id",
    "alter_transaction",
]


def _check(envelope: TransactionEnvelope, operation: str, max_state: EnvelopeState) -> None:
    if envelope.is_signed:
        raise StateMutationError(
            "Cannot alter a signed transaction",
            operation=operation,
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        )
    if envelope.state > max_state:
        raise StateMutationError(
            f"Cannot {operation.replace('_', ' ')} after {envelope.state.name}",
            operation=operation,
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        )


def _parse(envelope: TransactionEnvelope, operation: str) -> Message:
    try:
        return envelope.raw
    except DecodeError as exc:
        raise StateMutationError(
            "Transaction raw data cannot be parsed",
            operation=operation,
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        ) from exc


def extend_expiration(envelope: TransactionEnvelope, extension: Any) -> TransactionEnvelope:
    """
    Push the expiration back by ``extension`` seconds.

    Args:
        envelope: Unsigned envelope in the ASSEMBLED or EXTENDED state.
        extension: Seconds to add, positive.

    Returns:
        Envelope in the EXTENDED state with a new id.

    Raises:
        InvalidRangeError: If the extension is not a positive integer.
        StateMutationError: If the envelope is signed, unparseable or past
            the EXTENDED state.
    """
    _check(envelope, "extend_expiration", EnvelopeState.EXTENDED)
    seconds = validate_integer(extension, "extension", 1, MAX_INT64 // 1000)
    raw = _parse(envelope, "extend_expiration")

    expiration = raw.expiration + seconds * 1000
    if expiration > MAX_INT64:
        raise StateMutationError(
            "Expiration overflows int64",
            operation="extend_expiration",
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        )
    raw.expiration = expiration

    extended = reseal(envelope, raw, EnvelopeState.EXTENDED)
    _logger.debug(
        "Extended transaction expiration",
        extra={"tx_id": extended.tx_id, "previous_tx_id": envelope.tx_id, "seconds": seconds},
    )
    return extended


def attach_data(
    envelope: TransactionEnvelope,
    payload: Any,
    data_format: str = "utf8",
) -> TransactionEnvelope:
    """
    Set the transaction's data (memo) field, replacing any previous value.

    The ledger charges DATA_FIELD_FEE_SUN for transactions carrying data;
    the fee is not deducted or checked here.

    Args:
        envelope: Unsigned envelope, at most DATA_ATTACHED.
        payload: Text (``utf8``) or hex string (``hex``).
        data_format: "utf8" or "hex".

    Returns:
        Envelope in the DATA_ATTACHED state with a new id.
    """
    _check(envelope, "attach_data", EnvelopeState.DATA_ATTACHED)
    if data_format not in DATA_FORMATS:
        raise StateMutationError(
            f"Unknown data format: {data_format}",
            operation="attach_data",
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        )
    if data_format == "hex":
        data = validate_hex(payload, "data", min_bytes=1)
    else:
        data = validate_string(payload, "data").encode("utf-8")

    raw = _parse(envelope, "attach_data")
    raw.data = data

    attached = reseal(envelope, raw, EnvelopeState.DATA_ATTACHED)
    _logger.debug(
        "Attached transaction data",
        extra={"tx_id": attached.tx_id, "previous_tx_id": envelope.tx_id, "size": len(data)},
    )
    return attached


def regenerate_id(envelope: TransactionEnvelope) -> TransactionEnvelope:
    """
    Recompute the id from the raw data and mark the envelope RESEALED.

    Idempotent: calling it again yields an equal envelope.
    """
    _check(envelope, "regenerate_id", EnvelopeState.RESEALED)
    raw = _parse(envelope, "regenerate_id")
    return reseal(envelope, raw, EnvelopeState.RESEALED)


def alter_transaction(
    envelope: TransactionEnvelope,
    *,
    data: Optional[str] = None,
    data_format: str = "utf8",
    extension: Optional[Any] = None,
) -> TransactionEnvelope:
    """
    Extend the expiration and/or attach data in one step.

    The extension is applied first, then the data.

    Raises:
        StateMutationError: If neither change is requested or a step is not
            allowed from the envelope's state.
    """
    if data is None and extension is None:
        raise StateMutationError(
            "Nothing to alter: give data or an extension",
            operation="alter_transaction",
            from_state=envelope.state.name,
            tx_id=envelope.tx_id,
        )
    if extension is not None:
        envelope = extend_expiration(envelope, extension)
    if data is not None:
        envelope = attach_data(envelope, data, data_format)
    return envelope
