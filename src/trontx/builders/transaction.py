"""
Transaction assembly.

Wraps a ContractMessage into the ledger's ``Transaction.raw`` envelope,
anchored to a reference block, serializes it deterministically and derives
the transaction id as ``sha256(raw_data)``.

Example:
    >>> block = ReferenceBlock(number=51_345_678, block_id="00000000030f..." , timestamp=1_700_000_000_000)
    >>> envelope = TransactionAssembler().assemble(message, block)
    >>> len(envelope.tx_id)
    64
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple

from google.protobuf import any_pb2
from google.protobuf.message import DecodeError, Message
from web3 import Web3

from trontx.builders.contract_message import ContractMessage
from trontx.constants import ADDRESS_PREFIX_HEX, EXPIRATION_WINDOW_MS
from trontx.errors import TransactionIdMismatchError
from trontx.protocol.contract_types import ContractType
from trontx.protocol.schema import TransactionContract, TransactionRaw, message_class
from trontx.utils.logging import get_logger
from trontx.utils.validation import validate_fee_limit

_logger = get_logger(__name__)


def compute_tx_id(raw_data: bytes) -> str:
    """Return the transaction id (hex sha256 of the serialized raw data)."""
    return hashlib.sha256(raw_data).hexdigest()


def derive_contract_address(tx_id: str, owner_address: bytes) -> str:
    """Return the hex address of a contract created by ``tx_id``."""
    digest = Web3.keccak(bytes.fromhex(tx_id) + owner_address)
    return ADDRESS_PREFIX_HEX + bytes(digest[12:]).hex()


def serialize_raw(raw: Message) -> bytes:
    return raw.SerializeToString(deterministic=True)


def message_to_dict(message: Message) -> Dict[str, Any]:
    """
    Render a protobuf message the way the node's JSON API does.

    Bytes become hex, enums become their names and ``Any`` parameters are
    unpacked into ``{"value": ..., "type_url": ...}``.
    """
    result: Dict[str, Any] = {}
    for field, value in message.ListFields():
        if field.label == field.LABEL_REPEATED:
            result[field.name] = [_field_value(field, v) for v in value]
        else:
            result[field.name] = _field_value(field, value)
    return result


def _field_value(field: Any, value: Any) -> Any:
    if field.type == field.TYPE_BYTES:
        return value.hex()
    if field.type == field.TYPE_ENUM:
        enum_value = field.enum_type.values_by_number.get(value)
        return enum_value.name if enum_value is not None else value
    if field.type == field.TYPE_MESSAGE:
        if field.message_type.full_name == "google.protobuf.Any":
            name = value.type_url.rsplit("/", 1)[-1].split(".")[-1]
            inner = message_class(name)()
            value.Unpack(inner)
            return {"value": message_to_dict(inner), "type_url": value.type_url}
        return message_to_dict(value)
    return value


@dataclass(frozen=True)
class ReferenceBlock:
    """
    Recent block a transaction is anchored to.

    Attributes:
        number: Block height.
        block_id: Block id as 64 hex characters.
        timestamp: Block timestamp in milliseconds.
    """

    number: int
    block_id: str
    timestamp: int

    @property
    def ref_block_bytes(self) -> bytes:
        return self.number.to_bytes(8, "big")[6:8]

    @property
    def ref_block_hash(self) -> bytes:
        return bytes.fromhex(self.block_id)[8:16]

    @classmethod
    def from_node(cls, payload: Mapping[str, Any]) -> "ReferenceBlock":
        """Build from a ``getnowblock`` / ``getblock`` response."""
        raw = payload["block_header"]["raw_data"]
        return cls(
            number=int(raw.get("number", 0)),
            block_id=payload["blockID"],
            timestamp=int(raw["timestamp"]),
        )


class EnvelopeState(IntEnum):
    """
    Mutation state of an envelope. Transitions only move forward.

    ASSEMBLED -> EXTENDED -> DATA_ATTACHED -> RESEALED
    """

    ASSEMBLED = 0
    EXTENDED = 1
    DATA_ATTACHED = 2
    RESEALED = 3


@dataclass(frozen=True)
class TransactionEnvelope:
    """
    An assembled, unsigned transaction.

    ``tx_id`` always equals sha256 of ``raw_data``; every operation that
    changes the raw bytes returns a new envelope with a fresh id.
    """

    tx_id: str
    raw_data: bytes
    contract_type: ContractType
    state: EnvelopeState = EnvelopeState.ASSEMBLED
    signature: Tuple[str, ...] = ()
    contract_address: Optional[str] = None

    @property
    def raw(self) -> Message:
        """Parsed ``Transaction.raw`` message (a fresh copy)."""
        return TransactionRaw.FromString(self.raw_data)

    @property
    def raw_data_hex(self) -> str:
        return self.raw_data.hex()

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)

    @property
    def expiration(self) -> int:
        return self.raw.expiration

    @property
    def timestamp(self) -> int:
        return self.raw.timestamp

    @property
    def fee_limit(self) -> int:
        return self.raw.fee_limit

    @property
    def data(self) -> bytes:
        return self.raw.data

    @property
    def ref_block_bytes(self) -> bytes:
        return self.raw.ref_block_bytes

    @property
    def ref_block_hash(self) -> bytes:
        return self.raw.ref_block_hash

    @property
    def permission_id(self) -> int:
        return self.raw.contract[0].Permission_id

    @property
    def parameter(self) -> Message:
        """Unpacked contract parameter message."""
        inner = message_class(self.contract_type.message_name)()
        self.raw.contract[0].parameter.Unpack(inner)
        return inner

    def to_dict(self) -> Dict[str, Any]:
        """Node JSON representation of the transaction."""
        data: Dict[str, Any] = {
            "visible": False,
            "txID": self.tx_id,
            "raw_data": message_to_dict(self.raw),
            "raw_data_hex": self.raw_data_hex,
        }
        if self.signature:
            data["signature"] = list(self.signature)
        if self.contract_address:
            data["contract_address"] = self.contract_address
        return data

    @classmethod
    def from_node(cls, payload: Mapping[str, Any]) -> "TransactionEnvelope":
        """
        Load a transaction returned by a node.

        Raises:
            TransactionIdMismatchError: If ``txID`` is not the sha256 of
                ``raw_data_hex``.
        """
        if "transaction" in payload:
            payload = payload["transaction"]
        raw_data = bytes.fromhex(payload["raw_data_hex"])
        tx_id = compute_tx_id(raw_data)
        if payload.get("txID") and payload["txID"] != tx_id:
            raise TransactionIdMismatchError(
                expected=tx_id,
                actual=payload["txID"],
                reason="txID is not sha256(raw_data)",
            )
        try:
            raw = TransactionRaw.FromString(raw_data)
        except DecodeError as exc:
            raise TransactionIdMismatchError(
                expected=tx_id, actual=payload.get("txID", ""), reason=f"unparseable raw data: {exc}"
            ) from exc
        return cls(
            tx_id=tx_id,
            raw_data=raw_data,
            contract_type=ContractType(raw.contract[0].type),
            signature=tuple(payload.get("signature") or ()),
            contract_address=payload.get("contract_address"),
        )


class TransactionAssembler:
    """
    Builds transaction envelopes from contract messages.

    Args:
        expiration_window_ms: Added to the reference block timestamp to get
            the expiration.
    """

    def __init__(self, expiration_window_ms: int = EXPIRATION_WINDOW_MS) -> None:
        self._expiration_window_ms = expiration_window_ms

    def assemble(
        self,
        message: ContractMessage,
        reference_block: ReferenceBlock,
        fee_limit: Optional[int] = None,
    ) -> TransactionEnvelope:
        """
        Assemble and hash a transaction.

        Args:
            message: Validated contract message.
            reference_block: Block to anchor to.
            fee_limit: Overrides the message's suggested fee limit, 1 to
                MAX_FEE_LIMIT sun.

        Returns:
            Envelope in the ASSEMBLED state.

        Raises:
            InvalidRangeError: If the fee limit override is out of bounds.
        """
        if fee_limit is not None:
            fee_limit = validate_fee_limit(fee_limit)
        envelope = self._seal(
            message,
            ref_block_bytes=reference_block.ref_block_bytes,
            ref_block_hash=reference_block.ref_block_hash,
            expiration=reference_block.timestamp + self._expiration_window_ms,
            timestamp=reference_block.timestamp,
            fee_limit=fee_limit if fee_limit is not None else message.fee_limit,
        )
        _logger.debug(
            "Assembled transaction",
            extra={"tx_id": envelope.tx_id, "contract_type": message.contract_type.name},
        )
        return envelope

    def cross_check(
        self,
        message: ContractMessage,
        node_transaction: Mapping[str, Any],
    ) -> TransactionEnvelope:
        """
        Verify a node-built transaction against the local encoding.

        The message is re-assembled locally with the node's anchor fields
        (reference block, expiration, timestamp) and the raw bytes are
        compared. The fee limit is the message's when it carries one, so a
        node that drops or changes it fails the check.

        Raises:
            TransactionIdMismatchError: If the node's id is not the hash of its
                raw data, or the local bytes differ from the node's.
        """
        remote = TransactionEnvelope.from_node(node_transaction)
        raw = remote.raw
        local = self._seal(
            message,
            ref_block_bytes=raw.ref_block_bytes,
            ref_block_hash=raw.ref_block_hash,
            expiration=raw.expiration,
            timestamp=raw.timestamp,
            fee_limit=message.fee_limit if message.fee_limit is not None else raw.fee_limit or None,
        )
        if local.raw_data != remote.raw_data:
            _logger.warning(
                "Node transaction differs from local encoding",
                extra={"local_tx_id": local.tx_id, "node_tx_id": remote.tx_id},
            )
            raise TransactionIdMismatchError(
                expected=local.tx_id,
                actual=remote.tx_id,
                reason="node transaction differs from local encoding",
            )
        return local

    def _seal(
        self,
        message: ContractMessage,
        *,
        ref_block_bytes: bytes,
        ref_block_hash: bytes,
        expiration: int,
        timestamp: int,
        fee_limit: Optional[int],
    ) -> TransactionEnvelope:
        parameter = any_pb2.Any()
        parameter.Pack(message.to_protobuf())
        contract = TransactionContract(type=int(message.contract_type), parameter=parameter)
        if message.permission_id:
            contract.Permission_id = message.permission_id

        raw = TransactionRaw(
            ref_block_bytes=ref_block_bytes,
            ref_block_hash=ref_block_hash,
            expiration=expiration,
            timestamp=timestamp,
            contract=[contract],
        )
        if fee_limit:
            raw.fee_limit = fee_limit

        raw_data = serialize_raw(raw)
        tx_id = compute_tx_id(raw_data)
        return TransactionEnvelope(
            tx_id=tx_id,
            raw_data=raw_data,
            contract_type=message.contract_type,
            contract_address=_contract_address(message.contract_type, tx_id, message.owner_address),
        )


def _contract_address(contract_type: ContractType, tx_id: str, owner_address: bytes) -> Optional[str]:
    if contract_type is not ContractType.CREATE_SMART_CONTRACT:
        return None
    return derive_contract_address(tx_id, owner_address)


def reseal(
    envelope: TransactionEnvelope,
    raw: Message,
    state: EnvelopeState,
) -> TransactionEnvelope:
    """Return a copy of ``envelope`` with new raw data, id and state."""
    raw_data = serialize_raw(raw)
    tx_id = compute_tx_id(raw_data)
    contract_address = envelope.contract_address
    if envelope.contract_type is ContractType.CREATE_SMART_CONTRACT:
        contract_address = derive_contract_address(tx_id, envelope.parameter.owner_address)
    return replace(
        envelope,
        tx_id=tx_id,
        raw_data=raw_data,
        state=state,
        contract_address=contract_address,
    )


__all__ = [
    "ReferenceBlock",
    "EnvelopeState",
    "TransactionEnvelope",
    "TransactionAssembler",
    "compute_tx_id",
    "derive_contract_address",
    "message_to_dict",
    "reseal",
]
