"""
Wire schema for ledger transactions.

The ledger serializes transactions as protobuf messages in the ``protocol``
package. The subset needed to build and alter transactions is declared here
as tables and registered with the default descriptor pool at import time,
so the protobuf runtime handles varints, length prefixes, field ordering and
``google.protobuf.Any`` packing.

Usage:
    >>> from trontx.protocol.schema import message_class
    >>> Transfer = message_class("TransferContract")
    >>> Transfer(owner_address=b"A" * 21, amount=1).SerializeToString(deterministic=True)
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple, Type

from google.protobuf import any_pb2  # noqa: F401  registers google/protobuf/any.proto
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

PACKAGE = "protocol"
FILE_NAME = "trontx/protocol/transaction.proto"

# (name, number, type, repeated)
FieldSpec = Tuple[str, int, str, bool]


def _f(name: str, number: int, type_: str, repeated: bool = False) -> FieldSpec:
    return (name, number, type_, repeated)


_OWNER = _f("owner_address", 1, "bytes")

# Enums declared inside a message; their value names would otherwise clash
# with the contract message names in the package scope.
ENUM_SCOPES: Dict[str, str] = {"ContractType": "TransactionContract"}

ENUMS: Dict[str, Sequence[Tuple[str, int]]] = {
    "ContractType": (
        ("AccountCreateContract", 0),
        ("TransferContract", 1),
        ("TransferAssetContract", 2),
        ("VoteWitnessContract", 4),
        ("WitnessCreateContract", 5),
        ("AssetIssueContract", 6),
        ("WitnessUpdateContract", 8),
        ("ParticipateAssetIssueContract", 9),
        ("AccountUpdateContract", 10),
        ("FreezeBalanceContract", 11),
        ("UnfreezeBalanceContract", 12),
        ("WithdrawBalanceContract", 13),
        ("UpdateAssetContract", 15),
        ("ProposalCreateContract", 16),
        ("ProposalApproveContract", 17),
        ("ProposalDeleteContract", 18),
        ("SetAccountIdContract", 19),
        ("CreateSmartContract", 30),
        ("TriggerSmartContract", 31),
        ("UpdateSettingContract", 33),
        ("ExchangeCreateContract", 41),
        ("ExchangeInjectContract", 42),
        ("ExchangeWithdrawContract", 43),
        ("ExchangeTransactionContract", 44),
        ("UpdateEnergyLimitContract", 45),
        ("AccountPermissionUpdateContract", 46),
        ("ClearABIContract", 48),
        ("UpdateBrokerageContract", 49),
        ("FreezeBalanceV2Contract", 54),
        ("UnfreezeBalanceV2Contract", 55),
        ("WithdrawExpireUnfreezeContract", 56),
        ("DelegateResourceContract", 57),
        ("UnDelegateResourceContract", 58),
        ("CancelAllUnfreezeV2Contract", 59),
    ),
    "ResourceCode": (("BANDWIDTH", 0), ("ENERGY", 1), ("TRON_POWER", 2)),
    "AccountType": (("Normal", 0), ("AssetIssue", 1), ("Contract", 2)),
    "PermissionType": (("Owner", 0), ("Witness", 1), ("Active", 2)),
    "AbiEntryType": (
        ("UnknownEntryType", 0),
        ("Constructor", 1),
        ("Function", 2),
        ("Event", 3),
        ("Fallback", 4),
        ("Receive", 5),
        ("Error", 6),
    ),
    "AbiStateMutabilityType": (
        ("UnknownMutabilityType", 0),
        ("Pure", 1),
        ("View", 2),
        ("Nonpayable", 3),
        ("Payable", 4),
    ),
}

MESSAGES: Dict[str, List[FieldSpec]] = {
    # ------------------------------------------------------------------
    # Envelope
    # ------------------------------------------------------------------
    "TransactionContract": [
        _f("type", 1, "ContractType"),
        _f("parameter", 2, "google.protobuf.Any"),
        _f("provider", 3, "bytes"),
        _f("ContractName", 4, "bytes"),
        _f("Permission_id", 5, "int32"),
    ],
    "TransactionRaw": [
        _f("ref_block_bytes", 1, "bytes"),
        _f("ref_block_num", 3, "int64"),
        _f("ref_block_hash", 4, "bytes"),
        _f("expiration", 8, "int64"),
        _f("data", 10, "bytes"),
        _f("contract", 11, "TransactionContract", True),
        _f("scripts", 12, "bytes"),
        _f("timestamp", 14, "int64"),
        _f("fee_limit", 18, "int64"),
    ],
    "Transaction": [
        _f("raw_data", 1, "TransactionRaw"),
        _f("signature", 2, "bytes", True),
    ],
    # ------------------------------------------------------------------
    # Balance and account contracts
    # ------------------------------------------------------------------
    "TransferContract": [
        _OWNER,
        _f("to_address", 2, "bytes"),
        _f("amount", 3, "int64"),
    ],
    "TransferAssetContract": [
        _f("asset_name", 1, "bytes"),
        _f("owner_address", 2, "bytes"),
        _f("to_address", 3, "bytes"),
        _f("amount", 4, "int64"),
    ],
    "AccountCreateContract": [
        _OWNER,
        _f("account_address", 2, "bytes"),
        _f("type", 3, "AccountType"),
    ],
    "AccountUpdateContract": [
        _f("account_name", 1, "bytes"),
        _f("owner_address", 2, "bytes"),
    ],
    "SetAccountIdContract": [
        _f("account_id", 1, "bytes"),
        _f("owner_address", 2, "bytes"),
    ],
    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------
    "FrozenSupply": [
        _f("frozen_amount", 1, "int64"),
        _f("frozen_days", 2, "int64"),
    ],
    "AssetIssueContract": [
        _OWNER,
        _f("name", 2, "bytes"),
        _f("abbr", 3, "bytes"),
        _f("total_supply", 4, "int64"),
        _f("frozen_supply", 5, "FrozenSupply", True),
        _f("trx_num", 6, "int32"),
        _f("precision", 7, "int32"),
        _f("num", 8, "int32"),
        _f("start_time", 9, "int64"),
        _f("end_time", 10, "int64"),
        _f("vote_score", 16, "int32"),
        _f("description", 20, "bytes"),
        _f("url", 21, "bytes"),
        _f("free_asset_net_limit", 22, "int64"),
        _f("public_free_asset_net_limit", 23, "int64"),
    ],
    "ParticipateAssetIssueContract": [
        _OWNER,
        _f("to_address", 2, "bytes"),
        _f("asset_name", 3, "bytes"),
        _f("amount", 4, "int64"),
    ],
    "UpdateAssetContract": [
        _OWNER,
        _f("description", 2, "bytes"),
        _f("url", 3, "bytes"),
        _f("new_limit", 4, "int64"),
        _f("new_public_limit", 5, "int64"),
    ],
    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------
    "ProposalParameter": [
        _f("key", 1, "int64"),
        _f("value", 2, "int64"),
    ],
    "ProposalCreateContract": [
        _OWNER,
        _f("parameters", 2, "ProposalParameter", True),
    ],
    "ProposalApproveContract": [
        _OWNER,
        _f("proposal_id", 2, "int64"),
        _f("is_add_approval", 3, "bool"),
    ],
    "ProposalDeleteContract": [
        _OWNER,
        _f("proposal_id", 2, "int64"),
    ],
    "WitnessCreateContract": [
        _OWNER,
        _f("url", 2, "bytes"),
    ],
    "Vote": [
        _f("vote_address", 1, "bytes"),
        _f("vote_count", 2, "int64"),
    ],
    "VoteWitnessContract": [
        _OWNER,
        _f("votes", 2, "Vote", True),
        _f("support", 3, "bool"),
    ],
    "UpdateBrokerageContract": [
        _OWNER,
        _f("brokerage", 2, "int32"),
    ],
    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    "FreezeBalanceContract": [
        _OWNER,
        _f("frozen_balance", 2, "int64"),
        _f("frozen_duration", 3, "int64"),
        _f("resource", 10, "ResourceCode"),
        _f("receiver_address", 15, "bytes"),
    ],
    "UnfreezeBalanceContract": [
        _OWNER,
        _f("resource", 10, "ResourceCode"),
        _f("receiver_address", 13, "bytes"),
    ],
    "WithdrawBalanceContract": [_OWNER],
    "FreezeBalanceV2Contract": [
        _OWNER,
        _f("frozen_balance", 2, "int64"),
        _f("resource", 3, "ResourceCode"),
    ],
    "UnfreezeBalanceV2Contract": [
        _OWNER,
        _f("unfreeze_balance", 2, "int64"),
        _f("resource", 3, "ResourceCode"),
    ],
    "WithdrawExpireUnfreezeContract": [_OWNER],
    "CancelAllUnfreezeV2Contract": [_OWNER],
    "DelegateResourceContract": [
        _OWNER,
        _f("resource", 2, "ResourceCode"),
        _f("balance", 3, "int64"),
        _f("receiver_address", 4, "bytes"),
        _f("lock", 5, "bool"),
        _f("lock_period", 6, "int64"),
    ],
    "UnDelegateResourceContract": [
        _OWNER,
        _f("resource", 2, "ResourceCode"),
        _f("balance", 3, "int64"),
        _f("receiver_address", 4, "bytes"),
    ],
    # ------------------------------------------------------------------
    # Smart contracts
    # ------------------------------------------------------------------
    "AbiParam": [
        _f("indexed", 1, "bool"),
        _f("name", 2, "string"),
        _f("type", 3, "string"),
    ],
    "AbiEntry": [
        _f("anonymous", 1, "bool"),
        _f("constant", 2, "bool"),
        _f("name", 3, "string"),
        _f("inputs", 4, "AbiParam", True),
        _f("outputs", 5, "AbiParam", True),
        _f("type", 6, "AbiEntryType"),
        _f("payable", 7, "bool"),
        _f("stateMutability", 8, "AbiStateMutabilityType"),
    ],
    "Abi": [
        _f("entrys", 1, "AbiEntry", True),
    ],
    "SmartContract": [
        _f("origin_address", 1, "bytes"),
        _f("contract_address", 2, "bytes"),
        _f("abi", 3, "Abi"),
        _f("bytecode", 4, "bytes"),
        _f("call_value", 5, "int64"),
        _f("consume_user_resource_percent", 6, "int64"),
        _f("name", 7, "string"),
        _f("origin_energy_limit", 8, "int64"),
        _f("code_hash", 9, "bytes"),
        _f("trx_hash", 10, "bytes"),
        _f("version", 11, "int32"),
    ],
    "CreateSmartContract": [
        _OWNER,
        _f("new_contract", 2, "SmartContract"),
        _f("call_token_value", 3, "int64"),
        _f("token_id", 4, "int64"),
    ],
    "TriggerSmartContract": [
        _OWNER,
        _f("contract_address", 2, "bytes"),
        _f("call_value", 3, "int64"),
        _f("data", 4, "bytes"),
        _f("call_token_value", 5, "int64"),
        _f("token_id", 6, "int64"),
    ],
    "ClearABIContract": [
        _OWNER,
        _f("contract_address", 2, "bytes"),
    ],
    "UpdateSettingContract": [
        _OWNER,
        _f("contract_address", 2, "bytes"),
        _f("consume_user_resource_percent", 3, "int64"),
    ],
    "UpdateEnergyLimitContract": [
        _OWNER,
        _f("contract_address", 2, "bytes"),
        _f("origin_energy_limit", 3, "int64"),
    ],
    # ------------------------------------------------------------------
    # Exchanges
    # ------------------------------------------------------------------
    "ExchangeCreateContract": [
        _OWNER,
        _f("first_token_id", 2, "bytes"),
        _f("first_token_balance", 3, "int64"),
        _f("second_token_id", 4, "bytes"),
        _f("second_token_balance", 5, "int64"),
    ],
    "ExchangeInjectContract": [
        _OWNER,
        _f("exchange_id", 2, "int64"),
        _f("token_id", 3, "bytes"),
        _f("quant", 4, "int64"),
    ],
    "ExchangeWithdrawContract": [
        _OWNER,
        _f("exchange_id", 2, "int64"),
        _f("token_id", 3, "bytes"),
        _f("quant", 4, "int64"),
    ],
    "ExchangeTransactionContract": [
        _OWNER,
        _f("exchange_id", 2, "int64"),
        _f("token_id", 3, "bytes"),
        _f("quant", 4, "int64"),
        _f("expected", 5, "int64"),
    ],
    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------
    "Key": [
        _f("address", 1, "bytes"),
        _f("weight", 2, "int64"),
    ],
    "Permission": [
        _f("type", 1, "PermissionType"),
        _f("id", 2, "int32"),
        _f("permission_name", 3, "string"),
        _f("threshold", 4, "int64"),
        _f("parent_id", 5, "int32"),
        _f("operations", 6, "bytes"),
        _f("keys", 7, "Key", True),
    ],
    "AccountPermissionUpdateContract": [
        _OWNER,
        _f("owner", 2, "Permission"),
        _f("witness", 3, "Permission"),
        _f("actives", 4, "Permission", True),
    ],
}

_SCALARS = {
    "bytes": descriptor_pb2.FieldDescriptorProto.TYPE_BYTES,
    "string": descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
    "int64": descriptor_pb2.FieldDescriptorProto.TYPE_INT64,
    "int32": descriptor_pb2.FieldDescriptorProto.TYPE_INT32,
    "bool": descriptor_pb2.FieldDescriptorProto.TYPE_BOOL,
}


def _add_enum(container, name: str, values: Sequence[Tuple[str, int]]) -> None:
    enum = container.add(name=name)
    for value_name, number in values:
        enum.value.add(name=value_name, number=number)


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name=FILE_NAME,
        package=PACKAGE,
        syntax="proto3",
        dependency=["google/protobuf/any.proto"],
    )
    for enum_name, values in ENUMS.items():
        if enum_name not in ENUM_SCOPES:
            _add_enum(proto.enum_type, enum_name, values)

    for message_name, fields in MESSAGES.items():
        message = proto.message_type.add(name=message_name)
        for enum_name, scope in ENUM_SCOPES.items():
            if scope == message_name:
                _add_enum(message.enum_type, enum_name, ENUMS[enum_name])
        for name, number, type_, repeated in fields:
            field = message.field.add(
                name=name,
                number=number,
                label=(
                    descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
                    if repeated
                    else descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
                ),
            )
            if type_ in _SCALARS:
                field.type = _SCALARS[type_]
            elif type_ in ENUMS:
                field.type = descriptor_pb2.FieldDescriptorProto.TYPE_ENUM
                scope = ENUM_SCOPES.get(type_)
                field.type_name = f".{PACKAGE}.{scope}.{type_}" if scope else f".{PACKAGE}.{type_}"
            elif "." in type_:
                field.type = descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE
                field.type_name = f".{type_}"
            else:
                field.type = descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE
                field.type_name = f".{PACKAGE}.{type_}"
    return proto


def _register() -> Dict[str, Type[Message]]:
    pool = descriptor_pool.Default()
    try:
        file_descriptor = pool.FindFileByName(FILE_NAME)
    except KeyError:
        file_descriptor = pool.AddSerializedFile(_build_file().SerializeToString())
        if not hasattr(file_descriptor, "message_types_by_name"):
            file_descriptor = pool.FindFileByName(FILE_NAME)
    return {
        name: message_factory.GetMessageClass(descriptor)
        for name, descriptor in file_descriptor.message_types_by_name.items()
    }


_CLASSES = _register()


def message_class(name: str) -> Type[Message]:
    """Return the generated message class for a schema message name."""
    try:
        return _CLASSES[name]
    except KeyError:
        raise KeyError(f"Unknown protocol message: {name}") from None


def type_url(name: str) -> str:
    """Return the ``google.protobuf.Any`` type url for a schema message."""
    return f"type.googleapis.com/{PACKAGE}.{name}"


Transaction = message_class("Transaction")
TransactionRaw = message_class("TransactionRaw")
TransactionContract = message_class("TransactionContract")

__all__ = [
    "PACKAGE",
    "ENUMS",
    "MESSAGES",
    "message_class",
    "type_url",
    "Transaction",
    "TransactionRaw",
    "TransactionContract",
]
