"""
Contract kinds supported by the transaction builder.

Each kind has a stable wire tag (the ``ContractType`` enum value), a
protobuf message name for its parameter and the node HTTP endpoint that
builds the same transaction server-side.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Union

from trontx.protocol.schema import ENUMS


class ContractType(IntEnum):
    """Wire tags for contract messages."""

    ACCOUNT_CREATE = 0
    TRANSFER = 1
    TRANSFER_ASSET = 2
    VOTE_WITNESS = 4
    WITNESS_CREATE = 5
    ASSET_ISSUE = 6
    PARTICIPATE_ASSET_ISSUE = 9
    ACCOUNT_UPDATE = 10
    FREEZE_BALANCE = 11
    UNFREEZE_BALANCE = 12
    WITHDRAW_BALANCE = 13
    UPDATE_ASSET = 15
    PROPOSAL_CREATE = 16
    PROPOSAL_APPROVE = 17
    PROPOSAL_DELETE = 18
    SET_ACCOUNT_ID = 19
    CREATE_SMART_CONTRACT = 30
    TRIGGER_SMART_CONTRACT = 31
    UPDATE_SETTING = 33
    EXCHANGE_CREATE = 41
    EXCHANGE_INJECT = 42
    EXCHANGE_WITHDRAW = 43
    EXCHANGE_TRANSACTION = 44
    UPDATE_ENERGY_LIMIT = 45
    ACCOUNT_PERMISSION_UPDATE = 46
    CLEAR_ABI = 48
    UPDATE_BROKERAGE = 49
    FREEZE_BALANCE_V2 = 54
    UNFREEZE_BALANCE_V2 = 55
    WITHDRAW_EXPIRE_UNFREEZE = 56
    DELEGATE_RESOURCE = 57
    UNDELEGATE_RESOURCE = 58
    CANCEL_ALL_UNFREEZE_V2 = 59

    @property
    def message_name(self) -> str:
        """Protobuf message name of the contract parameter."""
        return _MESSAGE_NAMES[self.value]

    @property
    def endpoint(self) -> str:
        """Node endpoint (under /wallet/) that builds this kind server-side."""
        return ENDPOINTS[self]

    @classmethod
    def parse(cls, value: Union["ContractType", int, str]) -> "ContractType":
        """
        Resolve a kind from its enum, wire tag or name.

        Accepts "TRANSFER", "TransferContract" or 1 alike.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            if value in cls.__members__:
                return cls[value]
            for tag, name in _MESSAGE_NAMES.items():
                if name == value:
                    return cls(tag)
        raise ValueError(f"Unknown contract type: {value!r}")


_MESSAGE_NAMES: Dict[int, str] = {
    number: name for name, number in ENUMS["ContractType"]
}

ENDPOINTS: Dict[ContractType, str] = {
    ContractType.ACCOUNT_CREATE: "createaccount",
    ContractType.TRANSFER: "createtransaction",
    ContractType.TRANSFER_ASSET: "transferasset",
    ContractType.VOTE_WITNESS: "votewitnessaccount",
    ContractType.WITNESS_CREATE: "createwitness",
    ContractType.ASSET_ISSUE: "createassetissue",
    ContractType.PARTICIPATE_ASSET_ISSUE: "participateassetissue",
    ContractType.ACCOUNT_UPDATE: "updateaccount",
    ContractType.FREEZE_BALANCE: "freezebalance",
    ContractType.UNFREEZE_BALANCE: "unfreezebalance",
    ContractType.WITHDRAW_BALANCE: "withdrawbalance",
    ContractType.UPDATE_ASSET: "updateasset",
    ContractType.PROPOSAL_CREATE: "proposalcreate",
    ContractType.PROPOSAL_APPROVE: "proposalapprove",
    ContractType.PROPOSAL_DELETE: "proposaldelete",
    ContractType.SET_ACCOUNT_ID: "setaccountid",
    ContractType.CREATE_SMART_CONTRACT: "deploycontract",
    ContractType.TRIGGER_SMART_CONTRACT: "triggersmartcontract",
    ContractType.UPDATE_SETTING: "updatesetting",
    ContractType.EXCHANGE_CREATE: "exchangecreate",
    ContractType.EXCHANGE_INJECT: "exchangeinject",
    ContractType.EXCHANGE_WITHDRAW: "exchangewithdraw",
    ContractType.EXCHANGE_TRANSACTION: "exchangetransaction",
    ContractType.UPDATE_ENERGY_LIMIT: "updateenergylimit",
    ContractType.ACCOUNT_PERMISSION_UPDATE: "accountpermissionupdate",
    ContractType.CLEAR_ABI: "clearabi",
    ContractType.UPDATE_BROKERAGE: "updateBrokerage",
    ContractType.FREEZE_BALANCE_V2: "freezebalancev2",
    ContractType.UNFREEZE_BALANCE_V2: "unfreezebalancev2",
    ContractType.WITHDRAW_EXPIRE_UNFREEZE: "withdrawexpireunfreeze",
    ContractType.DELEGATE_RESOURCE: "delegateresource",
    ContractType.UNDELEGATE_RESOURCE: "undelegateresource",
    ContractType.CANCEL_ALL_UNFREEZE_V2: "cancelallunfreezev2",
}

__all__ = ["ContractType", "ENDPOINTS"]
