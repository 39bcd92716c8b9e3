"""Ledger wire schema and contract kinds."""

from trontx.protocol.contract_types import ENDPOINTS, ContractType
from trontx.protocol.schema import (
    Transaction,
    TransactionContract,
    TransactionRaw,
    message_class,
    type_url,
)

__all__ = [
    "ContractType",
    "ENDPOINTS",
    "Transaction",
    "TransactionContract",
    "TransactionRaw",
    "message_class",
    "type_url",
]
