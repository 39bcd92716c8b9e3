"""Contract message, transaction and dry-run builders."""

from trontx.builders.contract_message import ContractMessage, ContractMessageFactory
from trontx.builders.transaction import (
    EnvelopeState,
    ReferenceBlock,
    TransactionAssembler,
    TransactionEnvelope,
    compute_tx_id,
    derive_contract_address,
)
from trontx.builders.mutator import (
    alter_transaction,
    attach_data,
    extend_expiration,
    regenerate_id,
)
from trontx.builders.constant_call import (
    ConstantCallEvaluator,
    ConstantCallResult,
    CostEstimate,
)

__all__ = [
    "ContractMessage",
    "ContractMessageFactory",
    "EnvelopeState",
    "ReferenceBlock",
    "TransactionAssembler",
    "TransactionEnvelope",
    "compute_tx_id",
    "derive_contract_address",
    "alter_transaction",
    "attach_data",
    "extend_expiration",
    "regenerate_id",
    "ConstantCallEvaluator",
    "ConstantCallResult",
    "CostEstimate",
]
