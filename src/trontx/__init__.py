"""
trontx - transaction builder and contract-call encoding for the TRON ledger.

Validates operation parameters, encodes them as ledger contract messages,
assembles and hashes unsigned transactions, alters them before signing and
encodes/decodes smart contract call parameters.

Example:
    >>> from trontx import ContractMessageFactory, ReferenceBlock, TransactionAssembler
    >>> message = ContractMessageFactory().send_trx(to, 1_000_000, owner)
    >>> envelope = TransactionAssembler().assemble(message, block)
    >>> envelope.tx_id
"""

from trontx.abi import ABIEntry, ABIParam, FlatParamCodec, StructuredParamCodec, function_selector
from trontx.builders import (
    ConstantCallEvaluator,
    ContractMessage,
    ContractMessageFactory,
    EnvelopeState,
    ReferenceBlock,
    TransactionAssembler,
    TransactionEnvelope,
    alter_transaction,
    attach_data,
    extend_expiration,
    regenerate_id,
)
from trontx.client import TransactionBuilder
from trontx.config import BuildOptions, Network, NodeConfig, get_node_config
from trontx.errors import (
    EncodingError,
    InputValidationError,
    NodeError,
    StateMutationError,
    TransactionIdMismatchError,
    TronTxError,
)
from trontx.node import HttpLedgerNodeClient, LedgerNodeClient
from trontx.protocol import ContractType
from trontx.version import __version__

__all__ = [
    "__version__",
    "TransactionBuilder",
    "ContractMessage",
    "ContractMessageFactory",
    "TransactionAssembler",
    "TransactionEnvelope",
    "ReferenceBlock",
    "EnvelopeState",
    "extend_expiration",
    "attach_data",
    "regenerate_id",
    "alter_transaction",
    "ConstantCallEvaluator",
    "ABIEntry",
    "ABIParam",
    "FlatParamCodec",
    "StructuredParamCodec",
    "function_selector",
    "ContractType",
    "BuildOptions",
    "NodeConfig",
    "Network",
    "get_node_config",
    "LedgerNodeClient",
    "HttpLedgerNodeClient",
    "TronTxError",
    "InputValidationError",
    "EncodingError",
    "TransactionIdMismatchError",
    "StateMutationError",
    "NodeError",
]
