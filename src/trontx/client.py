"""
TransactionBuilder - high-level entry point.

Combines the contract message factory, the assembler, the mutator and the
constant call evaluator around a ledger node.

Example:
    >>> from trontx import TransactionBuilder
    >>> from trontx.config import Network, get_node_config
    >>> from trontx.node import HttpLedgerNodeClient
    >>>
    >>> node = HttpLedgerNodeClient(get_node_config(Network.NILE))
    >>> builder = TransactionBuilder(node, options={"default_address": "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL"})
    >>> envelope = await builder.send_trx("TVDGpn4hCSzJ5nkHPLetk8KQBtwaTppnkr", 1_000_000)
    >>> envelope = builder.alter_transaction(envelope, data="invoice 42")
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from trontx.builders import mutator
from trontx.builders.constant_call import ConstantCallEvaluator
from trontx.builders.contract_message import ContractMessage, ContractMessageFactory, OptionsLike
from trontx.builders.transaction import TransactionAssembler, TransactionEnvelope
from trontx.config import BuildOptions
from trontx.node import LedgerNodeClient
from trontx.protocol.contract_types import ContractType
from trontx.utils.logging import get_logger
from trontx.utils.validation import validate_fee_limit

_logger = get_logger(__name__)


class TransactionBuilder:
    """
    Builds unsigned transactions anchored to a node's latest block.

    With ``local_id_computation`` (the default) the transaction is encoded
    and hashed locally. Otherwise the node builds it and the result is
    cross-checked against the local encoding before it is returned.

    Args:
        node: Ledger node client.
        options: Default build options merged under per-call options.
        factory: Contract message factory.
        assembler: Transaction assembler.
    """

    def __init__(
        self,
        node: LedgerNodeClient,
        *,
        options: OptionsLike = None,
        factory: Optional[ContractMessageFactory] = None,
        assembler: Optional[TransactionAssembler] = None,
    ) -> None:
        self._node = node
        self._options = BuildOptions.coerce(options)
        self._factory = factory or ContractMessageFactory()
        self._assembler = assembler or TransactionAssembler()
        self._evaluator = ConstantCallEvaluator(node, self._factory)

    @property
    def factory(self) -> ContractMessageFactory:
        return self._factory

    @property
    def evaluator(self) -> ConstantCallEvaluator:
        return self._evaluator

    def _merge(self, options: OptionsLike) -> BuildOptions:
        if options is None:
            return self._options
        overrides = BuildOptions.coerce(options).model_dump(exclude_unset=True)
        return self._options.model_copy(update=overrides)

    # ========================================================================
    # Build and assemble
    # ========================================================================

    async def assemble(
        self,
        message: ContractMessage,
        options: OptionsLike = None,
        fee_limit: Optional[int] = None,
    ) -> TransactionEnvelope:
        """
        Assemble a prepared message locally or through the node.

        A ``fee_limit`` override replaces the message's suggested fee limit on
        both paths; the node is asked to build with it and the cross-check
        holds the node to it.
        """
        options = self._merge(options)
        if fee_limit is not None:
            message = replace(message, fee_limit=validate_fee_limit(fee_limit))
        if options.local_id_computation:
            block = await self._node.get_reference_block()
            return self._assembler.assemble(message, block)

        node_transaction = await self._node.create_transaction(message)
        envelope = self._assembler.cross_check(message, node_transaction)
        _logger.info(
            "Node-built transaction verified",
            extra={"tx_id": envelope.tx_id, "contract_type": message.contract_type.name},
        )
        return envelope

    async def build(
        self,
        kind: Union[ContractType, int, str],
        params: Mapping[str, Any],
        options: OptionsLike = None,
        fee_limit: Optional[int] = None,
    ) -> TransactionEnvelope:
        """
        Validate, build and assemble a transaction of any supported kind.

        Args:
            kind: Contract kind (enum, wire tag or name).
            params: Keyword arguments of the kind's factory method.
            options: Per-call build options.
            fee_limit: Optional fee limit override.

        Returns:
            Unsigned TransactionEnvelope.
        """
        options = self._merge(options)
        message = self._factory.build(kind, params, options)
        return await self.assemble(message, options, fee_limit)

    async def send_trx(self, to: Any, amount: Any, owner: Any = None, options: OptionsLike = None) -> TransactionEnvelope:
        options = self._merge(options)
        return await self.assemble(self._factory.send_trx(to, amount, owner, options), options)

    async def send_token(
        self,
        to: Any,
        amount: Any,
        token_id: Any,
        owner: Any = None,
        options: OptionsLike = None,
    ) -> TransactionEnvelope:
        options = self._merge(options)
        return await self.assemble(self._factory.send_token(to, amount, token_id, owner, options), options)

    async def trigger_smart_contract(
        self,
        contract: Any,
        function_selector: Optional[str] = None,
        parameters: Any = (),
        owner: Any = None,
        options: OptionsLike = None,
        **kwargs: Any,
    ) -> TransactionEnvelope:
        options = self._merge(options)
        message = self._factory.trigger_smart_contract(
            contract, function_selector, parameters, owner, options=options, **kwargs
        )
        return await self.assemble(message, options)

    async def create_smart_contract(self, options: OptionsLike = None, **kwargs: Any) -> TransactionEnvelope:
        options = self._merge(options)
        message = self._factory.create_smart_contract(options=options, **kwargs)
        return await self.assemble(message, options)

    # ========================================================================
    # Alteration
    # ========================================================================

    def extend_expiration(self, envelope: TransactionEnvelope, extension: Any) -> TransactionEnvelope:
        return mutator.extend_expiration(envelope, extension)

    def add_update_data(
        self,
        envelope: TransactionEnvelope,
        data: Any,
        data_format: str = "utf8",
    ) -> TransactionEnvelope:
        return mutator.attach_data(envelope, data, data_format)

    def alter_transaction(
        self,
        envelope: TransactionEnvelope,
        *,
        data: Optional[str] = None,
        data_format: str = "utf8",
        extension: Optional[Any] = None,
    ) -> TransactionEnvelope:
        return mutator.alter_transaction(envelope, data=data, data_format=data_format, extension=extension)

    def new_tx_id(self, envelope: TransactionEnvelope) -> TransactionEnvelope:
        return mutator.regenerate_id(envelope)

    # ========================================================================
    # Dry runs
    # ========================================================================

    async def trigger_constant_contract(self, *args: Any, options: OptionsLike = None, **kwargs: Any):
        """See ConstantCallEvaluator.evaluate."""
        return await self._evaluator.evaluate(*args, options=self._merge(options), **kwargs)

    async def estimate_energy(self, *args: Any, options: OptionsLike = None, **kwargs: Any):
        """See ConstantCallEvaluator.estimate_cost."""
        return await self._evaluator.estimate_cost(*args, options=self._merge(options), **kwargs)

    async def deploy_constant_contract(self, options: OptionsLike = None, **kwargs: Any):
        """See ConstantCallEvaluator.estimate_deployment_cost."""
        return await self._evaluator.estimate_deployment_cost(options=self._merge(options), **kwargs)


__all__ = ["TransactionBuilder"]
