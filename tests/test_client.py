"""
Tests for TransactionBuilder.

Tests cover:
- Local assembly anchored to the node's latest block
- Node-built transactions verified against the local encoding
- Option merging
- Alteration and dry-run passthroughs
"""

from unittest.mock import AsyncMock

import pytest

from trontx import TransactionBuilder
from trontx.builders.transaction import EnvelopeState, TransactionAssembler
from trontx.errors import InvalidRangeError, SameAccountError, TransactionIdMismatchError
from trontx.protocol.contract_types import ContractType


@pytest.fixture
def node(reference_block) -> AsyncMock:
    node = AsyncMock()
    node.get_reference_block.return_value = reference_block
    node.trigger_constant_contract.return_value = {"result": {"result": True}, "energy_used": 77}
    node.estimate_energy.return_value = {"result": {"result": True}, "energy_required": 88}
    return node


@pytest.fixture
def builder(node, factory, owner) -> TransactionBuilder:
    return TransactionBuilder(node, options={"default_address": owner}, factory=factory)


# =============================================================================
# Local assembly
# =============================================================================


class TestLocalAssembly:
    """Transactions built and hashed locally."""

    @pytest.mark.asyncio
    async def test_send_trx(self, builder, node, receiver, assembler, factory, owner, reference_block) -> None:
        envelope = await builder.send_trx(receiver, 1_000_000)

        expected = assembler.assemble(factory.send_trx(receiver, 1_000_000, owner), reference_block)
        assert envelope == expected
        node.get_reference_block.assert_awaited_once()
        node.create_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_build_by_kind(self, builder, receiver_hex, owner_hex) -> None:
        envelope = await builder.build("TRANSFER", {"to": receiver_hex, "amount": 10})

        assert envelope.contract_type is ContractType.TRANSFER
        assert envelope.parameter.owner_address.hex() == owner_hex
        assert len(envelope.tx_id) == 64

    @pytest.mark.asyncio
    async def test_per_call_options_merge(self, builder, receiver, owner_hex) -> None:
        """Per-call options override defaults without dropping them."""
        envelope = await builder.send_trx(receiver, 10, options={"permission_id": 3})

        assert envelope.permission_id == 3
        assert envelope.parameter.owner_address.hex() == owner_hex

    @pytest.mark.asyncio
    async def test_validation_before_node_access(self, builder, node, owner) -> None:
        with pytest.raises(SameAccountError):
            await builder.send_trx(owner, 10)
        node.get_reference_block.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_token(self, builder, receiver) -> None:
        envelope = await builder.send_token(receiver, 5, "1000001")
        assert envelope.parameter.asset_name == b"1000001"

    @pytest.mark.asyncio
    async def test_trigger_smart_contract(self, builder, contract_address) -> None:
        envelope = await builder.trigger_smart_contract(contract_address, "f()", fee_limit=2_000_000)
        assert envelope.fee_limit == 2_000_000
        assert envelope.parameter.data.hex() == "26121ff0"

    @pytest.mark.asyncio
    async def test_create_smart_contract(self, builder) -> None:
        envelope = await builder.create_smart_contract(abi=[], bytecode="6080604052")
        assert envelope.contract_type is ContractType.CREATE_SMART_CONTRACT
        assert envelope.contract_address.startswith("41")


# =============================================================================
# Node-built transactions
# =============================================================================


class TestNodeAssembly:
    """Transactions built by the node and cross-checked locally."""

    @pytest.mark.asyncio
    async def test_verified(self, builder, node, factory, owner, receiver, reference_block) -> None:
        node_tx = TransactionAssembler().assemble(factory.send_trx(receiver, 10, owner), reference_block).to_dict()
        node.create_transaction.return_value = node_tx

        envelope = await builder.send_trx(receiver, 10, options={"txLocal": False})

        assert envelope.tx_id == node_tx["txID"]
        node.get_reference_block.assert_not_called()
        message = node.create_transaction.call_args.args[0]
        assert message.contract_type is ContractType.TRANSFER

    @pytest.mark.asyncio
    async def test_mismatch(self, builder, node, factory, owner, receiver, reference_block) -> None:
        node_tx = TransactionAssembler().assemble(factory.send_trx(receiver, 99, owner), reference_block).to_dict()
        node.create_transaction.return_value = node_tx

        with pytest.raises(TransactionIdMismatchError):
            await builder.send_trx(receiver, 10, options={"local_id_computation": False})

    @pytest.mark.asyncio
    async def test_fee_limit_override_sent_to_node(
        self, builder, node, factory, owner, contract_address, reference_block
    ) -> None:
        message = factory.trigger_smart_contract(contract_address, "f()", owner=owner)
        node_tx = TransactionAssembler().assemble(message, reference_block, fee_limit=2_000_000).to_dict()
        node.create_transaction.return_value = node_tx

        envelope = await builder.assemble(message, {"txLocal": False}, fee_limit=2_000_000)

        assert envelope.fee_limit == 2_000_000
        assert envelope.tx_id == node_tx["txID"]
        assert node.create_transaction.call_args.args[0].fee_limit == 2_000_000

    @pytest.mark.asyncio
    async def test_node_ignoring_fee_limit_override(
        self, builder, node, factory, owner, contract_address, reference_block
    ) -> None:
        """A node that keeps the suggested fee limit fails the cross-check."""
        message = factory.trigger_smart_contract(contract_address, "f()", owner=owner)
        node.create_transaction.return_value = TransactionAssembler().assemble(message, reference_block).to_dict()

        with pytest.raises(TransactionIdMismatchError):
            await builder.assemble(message, {"txLocal": False}, fee_limit=2_000_000)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("local", [True, False])
    @pytest.mark.parametrize("fee_limit", [-5, 0, 15_000_000_001])
    async def test_invalid_fee_limit_override(
        self, builder, node, factory, owner, contract_address, local, fee_limit
    ) -> None:
        message = factory.trigger_smart_contract(contract_address, "f()", owner=owner)

        with pytest.raises(InvalidRangeError):
            await builder.assemble(message, {"txLocal": local}, fee_limit=fee_limit)
        node.get_reference_block.assert_not_called()
        node.create_transaction.assert_not_called()


# =============================================================================
# Alteration
# =============================================================================


class TestAlteration:
    """Passthroughs to the mutator."""

    @pytest.mark.asyncio
    async def test_alter_transaction(self, builder, receiver) -> None:
        envelope = await builder.send_trx(receiver, 10)

        altered = builder.alter_transaction(envelope, data="invoice 42", extension=120)

        assert altered.data == b"invoice 42"
        assert altered.expiration == envelope.expiration + 120_000
        assert altered.tx_id != envelope.tx_id

    @pytest.mark.asyncio
    async def test_extend_then_data_then_reseal(self, builder, receiver) -> None:
        envelope = await builder.send_trx(receiver, 10)

        extended = builder.extend_expiration(envelope, 60)
        attached = builder.add_update_data(extended, "cafe", "hex")
        resealed = builder.new_tx_id(attached)

        assert attached.data == b"\xca\xfe"
        assert resealed.tx_id == attached.tx_id
        assert resealed.state is EnvelopeState.RESEALED


# =============================================================================
# Dry runs
# =============================================================================


class TestDryRuns:
    """Passthroughs to the constant call evaluator."""

    @pytest.mark.asyncio
    async def test_trigger_constant_contract(self, builder, node, contract_address, owner_hex) -> None:
        result = await builder.trigger_constant_contract(contract_address, "totalSupply()")

        assert result.success is True
        assert result.energy_used == 77
        assert node.trigger_constant_contract.call_args.args[0]["owner_address"] == owner_hex

    @pytest.mark.asyncio
    async def test_estimate_energy(self, builder, contract_address) -> None:
        estimate = await builder.estimate_energy(contract_address, "f()")
        assert estimate.energy_required == 88

    @pytest.mark.asyncio
    async def test_deploy_constant_contract(self, builder) -> None:
        estimate = await builder.deploy_constant_contract(abi=[], bytecode="6080")
        assert estimate.energy_required == 77

    def test_properties(self, builder, factory) -> None:
        assert builder.factory is factory
        assert builder.evaluator is not None
