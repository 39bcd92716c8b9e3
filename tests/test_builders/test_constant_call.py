"""
Tests for ConstantCallEvaluator.
"""

from unittest.mock import AsyncMock

import pytest
from eth_abi import encode as abi_encode

from trontx.builders.constant_call import ConstantCallEvaluator, ConstantCallResult, CostEstimate
from trontx.errors import InvalidAmountError

BALANCE_OF = {
    "type": "function",
    "name": "balanceOf",
    "stateMutability": "view",
    "inputs": [{"name": "who", "type": "address"}],
    "outputs": [{"name": "", "type": "uint256"}],
}

PAYABLE_CONSTRUCTOR = [{"type": "constructor", "stateMutability": "payable", "inputs": []}]


@pytest.fixture
def node() -> AsyncMock:
    node = AsyncMock()
    node.trigger_constant_contract.return_value = {
        "result": {"result": True},
        "energy_used": 1234,
        "constant_result": [abi_encode(["uint256"], [42]).hex()],
        "transaction": {"txID": "ab" * 32},
    }
    node.estimate_energy.return_value = {"result": {"result": True}, "energy_required": 5678}
    return node


@pytest.fixture
def evaluator(node, factory) -> ConstantCallEvaluator:
    return ConstantCallEvaluator(node, factory)


# =============================================================================
# evaluate
# =============================================================================


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.mark.asyncio
    async def test_success(self, evaluator, node, owner, owner_hex, contract_address, receiver_hex) -> None:
        result = await evaluator.evaluate(
            contract_address,
            "balanceOf(address)",
            [{"type": "address", "value": receiver_hex}],
            owner,
        )

        assert isinstance(result, ConstantCallResult)
        assert result.success is True
        assert result.energy_used == 1234
        assert result.message is None
        assert int.from_bytes(result.result_bytes, "big") == 42
        assert result.transaction == {"txID": "ab" * 32}

        payload = node.trigger_constant_contract.call_args.args[0]
        assert payload["owner_address"] == owner_hex
        assert payload["data"].startswith("70a08231")
        assert payload["visible"] is False
        assert node.trigger_constant_contract.call_args.kwargs == {"confirmed": False}

    @pytest.mark.asyncio
    async def test_confirmed_option(self, evaluator, node, owner, contract_address) -> None:
        await evaluator.evaluate(contract_address, "totalSupply()", owner=owner, options={"confirmed": True})
        assert node.trigger_constant_contract.call_args.kwargs == {"confirmed": True}

    @pytest.mark.asyncio
    async def test_permission_id_in_payload(self, evaluator, node, owner, contract_address) -> None:
        await evaluator.evaluate(contract_address, "totalSupply()", owner=owner, options={"permission_id": 2})
        assert node.trigger_constant_contract.call_args.args[0]["Permission_id"] == 2

    @pytest.mark.asyncio
    async def test_revert_reason(self, evaluator, node, owner, contract_address) -> None:
        revert = bytes.fromhex("08c379a0") + abi_encode(["string"], ["not allowed"])
        node.trigger_constant_contract.return_value = {
            "result": {},
            "energy_used": 10,
            "constant_result": [revert.hex()],
        }

        result = await evaluator.evaluate(contract_address, "f()", owner=owner)

        assert result.success is False
        assert result.message == "not allowed"

    @pytest.mark.asyncio
    async def test_node_message_is_hex_decoded(self, evaluator, node, owner, contract_address) -> None:
        node.trigger_constant_contract.return_value = {
            "result": {"code": "CONTRACT_VALIDATE_ERROR", "message": b"no contract".hex()},
        }

        result = await evaluator.evaluate(contract_address, "f()", owner=owner)

        assert result.success is False
        assert result.message == "no contract"
        assert result.results == ()
        assert result.result_bytes == b""

    @pytest.mark.asyncio
    async def test_validation_before_request(self, evaluator, node, owner, contract_address) -> None:
        with pytest.raises(InvalidAmountError):
            await evaluator.evaluate(contract_address, "f()", owner=owner, call_value=-1)
        node.trigger_constant_contract.assert_not_called()

    @pytest.mark.asyncio
    async def test_decode_result(self, evaluator, owner, contract_address, receiver_hex) -> None:
        result = await evaluator.evaluate(contract_address, owner=owner, function_abi=BALANCE_OF, parameters=[receiver_hex])
        assert evaluator.decode_result(BALANCE_OF, result) == [42]


# =============================================================================
# Cost estimates
# =============================================================================


class TestEstimates:
    """Tests for estimate_cost() and estimate_deployment_cost()."""

    @pytest.mark.asyncio
    async def test_estimate_cost(self, evaluator, node, owner, contract_address) -> None:
        estimate = await evaluator.estimate_cost(contract_address, "f()", owner=owner)

        assert estimate == CostEstimate(energy_required=5678, success=True)
        node.estimate_energy.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_estimate_deployment_cost(self, evaluator, node, owner, owner_hex) -> None:
        estimate = await evaluator.estimate_deployment_cost(
            abi=PAYABLE_CONSTRUCTOR, bytecode="6080604052", call_value=5, owner=owner
        )

        assert estimate.energy_required == 1234
        assert estimate.success is True
        payload = node.trigger_constant_contract.call_args.args[0]
        assert payload == {
            "owner_address": owner_hex,
            "data": "6080604052",
            "call_value": 5,
            "visible": False,
        }

    @pytest.mark.asyncio
    async def test_deployment_with_token(self, evaluator, node, owner) -> None:
        await evaluator.estimate_deployment_cost(
            abi=PAYABLE_CONSTRUCTOR, bytecode="6080", token_id=1000001, token_value=7, owner=owner
        )
        payload = node.trigger_constant_contract.call_args.args[0]
        assert payload["token_id"] == 1000001
        assert payload["call_token_value"] == 7
