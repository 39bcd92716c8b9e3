"""
Dry-run evaluation of contract calls.

ConstantCallEvaluator builds the same TriggerSmartContract message a real
call would use and asks a node to execute it without committing, returning
the raw result and the energy consumed. Nothing is broadcast.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from trontx.abi.codec import StructuredParamCodec, decode_revert_reason
from trontx.abi.types import ABIEntry
from trontx.builders.contract_message import ContractMessage, ContractMessageFactory, OptionsLike
from trontx.config import BuildOptions
from trontx.utils.logging import get_logger

if TYPE_CHECKING:
    from trontx.node import LedgerNodeClient

_logger = get_logger(__name__)


@dataclass(frozen=True)
class ConstantCallResult:
    """
    Outcome of a constant call.

    Attributes:
        results: Raw return data, one entry per ``constant_result`` item.
        success: Whether the node reports successful execution.
        energy_used: Energy consumed by the execution.
        message: Error message or revert reason, if any.
        transaction: The node's transaction JSON, if returned.
    """

    results: Tuple[bytes, ...]
    success: bool
    energy_used: int = 0
    message: Optional[str] = None
    transaction: Optional[Mapping[str, Any]] = None

    @property
    def result_bytes(self) -> bytes:
        return self.results[0] if self.results else b""


@dataclass(frozen=True)
class CostEstimate:
    """Energy needed to execute a call or a deployment."""

    energy_required: int
    success: bool
    message: Optional[str] = None


def _node_message(result: Mapping[str, Any]) -> Optional[str]:
    message = result.get("message")
    if not message:
        return None
    try:
        return bytes.fromhex(message).decode("utf-8", errors="replace")
    except ValueError:
        return message


def _constant_payload(message: ContractMessage) -> Dict[str, Any]:
    payload = message.to_dict()
    if message.permission_id:
        payload["Permission_id"] = message.permission_id
    payload["visible"] = False
    return payload


class ConstantCallEvaluator:
    """
    Evaluates contract calls against a node without broadcasting.

    Args:
        node: Node client used for the dry run.
        factory: Message factory; a default one is created if omitted.
    """

    def __init__(
        self,
        node: LedgerNodeClient,
        factory: Optional[ContractMessageFactory] = None,
    ) -> None:
        self._node = node
        self._factory = factory or ContractMessageFactory()
        self._codec = StructuredParamCodec()

    def _trigger(
        self,
        contract: Any,
        function_selector: Optional[str],
        parameters: Sequence[Any],
        owner: Any,
        options: OptionsLike,
        **kwargs: Any,
    ) -> Tuple[ContractMessage, BuildOptions]:
        options = BuildOptions.coerce(options)
        message = self._factory.trigger_smart_contract(
            contract,
            function_selector,
            parameters,
            owner,
            options=options,
            **kwargs,
        )
        return message, options

    async def evaluate(
        self,
        contract: Any,
        function_selector: Optional[str] = None,
        parameters: Sequence[Any] = (),
        owner: Any = None,
        options: OptionsLike = None,
        **kwargs: Any,
    ) -> ConstantCallResult:
        """
        Execute a read-only call.

        Args:
            contract: Contract address.
            function_selector: Signature, e.g. ``"balanceOf(address)"``.
            parameters: Arguments, encoded as for ``trigger_smart_contract``.
            owner: Caller address.
            options: Build options; ``confirmed`` routes to the solidity node.
            **kwargs: Passed to ``trigger_smart_contract`` (``function_abi``,
                ``call_value``, ``raw_parameter``, ``input_data``...).

        Returns:
            ConstantCallResult with the raw return data.
        """
        message, options = self._trigger(contract, function_selector, parameters, owner, options, **kwargs)
        response = await self._node.trigger_constant_contract(
            _constant_payload(message), confirmed=options.confirmed
        )

        result = response.get("result") or {}
        results = tuple(bytes.fromhex(r) for r in response.get("constant_result") or ())
        message_text = _node_message(result)
        if message_text is None and results:
            message_text = decode_revert_reason(results[0])

        outcome = ConstantCallResult(
            results=results,
            success=bool(result.get("result")),
            energy_used=int(response.get("energy_used", 0)),
            message=message_text,
            transaction=response.get("transaction"),
        )
        _logger.debug(
            "Constant call evaluated",
            extra={"success": outcome.success, "energy_used": outcome.energy_used},
        )
        return outcome

    async def estimate_cost(
        self,
        contract: Any,
        function_selector: Optional[str] = None,
        parameters: Sequence[Any] = (),
        owner: Any = None,
        options: OptionsLike = None,
        **kwargs: Any,
    ) -> CostEstimate:
        """Estimate the energy a call needs (node ``estimateenergy``)."""
        message, options = self._trigger(contract, function_selector, parameters, owner, options, **kwargs)
        response = await self._node.estimate_energy(
            _constant_payload(message), confirmed=options.confirmed
        )
        result = response.get("result") or {}
        return CostEstimate(
            energy_required=int(response.get("energy_required", 0)),
            success=bool(result.get("result")),
            message=_node_message(result),
        )

    async def estimate_deployment_cost(
        self,
        *,
        abi: Any,
        bytecode: Any,
        owner: Any = None,
        options: OptionsLike = None,
        **kwargs: Any,
    ) -> CostEstimate:
        """
        Estimate the energy a deployment needs by executing the constructor.

        Accepts the same keyword arguments as ``create_smart_contract``.
        """
        options = BuildOptions.coerce(options)
        message = self._factory.create_smart_contract(
            abi=abi, bytecode=bytecode, owner=owner, options=options, **kwargs
        )
        parameter = message.to_dict()
        payload: Dict[str, Any] = {
            "owner_address": parameter["owner_address"],
            "data": parameter["new_contract"]["bytecode"],
            "call_value": parameter["new_contract"].get("call_value", 0),
            "visible": False,
        }
        if "token_id" in parameter:
            payload["token_id"] = parameter["token_id"]
            payload["call_token_value"] = parameter.get("call_token_value", 0)

        response = await self._node.trigger_constant_contract(payload, confirmed=options.confirmed)
        result = response.get("result") or {}
        return CostEstimate(
            energy_required=int(response.get("energy_used", 0)),
            success=bool(result.get("result")),
            message=_node_message(result),
        )

    def decode_result(
        self,
        entry: Union[ABIEntry, Mapping[str, Any]],
        result: Union[ConstantCallResult, bytes, str],
    ) -> List[Any]:
        """Decode return data against ``entry``'s outputs."""
        if not isinstance(entry, ABIEntry):
            entry = ABIEntry.from_dict(entry)
        if isinstance(result, ConstantCallResult):
            result = result.result_bytes
        return self._codec.decode(entry, result)


__all__ = ["ConstantCallEvaluator", "ConstantCallResult", "CostEstimate"]
