"""
Ledger node access.

LedgerNodeClient is the collaborator the builder needs from a node: a
reference block, server-side transaction construction, constant (dry-run)
calls, energy estimates and broadcast. HttpLedgerNodeClient implements it
over the node's HTTP API with httpx.

Each call makes exactly one request; retries are left to the caller.

Example:
    >>> from trontx.config import Network, get_node_config
    >>> node = HttpLedgerNodeClient(get_node_config(Network.SHASTA))
    >>> block = await node.get_reference_block()
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from trontx.builders.contract_message import ContractMessage
from trontx.builders.transaction import ReferenceBlock
from trontx.config import NodeConfig
from trontx.errors import NodeError
from trontx.protocol.contract_types import ContractType
from trontx.utils.logging import get_logger

_logger = get_logger(__name__)

API_KEY_HEADER = "TRON-PRO-API-KEY"


class LedgerNodeClient(Protocol):
    """Operations the builder needs from a ledger node."""

    async def get_reference_block(self) -> ReferenceBlock: ...

    async def create_transaction(self, message: ContractMessage) -> Dict[str, Any]: ...

    async def trigger_constant_contract(
        self, payload: Mapping[str, Any], *, confirmed: bool = False
    ) -> Dict[str, Any]: ...

    async def estimate_energy(
        self, payload: Mapping[str, Any], *, confirmed: bool = False
    ) -> Dict[str, Any]: ...

    async def broadcast(self, transaction: Mapping[str, Any]) -> Dict[str, Any]: ...


def node_payload(message: ContractMessage) -> Dict[str, Any]:
    """
    Translate a contract message into the request body of its node endpoint.

    Most endpoints take the protobuf fields directly (bytes as hex);
    ``deploycontract`` takes the new contract's fields flattened.
    """
    payload = message.to_dict()
    if message.contract_type is ContractType.CREATE_SMART_CONTRACT:
        new_contract = payload.pop("new_contract")
        payload.update(
            {
                "abi": json.dumps(new_contract.get("abi", {}).get("entrys", [])),
                "bytecode": new_contract.get("bytecode", ""),
                "call_value": new_contract.get("call_value", 0),
                "consume_user_resource_percent": new_contract.get("consume_user_resource_percent", 0),
                "origin_energy_limit": new_contract.get("origin_energy_limit", 0),
                "name": new_contract.get("name", ""),
            }
        )
    if message.fee_limit is not None:
        payload["fee_limit"] = message.fee_limit
    if message.permission_id:
        payload["Permission_id"] = message.permission_id
    payload["visible"] = False
    return payload


class HttpLedgerNodeClient:
    """
    LedgerNodeClient over the node HTTP API.

    Args:
        config: Node URLs, timeout and API key.
    """

    def __init__(self, config: NodeConfig) -> None:
        self._config = config
        self._full_node_url = config.full_node_url.rstrip("/")
        self._solidity_node_url = (config.solidity_node_url or config.full_node_url).rstrip("/")

    @property
    def full_node_url(self) -> str:
        return self._full_node_url

    @property
    def solidity_node_url(self) -> str:
        return self._solidity_node_url

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        return headers

    async def _post(
        self,
        path: str,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        solidity: bool = False,
    ) -> Dict[str, Any]:
        base = self._solidity_node_url if solidity else self._full_node_url
        url = f"{base}{path}"
        _logger.info("Node request", extra={"endpoint": path, "solidity": solidity})

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_ms / 1000)
        ) as client:
            try:
                response = await client.post(url, json=dict(payload or {}), headers=self._headers())
            except httpx.HTTPError as exc:
                raise NodeError(f"Request to {path} failed: {exc}", endpoint=path) from exc

            if response.status_code != 200:
                raise NodeError(
                    f"Request to {path} failed: HTTP {response.status_code}",
                    endpoint=path,
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as exc:
                raise NodeError(f"Invalid JSON from {path}", endpoint=path) from exc

        if isinstance(data, dict) and data.get("Error"):
            raise NodeError(str(data["Error"]), endpoint=path)
        return data

    async def get_reference_block(self) -> ReferenceBlock:
        """Fetch the latest block to anchor transactions to."""
        data = await self._post("/wallet/getnowblock")
        try:
            return ReferenceBlock.from_node(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise NodeError("Malformed block response", endpoint="/wallet/getnowblock") from exc

    async def create_transaction(self, message: ContractMessage) -> Dict[str, Any]:
        """Ask the node to build the transaction for ``message``."""
        path = f"/wallet/{message.contract_type.endpoint}"
        data = await self._post(path, node_payload(message))
        if "transaction" in data:
            data = data["transaction"]
        if "raw_data_hex" not in data:
            raise NodeError("Node did not return a transaction", endpoint=path, details={"response": data})
        return data

    async def trigger_constant_contract(
        self, payload: Mapping[str, Any], *, confirmed: bool = False
    ) -> Dict[str, Any]:
        prefix = "/walletsolidity" if confirmed else "/wallet"
        return await self._post(f"{prefix}/triggerconstantcontract", payload, solidity=confirmed)

    async def estimate_energy(
        self, payload: Mapping[str, Any], *, confirmed: bool = False
    ) -> Dict[str, Any]:
        prefix = "/walletsolidity" if confirmed else "/wallet"
        return await self._post(f"{prefix}/estimateenergy", payload, solidity=confirmed)

    async def broadcast(self, transaction: Mapping[str, Any]) -> Dict[str, Any]:
        """Broadcast a signed transaction (node JSON form)."""
        return await self._post("/wallet/broadcasttransaction", transaction)


__all__ = ["LedgerNodeClient", "HttpLedgerNodeClient", "node_payload", "API_KEY_HEADER"]
