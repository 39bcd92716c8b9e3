"""
Tests for HttpLedgerNodeClient.

Tests cover:
- Request routing (full node vs solidity node)
- API key header
- Response parsing for blocks and transactions
- Error handling for HTTP, transport and node error payloads
"""

import json
from unittest.mock import patch

import httpx
import pytest

from trontx.builders.transaction import ReferenceBlock
from trontx.config import NodeConfig
from trontx.errors import NodeError
from trontx.node import API_KEY_HEADER, HttpLedgerNodeClient, node_payload


@pytest.fixture
def client(node_config) -> HttpLedgerNodeClient:
    return HttpLedgerNodeClient(node_config)


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    """Tests for URL and header handling."""

    def test_trailing_slash_stripped(self) -> None:
        client = HttpLedgerNodeClient(NodeConfig(full_node_url="https://node.example.org/"))
        assert client.full_node_url == "https://node.example.org"

    def test_solidity_defaults_to_full_node(self) -> None:
        client = HttpLedgerNodeClient(NodeConfig(full_node_url="https://node.example.org"))
        assert client.solidity_node_url == "https://node.example.org"

    @pytest.mark.asyncio
    async def test_no_api_key_header(self, mock_httpx, make_response, block_response) -> None:
        client_class, http = mock_httpx(make_response(200, block_response))
        client = HttpLedgerNodeClient(NodeConfig(full_node_url="https://node.example.org"))

        with patch("httpx.AsyncClient", client_class):
            await client.get_reference_block()

        assert API_KEY_HEADER not in http.post.call_args.kwargs["headers"]


# =============================================================================
# Reference block
# =============================================================================


class TestGetReferenceBlock:
    """Tests for get_reference_block()."""

    @pytest.mark.asyncio
    async def test_success(self, client, mock_httpx, make_response, block_response, reference_block) -> None:
        client_class, http = mock_httpx(make_response(200, block_response))

        with patch("httpx.AsyncClient", client_class):
            block = await client.get_reference_block()

        assert block == reference_block
        assert isinstance(block, ReferenceBlock)
        url = http.post.call_args.args[0]
        assert url == "https://full.example.org/wallet/getnowblock"
        assert http.post.call_args.kwargs["headers"][API_KEY_HEADER] == "test-api-key"

    @pytest.mark.asyncio
    async def test_timeout_from_config(self, client, mock_httpx, make_response, block_response) -> None:
        client_class, _ = mock_httpx(make_response(200, block_response))

        with patch("httpx.AsyncClient", client_class):
            await client.get_reference_block()

        timeout = client_class.call_args.kwargs["timeout"]
        assert timeout.connect == 5.0

    @pytest.mark.asyncio
    async def test_malformed_block(self, client, mock_httpx, make_response) -> None:
        client_class, _ = mock_httpx(make_response(200, {"blockID": "00"}))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError, match="Malformed block response"):
                await client.get_reference_block()


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Tests for failed requests."""

    @pytest.mark.asyncio
    async def test_http_status(self, client, mock_httpx, make_response) -> None:
        client_class, _ = mock_httpx(make_response(503, None, "unavailable"))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError) as exc_info:
                await client.get_reference_block()

        assert exc_info.value.status_code == 503
        assert exc_info.value.endpoint == "/wallet/getnowblock"

    @pytest.mark.asyncio
    async def test_invalid_json(self, client, mock_httpx, make_response) -> None:
        client_class, _ = mock_httpx(make_response(200, None, "<html>"))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError, match="Invalid JSON"):
                await client.get_reference_block()

    @pytest.mark.asyncio
    async def test_error_payload(self, client, mock_httpx, make_response) -> None:
        client_class, _ = mock_httpx(make_response(200, {"Error": "class java.lang.NullPointerException"}))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError, match="NullPointerException"):
                await client.broadcast({"txID": "00"})

    @pytest.mark.asyncio
    async def test_transport_error(self, client, mock_httpx) -> None:
        client_class, _ = mock_httpx(httpx.ConnectError("connection refused"))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError, match="connection refused"):
                await client.get_reference_block()

    @pytest.mark.asyncio
    async def test_single_attempt(self, client, mock_httpx, make_response) -> None:
        """Failures are not retried."""
        client_class, http = mock_httpx(make_response(500, None))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError):
                await client.get_reference_block()

        assert http.post.await_count == 1


# =============================================================================
# Transactions
# =============================================================================


class TestCreateTransaction:
    """Tests for create_transaction() and node_payload()."""

    @pytest.mark.asyncio
    async def test_transfer(self, client, factory, owner, owner_hex, receiver, receiver_hex, mock_httpx, make_response) -> None:
        node_tx = {"txID": "aa" * 32, "raw_data_hex": "0a02"}
        client_class, http = mock_httpx(make_response(200, node_tx))

        with patch("httpx.AsyncClient", client_class):
            result = await client.create_transaction(factory.send_trx(receiver, 10, owner))

        assert result == node_tx
        assert http.post.call_args.args[0] == "https://full.example.org/wallet/createtransaction"
        assert http.post.call_args.kwargs["json"] == {
            "owner_address": owner_hex,
            "to_address": receiver_hex,
            "amount": 10,
            "visible": False,
        }

    @pytest.mark.asyncio
    async def test_unwraps_transaction(self, client, factory, owner, contract_address, mock_httpx, make_response) -> None:
        node_tx = {"txID": "aa" * 32, "raw_data_hex": "0a02"}
        client_class, http = mock_httpx(make_response(200, {"result": {"result": True}, "transaction": node_tx}))
        message = factory.trigger_smart_contract(contract_address, "f()", owner=owner)

        with patch("httpx.AsyncClient", client_class):
            result = await client.create_transaction(message)

        assert result == node_tx
        payload = http.post.call_args.kwargs["json"]
        assert http.post.call_args.args[0].endswith("/wallet/triggersmartcontract")
        assert payload["fee_limit"] == 150_000_000
        assert payload["data"] == "26121ff0"

    @pytest.mark.asyncio
    async def test_missing_transaction(self, client, factory, owner, receiver, mock_httpx, make_response) -> None:
        client_class, _ = mock_httpx(make_response(200, {"result": {"result": False}}))

        with patch("httpx.AsyncClient", client_class):
            with pytest.raises(NodeError, match="did not return a transaction"):
                await client.create_transaction(factory.send_trx(receiver, 10, owner))

    def test_deploy_payload_is_flattened(self, factory, owner, owner_hex) -> None:
        abi = [{"type": "constructor", "stateMutability": "nonpayable", "inputs": []}]
        message = factory.create_smart_contract(abi=abi, bytecode="6080", name="C", owner=owner)

        payload = node_payload(message)

        assert "new_contract" not in payload
        assert payload["owner_address"] == owner_hex
        assert payload["bytecode"] == "6080"
        assert payload["name"] == "C"
        assert payload["consume_user_resource_percent"] == 100
        assert json.loads(payload["abi"])[0]["type"] == 1

    def test_permission_id(self, factory, owner, receiver) -> None:
        message = factory.send_trx(receiver, 10, owner, {"permission_id": 2})
        assert node_payload(message)["Permission_id"] == 2


# =============================================================================
# Constant calls
# =============================================================================


class TestConstantCalls:
    """Tests for trigger_constant_contract() and estimate_energy()."""

    @pytest.mark.asyncio
    async def test_full_node(self, client, mock_httpx, make_response) -> None:
        client_class, http = mock_httpx(make_response(200, {"result": {"result": True}}))

        with patch("httpx.AsyncClient", client_class):
            await client.trigger_constant_contract({"data": "00"})

        assert http.post.call_args.args[0] == "https://full.example.org/wallet/triggerconstantcontract"

    @pytest.mark.asyncio
    async def test_confirmed_uses_solidity_node(self, client, mock_httpx, make_response) -> None:
        client_class, http = mock_httpx(make_response(200, {}), make_response(200, {}))

        with patch("httpx.AsyncClient", client_class):
            await client.trigger_constant_contract({}, confirmed=True)
            await client.estimate_energy({}, confirmed=True)

        urls = [call.args[0] for call in http.post.call_args_list]
        assert urls == [
            "https://solidity.example.org/walletsolidity/triggerconstantcontract",
            "https://solidity.example.org/walletsolidity/estimateenergy",
        ]

    @pytest.mark.asyncio
    async def test_broadcast(self, client, mock_httpx, make_response) -> None:
        client_class, http = mock_httpx(make_response(200, {"result": True, "txid": "ab" * 32}))

        with patch("httpx.AsyncClient", client_class):
            result = await client.broadcast({"txID": "ab" * 32, "signature": ["00"]})

        assert result["result"] is True
        assert http.post.call_args.args[0] == "https://full.example.org/wallet/broadcasttransaction"
