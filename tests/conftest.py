"""
Shared fixtures for trontx tests.
"""

from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from trontx.builders.contract_message import ContractMessageFactory
from trontx.builders.transaction import ReferenceBlock, TransactionAssembler
from trontx.config import BuildOptions, NodeConfig
from trontx.utils import address


# =============================================================================
# Test Constants
# =============================================================================

# Published address pair (hex and base58check forms of the same account)
OWNER_HEX = "418840e6c55b9ada326d211d818c34a994aeced808"
OWNER_BASE58 = "TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL"

RECEIVER_HEX = "41" + "11" * 20
THIRD_HEX = "41" + "22" * 20
CONTRACT_HEX = "41" + "a6" * 20

NOW_MS = 1_700_000_000_000

BLOCK_NUMBER = 51_345_678
BLOCK_ID = "00000000030f790e" + "3c" * 8 + "9d" * 16
BLOCK_TIMESTAMP = 1_700_000_003_000


# =============================================================================
# Fixtures - Addresses
# =============================================================================


@pytest.fixture
def owner() -> str:
    """Owner address in base58check form."""
    return OWNER_BASE58


@pytest.fixture
def owner_hex() -> str:
    return OWNER_HEX


@pytest.fixture
def receiver() -> str:
    """Receiver address in base58check form."""
    return address.to_base58(RECEIVER_HEX)


@pytest.fixture
def receiver_hex() -> str:
    return RECEIVER_HEX


@pytest.fixture
def third_party() -> str:
    return address.to_base58(THIRD_HEX)


@pytest.fixture
def contract_address() -> str:
    return address.to_base58(CONTRACT_HEX)


# =============================================================================
# Fixtures - Builders
# =============================================================================


@pytest.fixture
def clock() -> Callable[[], int]:
    """Fixed clock returning NOW_MS."""
    return lambda: NOW_MS


@pytest.fixture
def factory(clock: Callable[[], int]) -> ContractMessageFactory:
    return ContractMessageFactory(clock=clock)


@pytest.fixture
def assembler() -> TransactionAssembler:
    return TransactionAssembler()


@pytest.fixture
def reference_block() -> ReferenceBlock:
    return ReferenceBlock(number=BLOCK_NUMBER, block_id=BLOCK_ID, timestamp=BLOCK_TIMESTAMP)


@pytest.fixture
def default_options(owner: str) -> BuildOptions:
    """Options with the owner as default address."""
    return BuildOptions(default_address=owner)


@pytest.fixture
def node_config() -> NodeConfig:
    return NodeConfig(
        full_node_url="https://full.example.org",
        solidity_node_url="https://solidity.example.org",
        timeout_ms=5000,
        api_key="test-api-key",
    )


@pytest.fixture
def block_response() -> dict:
    """getnowblock response for the reference block."""
    return {
        "blockID": BLOCK_ID,
        "block_header": {
            "raw_data": {
                "number": BLOCK_NUMBER,
                "timestamp": BLOCK_TIMESTAMP,
            }
        },
    }


# =============================================================================
# Helper Functions
# =============================================================================


def create_mock_response(
    status_code: int = 200,
    json_data=None,
    text: str = "",
) -> MagicMock:
    """Create a mock httpx Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.text = text
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("no json")
    return response


class MockAsyncContextManager:
    """Mock async context manager for httpx.AsyncClient."""

    def __init__(self, mock_client: AsyncMock):
        self.mock_client = mock_client

    async def __aenter__(self):
        return self.mock_client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def mock_httpx():
    """
    Factory for a patched httpx.AsyncClient class.

    Returns (client_class, http) where ``http.post`` is an AsyncMock whose
    side effect yields the given responses in order.
    """

    def make(*responses: MagicMock):
        http = AsyncMock()
        http.post = AsyncMock(side_effect=list(responses))

        def factory(*args, **kwargs):
            return MockAsyncContextManager(http)

        return MagicMock(side_effect=factory), http

    return make


@pytest.fixture
def make_response():
    """Expose create_mock_response to tests."""
    return create_mock_response
