"""
Configuration for the trontx SDK.

BuildOptions replaces the trailing positional flags the builder operations
accept (permission tier, default owner, id computation mode, confirmed
state). NodeConfig describes how to reach a ledger node over HTTP.

Example:
    >>> from trontx.config import BuildOptions, Network, get_node_config
    >>> options = BuildOptions(permission_id=2, default_address="TNPeeaaFB7K9cmo4uQpcU32zGK8G1NYqeL")
    >>> node = get_node_config(Network.SHASTA)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from trontx.constants import MAX_INT32


class BuildOptions(BaseModel):
    """
    Per-call options shared by every contract message builder.

    Attributes:
        permission_id: Permission tier the transaction is authorized under.
            Only attached to the message when non-zero.
        default_address: Owner used when an operation omits one.
        local_id_computation: Compute the transaction id locally instead of
            asking the node to build the transaction.
        confirmed: Route read-only calls to the solidity (confirmed) node.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    permission_id: Optional[int] = Field(
        default=None,
        ge=0,
        le=MAX_INT32,
        alias="permissionId",
        description="Permission tier for multi-signature accounts",
    )
    default_address: Optional[str] = Field(
        default=None,
        alias="defaultAddress",
        description="Owner address used when an operation omits one",
    )
    local_id_computation: bool = Field(
        default=True,
        alias="txLocal",
        description="Build and hash the transaction locally",
    )
    confirmed: bool = Field(
        default=False,
        description="Query confirmed state for constant calls",
    )

    @classmethod
    def coerce(
        cls, options: Union["BuildOptions", Mapping[str, Any], None]
    ) -> "BuildOptions":
        """Accept None, a mapping (snake_case or camelCase keys) or an instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))


class Network(str, Enum):
    """Known public networks."""

    MAINNET = "mainnet"
    SHASTA = "shasta"
    NILE = "nile"


class NodeConfig(BaseModel):
    """Connection settings for the HTTP ledger node adapter."""

    model_config = ConfigDict(frozen=True)

    full_node_url: str = Field(
        description="Base URL of the full node HTTP API",
    )
    solidity_node_url: Optional[str] = Field(
        default=None,
        description="Base URL of the solidity node; defaults to the full node",
    )
    timeout_ms: int = Field(
        default=30000,
        ge=1000,
        description="Request timeout in milliseconds",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Value for the TRON-PRO-API-KEY header",
    )


NETWORKS: Dict[Network, NodeConfig] = {
    Network.MAINNET: NodeConfig(full_node_url="https://api.trongrid.io"),
    Network.SHASTA: NodeConfig(full_node_url="https://api.shasta.trongrid.io"),
    Network.NILE: NodeConfig(full_node_url="https://nile.trongrid.io"),
}


def get_node_config(
    network: Union[Network, str],
    *,
    full_node_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> NodeConfig:
    """
    Get node configuration for a network.

    Args:
        network: Network name or enum value.
        full_node_url: Optional override for the full node URL.
        api_key: Optional API key.

    Returns:
        NodeConfig for the network.

    Raises:
        ValueError: If the network is unknown.
    """
    try:
        network = Network(network)
    except ValueError:
        raise ValueError(
            f"Unknown network: {network}. Supported: {[n.value for n in Network]}"
        ) from None

    config = NETWORKS[network]
    updates: Dict[str, Any] = {}
    if full_node_url:
        updates["full_node_url"] = full_node_url
    if api_key:
        updates["api_key"] = api_key
    return config.model_copy(update=updates) if updates else config


__all__ = [
    "BuildOptions",
    "Network",
    "NodeConfig",
    "NETWORKS",
    "get_node_config",
]
