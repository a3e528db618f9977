"""Deployment configuration for dex-deployments library."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from eth_utils import is_address, to_checksum_address, to_wei

from .constants import (
    DEFAULT_APPROVE_ETHER,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_DEX_CONFIRMATIONS,
    DEFAULT_INIT_ETHER,
    DEFAULT_INIT_GAS_LIMIT,
    DEFAULT_LIQUIDITY_RECIPIENT,
    DEFAULT_NETWORK,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TRANSFER_ETHER,
    NETWORK_CONFIG,
)
from .paths import get_default_artifacts_dir, get_default_deployments_dir


def parse_ether(amount: str) -> int:
    """Convert an ether amount such as "0.5" to wei."""
    return to_wei(amount, "ether")


@dataclass
class DeployConfig:
    """Everything a bootstrap run needs besides the chain itself."""

    network: str
    rpc_url: str
    deployments_dir: Path
    artifacts_dir: Path
    deployer: Optional[str] = None  # Defaults to the node's first account
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    # Bootstrap parameters (wei)
    liquidity_recipient: str = DEFAULT_LIQUIDITY_RECIPIENT
    transfer_amount: int = parse_ether(DEFAULT_TRANSFER_ETHER)
    approve_amount: int = parse_ether(DEFAULT_APPROVE_ETHER)
    init_amount: int = parse_ether(DEFAULT_INIT_ETHER)
    init_gas_limit: int = DEFAULT_INIT_GAS_LIMIT
    dex_confirmations: int = DEFAULT_DEX_CONFIRMATIONS

    @classmethod
    def from_env(cls, network: str = DEFAULT_NETWORK, **overrides: Any) -> "DeployConfig":
        """
        Build a configuration from environment variables and overrides.

        The RPC URL comes from the network's variable in NETWORK_CONFIG
        (e.g. $SEPOLIA_RPC_URL), the deployer from $DEPLOYER_ADDRESS.
        Overrides set to None are ignored.

        Args:
            network: Network name from NETWORK_CONFIG
            **overrides: Field values taking precedence over the environment

        Returns:
            DeployConfig

        Raises:
            ValueError: If the network is unknown, no RPC URL is available
                        or an address is malformed
        """
        if network not in NETWORK_CONFIG:
            raise ValueError(
                f"Unknown network '{network}', expected one of {sorted(NETWORK_CONFIG)}"
            )
        network_config = NETWORK_CONFIG[network]
        overrides = {k: v for k, v in overrides.items() if v is not None}

        rpc_url = overrides.pop("rpc_url", None) or os.environ.get(
            network_config["default_rpc_env"], network_config["default_rpc_url"]
        )
        if rpc_url is None:
            raise ValueError(
                f"RPC URL required: set ${network_config['default_rpc_env']} "
                "or pass rpc_url"
            )

        deployer = overrides.pop("deployer", None) or os.environ.get("DEPLOYER_ADDRESS")
        if deployer is not None:
            deployer = _checksum(deployer, "deployer")

        if "liquidity_recipient" in overrides:
            overrides["liquidity_recipient"] = _checksum(
                overrides["liquidity_recipient"], "liquidity_recipient"
            )

        deployments_dir = Path(overrides.pop("deployments_dir", get_default_deployments_dir()))
        artifacts_dir = Path(overrides.pop("artifacts_dir", get_default_artifacts_dir()))

        return cls(
            network=network,
            rpc_url=rpc_url,
            deployments_dir=deployments_dir,
            artifacts_dir=artifacts_dir,
            deployer=deployer,
            **overrides,
        )


def _checksum(address: str, field_name: str) -> str:
    if not is_address(address):
        raise ValueError(f"Invalid {field_name} address: {address}")
    return to_checksum_address(address)
