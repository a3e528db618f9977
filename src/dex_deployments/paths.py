"""Path management utilities for dex-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_deployments_dir() -> Path:
    """
    Get default deployments directory.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


def get_default_artifacts_dir() -> Path:
    """
    Get default hardhat artifacts directory.

    Returns:
        Path to ./artifacts
    """
    return Path.cwd() / "artifacts"


def get_network_paths(
    network: str, deployments_root: Optional[Union[Path, str]] = None
) -> tuple[Path, Path]:
    """
    Get per-network deployment paths.

    Args:
        network: Network name, e.g. "localhost"
        deployments_root: Custom deployments directory (defaults to ./deployments)

    Returns:
        Tuple of (network_dir, chain_id_path)
    """
    if deployments_root is None:
        deployments_root = get_default_deployments_dir()
    else:
        deployments_root = Path(deployments_root).absolute()

    network_dir = deployments_root / network
    chain_id_path = network_dir / ".chainId"

    return (network_dir, chain_id_path)
