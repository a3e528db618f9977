"""Persisted deployment storage for dex-deployments library."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import DefectiveDeploymentError
from .parsers import parse_hardhat_deployment
from .paths import get_network_paths
from .types import DeploymentRecord, StepKind, StepStatus

logger = logging.getLogger(__name__)


class DeploymentStore:
    """
    Stores deployed contract addresses in the hardhat-deploy layout.

    Each deployment lives at <root>/<network>/<Name>.json, so an existing
    hardhat-deploy deployments directory can be reused as is.
    """

    def __init__(self, root: Optional[Union[Path, str]] = None):
        """
        Initialize the store.

        Args:
            root: Deployments directory (defaults to ./deployments)
        """
        self._root = root

    def network_dir(self, network: str) -> Path:
        return get_network_paths(network, self._root)[0]

    def path_for(self, network: str, name: str) -> Path:
        return self.network_dir(network) / f"{name}.json"

    def names(self, network: str) -> List[str]:
        """
        List contract names stored for a network.

        Args:
            network: Network name

        Returns:
            Sorted list of names, empty if the network has no deployments
        """
        network_dir = self.network_dir(network)
        if not network_dir.exists():
            return []
        return sorted(p.stem for p in network_dir.glob("*.json"))

    def load(self, network: str, name: str) -> Optional[DeploymentRecord]:
        """
        Load the stored deployment of a contract.

        Args:
            network: Network name
            name: Deploy step name

        Returns:
            DeploymentRecord, or None if nothing usable is stored
        """
        path = self.path_for(network, name)
        if not path.exists():
            return None

        try:
            data = parse_hardhat_deployment(path)
        except DefectiveDeploymentError as e:
            # Same treatment as a missing file: the contract gets deployed again
            logger.warning("Ignoring defective deployment file: %s", e)
            return None

        return DeploymentRecord(
            name=name,
            kind=StepKind.DEPLOY,
            status=StepStatus.SUCCESS,
            address=data["address"],
            transaction_hash=data.get("transaction_hash"),
            block_number=data["block"],
            args=tuple(data.get("constructor_args", ())),
        )

    def save(
        self,
        network: str,
        name: str,
        record: DeploymentRecord,
        abi: Optional[List[Dict[str, Any]]] = None,
    ) -> Path:
        """
        Save a successful deploy record to disk.

        Args:
            network: Network name
            name: Deploy step name
            record: Record produced by the deploy
            abi: Contract ABI to store alongside the address

        Returns:
            Path of the written file

        Raises:
            ValueError: If the record is not a successful deploy
        """
        if record.kind is not StepKind.DEPLOY or not record.succeeded or not record.address:
            raise ValueError(f"Only successful deploys can be stored, got {record.name}")

        path = self.path_for(network, name)

        num_deployments = 1
        if path.exists():
            try:
                with open(path) as f:
                    num_deployments = json.load(f).get("numDeployments", 0) + 1
            except json.JSONDecodeError:
                logger.warning("Overwriting unreadable deployment file %s", path)

        data: Dict[str, Any] = {
            "address": record.address,
            "abi": abi or [],
            "transactionHash": record.transaction_hash,
            "receipt": {
                "transactionHash": record.transaction_hash,
                "blockNumber": record.block_number,
                "contractAddress": record.address,
            },
            "args": list(record.args),
            "numDeployments": num_deployments,
        }

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        return path

    def save_chain_id(self, network: str, chain_id: str) -> None:
        """Write the .chainId marker hardhat-deploy keeps per network."""
        chain_id_path = get_network_paths(network, self._root)[1]
        chain_id_path.parent.mkdir(parents=True, exist_ok=True)
        chain_id_path.write_text(str(chain_id))

    def load_chain_id(self, network: str) -> Optional[str]:
        chain_id_path = get_network_paths(network, self._root)[1]
        try:
            return chain_id_path.read_text().strip()
        except FileNotFoundError:
            return None
