"""Deployment file and compiler artifact parsers for dex-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ArtifactNotFoundError, DefectiveDeploymentError


def parse_hardhat_deployment(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat-deploy JSON file.

    Args:
        file_path: Path to contract deployment JSON file

    Returns:
        Dictionary with canonical field names:
        - Required: address, block
        - Optional: abi, transaction_hash, constructor_args, num_deployments

    Raises:
        DefectiveDeploymentError: If address or block number is missing
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DefectiveDeploymentError(
            f"Unreadable hardhat deployment file: {file_path}"
        ) from e

    if "address" not in data:
        raise DefectiveDeploymentError(
            f"Missing address in hardhat deployment file: {file_path}"
        )

    # Try to get block number from receipt first, fall back to top-level
    block_number = None
    if "receipt" in data and "blockNumber" in data["receipt"]:
        block_number = data["receipt"]["blockNumber"]
    elif "blockNumber" in data:
        block_number = data["blockNumber"]

    if block_number is None:
        raise DefectiveDeploymentError(
            f"Missing block number in hardhat deployment file: {file_path}"
        )

    result: Dict[str, Any] = {
        "address": data["address"],
        "block": block_number,
    }

    # Extract optional fields if present
    if "abi" in data:
        result["abi"] = data["abi"]
    if "transactionHash" in data:
        result["transaction_hash"] = data["transactionHash"]
    if "args" in data:
        result["constructor_args"] = data["args"]
    if "numDeployments" in data:
        result["num_deployments"] = data["numDeployments"]

    return result


def find_artifact(artifacts_dir: Path, contract_name: str) -> Optional[Path]:
    """
    Locate the hardhat compiler artifact for a contract.

    Hardhat writes artifacts as artifacts/contracts/<File>.sol/<Name>.json
    next to a <Name>.dbg.json debug file, which is ignored here.

    Args:
        artifacts_dir: Root of the hardhat artifacts tree
        contract_name: Contract name, e.g. "DEX"

    Returns:
        Path to the artifact, or None if not found
    """
    if not artifacts_dir.exists():
        return None

    matches = sorted(artifacts_dir.rglob(f"{contract_name}.json"))
    return matches[0] if matches else None


def parse_hardhat_artifact(artifacts_dir: Path, contract_name: str) -> Dict[str, Any]:
    """
    Load ABI and creation bytecode for a contract.

    Args:
        artifacts_dir: Root of the hardhat artifacts tree
        contract_name: Contract name, e.g. "Balloons"

    Returns:
        Dictionary with contract_name, abi and bytecode (0x-prefixed hex)

    Raises:
        ArtifactNotFoundError: If no readable artifact with bytecode exists
    """
    artifact_path = find_artifact(artifacts_dir, contract_name)
    if artifact_path is None:
        raise ArtifactNotFoundError(
            f"No artifact for '{contract_name}' under {artifacts_dir}. "
            "Compile the contracts first."
        )

    try:
        with open(artifact_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactNotFoundError(
            f"Unreadable artifact for '{contract_name}': {artifact_path}"
        ) from e

    bytecode = data.get("bytecode") or ""
    if bytecode in ("", "0x"):
        # Interfaces and abstract contracts compile without bytecode
        raise ArtifactNotFoundError(
            f"Artifact for '{contract_name}' has no bytecode: {artifact_path}"
        )

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    return {
        "contract_name": data.get("contractName", contract_name),
        "abi": data.get("abi", []),
        "bytecode": bytecode,
    }
