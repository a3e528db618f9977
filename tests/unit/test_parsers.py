"""Unit tests for deployment file and artifact parsers."""

import json
from pathlib import Path

import pytest

from dex_deployments.exceptions import ArtifactNotFoundError, DefectiveDeploymentError
from dex_deployments.parsers import (
    find_artifact,
    parse_hardhat_artifact,
    parse_hardhat_deployment,
)


class TestParseHardhatDeployment:
    """Test the parse_hardhat_deployment function."""

    def test_field_mapping_from_hardhat_names(self, tmp_path: Path):
        """Test that hardhat field names are mapped to canonical names."""
        test_file = tmp_path / "DEX.json"
        data = {
            "address": "0x1234567890123456789012345678901234567890",
            "abi": [{"type": "function", "name": "init"}],
            "receipt": {
                "blockNumber": 12345,
                "transactionHash": "0xabc",
            },
            "transactionHash": "0xabc",
            "args": ["0x5FbDB2315678afecb367f032d93F642f64180aa3"],
            "numDeployments": 3,
        }
        test_file.write_text(json.dumps(data))

        result = parse_hardhat_deployment(test_file)

        assert result["address"] == "0x1234567890123456789012345678901234567890"
        assert result["block"] == 12345  # from receipt.blockNumber
        assert result["abi"] == [{"type": "function", "name": "init"}]
        assert result["transaction_hash"] == "0xabc"
        assert result["constructor_args"] == ["0x5FbDB2315678afecb367f032d93F642f64180aa3"]
        assert result["num_deployments"] == 3

    def test_parses_minimal_file(self, tmp_path: Path):
        """Test parsing with only required fields."""
        test_file = tmp_path / "minimal.json"
        test_file.write_text(
            json.dumps(
                {
                    "address": "0x1234567890123456789012345678901234567890",
                    "receipt": {"blockNumber": 7},
                }
            )
        )

        result = parse_hardhat_deployment(test_file)

        assert result == {
            "address": "0x1234567890123456789012345678901234567890",
            "block": 7,
        }

    def test_falls_back_to_top_level_block_number(self, tmp_path: Path):
        """Test that a top-level blockNumber is used without a receipt."""
        test_file = tmp_path / "toplevel.json"
        test_file.write_text(json.dumps({"address": "0x1", "blockNumber": 99}))

        assert parse_hardhat_deployment(test_file)["block"] == 99

    def test_missing_block_number_raises(self, tmp_path: Path):
        """Test that a file without block number is defective."""
        test_file = tmp_path / "noblock.json"
        test_file.write_text(json.dumps({"address": "0x1", "abi": []}))

        with pytest.raises(DefectiveDeploymentError, match="block number"):
            parse_hardhat_deployment(test_file)

    def test_missing_address_raises(self, tmp_path: Path):
        """Test that a file without address is defective."""
        test_file = tmp_path / "noaddress.json"
        test_file.write_text(json.dumps({"receipt": {"blockNumber": 1}}))

        with pytest.raises(DefectiveDeploymentError, match="address"):
            parse_hardhat_deployment(test_file)

    def test_corrupted_json_raises(self, tmp_path: Path):
        """Test that unreadable JSON is reported as defective."""
        test_file = tmp_path / "corrupted.json"
        test_file.write_text("{ invalid json")

        with pytest.raises(DefectiveDeploymentError):
            parse_hardhat_deployment(test_file)


class TestFindArtifact:
    """Test the find_artifact function."""

    def test_finds_nested_artifact(self, artifacts_dir: Path):
        """Test that artifacts under contracts/<File>.sol/ are found."""
        path = find_artifact(artifacts_dir, "DEX")

        assert path == artifacts_dir / "contracts" / "DEX.sol" / "DEX.json"

    def test_ignores_debug_files(self, artifacts_dir: Path):
        """Test that .dbg.json files are not returned."""
        path = find_artifact(artifacts_dir, "Balloons")

        assert path is not None
        assert not path.name.endswith(".dbg.json")

    def test_missing_contract(self, artifacts_dir: Path):
        """Test that an unknown contract returns None."""
        assert find_artifact(artifacts_dir, "Router") is None

    def test_missing_directory(self, tmp_path: Path):
        """Test that a missing artifacts directory returns None."""
        assert find_artifact(tmp_path / "nope", "DEX") is None


class TestParseHardhatArtifact:
    """Test the parse_hardhat_artifact function."""

    def test_loads_abi_and_bytecode(self, artifacts_dir: Path):
        """Test loading a complete artifact."""
        artifact = parse_hardhat_artifact(artifacts_dir, "DEX")

        assert artifact["contract_name"] == "DEX"
        assert artifact["bytecode"] == "0x6080604053"
        assert any(item.get("name") == "init" for item in artifact["abi"])

    def test_adds_hex_prefix(self, tmp_path: Path):
        """Test that bytecode without 0x prefix is normalized."""
        (tmp_path / "Plain.json").write_text(json.dumps({"abi": [], "bytecode": "6080"}))

        assert parse_hardhat_artifact(tmp_path, "Plain")["bytecode"] == "0x6080"

    def test_missing_artifact_raises(self, artifacts_dir: Path):
        """Test that a missing artifact raises ArtifactNotFoundError."""
        with pytest.raises(ArtifactNotFoundError, match="Router"):
            parse_hardhat_artifact(artifacts_dir, "Router")

    def test_interface_without_bytecode_raises(self, tmp_path: Path):
        """Test that artifacts with empty bytecode cannot be deployed."""
        (tmp_path / "IERC20.json").write_text(json.dumps({"abi": [], "bytecode": "0x"}))

        with pytest.raises(ArtifactNotFoundError, match="no bytecode"):
            parse_hardhat_artifact(tmp_path, "IERC20")

    def test_corrupted_artifact_raises(self, tmp_path: Path):
        """Test that an artifact that is not valid JSON raises ArtifactNotFoundError."""
        (tmp_path / "Balloons.json").write_text("{truncated")

        with pytest.raises(ArtifactNotFoundError, match="Unreadable"):
            parse_hardhat_artifact(tmp_path, "Balloons")
