"""Shared pytest fixtures for dex-deployments tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from dex_deployments.contracts import ContractHandle
from dex_deployments.exceptions import ContractNotFoundError, TransactionRevertedError
from dex_deployments.storage import DeploymentStore
from dex_deployments.types import ChainContext, TransactionReceipt

DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
RECIPIENT = "0x047821dc2b13f680fed9b006f0868be43acf4fe6"

BALLOONS_ABI: List[Dict[str, Any]] = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "approve",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
]

DEX_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [{"name": "token_addr", "type": "address"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "init",
        "inputs": [{"name": "tokens", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "payable",
    },
]


ABIS = {"Balloons": BALLOONS_ABI, "DEX": DEX_ABI}


class FakeChainClient:
    """In-memory chain client recording every submission."""

    def __init__(self) -> None:
        self.block = 100
        self.submissions: List[Tuple[Any, ...]] = []
        self.waits: List[Tuple[str, int, float]] = []
        self.contracts: Dict[str, str] = {}  # address -> contract name
        self.fail_on: set = set()  # contract names or method names that revert
        self.timeout_on_wait = False
        self._tx_blocks: Dict[str, int] = {}
        self._nonce = 0

    def _mine(self) -> Tuple[str, int]:
        self._nonce += 1
        self.block += 1
        tx_hash = f"0x{self._nonce:064x}"
        self._tx_blocks[tx_hash] = self.block
        return tx_hash, self.block

    def deploy_contract(
        self, name: str, constructor_args: List[Any], sender: str
    ) -> Tuple[str, TransactionReceipt]:
        self.submissions.append(("deploy", name, list(constructor_args), sender))
        if name in self.fail_on:
            raise TransactionRevertedError(f"{name} constructor reverted")
        tx_hash, block = self._mine()
        address = f"0x{0xC0DE0000 + self._nonce:040x}"
        self.contracts[address] = name
        return address, TransactionReceipt(tx_hash, block, 1, address, 500000)

    def call_contract(
        self,
        address: str,
        method: str,
        args: List[Any],
        sender: str,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> TransactionReceipt:
        self.submissions.append(("call", address, method, list(args), sender, value, gas_limit))
        if address not in self.contracts:
            raise ContractNotFoundError(f"No contract at {address}")
        if method in self.fail_on:
            raise TransactionRevertedError(f"{method} reverted")
        tx_hash, block = self._mine()
        return TransactionReceipt(tx_hash, block, 1, None, 50000)

    def wait_for_confirmations(self, tx_hash: str, count: int, timeout: float) -> int:
        self.waits.append((tx_hash, count, timeout))
        if self.timeout_on_wait:
            raise TimeoutError(f"{tx_hash} not confirmed")
        return self._tx_blocks[tx_hash]

    def register_contract(self, name: str, address: str) -> None:
        self.contracts[address] = name

    def contract_abi(self, name: str) -> List[Dict[str, Any]]:
        return ABIS.get(name, [])

    def get_contract_handle(self, name: str, sender: str) -> ContractHandle:
        for address, contract_name in self.contracts.items():
            if contract_name == name:
                return ContractHandle(self, name, address, BALLOONS_ABI + DEX_ABI, sender)
        raise ContractNotFoundError(name)


@pytest.fixture
def fake_client() -> FakeChainClient:
    """Return a fresh in-memory chain client."""
    return FakeChainClient()


@pytest.fixture
def deployments_dir(tmp_path: Path) -> Path:
    """Return a temporary hardhat-deploy deployments directory."""
    path = tmp_path / "deployments"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def store(deployments_dir: Path) -> DeploymentStore:
    """Return a deployment store backed by a temporary directory."""
    return DeploymentStore(deployments_dir)


@pytest.fixture
def context(fake_client: FakeChainClient, store: DeploymentStore) -> ChainContext:
    """Return a chain context on a public-like network with storage."""
    return ChainContext(
        client=fake_client,
        sender=DEPLOYER,
        network="sepolia",
        chain_id="11155111",
        store=store,
        confirmation_timeout=5.0,
    )


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Create hardhat artifacts for Balloons and DEX."""
    root = tmp_path / "artifacts"
    for name, abi, bytecode in [
        ("Balloons", BALLOONS_ABI, "0x6080604052"),
        ("DEX", DEX_ABI, "0x6080604053"),
    ]:
        contract_dir = root / "contracts" / f"{name}.sol"
        contract_dir.mkdir(parents=True, exist_ok=True)
        (contract_dir / f"{name}.json").write_text(
            json.dumps({"contractName": name, "abi": abi, "bytecode": bytecode})
        )
        (contract_dir / f"{name}.dbg.json").write_text(json.dumps({"buildInfo": "x"}))
    return root


class FakeNode:
    """JSON-RPC node double for `responses` callbacks, mining one block per transaction."""

    def __init__(self, chain_id: int = 31337, accounts: Optional[List[str]] = None):
        self.chain_id = chain_id
        self.accounts = [DEPLOYER.lower()] if accounts is None else accounts
        self.block = 1
        self.sent: List[Dict[str, Any]] = []
        self.receipts: Dict[str, Dict[str, Any]] = {}
        self.revert_data_prefixes: List[str] = []

    def handle(self, request):
        body = json.loads(request.body)
        method, params = body["method"], body["params"]
        handler = getattr(self, method, None)
        if handler is None:
            error = {"code": -32601, "message": f"{method} not supported"}
            payload = {"jsonrpc": "2.0", "id": body["id"], "error": error}
        else:
            payload = {"jsonrpc": "2.0", "id": body["id"], "result": handler(*params)}
        return (200, {}, json.dumps(payload))

    def eth_chainId(self):
        return hex(self.chain_id)

    def eth_accounts(self):
        return self.accounts

    def eth_blockNumber(self):
        return hex(self.block)

    def eth_sendTransaction(self, tx):
        self.sent.append(tx)
        self.block += 1
        tx_hash = f"0x{len(self.sent):064x}"
        reverted = any(tx["data"].startswith(p) for p in self.revert_data_prefixes)
        receipt = {
            "transactionHash": tx_hash,
            "blockNumber": hex(self.block),
            "status": "0x0" if reverted else "0x1",
            "gasUsed": hex(21000),
            "contractAddress": None,
        }
        if "to" not in tx:
            receipt["contractAddress"] = f"0x{0xDE9100 + len(self.sent):040x}"
        self.receipts[tx_hash] = receipt
        return tx_hash

    def eth_getTransactionReceipt(self, tx_hash):
        return self.receipts.get(tx_hash)
