"""JSON-RPC chain client for dex-deployments library."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import requests
from eth_utils import to_checksum_address

from .abi import encode_deploy_data, encode_function_call
from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_POLL_INTERVAL, RPC_REQUEST_TIMEOUT
from .contracts import ContractHandle
from .exceptions import ContractNotFoundError, RpcError, TransactionRevertedError
from .parsers import parse_hardhat_artifact
from .paths import get_default_artifacts_dir
from .types import TransactionReceipt

logger = logging.getLogger(__name__)


def parse_receipt(data: Dict[str, Any]) -> TransactionReceipt:
    """
    Convert a raw eth_getTransactionReceipt result.

    Args:
        data: Receipt object with hex quantities

    Returns:
        TransactionReceipt with integer fields

    Raises:
        RpcError: If a required field is missing or not a hex quantity
    """
    try:
        contract_address = data.get("contractAddress")
        gas_used = data.get("gasUsed")
        return TransactionReceipt(
            transaction_hash=data["transactionHash"],
            block_number=int(data["blockNumber"], 16),
            # Pre-byzantium receipts carry no status; treat them as successful
            status=int(data.get("status", "0x1"), 16),
            contract_address=to_checksum_address(contract_address) if contract_address else None,
            gas_used=int(gas_used, 16) if gas_used else None,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise RpcError(f"Malformed transaction receipt: {data!r}") from e


class JsonRpcChainClient:
    """
    Chain client speaking Ethereum JSON-RPC over HTTP.

    Transactions are sent with eth_sendTransaction, so the sender must be
    an account the node manages (hardhat node, anvil, or a node with an
    unlocked account). Contracts are built from hardhat compiler artifacts.
    """

    def __init__(
        self,
        rpc_url: str,
        artifacts_dir: Optional[Union[Path, str]] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        receipt_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            rpc_url: HTTP JSON-RPC endpoint
            artifacts_dir: Hardhat artifacts directory (defaults to ./artifacts)
            poll_interval: Seconds between receipt / block number polls
            receipt_timeout: Seconds to wait for a submitted transaction to be mined
            session: Optional requests session to reuse connections
        """
        self.rpc_url = rpc_url
        self._artifacts_dir = (
            Path(artifacts_dir) if artifacts_dir is not None else get_default_artifacts_dir()
        )
        self._poll_interval = poll_interval
        self._receipt_timeout = receipt_timeout
        self._session = session or requests.Session()
        self._request_id = 0

        # Artifact cache: contract name -> {abi, bytecode}
        self._artifacts: Dict[str, Dict[str, Any]] = {}
        # Known contracts: checksummed address -> contract name
        self._contracts: Dict[str, str] = {}

    def request(self, method: str, params: List[Any]) -> Any:
        """
        Perform a single JSON-RPC call.

        Raises:
            RpcError: On network errors, HTTP errors or RPC error objects
        """
        self._request_id += 1
        try:
            response = self._session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params,
                    "id": self._request_id,
                },
                timeout=RPC_REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise RpcError(f"Network error during {method}: {e}") from e

        if response.status_code != 200:
            raise RpcError(f"{method} failed with HTTP status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"{method} returned a non-JSON response") from e
        if not isinstance(result, dict):
            raise RpcError(f"{method} returned an unexpected response: {result!r}")

        if "error" in result:
            error = result["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"{method} rejected: {message}")

        return result.get("result")

    def _request_quantity(self, method: str) -> int:
        value = self.request(method, [])
        try:
            return int(value, 16)
        except (TypeError, ValueError) as e:
            raise RpcError(f"{method} returned a non-hex quantity: {value!r}") from e

    def get_chain_id(self) -> str:
        """Return the chain id as a decimal string, e.g. "31337"."""
        return str(self._request_quantity("eth_chainId"))

    def get_named_accounts(self) -> Dict[str, str]:
        """
        Return the accounts the node manages, keyed by role.

        Raises:
            RpcError: If the node exposes no accounts
        """
        accounts = self.request("eth_accounts", [])
        if not accounts:
            raise RpcError("Node exposes no accounts; configure a deployer address")
        return {"deployer": to_checksum_address(accounts[0])}

    def block_number(self) -> int:
        return self._request_quantity("eth_blockNumber")

    def artifact(self, name: str) -> Dict[str, Any]:
        """Load (and cache) the compiler artifact of a contract."""
        if name not in self._artifacts:
            self._artifacts[name] = parse_hardhat_artifact(self._artifacts_dir, name)
        return self._artifacts[name]

    def contract_abi(self, name: str) -> List[Dict[str, Any]]:
        return self.artifact(name)["abi"]

    def register_contract(self, name: str, address: str) -> None:
        """Associate an address with the artifact used to call it."""
        self._contracts[to_checksum_address(address)] = name

    def address_of(self, name: str) -> str:
        """
        Get the address registered for a contract name.

        Raises:
            ContractNotFoundError: If the name was never deployed or registered
        """
        for address, contract_name in self._contracts.items():
            if contract_name == name:
                return address
        raise ContractNotFoundError(f"No address known for contract '{name}'")

    def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        data = self.request("eth_getTransactionReceipt", [tx_hash])
        return parse_receipt(data) if data else None

    def wait_for_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> TransactionReceipt:
        """
        Poll until a transaction is mined.

        Raises:
            TimeoutError: If no receipt appears before the timeout
            TransactionRevertedError: If the transaction reverted
        """
        if timeout is None:
            timeout = self._receipt_timeout
        deadline = time.monotonic() + timeout

        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                if receipt.status != 1:
                    raise TransactionRevertedError(
                        f"Transaction {tx_hash} reverted in block {receipt.block_number}"
                    )
                return receipt
            if time.monotonic() >= deadline:
                raise TimeoutError(f"Transaction {tx_hash} not mined after {timeout}s")
            time.sleep(self._poll_interval)

    def send_transaction(self, tx: Dict[str, Any]) -> TransactionReceipt:
        """Submit a transaction from a node-managed account and wait for its receipt."""
        tx_hash = self.request("eth_sendTransaction", [tx])
        logger.debug("Submitted transaction %s", tx_hash)
        return self.wait_for_receipt(tx_hash)

    def deploy_contract(
        self, name: str, constructor_args: List[Any], sender: str
    ) -> Tuple[str, TransactionReceipt]:
        """
        Deploy a contract from its artifact.

        Args:
            name: Contract (artifact) name
            constructor_args: Resolved constructor arguments
            sender: Deployer address

        Returns:
            Tuple of (address, receipt)
        """
        artifact = self.artifact(name)
        data = encode_deploy_data(artifact["bytecode"], artifact["abi"], constructor_args)

        receipt = self.send_transaction({"from": sender, "data": data})
        if receipt.contract_address is None:
            raise TransactionRevertedError(
                f"Deployment of {name} in {receipt.transaction_hash} created no contract"
            )

        self.register_contract(name, receipt.contract_address)
        return receipt.contract_address, receipt

    def call_contract(
        self,
        address: str,
        method: str,
        args: List[Any],
        sender: str,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> TransactionReceipt:
        """
        Send a state-changing call to a deployed contract.

        Args:
            address: Contract address, registered through deploy or register_contract
            method: Function name
            args: Resolved function arguments
            sender: Caller address
            value: Wei to send with the call
            gas_limit: Explicit gas limit, node estimate if omitted

        Returns:
            Receipt of the mined call
        """
        address = to_checksum_address(address)
        if address not in self._contracts:
            raise ContractNotFoundError(f"No artifact registered for address {address}")

        abi = self.artifact(self._contracts[address])["abi"]
        tx: Dict[str, Any] = {
            "from": sender,
            "to": address,
            "data": encode_function_call(abi, method, args),
        }
        if value is not None:
            tx["value"] = hex(value)
        if gas_limit is not None:
            tx["gas"] = hex(gas_limit)

        return self.send_transaction(tx)

    def wait_for_confirmations(self, tx_hash: str, count: int, timeout: float) -> int:
        """
        Wait until `count` blocks are mined on top of the transaction's block.

        Args:
            tx_hash: Transaction hash
            count: Number of additional blocks required
            timeout: Seconds to wait

        Returns:
            Block number containing the transaction

        Raises:
            TimeoutError: If the confirmations are not observed in time
        """
        deadline = time.monotonic() + timeout

        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None and self.block_number() >= receipt.block_number + count:
                return receipt.block_number
            if time.monotonic() >= deadline:
                raise TimeoutError(
                    f"Transaction {tx_hash} did not reach {count} confirmation(s) in {timeout}s"
                )
            time.sleep(self._poll_interval)

    def get_contract_handle(self, name: str, sender: str) -> ContractHandle:
        """Return a proxy that sends calls to the deployed contract as `sender`."""
        address = self.address_of(name)
        return ContractHandle(self, name, address, self.artifact(name)["abi"], sender)
