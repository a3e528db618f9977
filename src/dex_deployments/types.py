"""Data types and dataclasses for dex-deployments library."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Protocol, Tuple

from .constants import DEFAULT_CONFIRMATION_TIMEOUT

if TYPE_CHECKING:
    from .contracts import ContractHandle
    from .storage import DeploymentStore


class StepKind(Enum):
    """
    What a step does on chain.

    - DEPLOY: creates a contract instance and yields its address
    - CALL: invokes a method on an already deployed contract
    """

    DEPLOY = "deploy"
    CALL = "call"


class StepStatus(Enum):
    """Outcome of an executed step."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Ref:
    """Reference to the address produced by an earlier step."""

    step: str

    def __str__(self) -> str:
        return f"ref({self.step})"


@dataclass(frozen=True)
class DeploymentStep:
    """A single deploy or call in a deployment plan."""

    name: str  # Unique within a plan, e.g. "Balloons" or "Balloons.approve"
    kind: StepKind = StepKind.DEPLOY
    args: Tuple[Any, ...] = ()  # Literals or Ref instances
    confirmations: int = 0  # Blocks to wait on top of the transaction's block

    # Deploy steps
    contract: Optional[str] = None  # Artifact name, defaults to name

    # Call steps
    target: Optional[Ref] = None  # Step whose address is called
    method: Optional[str] = None
    value: Optional[int] = None  # Wei sent along with the call
    gas_limit: Optional[int] = None

    @classmethod
    def deploy(
        cls,
        name: str,
        args: Optional[List[Any]] = None,
        confirmations: int = 0,
        contract: Optional[str] = None,
    ) -> "DeploymentStep":
        return cls(
            name=name,
            kind=StepKind.DEPLOY,
            args=tuple(args or ()),
            confirmations=confirmations,
            contract=contract or name,
        )

    @classmethod
    def call(
        cls,
        target: str,
        method: str,
        args: Optional[List[Any]] = None,
        confirmations: int = 0,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
        name: Optional[str] = None,
    ) -> "DeploymentStep":
        return cls(
            name=name or f"{target}.{method}",
            kind=StepKind.CALL,
            args=tuple(args or ()),
            confirmations=confirmations,
            target=Ref(target),
            method=method,
            value=value,
            gas_limit=gas_limit,
        )

    def references(self) -> List[Ref]:
        """Return every Ref the step depends on, target included."""
        refs = [arg for arg in self.args if isinstance(arg, Ref)]
        if self.target is not None:
            refs.insert(0, self.target)
        return refs


@dataclass(frozen=True)
class TransactionReceipt:
    """The fields of a mined transaction receipt the sequencer relies on."""

    transaction_hash: str
    block_number: int
    status: int  # 1 success, 0 reverted
    contract_address: Optional[str] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True)
class DeploymentRecord:
    """Outcome of one executed step."""

    # Required fields
    name: str
    kind: StepKind
    status: StepStatus

    # Optional fields
    address: Optional[str] = None  # Deployed address (deploy steps)
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    args: Tuple[Any, ...] = ()  # Resolved arguments
    reused: bool = False  # True when an earlier deployment was found in storage
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is StepStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "status": self.status.value,
            "address": self.address,
            "transaction_hash": self.transaction_hash,
            "block_number": self.block_number,
            "args": list(self.args),
            "reused": self.reused,
            "error": self.error,
        }


class DeploymentLedger(Mapping):
    """
    Ordered, append-only mapping from step name to DeploymentRecord.

    Iteration follows the order in which records were appended.
    """

    def __init__(self) -> None:
        self._records: Dict[str, DeploymentRecord] = {}

    def append(self, record: DeploymentRecord) -> None:
        """
        Add a record for a step that has not been recorded yet.

        Raises:
            ValueError: If the step already has a record
        """
        if record.name in self._records:
            raise ValueError(f"Step '{record.name}' already has a record")
        self._records[record.name] = record

    def __getitem__(self, name: str) -> DeploymentRecord:
        return self._records[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"DeploymentLedger({list(self._records)!r})"

    def records(self) -> List[DeploymentRecord]:
        return list(self._records.values())

    def snapshot(self) -> List[Dict[str, Any]]:
        """Return the ledger as a list of plain dictionaries, in order."""
        return [record.to_dict() for record in self._records.values()]


class ChainClient(Protocol):
    """Interface the sequencer needs from a chain client."""

    def deploy_contract(
        self, name: str, constructor_args: List[Any], sender: str
    ) -> Tuple[str, TransactionReceipt]:
        ...

    def call_contract(
        self,
        address: str,
        method: str,
        args: List[Any],
        sender: str,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> TransactionReceipt:
        ...

    def wait_for_confirmations(self, tx_hash: str, count: int, timeout: float) -> int:
        ...

    def register_contract(self, name: str, address: str) -> None:
        ...

    def contract_abi(self, name: str) -> List[Dict[str, Any]]:
        ...

    def get_contract_handle(self, name: str, sender: str) -> "ContractHandle":
        ...


@dataclass(frozen=True)
class ChainContext:
    """Shared, read-only context passed to every step of a run."""

    client: ChainClient
    sender: str
    network: str
    chain_id: Optional[str] = None
    store: Optional["DeploymentStore"] = None
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
