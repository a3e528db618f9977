"""Custom exception classes for dex-deployments library."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .types import DeploymentLedger


class DeploymentError(Exception):
    """
    Base exception for errors that halt a deployment run.

    Carries the name of the step that failed (if any), the ledger as it
    stood when the run stopped, and the hash of a transaction whose outcome
    the caller has to check.
    """

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        ledger: Optional["DeploymentLedger"] = None,
        transaction_hash: Optional[str] = None,
    ):
        super().__init__(message)
        self.step_name = step_name
        self.ledger = ledger
        self.transaction_hash = transaction_hash


class InvalidPlanError(DeploymentError, ValueError):
    """Raised when a step list is malformed; no chain call has been made."""

    pass


class UnresolvedReferenceError(DeploymentError, LookupError):
    """Raised when a step argument references a step with no usable address."""

    pass


class SubmissionFailureError(DeploymentError, RuntimeError):
    """Raised when the chain client rejected a deploy or call."""

    pass


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when required confirmations were not observed in time.

    The transaction may still confirm later.
    """

    pass


class ChainClientError(Exception):
    """Base exception for errors raised by a chain client."""

    pass


class RpcError(ChainClientError, RuntimeError):
    """Raised when a JSON-RPC request fails or returns an error object."""

    pass


class TransactionRevertedError(ChainClientError, RuntimeError):
    """Raised when a mined transaction has a failed status."""

    pass


class ArtifactNotFoundError(ChainClientError, FileNotFoundError):
    """Raised when no usable compiler artifact exists for a contract name."""

    pass


class AbiError(ChainClientError, ValueError):
    """Raised when a method or constructor cannot be encoded against an ABI."""

    pass


class ContractNotFoundError(ChainClientError, LookupError):
    """Raised when no address is known for a contract name."""

    pass


class DefectiveDeploymentError(ValueError):
    """Raised when a hardhat deployment file is missing required fields."""

    pass
