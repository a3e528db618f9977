"""
dex-deployments: deploy and bootstrap the Balloons token and DEX contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DeployConfig
from .exceptions import (
    ChainClientError,
    ConfirmationTimeoutError,
    DeploymentError,
    InvalidPlanError,
    SubmissionFailureError,
    UnresolvedReferenceError,
)
from .plans import confirmations_for, dex_bootstrap_plan
from .rpc import JsonRpcChainClient
from .sequencer import run, validate_plan
from .storage import DeploymentStore
from .types import (
    ChainContext,
    DeploymentLedger,
    DeploymentRecord,
    DeploymentStep,
    Ref,
    StepKind,
    StepStatus,
)

try:
    __version__ = version("dex-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "run",
    "validate_plan",
    "dex_bootstrap_plan",
    "confirmations_for",
    "DeployConfig",
    "DeploymentStore",
    "JsonRpcChainClient",
    "ChainContext",
    "DeploymentStep",
    "DeploymentRecord",
    "DeploymentLedger",
    "Ref",
    "StepKind",
    "StepStatus",
    "DeploymentError",
    "InvalidPlanError",
    "UnresolvedReferenceError",
    "SubmissionFailureError",
    "ConfirmationTimeoutError",
    "ChainClientError",
]
