"""Deployment sequencer: runs an ordered plan of deploys and calls."""

import dataclasses
import logging
from typing import Any, Iterable, List, Set

from .exceptions import (
    ChainClientError,
    ConfirmationTimeoutError,
    DeploymentError,
    InvalidPlanError,
    SubmissionFailureError,
    UnresolvedReferenceError,
)
from .types import (
    ChainContext,
    DeploymentLedger,
    DeploymentRecord,
    DeploymentStep,
    Ref,
    StepKind,
    StepStatus,
    TransactionReceipt,
)

logger = logging.getLogger(__name__)


def validate_plan(steps: List[DeploymentStep]) -> None:
    """
    Check a plan before anything is sent to the chain.

    A valid plan is non-empty, has unique step names, only references
    steps that come strictly earlier, and gives every step the fields its
    kind needs.

    Args:
        steps: Ordered list of steps

    Raises:
        InvalidPlanError: On the first violation found
    """
    if not steps:
        raise InvalidPlanError("Deployment plan has no steps")

    seen: Set[str] = set()
    for position, step in enumerate(steps):
        if not isinstance(step, DeploymentStep):
            raise InvalidPlanError(f"Item {position} is not a DeploymentStep: {step!r}")
        if not step.name:
            raise InvalidPlanError(f"Step {position} has no name")
        if step.name in seen:
            raise InvalidPlanError(f"Duplicate step name '{step.name}'")

        confirmations = step.confirmations
        if isinstance(confirmations, bool) or not isinstance(confirmations, int) or confirmations < 0:
            raise InvalidPlanError(
                f"Step '{step.name}' needs a non-negative confirmation count, got {confirmations!r}"
            )

        match step.kind:
            case StepKind.DEPLOY:
                if not step.contract:
                    raise InvalidPlanError(f"Deploy step '{step.name}' has no contract name")
            case StepKind.CALL:
                if step.target is None or not step.method:
                    raise InvalidPlanError(f"Call step '{step.name}' needs a target and a method")
            case _:
                raise InvalidPlanError(f"Step '{step.name}' has unknown kind {step.kind!r}")

        for field_name in ("value", "gas_limit"):
            amount = getattr(step, field_name)
            if amount is not None and (not isinstance(amount, int) or amount < 0):
                raise InvalidPlanError(f"Step '{step.name}' has invalid {field_name} {amount!r}")

        for ref in step.references():
            if ref.step not in seen:
                raise InvalidPlanError(
                    f"Step '{step.name}' references '{ref.step}', which does not run before it"
                )

        seen.add(step.name)


def resolve_ref(ref: Ref, step: DeploymentStep, ledger: DeploymentLedger) -> str:
    """
    Resolve a reference to the address recorded for an earlier step.

    Raises:
        UnresolvedReferenceError: If the step has no successful record with an address
    """
    record = ledger.get(ref.step)
    if record is None or not record.succeeded:
        raise UnresolvedReferenceError(
            f"Step '{step.name}' references '{ref.step}', which has no successful record"
        )
    if record.address is None:
        raise UnresolvedReferenceError(
            f"Step '{step.name}' references '{ref.step}', which produced no address"
        )
    return record.address


def resolve_args(step: DeploymentStep, ledger: DeploymentLedger) -> List[Any]:
    """Replace every Ref in a step's arguments with the referenced address."""
    return [
        resolve_ref(arg, step, ledger) if isinstance(arg, Ref) else arg for arg in step.args
    ]


def _confirm(step: DeploymentStep, receipt: TransactionReceipt, context: ChainContext) -> int:
    # Returns the block number of the transaction once enough blocks are on top
    if step.confirmations == 0:
        return receipt.block_number

    logger.info(
        "waiting for %d confirmation(s) of %s (tx: %s)",
        step.confirmations,
        step.name,
        receipt.transaction_hash,
    )
    try:
        return context.client.wait_for_confirmations(
            receipt.transaction_hash, step.confirmations, context.confirmation_timeout
        )
    except (TimeoutError, ChainClientError) as e:
        raise ConfirmationTimeoutError(
            f"{step.name}: {step.confirmations} confirmation(s) not observed: {e}",
            transaction_hash=receipt.transaction_hash,
        ) from e


def _same_args(stored: Iterable[Any], resolved: Iterable[Any]) -> bool:
    # hardhat-deploy writes numbers as decimal strings and addresses in any case
    return [str(a).lower() for a in stored] == [str(a).lower() for a in resolved]


def _deploy(step: DeploymentStep, args: List[Any], context: ChainContext) -> DeploymentRecord:
    if context.store is not None:
        stored = context.store.load(context.network, step.name)
        if stored is not None and _same_args(stored.args, args):
            logger.info('reusing "%s" at %s', step.name, stored.address)
            context.client.register_contract(step.contract, stored.address)
            return dataclasses.replace(stored, reused=True)
        if stored is not None:
            logger.info('constructor arguments of "%s" changed, redeploying', step.name)

    logger.info('deploying "%s"', step.name)
    try:
        abi = context.client.contract_abi(step.contract)
        address, receipt = context.client.deploy_contract(step.contract, args, context.sender)
    except ChainClientError as e:
        raise SubmissionFailureError(f"Deployment of {step.name} failed: {e}") from e
    except TimeoutError as e:
        raise ConfirmationTimeoutError(f"Deployment of {step.name} was not mined: {e}") from e

    block_number = _confirm(step, receipt, context)
    logger.info(
        'deployed "%s" (tx: %s) at %s with %s gas',
        step.name,
        receipt.transaction_hash,
        address,
        receipt.gas_used,
    )

    record = DeploymentRecord(
        name=step.name,
        kind=StepKind.DEPLOY,
        status=StepStatus.SUCCESS,
        address=address,
        transaction_hash=receipt.transaction_hash,
        block_number=block_number,
        args=tuple(args),
    )
    if context.store is not None:
        context.store.save(context.network, step.name, record, abi=abi)
    return record


def _call(
    step: DeploymentStep, args: List[Any], context: ChainContext, ledger: DeploymentLedger
) -> DeploymentRecord:
    address = resolve_ref(step.target, step, ledger)

    logger.info("calling %s on %s", step.name, address)
    try:
        receipt = context.client.call_contract(
            address,
            step.method,
            args,
            context.sender,
            value=step.value,
            gas_limit=step.gas_limit,
        )
    except ChainClientError as e:
        raise SubmissionFailureError(f"Call {step.name} failed: {e}") from e
    except TimeoutError as e:
        raise ConfirmationTimeoutError(f"Call {step.name} was not mined: {e}") from e

    block_number = _confirm(step, receipt, context)
    logger.info("%s mined in block %d (tx: %s)", step.name, block_number, receipt.transaction_hash)

    return DeploymentRecord(
        name=step.name,
        kind=StepKind.CALL,
        status=StepStatus.SUCCESS,
        transaction_hash=receipt.transaction_hash,
        block_number=block_number,
        args=tuple(args),
    )


def run(steps: Iterable[DeploymentStep], context: ChainContext) -> DeploymentLedger:
    """
    Execute a deployment plan step by step.

    Steps run strictly in order. Deploy steps already present in
    context.store for context.network are reused instead of redeployed.
    The first failing step is recorded with FAILED status and halts the run.

    Args:
        steps: Ordered deployment steps
        context: Chain client, sender, network and storage shared by all steps

    Returns:
        Ledger with one successful record per step, in plan order

    Raises:
        InvalidPlanError: Before any chain call, if the plan is malformed or
            context.store holds deployments of another chain for context.network
        UnresolvedReferenceError: If a reference has no usable address
        SubmissionFailureError: If the chain client rejected a deploy or call
        ConfirmationTimeoutError: If a transaction's outcome could not be confirmed
    """
    steps = list(steps)
    validate_plan(steps)

    if context.store is not None and context.chain_id is not None:
        stored_chain_id = context.store.load_chain_id(context.network)
        if stored_chain_id is not None and stored_chain_id != str(context.chain_id):
            stored_names = ", ".join(context.store.names(context.network)) or "no contracts"
            raise InvalidPlanError(
                f"Deployments for '{context.network}' ({stored_names}) belong to chain "
                f"{stored_chain_id}, not {context.chain_id}"
            )
        context.store.save_chain_id(context.network, context.chain_id)

    ledger = DeploymentLedger()

    logger.info(
        "Running %d step(s) on %s as %s", len(steps), context.network, context.sender
    )

    for step in steps:
        try:
            args = resolve_args(step, ledger)
            if step.kind is StepKind.DEPLOY:
                record = _deploy(step, args, context)
            else:
                record = _call(step, args, context, ledger)
        except DeploymentError as e:
            ledger.append(
                DeploymentRecord(
                    name=step.name,
                    kind=step.kind,
                    status=StepStatus.FAILED,
                    transaction_hash=e.transaction_hash,
                    error=str(e),
                )
            )
            e.step_name = step.name
            e.ledger = ledger
            logger.error("%s failed (%s): %s", step.name, type(e).__name__, e)
            raise

        ledger.append(record)

    logger.info("Completed %d step(s) on %s", len(ledger), context.network)
    return ledger
