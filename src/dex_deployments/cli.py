"""Command line entry point: deploy and bootstrap Balloons and DEX."""

import argparse
import logging
from typing import List, Optional

from .config import DeployConfig
from .constants import DEFAULT_NETWORK, NETWORK_CONFIG
from .exceptions import ChainClientError, ConfirmationTimeoutError, DeploymentError
from .plans import dex_bootstrap_plan
from .rpc import JsonRpcChainClient
from .sequencer import run
from .storage import DeploymentStore
from .types import ChainContext, DeploymentLedger

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
# The last transaction may still confirm; the caller has to reconcile first
EXIT_UNCONFIRMED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dex-deploy",
        description="Deploy the Balloons token and DEX contracts and seed the pool.",
    )
    parser.add_argument(
        "--network",
        default=DEFAULT_NETWORK,
        choices=sorted(NETWORK_CONFIG),
        help="Target network (default: %(default)s)",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint, overrides the network's env var")
    parser.add_argument("--deployer", help="Sender address, defaults to the node's first account")
    parser.add_argument("--deployments-dir", help="hardhat-deploy deployments directory")
    parser.add_argument("--artifacts-dir", help="hardhat artifacts directory")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for receipts and confirmations",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    return parser


def format_ledger(ledger: DeploymentLedger) -> str:
    """Render a ledger as one line per step."""
    lines = []
    for record in ledger.records():
        detail = record.address or record.transaction_hash or "-"
        suffix = " (reused)" if record.reused else ""
        if record.error:
            suffix = f" ({record.error})"
        lines.append(f"{record.status.value:<8} {record.name:<20} {detail}{suffix}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DeployConfig.from_env(
            args.network,
            rpc_url=args.rpc_url,
            deployer=args.deployer,
            deployments_dir=args.deployments_dir,
            artifacts_dir=args.artifacts_dir,
            confirmation_timeout=args.timeout,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FAILED

    client = JsonRpcChainClient(
        config.rpc_url,
        config.artifacts_dir,
        poll_interval=config.poll_interval,
        receipt_timeout=config.confirmation_timeout,
    )

    try:
        chain_id = client.get_chain_id()
        sender = config.deployer or client.get_named_accounts()["deployer"]
    except ChainClientError as e:
        logger.error("Cannot reach %s at %s: %s", config.network, config.rpc_url, e)
        return EXIT_FAILED

    logger.info("Connected to %s (chain id %s), deployer %s", config.network, chain_id, sender)

    context = ChainContext(
        client=client,
        sender=sender,
        network=config.network,
        chain_id=chain_id,
        store=DeploymentStore(config.deployments_dir),
        confirmation_timeout=config.confirmation_timeout,
    )

    try:
        ledger = run(dex_bootstrap_plan(config, chain_id), context)
    except ConfirmationTimeoutError as e:
        logger.error(
            "Outcome of %s unknown (tx: %s); check the chain before re-running",
            e.step_name,
            e.transaction_hash,
        )
        print(format_ledger(e.ledger))
        return EXIT_UNCONFIRMED
    except DeploymentError as e:
        logger.error("Deployment failed at %s: %s", e.step_name or "plan validation", e)
        if e.ledger is not None:
            print(format_ledger(e.ledger))
        return EXIT_FAILED

    print(format_ledger(ledger))
    return EXIT_OK
