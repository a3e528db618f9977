"""Deployment plans for the Balloons token and DEX exchange."""

from typing import List

from .config import DeployConfig
from .constants import LOCAL_CHAIN_ID
from .types import DeploymentStep, Ref


def confirmations_for(chain_id: str, count: int) -> int:
    """
    Confirmation policy for a chain.

    A local hardhat node only mines on demand, so waiting for blocks on
    top of a transaction would never finish there.

    Args:
        chain_id: Decimal chain id string
        count: Confirmations wanted on public networks

    Returns:
        0 on the local chain, count elsewhere
    """
    return 0 if str(chain_id) == LOCAL_CHAIN_ID else count


def dex_bootstrap_plan(config: DeployConfig, chain_id: str) -> List[DeploymentStep]:
    """
    Build the plan that deploys Balloons and DEX and seeds the pool.

    1. deploy Balloons
    2. deploy DEX(Balloons)
    3. Balloons.transfer(recipient, transfer_amount)
    4. Balloons.approve(DEX, approve_amount)
    5. DEX.init(init_amount) sending init_amount wei

    Args:
        config: Deployment configuration with recipient and amounts
        chain_id: Decimal chain id string, drives the DEX confirmation count

    Returns:
        Ordered list of steps
    """
    return [
        DeploymentStep.deploy("Balloons"),
        DeploymentStep.deploy(
            "DEX",
            args=[Ref("Balloons")],
            confirmations=confirmations_for(chain_id, config.dex_confirmations),
        ),
        DeploymentStep.call(
            "Balloons",
            "transfer",
            args=[config.liquidity_recipient, config.transfer_amount],
        ),
        DeploymentStep.call(
            "Balloons",
            "approve",
            args=[Ref("DEX"), config.approve_amount],
        ),
        DeploymentStep.call(
            "DEX",
            "init",
            args=[config.init_amount],
            value=config.init_amount,
            gas_limit=config.init_gas_limit,
        ),
    ]
