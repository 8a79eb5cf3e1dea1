"""Deployment confirmation waiter for erc721n-deployments library."""

import logging
from typing import Optional

from web3.exceptions import TimeExhausted

from .constants import DEFAULT_POLL_INTERVAL
from .context import ExecutionContext, web3_errors
from .exceptions import ConfirmationTimeoutError, DeploymentRevertedError
from .types import PendingDeployment

logger = logging.getLogger(__name__)


def await_confirmation(
    ctx: ExecutionContext,
    pending: PendingDeployment,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: Optional[float] = None,
) -> str:
    """
    Block until a contract-creation transaction is included.

    Args:
        ctx: Execution context
        pending: Submitted deployment
        poll_interval: Seconds between receipt polls
        timeout: Seconds to wait before giving up (None waits indefinitely)

    Returns:
        Checksummed address of the deployed contract

    Raises:
        DeploymentRevertedError: If the receipt reports failure or carries no contract address
        ConfirmationTimeoutError: If timeout is given and elapses first
    """
    tx_hash = pending.transaction_hash

    try:
        with web3_errors(f"confirmation of {tx_hash}"):
            receipt = ctx.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=float("inf") if timeout is None else timeout,
                poll_latency=poll_interval,
            )
    except TimeExhausted as e:
        raise ConfirmationTimeoutError(
            f"{pending.artifact_name} deployment {tx_hash} not confirmed after {timeout}s",
            transaction_hash=tx_hash,
        ) from e

    # Pre-Byzantium receipts carry no status field
    if receipt.get("status") == 0:
        raise DeploymentRevertedError(
            f"{pending.artifact_name} deployment {tx_hash} reverted", transaction_hash=tx_hash
        )

    address = receipt.get("contractAddress")
    if not address:
        raise DeploymentRevertedError(
            f"{pending.artifact_name} deployment {tx_hash} created no contract",
            transaction_hash=tx_hash,
        )

    logger.info(
        "%s confirmed at %s (block %s)",
        pending.artifact_name,
        address,
        receipt.get("blockNumber", "?"),
    )
    return address
