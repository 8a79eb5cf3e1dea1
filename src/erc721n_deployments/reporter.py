"""Cost and outcome reporting for erc721n-deployments library."""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from eth_utils import from_wei

from .types import Account, DeploymentRecord, NetworkIdentity, Summary

logger = logging.getLogger(__name__)


def format_ether(wei: int) -> str:
    """Render a wei amount as ether, e.g. 1500000000000000 -> "0.0015 ETH"."""
    # from_wei rejects negatives and returns a plain int for zero
    sign = "-" if wei < 0 else ""
    ether = Decimal(from_wei(abs(wei), "ether")).normalize()
    return f"{sign}{ether:f} ETH"


def report(
    before: Account,
    after: Account,
    records: Sequence[DeploymentRecord],
    network: Optional[NetworkIdentity] = None,
) -> Summary:
    """
    Summarise a deployment run.

    Cost is before.balance - after.balance. A negative cost means the
    balance rose during the run (a transfer in, or an accounting error);
    it is reported as-is with a warning.

    Args:
        before: Signing account read before the first deployment
        after: Signing account read after the last confirmation
        records: Confirmed deployments, in plan order
        network: Network the run targeted

    Returns:
        Summary
    """
    cost = before.balance - after.balance
    warnings = []

    if before.address != after.address:
        warnings.append(
            f"Balance read from different accounts: {before.address} then {after.address}"
        )
    if cost < 0:
        warnings.append(
            f"Negative deployment cost {cost} wei: balance of {after.address} increased "
            "during the run"
        )

    for warning in warnings:
        logger.warning(warning)

    return Summary(
        network=network,
        deployer=before.address,
        records=list(records),
        cost=cost,
        warnings=warnings,
    )


def format_summary(summary: Summary) -> str:
    """Human-readable, multi-line rendering of a Summary."""
    lines = []
    if summary.network is not None:
        lines.append(f"Network: {summary.network.name} (chain id {summary.network.chain_id})")
    lines.append(f"Deployer: {summary.deployer}")
    for record in summary.records:
        lines.append(f"{record.artifact_name} deployed to: {record.address}")
    lines.append(f"Total cost: {format_ether(summary.cost)} ({summary.cost} wei)")
    for warning in summary.warnings:
        lines.append(f"WARNING: {warning}")
    return "\n".join(lines)


def save_summary(summary: Summary, output_path: Path) -> None:
    """
    Write a Summary as JSON.

    Creates parent directories if they don't exist.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(summary.to_dict(), f, indent=2)
