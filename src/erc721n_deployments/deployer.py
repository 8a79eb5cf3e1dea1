"""Dependency-ordered contract deployer for erc721n-deployments library."""

import logging
from typing import Any, List, Optional, Sequence

from eth_utils import to_hex

from .artifacts import ArtifactStore, check_constructor_args
from .confirmation import await_confirmation
from .constants import DEFAULT_POLL_INTERVAL, GAS_ESTIMATE_MULTIPLIER
from .context import ExecutionContext, read_chain_id, web3_errors
from .exceptions import DeploymentFailedError, UnresolvedReferenceError
from .types import Artifact, DeploymentRecord, DeploymentSpec, PendingDeployment, Reference

logger = logging.getLogger(__name__)


def validate_specs(specs: Sequence[DeploymentSpec]) -> None:
    """
    Check that every reference points at an earlier spec.

    Runs before anything is submitted, so an ordering mistake in a plan
    never leaves half a deployment behind.

    Raises:
        UnresolvedReferenceError: On a self, forward or negative reference
    """
    for position, spec in enumerate(specs):
        for index in spec.references():
            if not 0 <= index < position:
                raise UnresolvedReferenceError(
                    f"Spec {position} ({spec.artifact_name}) references spec {index}; "
                    f"only specs 0..{position - 1} are deployed before it"
                )


def resolve_args(spec: DeploymentSpec, records: Sequence[DeploymentRecord]) -> List[Any]:
    """
    Substitute references with the addresses of already-deployed contracts.

    Raises:
        UnresolvedReferenceError: If a reference has no record yet
    """
    resolved = []
    for arg in spec.constructor_args:
        if isinstance(arg, Reference):
            if not 0 <= arg.index < len(records):
                raise UnresolvedReferenceError(
                    f"{spec.artifact_name} references spec {arg.index}, "
                    f"but only {len(records)} contract(s) are deployed"
                )
            resolved.append(records[arg.index].address)
        else:
            resolved.append(arg.value)
    return resolved


def submit_deployment(
    ctx: ExecutionContext,
    artifact: Artifact,
    args: Sequence[Any],
    chain_id: Optional[int] = None,
) -> PendingDeployment:
    """
    Sign and send a contract-creation transaction.

    Args:
        ctx: Execution context
        artifact: Contract to deploy
        args: Resolved constructor arguments
        chain_id: Chain id for replay protection (read from the node if None)

    Returns:
        PendingDeployment carrying the transaction hash
    """
    check_constructor_args(artifact, args)
    sender = ctx.address
    if chain_id is None:
        chain_id = read_chain_id(ctx)

    w3 = ctx.w3
    constructor = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode).constructor(*args)

    with web3_errors(f"{artifact.name} deployment"):
        nonce = w3.eth.get_transaction_count(sender, "pending")
        gas_price = w3.eth.gas_price
        estimate = constructor.estimate_gas({"from": sender})

        # Legacy transaction: every field is set so web3 queries no fee defaults
        transaction = constructor.build_transaction(
            {
                "nonce": nonce,
                "gasPrice": gas_price,
                "gas": int(estimate * GAS_ESTIMATE_MULTIPLIER),
                "value": 0,
                "chainId": chain_id,
            }
        )
        signed = ctx.signer.sign_transaction(transaction)
        tx_hash = to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))

    logger.info("Submitted %s deployment %s (nonce %d)", artifact.name, tx_hash, nonce)
    return PendingDeployment(artifact_name=artifact.name, transaction_hash=tx_hash)


def deploy(
    ctx: ExecutionContext,
    specs: Sequence[DeploymentSpec],
    artifacts: ArtifactStore,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: Optional[float] = None,
) -> List[DeploymentRecord]:
    """
    Deploy specs one after another, feeding earlier addresses into later constructors.

    Contract N+1 is submitted only after contract N is confirmed.

    Args:
        ctx: Execution context
        specs: Plan, in dependency order
        artifacts: Source of compiled contracts
        poll_interval: Seconds between receipt polls
        timeout: Per-contract confirmation timeout (None waits indefinitely)

    Returns:
        One record per spec, in the same order

    Raises:
        UnresolvedReferenceError: If the plan is out of order (nothing is submitted)
        NoSignerConfiguredError: If no signer is configured (nothing is submitted)
        NetworkUnreachableError: If the chain id cannot be read (nothing is submitted)
        DeploymentFailedError: If spec N fails; carries records 0..N-1
    """
    specs = list(specs)
    validate_specs(specs)

    sender = ctx.address
    chain_id = read_chain_id(ctx)
    logger.info("Deploying %d contract(s) from %s", len(specs), sender)

    records: List[DeploymentRecord] = []
    for index, spec in enumerate(specs):
        try:
            artifact = artifacts.load(spec.artifact_name)
            args = resolve_args(spec, records)
            pending = submit_deployment(ctx, artifact, args, chain_id=chain_id)
            address = await_confirmation(
                ctx, pending, poll_interval=poll_interval, timeout=timeout
            )
        except Exception as e:
            logger.error(
                "Deployment %d (%s) failed after %d confirmed: %s",
                index,
                spec.artifact_name,
                len(records),
                e,
            )
            raise DeploymentFailedError(index, e, records) from e

        records.append(
            DeploymentRecord(
                address=address,
                artifact_name=spec.artifact_name,
                transaction_hash=pending.transaction_hash,
            )
        )

    return records
