"""End-to-end deployment pipeline for erc721n-deployments library."""

import logging
from typing import Callable, List, Optional, Sequence

from .artifacts import ArtifactStore
from .config import load_settings
from .constants import DEFAULT_PLAN, DEFAULT_POLL_INTERVAL, RESERVE_TOKEN_GETTER
from .context import ExecutionContext, read_account, read_context
from .deployer import deploy
from .exceptions import DeploymentError, DeploymentFailedError, PipelineFailedError
from .paths import get_summary_path
from .reporter import format_summary, report, save_summary
from .types import DeploymentRecord, DeploymentSpec, Summary
from .verification import verify_reference

logger = logging.getLogger(__name__)

Verifier = Callable[[ExecutionContext, List[DeploymentRecord]], None]


def verify_default_plan(ctx: ExecutionContext, records: List[DeploymentRecord]) -> None:
    """Check that the consumer stores the reserve token's address."""
    verify_reference(ctx, records, 1, RESERVE_TOKEN_GETTER, 0)


def run_pipeline(
    ctx: ExecutionContext,
    specs: Sequence[DeploymentSpec],
    artifacts: ArtifactStore,
    verify: Optional[Verifier] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: Optional[float] = None,
) -> Summary:
    """
    Read the network, deploy the plan, verify it and report the cost.

    Args:
        ctx: Execution context
        specs: Plan, in dependency order
        artifacts: Source of compiled contracts
        verify: Optional read-only check run on the records after deployment
        poll_interval: Seconds between receipt polls
        timeout: Per-contract confirmation timeout (None waits indefinitely)

    Returns:
        Summary of the run

    Raises:
        NoSignerConfiguredError: If no signer is configured
        NetworkUnreachableError: If the endpoint cannot be queried before deploying
        DeploymentFailedError: If a deployment fails; carries the completed records
        PipelineFailedError: If the balance re-read or verify fails; carries every record
    """
    network, before = read_context(ctx)
    records = deploy(ctx, specs, artifacts, poll_interval=poll_interval, timeout=timeout)

    step = "balance re-read"
    try:
        after = read_account(ctx)
        if verify is not None:
            step = "verification"
            verify(ctx, records)
    except Exception as e:
        logger.error("%s failed after %d deployment(s): %s", step, len(records), e)
        raise PipelineFailedError(step, e, records) from e

    return report(before, after, records, network=network)


def main(
    network: Optional[str] = None,
    artifacts_dir: Optional[str] = None,
    timeout: Optional[float] = None,
    output_dir: Optional[str] = None,
) -> int:
    """
    Deploy the default plan with settings from the environment.

    When output_dir is given the summary is also written to {output_dir}/{network}.json.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = load_settings(network)
        with ExecutionContext(settings) as ctx:
            summary = run_pipeline(
                ctx,
                DEFAULT_PLAN,
                ArtifactStore(artifacts_dir),
                verify=verify_default_plan,
                timeout=timeout,
            )
        print(format_summary(summary))
        if output_dir is not None:
            save_summary(summary, get_summary_path(output_dir, settings.name))
    except (DeploymentFailedError, PipelineFailedError) as e:
        for record in e.records:
            logger.error("Already deployed: %s at %s", record.artifact_name, record.address)
        logger.error("%s", e)
        return 1
    except (DeploymentError, ValueError) as e:
        logger.error("%s", e)
        return 1
    except OSError as e:
        logger.error("%s", e)
        return 1

    return 0
