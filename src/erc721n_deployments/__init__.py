"""
erc721n-deployments: deploy and verify the ERC721N contract pair over JSON-RPC
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactStore
from .config import NetworkSettings, load_settings
from .context import ExecutionContext, read_account, read_context
from .confirmation import await_confirmation
from .deployer import deploy, submit_deployment, validate_specs
from .exceptions import (
    AnonymousFixtureError,
    ArtifactNotFoundError,
    ConfirmationTimeoutError,
    DeploymentError,
    DeploymentFailedError,
    DeploymentRevertedError,
    InvalidArtifactError,
    NetworkUnreachableError,
    NoSignerConfiguredError,
    PipelineFailedError,
    RpcError,
    SnapshotRestoreFailedError,
    UnknownNetworkError,
    UnresolvedReferenceError,
    VerificationError,
)
from .fixtures import Checkpoint, FixtureCache
from .pipeline import run_pipeline
from .reporter import format_summary, report
from .types import (
    Account,
    Artifact,
    DeploymentRecord,
    DeploymentSpec,
    Literal,
    NetworkIdentity,
    Reference,
    Summary,
)

try:
    __version__ = version("erc721n-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "ArtifactStore",
    "NetworkSettings",
    "load_settings",
    "ExecutionContext",
    "read_context",
    "read_account",
    "await_confirmation",
    "deploy",
    "submit_deployment",
    "validate_specs",
    "Checkpoint",
    "FixtureCache",
    "run_pipeline",
    "report",
    "format_summary",
    "Account",
    "Artifact",
    "DeploymentRecord",
    "DeploymentSpec",
    "Literal",
    "NetworkIdentity",
    "Reference",
    "Summary",
    "DeploymentError",
    "NetworkUnreachableError",
    "RpcError",
    "NoSignerConfiguredError",
    "UnknownNetworkError",
    "ArtifactNotFoundError",
    "InvalidArtifactError",
    "UnresolvedReferenceError",
    "DeploymentRevertedError",
    "ConfirmationTimeoutError",
    "DeploymentFailedError",
    "PipelineFailedError",
    "VerificationError",
    "SnapshotRestoreFailedError",
    "AnonymousFixtureError",
]
