"""Custom exception classes for erc721n-deployments library."""

from typing import List, Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class NetworkUnreachableError(DeploymentError, ConnectionError):
    """Raised when the configured RPC endpoint cannot be queried."""

    pass


class RpcError(DeploymentError, ValueError):
    """Raised when the node answers a JSON-RPC call with an error member."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class NoSignerConfiguredError(DeploymentError, ValueError):
    """Raised when no private key is available for the selected network."""

    pass


class UnknownNetworkError(DeploymentError, ValueError):
    """Raised when a network name is not in the network table."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no compiled artifact exists for a contract name."""

    pass


class InvalidArtifactError(DeploymentError, ValueError):
    """Raised when an artifact file lacks an ABI or creation bytecode."""

    pass


class UnresolvedReferenceError(DeploymentError, ValueError):
    """Raised when a constructor argument references a spec that is not earlier in the plan."""

    pass


class DeploymentRevertedError(DeploymentError, RuntimeError):
    """Raised when the network reports a deployment transaction as failed."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when a caller-imposed confirmation timeout elapses."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class DeploymentFailedError(DeploymentError, RuntimeError):
    """
    Raised when submitting or confirming one spec of a plan fails.

    Attributes:
        index: Position of the failing spec in the plan
        cause: The underlying exception
        records: Records confirmed before the failure, in plan order
    """

    def __init__(self, index: int, cause: BaseException, records: Optional[List] = None):
        self.index = index
        self.cause = cause
        self.records = list(records or [])
        super().__init__(f"Deployment {index} failed: {cause}")


class PipelineFailedError(DeploymentError, RuntimeError):
    """
    Raised when a step after a successful deployment fails.

    The contracts are already on chain, so the records travel with the error.

    Attributes:
        step: Name of the failing step
        cause: The underlying exception
        records: Every record of the run, in plan order
    """

    def __init__(self, step: str, cause: BaseException, records: Optional[List] = None):
        self.step = step
        self.cause = cause
        self.records = list(records or [])
        super().__init__(f"{step} failed after {len(self.records)} deployment(s): {cause}")


class VerificationError(DeploymentError, ValueError):
    """Raised when a post-deployment query disagrees with the deployed plan."""

    pass


class SnapshotRestoreFailedError(DeploymentError, RuntimeError):
    """Raised when the node cannot revert to a snapshot handle."""

    def __init__(self, message: str, handle: Optional[str] = None):
        super().__init__(message)
        self.handle = handle


class AnonymousFixtureError(DeploymentError, TypeError):
    """Raised when a lambda is passed as a fixture setup function."""

    pass
