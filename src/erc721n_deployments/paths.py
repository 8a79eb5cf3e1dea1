"""Path management utilities for erc721n-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_artifacts_dir() -> Path:
    """
    Get default artifacts directory (Hardhat compile output).

    Returns:
        Path to ./artifacts
    """
    return Path.cwd() / "artifacts"


def resolve_artifacts_dir(artifacts_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Resolve the directory artifacts are read from.

    Args:
        artifacts_root: Custom artifacts directory (defaults to ./artifacts)

    Returns:
        Absolute path to the artifacts directory
    """
    if artifacts_root is None:
        return get_default_artifacts_dir()
    return Path(artifacts_root).absolute()


def get_summary_path(output_dir: Union[Path, str], network: str) -> Path:
    """
    Get the path a deployment summary is written to.

    Args:
        output_dir: Directory holding summaries
        network: Network name

    Returns:
        Path to {output_dir}/{network}.json
    """
    return Path(output_dir) / f"{network}.json"
