"""Compiled artifact loading for erc721n-deployments library."""

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Union

from .exceptions import ArtifactNotFoundError, InvalidArtifactError
from .paths import resolve_artifacts_dir
from .types import Artifact

# Solidity library placeholder left in bytecode that was never linked
_UNLINKED_LIBRARY = re.compile(r"__\$[0-9a-fA-F]{34}\$__")


class ArtifactFormat(Enum):
    """
    Artifact file format types.

    Value strings appear as Artifact.source_format:
    - HARDHAT: artifacts/contracts/<File>.sol/<Name>.json, bytecode is a hex string
    - FOUNDRY: out/<File>.sol/<Name>.json, bytecode is {"object": hex}
    """

    HARDHAT = "hardhat"
    FOUNDRY = "foundry"


def detect_artifact_format(data: Dict[str, Any]) -> Optional[ArtifactFormat]:
    """
    Detect which compiler produced a parsed artifact file.

    Args:
        data: Parsed artifact JSON

    Returns:
        ArtifactFormat.HARDHAT if "bytecode" is a string
        ArtifactFormat.FOUNDRY if "bytecode" is an object with an "object" member
        None if neither shape matches
    """
    bytecode = data.get("bytecode")
    if isinstance(bytecode, str):
        return ArtifactFormat.HARDHAT
    if isinstance(bytecode, dict) and "object" in bytecode:
        return ArtifactFormat.FOUNDRY
    return None


def parse_artifact(file_path: Path, name: Optional[str] = None) -> Artifact:
    """
    Parse a compiled artifact JSON file.

    Args:
        file_path: Path to the artifact file
        name: Contract name (defaults to "contractName" or the file stem)

    Returns:
        Artifact with 0x-prefixed creation bytecode

    Raises:
        InvalidArtifactError: If ABI or creation bytecode is missing or unlinked
    """
    with open(file_path) as f:
        data = json.load(f)

    if name is None:
        name = data.get("contractName") or file_path.stem

    artifact_format = detect_artifact_format(data)
    if artifact_format is None:
        raise InvalidArtifactError(f"Unrecognised artifact format: {file_path}")

    if artifact_format is ArtifactFormat.HARDHAT:
        bytecode = data["bytecode"]
    else:
        bytecode = data["bytecode"]["object"]

    abi = data.get("abi")
    if abi is None:
        raise InvalidArtifactError(f"Missing ABI in artifact: {file_path}")

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    # Interfaces and abstract contracts compile to empty bytecode
    if bytecode == "0x":
        raise InvalidArtifactError(f"Artifact {name} has no creation bytecode (abstract?)")

    placeholders = set(_UNLINKED_LIBRARY.findall(bytecode))
    if placeholders:
        raise InvalidArtifactError(
            f"Artifact {name} has unlinked libraries: {', '.join(sorted(placeholders))}"
        )

    return Artifact(name=name, abi=abi, bytecode=bytecode, source_format=artifact_format.value)


def find_artifact_file(name: str, artifacts_dir: Path) -> Path:
    """
    Locate the artifact file for a contract name.

    Both Hardhat and Foundry write <File>.sol/<Name>.json, so the search is
    the same for either layout.

    Raises:
        ArtifactNotFoundError: If no file or more than one file matches
    """
    matches = sorted(
        p for p in artifacts_dir.rglob(f"{name}.json") if "build-info" not in p.parts
    )
    if not matches:
        raise ArtifactNotFoundError(f"No artifact for '{name}' under {artifacts_dir}")
    if len(matches) > 1:
        raise ArtifactNotFoundError(
            f"Ambiguous artifact name '{name}': "
            + ", ".join(str(p.relative_to(artifacts_dir)) for p in matches)
        )
    return matches[0]


class ArtifactStore:
    """Loads artifacts by contract name, once each."""

    def __init__(self, artifacts_dir: Optional[Union[Path, str]] = None):
        self.artifacts_dir = resolve_artifacts_dir(artifacts_dir)
        self._loaded: Dict[str, Artifact] = {}

    @classmethod
    def from_artifacts(cls, artifacts: Iterable[Artifact]) -> "ArtifactStore":
        """Build a store that serves the given in-memory artifacts only."""
        store = cls()
        for artifact in artifacts:
            store._loaded[artifact.name] = artifact
        return store

    def load(self, name: str) -> Artifact:
        """
        Get an artifact by contract name.

        Raises:
            ArtifactNotFoundError: If no artifact exists for the name
            InvalidArtifactError: If the artifact file is unusable
        """
        if name not in self._loaded:
            if not self.artifacts_dir.exists():
                raise ArtifactNotFoundError(
                    f"Artifacts directory not found at {self.artifacts_dir}. "
                    "Compile the contracts first."
                )
            self._loaded[name] = parse_artifact(find_artifact_file(name, self.artifacts_dir), name)
        return self._loaded[name]


def check_constructor_args(artifact: Artifact, args: Sequence[Any]) -> None:
    """
    Check that args fit the artifact's constructor before anything is sent.

    Raises:
        ValueError: If the number of arguments does not match the constructor
    """
    inputs = artifact.constructor_inputs()
    if len(inputs) != len(args):
        raise ValueError(
            f"{artifact.name} constructor takes {len(inputs)} argument(s), got {len(args)}"
        )
