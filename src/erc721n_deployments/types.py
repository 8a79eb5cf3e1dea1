"""Data types and dataclasses for erc721n-deployments library."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class NetworkIdentity:
    """Identity of the target network, fetched once per pipeline run."""

    name: str  # Configured name, e.g. "sepolia"
    chain_id: int


@dataclass(frozen=True)
class Account:
    """The signing account and its balance at the time of reading."""

    address: str  # Checksummed address
    balance: int  # Wei


@dataclass(frozen=True)
class Literal:
    """Constructor argument passed through unchanged."""

    value: Any


@dataclass(frozen=True)
class Reference:
    """Constructor argument replaced by the address of an earlier spec in the plan."""

    index: int


ConstructorArg = Union[Literal, Reference]


@dataclass(frozen=True)
class DeploymentSpec:
    """A contract to deploy and the arguments for its constructor."""

    artifact_name: str
    constructor_args: Tuple[ConstructorArg, ...] = ()

    def __post_init__(self):
        if isinstance(self.constructor_args, (str, bytes)):
            raise TypeError(
                f"constructor_args for {self.artifact_name} must be a sequence of arguments, "
                f"not {type(self.constructor_args).__name__}"
            )
        # Wrap bare values so callers can write DeploymentSpec("X", (1, "a"))
        wrapped = tuple(
            arg if isinstance(arg, (Literal, Reference)) else Literal(arg)
            for arg in self.constructor_args
        )
        object.__setattr__(self, "constructor_args", wrapped)

    def references(self) -> List[int]:
        """Indices of the specs this one depends on."""
        return [arg.index for arg in self.constructor_args if isinstance(arg, Reference)]


@dataclass(frozen=True)
class DeploymentRecord:
    """A confirmed deployment."""

    address: str  # Checksummed contract address
    artifact_name: str
    transaction_hash: Optional[str] = None


@dataclass(frozen=True)
class PendingDeployment:
    """A submitted contract-creation transaction awaiting inclusion."""

    artifact_name: str
    transaction_hash: str


@dataclass(frozen=True)
class Artifact:
    """Compiled contract: interface plus creation bytecode."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode
    source_format: Optional[str] = None  # "hardhat" or "foundry"

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        """ABI inputs of the constructor (empty when it takes none)."""
        for item in self.abi:
            if item.get("type") == "constructor":
                return list(item.get("inputs", []))
        return []


@dataclass
class Summary:
    """Outcome of a pipeline run."""

    network: Optional[NetworkIdentity]
    deployer: str
    records: List[DeploymentRecord]
    cost: int  # Wei, before.balance - after.balance
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form suitable for json.dump."""
        return {
            "network": (
                {"name": self.network.name, "chain_id": self.network.chain_id}
                if self.network is not None
                else None
            ),
            "deployer": self.deployer,
            "contracts": [
                {
                    "name": r.artifact_name,
                    "address": r.address,
                    "transaction_hash": r.transaction_hash,
                }
                for r in self.records
            ],
            "cost_wei": self.cost,
            "warnings": list(self.warnings),
        }
