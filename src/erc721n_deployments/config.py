"""Environment configuration for erc721n-deployments library."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import DEFAULT_NETWORK, NETWORK_CONFIG, PRIVATE_KEY_ENV
from .exceptions import UnknownNetworkError


@dataclass(frozen=True)
class NetworkSettings:
    """Endpoint and credential for one network."""

    name: str
    rpc_url: str
    private_key: Optional[str] = None
    chain_id: Optional[int] = None  # Expected chain id, if known

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks
        key = "<set>" if self.private_key else None
        return (
            f"NetworkSettings(name={self.name!r}, rpc_url={self.rpc_url!r}, "
            f"private_key={key}, chain_id={self.chain_id!r})"
        )


def load_settings(
    network: Optional[str] = None,
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> NetworkSettings:
    """
    Build settings for a network from parameters and the environment.

    Explicit parameters win over environment variables. An empty
    environment value counts as unset.

    Args:
        network: Network name (defaults to "sepolia")
        rpc_url: RPC URL (defaults to the network's env var, e.g. $SEPOLIA_RPC)
        private_key: Signing key (defaults to $PK)
        env: Environment mapping (defaults to os.environ)

    Returns:
        NetworkSettings for the network

    Raises:
        UnknownNetworkError: If network is not in NETWORK_CONFIG
        ValueError: If no RPC URL is available
    """
    if env is None:
        env = os.environ
    if network is None:
        network = DEFAULT_NETWORK

    if network not in NETWORK_CONFIG:
        raise UnknownNetworkError(
            f"Unknown network '{network}'. Known networks: {', '.join(sorted(NETWORK_CONFIG))}"
        )
    network_config = NETWORK_CONFIG[network]

    if rpc_url is None:
        rpc_url = env.get(network_config["rpc_env"]) or network_config.get("default_rpc")
    if not rpc_url:
        raise ValueError(
            f"RPC URL required: set ${network_config['rpc_env']} environment variable "
            "or pass rpc_url parameter"
        )

    if private_key is None:
        private_key = env.get(PRIVATE_KEY_ENV) or None

    return NetworkSettings(
        name=network,
        rpc_url=rpc_url,
        private_key=private_key,
        chain_id=network_config["chain_id"],
    )
