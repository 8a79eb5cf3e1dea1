"""Configuration constants for erc721n-deployments library."""

from .types import DeploymentSpec, Reference

# Network configuration based on ethereum-lists/chains
# rpc_env / default_rpc: where the endpoint URL comes from
NETWORK_CONFIG = {
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "block_explorer_url": "https://sepolia.etherscan.io",
        "rpc_env": "SEPOLIA_RPC",
    },
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "block_explorer_url": "https://etherscan.io",
        "rpc_env": "MAINNET_RPC",
    },
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "block_explorer_url": None,
        "rpc_env": "LOCALHOST_RPC",
        "default_rpc": "http://127.0.0.1:8545",
    },
}

DEFAULT_NETWORK = "sepolia"

# Networks that support evm_snapshot / evm_revert
LOCAL_NETWORKS = ["localhost"]

# Signing key, shared by every network
PRIVATE_KEY_ENV = "PK"

# Confirmation polling
DEFAULT_POLL_INTERVAL = 1.0  # seconds
RPC_TIMEOUT = 30  # seconds per HTTP request

# Headroom added on top of eth_estimateGas
GAS_ESTIMATE_MULTIPLIER = 1.2

RESERVE_TOKEN = "ExampleReserveToken"
CONSUMER = "ERC721NTest"
RESERVE_TOKEN_GETTER = "getReserveTokenAddress"

# Reserve token first, then the consumer that stores its address
DEFAULT_PLAN = (
    DeploymentSpec(RESERVE_TOKEN),
    DeploymentSpec(CONSUMER, (Reference(0),)),
)
