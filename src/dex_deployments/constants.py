"""Configuration constants for dex-deployments library."""

# Chain id reported by a local hardhat / anvil node
LOCAL_CHAIN_ID = "31337"

# Network configuration based on ethereum-lists/chains
# Env var names hold the RPC endpoint for each network
NETWORK_CONFIG = {
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Hardhat Local",
        "default_rpc_url": "http://127.0.0.1:8545",
        "default_rpc_env": "LOCALHOST_RPC_URL",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "default_rpc_url": None,
        "default_rpc_env": "SEPOLIA_RPC_URL",
    },
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "default_rpc_url": None,
        "default_rpc_env": "MAINNET_RPC_URL",
    },
}

DEFAULT_NETWORK = "localhost"

# Seconds to wait for a receipt or for confirmations before giving up
DEFAULT_CONFIRMATION_TIMEOUT = 300.0
DEFAULT_POLL_INTERVAL = 1.0

# HTTP timeout for a single JSON-RPC round trip
RPC_REQUEST_TIMEOUT = 30

# Bootstrap parameters of the Balloons / DEX pair
DEFAULT_LIQUIDITY_RECIPIENT = "0x047821Dc2b13F680FeD9B006F0868bE43AcF4fe6"
DEFAULT_TRANSFER_ETHER = "10"
DEFAULT_APPROVE_ETHER = "100"
DEFAULT_INIT_ETHER = "0.5"
DEFAULT_INIT_GAS_LIMIT = 200000
DEFAULT_DEX_CONFIRMATIONS = 5
