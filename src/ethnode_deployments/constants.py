"""Configuration constants for ethnode-deployments library."""

DEFAULT_RPC_URL = "http://127.0.0.1:8545"

# Seconds
RPC_TIMEOUT = 30
DEFAULT_UNLOCK_DURATION = 300
DEFAULT_RECEIPT_TIMEOUT = 120
DEFAULT_POLL_INTERVAL = 1.0

# Roughly one block's worth of gas
DEFAULT_GAS_BUDGET = 8_000_000

# Unit the account balance is reported in
NATIVE_UNIT = "ether"

REGISTRY_DIR_NAME = ".ethnode-deployments"
REGISTRY_FILE_NAME = "deployments.json"

# Environment variables read by AccountConfig.from_env()
ENV_RPC_URL = "ETHNODE_RPC_URL"
ENV_COINBASE = "ETHNODE_COINBASE"
ENV_PASSWORD = "ETHNODE_PASSWORD"
ENV_GAS_BUDGET = "ETHNODE_GAS_BUDGET"
ENV_UNLOCK_DURATION = "ETHNODE_UNLOCK_DURATION"
ENV_RECEIPT_TIMEOUT = "ETHNODE_RECEIPT_TIMEOUT"
ENV_REGISTRY_DIR = "ETHNODE_REGISTRY_DIR"
