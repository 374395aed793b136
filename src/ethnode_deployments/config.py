"""Environment-driven configuration for ethnode-deployments library."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    DEFAULT_GAS_BUDGET,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_RPC_URL,
    DEFAULT_UNLOCK_DURATION,
    ENV_COINBASE,
    ENV_GAS_BUDGET,
    ENV_PASSWORD,
    ENV_RECEIPT_TIMEOUT,
    ENV_REGISTRY_DIR,
    ENV_RPC_URL,
    ENV_UNLOCK_DURATION,
)


@dataclass
class AccountConfig:
    """Settings for one managed node account."""

    coinbase: str
    password: str
    rpc_url: str = DEFAULT_RPC_URL
    gas_budget: int = DEFAULT_GAS_BUDGET
    unlock_duration: int = DEFAULT_UNLOCK_DURATION
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    registry_dir: Optional[str] = None

    def __repr__(self) -> str:
        # password omitted
        return (
            f"AccountConfig(coinbase={self.coinbase!r}, rpc_url={self.rpc_url!r}, "
            f"gas_budget={self.gas_budget!r})"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AccountConfig":
        """
        Build configuration from environment variables.

        Raises:
            ValueError: If $ETHNODE_COINBASE or $ETHNODE_PASSWORD is missing,
                        or a numeric variable does not parse
        """
        if environ is None:
            environ = os.environ

        coinbase = environ.get(ENV_COINBASE)
        password = environ.get(ENV_PASSWORD)
        if not coinbase or password is None:
            raise ValueError(
                f"Account required: set ${ENV_COINBASE} and ${ENV_PASSWORD} "
                "environment variables"
            )

        try:
            return cls(
                coinbase=coinbase,
                password=password,
                rpc_url=environ.get(ENV_RPC_URL, DEFAULT_RPC_URL),
                gas_budget=int(environ.get(ENV_GAS_BUDGET, DEFAULT_GAS_BUDGET)),
                unlock_duration=int(environ.get(ENV_UNLOCK_DURATION, DEFAULT_UNLOCK_DURATION)),
                receipt_timeout=float(environ.get(ENV_RECEIPT_TIMEOUT, DEFAULT_RECEIPT_TIMEOUT)),
                registry_dir=environ.get(ENV_REGISTRY_DIR),
            )
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e
