"""
ethnode-deployments: idempotent, budget-constrained contract deployment
for a single Ethereum node account
"""

from importlib.metadata import PackageNotFoundError, version

from .account import EthereumAccount
from .affordability import AffordabilityCheck
from .budget import SpendBudget
from .compiler import SolcCompiler, select_contract
from .config import AccountConfig
from .exceptions import (
    AccountError,
    AuthError,
    BudgetExceededError,
    CompileError,
    ContractNotFoundError,
    DeploymentCancelledError,
    DeploymentError,
    EstimationError,
    InsufficientFundsError,
    LedgerRPCError,
    NothingSpentError,
    PreflightError,
)
from .ledger import JsonRpcLedgerClient
from .orchestrator import DeploymentOrchestrator
from .registry import DeploymentRegistry
from .types import (
    CompiledContract,
    DeploymentHandle,
    DeploymentRequest,
    SubmissionEvent,
    SubmissionStage,
)

try:
    __version__ = version("ethnode-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "EthereumAccount",
    "DeploymentOrchestrator",
    "AffordabilityCheck",
    "SpendBudget",
    "SolcCompiler",
    "select_contract",
    "JsonRpcLedgerClient",
    "DeploymentRegistry",
    "AccountConfig",
    "CompiledContract",
    "DeploymentRequest",
    "DeploymentHandle",
    "SubmissionEvent",
    "SubmissionStage",
    "AccountError",
    "NothingSpentError",
    "AuthError",
    "CompileError",
    "ContractNotFoundError",
    "EstimationError",
    "InsufficientFundsError",
    "BudgetExceededError",
    "DeploymentCancelledError",
    "PreflightError",
    "LedgerRPCError",
    "DeploymentError",
]
