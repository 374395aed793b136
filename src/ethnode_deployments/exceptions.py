"""Custom exception classes for ethnode-deployments library."""

from typing import Optional


class AccountError(Exception):
    """Base exception for account and deployment errors."""

    pass


class NothingSpentError(AccountError):
    """Base for failures raised before any transaction was sent."""

    pass


class AuthError(NothingSpentError):
    """Raised when the node rejects the account credential."""

    pass


class CompileError(NothingSpentError, ValueError):
    """Raised when contract source does not compile."""

    pass


class ContractNotFoundError(NothingSpentError, ValueError):
    """Raised when a requested contract is not among the compiled artifacts."""

    pass


class EstimationError(NothingSpentError):
    """Raised when the node rejects gas estimation for a deployment."""

    pass


class InsufficientFundsError(NothingSpentError):
    """Raised when the account balance is below the estimated deployment cost."""

    def __init__(self, message: str, estimated_cost=None, balance=None):
        super().__init__(message)
        self.estimated_cost = estimated_cost
        self.balance = balance


class BudgetExceededError(NothingSpentError):
    """Raised when the spend budget denies the gas amount."""

    def __init__(self, message: str, requested: Optional[int] = None, remaining: Optional[int] = None):
        super().__init__(message)
        self.requested = requested
        self.remaining = remaining


class DeploymentCancelledError(NothingSpentError):
    """Raised when a deployment is cancelled before submission."""

    pass


class PreflightError(NothingSpentError):
    """Raised when a read-only check before submission cannot reach the ledger."""

    pass


class LedgerRPCError(AccountError, RuntimeError):
    """Raised when the ledger endpoint fails or returns a JSON-RPC error."""

    pass


class DeploymentError(AccountError):
    """
    Raised when submission or confirmation of a deployment fails.

    The transaction may already have been broadcast. Check chain state
    using ``transaction_hash`` (when known) before retrying.
    """

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash
