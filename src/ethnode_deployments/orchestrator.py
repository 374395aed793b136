"""Idempotent, budget-constrained contract deployment."""

import logging
import threading
from typing import Iterable, Optional

from web3 import Web3

from .affordability import AffordabilityCheck
from .budget import SpendBudget
from .constants import DEFAULT_UNLOCK_DURATION
from .exceptions import (
    AuthError,
    BudgetExceededError,
    DeploymentCancelledError,
    DeploymentError,
    EstimationError,
    InsufficientFundsError,
    LedgerRPCError,
    PreflightError,
)
from .types import (
    DeploymentHandle,
    DeploymentRequest,
    SubmissionEvent,
    SubmissionStage,
)

_LOGGER = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """
    Drives a deployment request to a terminal state.

    The steps are: unlock, idempotency check, gas estimate, affordability
    check, budget authorization, submission and confirmation. Every failure
    is terminal; nothing is retried here. Callers that want a retry must
    call ensure_deployed() again, which re-reads gas price and budget.
    """

    def __init__(
        self,
        ledger,
        budget: SpendBudget,
        sender: str,
        credential: str,
        unlock_duration: int = DEFAULT_UNLOCK_DURATION,
    ):
        self._ledger = ledger
        self._budget = budget
        self.sender = sender
        self._credential = credential
        self._unlock_duration = unlock_duration
        self.affordability = AffordabilityCheck(ledger, sender)

    def unlock(self) -> None:
        """
        Unlock the sender account on the node.

        Raises:
            AuthError: If the node rejects the credential
        """
        try:
            unlocked = self._ledger.unlock(self.sender, self._credential, self._unlock_duration)
        except LedgerRPCError as e:
            raise AuthError(f"Could not unlock {self.sender}: {e}") from e
        if not unlocked:
            raise AuthError(f"Node refused to unlock {self.sender}")

    def ensure_deployed(
        self,
        request: DeploymentRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> DeploymentHandle:
        """
        Make sure the requested contract is deployed and return a handle to it.

        Args:
            request: Contract, constructor args and optional prior deployment
            cancel_event: When set, aborts the deployment if submission has
                          not started yet

        Returns:
            DeploymentHandle of the existing or newly deployed contract

        Raises:
            AuthError: If the account cannot be unlocked
            EstimationError: If gas estimation fails
            InsufficientFundsError: If the balance is below the estimated cost
            BudgetExceededError: If the spend budget denies the gas amount
            DeploymentCancelledError: If cancelled before submission
            PreflightError: If the transaction lookup, balance or gas price
                            read fails
            DeploymentError: If submission or confirmation fails
        """
        contract = request.contract

        self._checkpoint(cancel_event, "unlock")
        self.unlock()

        self._checkpoint(cancel_event, "idempotency check")
        attached = self._find_existing(request)
        if attached is not None:
            return attached

        self._checkpoint(cancel_event, "gas estimation")
        try:
            gas_estimate = self._ledger.estimate_deployment_gas(
                contract, request.constructor_args, self.sender
            )
        except (LedgerRPCError, ValueError) as e:
            raise EstimationError(f"Gas estimation for {contract.name} failed: {e}") from e
        _LOGGER.info("Deploying %s needs an estimated %d gas", contract.name, gas_estimate)

        self._checkpoint(cancel_event, "affordability check")
        try:
            estimated_cost, balance = self.affordability.estimate(gas_estimate)
        except LedgerRPCError as e:
            raise PreflightError(f"Could not read balance or gas price: {e}") from e
        if balance < estimated_cost:
            raise InsufficientFundsError(
                f"Deploying {contract.name} costs {estimated_cost} but "
                f"{self.sender} holds {balance}",
                estimated_cost=estimated_cost,
                balance=balance,
            )

        self._checkpoint(cancel_event, "budget authorization")
        if not self._budget.authorize(gas_estimate):
            raise BudgetExceededError(
                f"Spend budget denied {gas_estimate} gas for {contract.name}",
                requested=gas_estimate,
                remaining=self._budget.remaining,
            )

        if cancel_event is not None and cancel_event.is_set():
            self._budget.refund(gas_estimate)
            raise DeploymentCancelledError(
                f"Deployment of {contract.name} cancelled before submission"
            )

        # Past this point the transaction may be broadcast; cancellation is ignored.
        try:
            events = self._ledger.submit_deployment(
                contract, request.constructor_args, self.sender, gas_estimate
            )
            return self._await_settlement(contract.abi, events)
        except (LedgerRPCError, ValueError) as e:
            raise DeploymentError(f"Deployment of {contract.name} failed: {e}") from e

    def _checkpoint(self, cancel_event: Optional[threading.Event], stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise DeploymentCancelledError(f"Deployment cancelled before {stage}")

    def _find_existing(self, request: DeploymentRequest) -> Optional[DeploymentHandle]:
        """
        Re-attach to a prior deployment of the same bytecode, if there is one.

        The check is a raw substring match of the bytecode within the prior
        transaction's input, which also holds the encoded constructor args.
        It is not a cryptographic identity check.
        """
        if not request.known_address or not Web3.is_address(request.known_address):
            return None
        if not request.known_tx_hash:
            return None

        try:
            tx = self._ledger.get_transaction(request.known_tx_hash)
        except LedgerRPCError as e:
            raise PreflightError(
                f"Could not look up prior transaction {request.known_tx_hash}: {e}"
            ) from e
        if tx is None:
            _LOGGER.warning(
                "Prior transaction %s not found; deploying anew", request.known_tx_hash
            )
            return None

        if request.contract.bytecode not in tx.get("input", b""):
            _LOGGER.warning(
                "Prior transaction %s does not carry %s bytecode; deploying anew",
                request.known_tx_hash,
                request.contract.name,
            )
            return None

        _LOGGER.info(
            "Attached %s to existing deployment at %s",
            request.contract.name,
            request.known_address,
        )
        return DeploymentHandle(
            address=request.known_address,
            abi=request.contract.abi,
            transaction_hash=request.known_tx_hash,
        )

    def _await_settlement(self, abi, events: Iterable[SubmissionEvent]) -> DeploymentHandle:
        """
        Consume submission milestones until the contract address is known.

        The transaction hash must arrive first; it is kept for the handle so
        later calls can re-attach to this deployment.
        """
        tx_hash = None
        try:
            for event in events:
                if event.stage is SubmissionStage.TRANSACTION_HASH:
                    tx_hash = event.value
                    _LOGGER.info("Deployment transaction %s submitted", tx_hash)
                elif event.stage is SubmissionStage.CONTRACT_ADDRESS:
                    if tx_hash is None:
                        raise DeploymentError("Contract address reported before transaction hash")
                    _LOGGER.info("Contract deployed at %s (tx %s)", event.value, tx_hash)
                    return DeploymentHandle(
                        address=event.value, abi=abi, transaction_hash=tx_hash
                    )
        except LedgerRPCError as e:
            raise DeploymentError(f"Deployment failed: {e}", transaction_hash=tx_hash) from e

        raise DeploymentError(
            "Submission ended without a contract address", transaction_hash=tx_hash
        )
