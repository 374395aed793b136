"""Account facade: balance, unlock and contract deployment."""

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from web3 import Web3

from .budget import SpendBudget
from .compiler import SolcCompiler, select_contract
from .config import AccountConfig
from .constants import NATIVE_UNIT
from .ledger import JsonRpcLedgerClient
from .orchestrator import DeploymentOrchestrator
from .registry import DeploymentRegistry, get_registry_path
from .types import CompiledContract, DeploymentHandle, DeploymentRequest

_LOGGER = logging.getLogger(__name__)


class EthereumAccount:
    """A single node-managed account that can deploy contracts."""

    def __init__(
        self,
        ledger,
        coinbase: str,
        password: str,
        budget: SpendBudget,
        compiler: Optional[SolcCompiler] = None,
        registry: Optional[DeploymentRegistry] = None,
        unlock_duration: Optional[int] = None,
    ):
        """
        Initialize the account.

        Args:
            ledger: Ledger client (e.g. JsonRpcLedgerClient)
            coinbase: Account address
            password: Credential used to unlock the account on the node
            budget: Spend budget; share one instance across accounts in a process
            compiler: Solidity compiler (defaults to SolcCompiler())
            registry: Optional record of prior deployments for re-attaching
            unlock_duration: Seconds the account stays unlocked
        """
        self._ledger = ledger
        self._coinbase = coinbase
        self.budget = budget
        self.compiler = compiler or SolcCompiler()
        self.registry = registry

        kwargs = {} if unlock_duration is None else {"unlock_duration": unlock_duration}
        self.orchestrator = DeploymentOrchestrator(ledger, budget, coinbase, password, **kwargs)

    @classmethod
    def from_config(
        cls, config: AccountConfig, budget: Optional[SpendBudget] = None
    ) -> "EthereumAccount":
        """
        Build an account talking JSON-RPC to ``config.rpc_url``.

        A new SpendBudget of ``config.gas_budget`` is created unless one is given.
        """
        ledger = JsonRpcLedgerClient(config.rpc_url, receipt_timeout=config.receipt_timeout)
        registry = None
        if config.registry_dir is not None:
            registry = DeploymentRegistry(get_registry_path(config.registry_dir))

        return cls(
            ledger,
            config.coinbase,
            config.password,
            budget if budget is not None else SpendBudget(config.gas_budget),
            registry=registry,
            unlock_duration=config.unlock_duration,
        )

    @property
    def coinbase(self) -> str:
        return self._coinbase

    def get_balance(self) -> Decimal:
        """Current balance in ether."""
        return Web3.from_wei(self._ledger.get_balance(self._coinbase), NATIVE_UNIT)

    def unlock(self) -> None:
        self.orchestrator.unlock()

    def compile(self, source_text: str) -> Dict[str, CompiledContract]:
        return self.compiler.compile(source_text)

    def deploy(
        self,
        source_text: str,
        contract_name: Optional[str] = None,
        constructor_args: Sequence[Any] = (),
        known_address: Optional[str] = None,
        known_tx_hash: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> DeploymentHandle:
        """
        Compile source and make sure the chosen contract is deployed.

        Compilation happens before any network call. When a registry is
        configured it fills in a missing known address/hash and records the
        resulting handle.

        Args:
            source_text: Solidity source
            contract_name: Contract to deploy (defaults to the last in the source)
            constructor_args: Positional constructor arguments
            known_address: Address of a prior deployment to re-attach to
            known_tx_hash: Transaction hash of that prior deployment
            cancel_event: Aborts the deployment if set before submission

        Returns:
            DeploymentHandle

        Raises:
            CompileError: If the source does not compile
            ContractNotFoundError: If contract_name is not in the source
            Any error of DeploymentOrchestrator.ensure_deployed()
        """
        contract = select_contract(self.compile(source_text), contract_name)

        if self.registry is not None and known_address is None and known_tx_hash is None:
            previous = self.registry.get(contract.name)
            if previous is not None:
                known_address = previous.address
                known_tx_hash = previous.transaction_hash

        request = DeploymentRequest(
            contract=contract,
            constructor_args=tuple(constructor_args),
            known_address=known_address,
            known_tx_hash=known_tx_hash,
        )
        handle = self.orchestrator.ensure_deployed(request, cancel_event=cancel_event)

        if self.registry is not None:
            self.registry.record(contract.name, handle)
            self.registry.save()
        return handle

    def init_contract(
        self,
        contract_path: Union[Path, str],
        contract_name: Optional[str] = None,
        constructor_args: Sequence[Any] = (),
        known_address: Optional[str] = None,
        known_tx_hash: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> DeploymentHandle:
        """Deploy (or re-attach to) a contract read from a Solidity file."""
        source_text = Path(contract_path).read_text(encoding="utf-8")
        _LOGGER.debug("Loaded contract source from %s", contract_path)
        return self.deploy(
            source_text,
            contract_name=contract_name,
            constructor_args=constructor_args,
            known_address=known_address,
            known_tx_hash=known_tx_hash,
            cancel_event=cancel_event,
        )
