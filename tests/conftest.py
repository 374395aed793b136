"""Shared pytest fixtures for ethnode-deployments tests."""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from web3 import Web3

from ethnode_deployments.abi import deployment_data
from ethnode_deployments.budget import SpendBudget
from ethnode_deployments.exceptions import LedgerRPCError
from ethnode_deployments.types import CompiledContract, SubmissionEvent, SubmissionStage

SENDER = "0x" + "ab" * 20
PASSWORD = "correct horse"

COUNTER_BYTECODE = bytes.fromhex("6080604052348015600f57600080fd5b50603f80601d6000396000f3fe")
COUNTER_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [{"name": "start", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "count",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    },
]

GREETER_BYTECODE = bytes.fromhex("6080604052600a600c565b005b")
GREETER_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "greet",
        "inputs": [],
        "outputs": [{"name": "", "type": "string", "internalType": "string"}],
        "stateMutability": "pure",
    },
]


class FakeLedger:
    """In-memory stand-in for a node, recording every call it receives."""

    def __init__(self, balance: int = 10**18, gas_price: int = 1, gas_estimate: int = 21000):
        self.balance = balance
        self.gas_price = gas_price
        self.gas_estimate = gas_estimate
        self.unlock_result = True
        self.unlock_error: Optional[Exception] = None
        self.estimate_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.confirm_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None
        self.gas_price_error: Optional[Exception] = None
        self.transaction_error: Optional[Exception] = None
        self.skip_address = False
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.submissions: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self._counter = 0
        self._lock = threading.Lock()

    def _record(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)

    def unlock(self, address, credential, duration):
        self._record("unlock")
        if self.unlock_error is not None:
            raise self.unlock_error
        return self.unlock_result and credential == PASSWORD

    def get_balance(self, address):
        self._record("get_balance")
        if self.balance_error is not None:
            raise self.balance_error
        return self.balance

    def get_gas_price(self):
        self._record("get_gas_price")
        if self.gas_price_error is not None:
            raise self.gas_price_error
        return self.gas_price

    def get_transaction(self, tx_hash):
        self._record("get_transaction")
        if self.transaction_error is not None:
            raise self.transaction_error
        return self.transactions.get(tx_hash)

    def estimate_deployment_gas(self, contract, args, sender):
        self._record("estimate_deployment_gas")
        if self.estimate_error is not None:
            raise self.estimate_error
        deployment_data(contract, args)
        return self.gas_estimate

    def submit_deployment(self, contract, args, sender, gas_limit):
        self._record("submit_deployment")
        if self.send_error is not None:
            raise self.send_error

        with self._lock:
            self._counter += 1
            n = self._counter
        tx_hash = "0x" + f"{n:064x}"
        address = Web3.to_checksum_address("0x" + f"{0xC0DE0000 + n:040x}")
        data = deployment_data(contract, args)
        with self._lock:
            self.submissions.append({"contract": contract.name, "gas": gas_limit, "hash": tx_hash})
            self.transactions[tx_hash] = {"hash": tx_hash, "from": sender, "input": data}

        return self._milestones(tx_hash, address)

    def _milestones(self, tx_hash, address):
        yield SubmissionEvent(SubmissionStage.TRANSACTION_HASH, tx_hash)
        if self.confirm_error is not None:
            raise self.confirm_error
        if self.skip_address:
            return
        yield SubmissionEvent(SubmissionStage.CONTRACT_ADDRESS, address)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def budget() -> SpendBudget:
    return SpendBudget(10_000_000)


@pytest.fixture
def counter_contract() -> CompiledContract:
    return CompiledContract(name="Counter", bytecode=COUNTER_BYTECODE, abi=COUNTER_ABI)


@pytest.fixture
def greeter_contract() -> CompiledContract:
    return CompiledContract(name="Greeter", bytecode=GREETER_BYTECODE, abi=GREETER_ABI)


@pytest.fixture
def solc_output() -> Dict[str, Any]:
    """What solcx.compile_source returns for a two-contract source."""
    return {
        "<stdin>:Counter": {"abi": COUNTER_ABI, "bin": COUNTER_BYTECODE.hex()},
        "<stdin>:Greeter": {"abi": GREETER_ABI, "bin": GREETER_BYTECODE.hex()},
    }


@pytest.fixture
def temp_registry_dir(tmp_path: Path) -> Path:
    """Create a temporary registry directory for tests."""
    registry_dir = tmp_path / ".ethnode-deployments"
    registry_dir.mkdir(parents=True, exist_ok=True)
    return registry_dir


@pytest.fixture
def rpc_failure() -> LedgerRPCError:
    return LedgerRPCError("RPC error: connection reset")


@pytest.fixture
def sender() -> str:
    return SENDER


@pytest.fixture
def password() -> str:
    return PASSWORD
