"""JSON-RPC ledger client for ethnode-deployments library."""

import itertools
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from .abi import deployment_data
from .constants import DEFAULT_POLL_INTERVAL, DEFAULT_RECEIPT_TIMEOUT, RPC_TIMEOUT
from .exceptions import LedgerRPCError
from .types import CompiledContract, SubmissionEvent, SubmissionStage

_LOGGER = logging.getLogger(__name__)


def _to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def _from_hex(value: Optional[str]) -> bytes:
    if not value:
        return b""
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


class JsonRpcLedgerClient:
    """Talks to an Ethereum node over HTTP JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = RPC_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        self.rpc_url = rpc_url
        self._session = session or requests.Session()
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._receipt_timeout = receipt_timeout
        self._ids = itertools.count(1)
        self._web3 = Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}, session=self._session)
        )

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a single JSON-RPC call and return its result.

        Raises:
            LedgerRPCError: On network failure, HTTP error status or RPC error
        """
        _LOGGER.debug("RPC %s", method)
        try:
            response = self._session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": next(self._ids),
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise LedgerRPCError(f"Network error during {method}: {e}") from e

        if response.status_code != 200:
            raise LedgerRPCError(
                f"RPC request {method} failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise LedgerRPCError(f"Malformed RPC response to {method}") from e

        if "error" in result:
            error = result["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise LedgerRPCError(f"RPC error from {method}: {message}")

        return result.get("result")

    def get_balance(self, address: str) -> int:
        """Balance of an address in wei."""
        return int(self.call("eth_getBalance", [address, "latest"]), 16)

    def get_gas_price(self) -> int:
        """Current gas price in wei."""
        return int(self.call("eth_gasPrice"), 16)

    def unlock(self, address: str, credential: str, duration: int) -> bool:
        """Unlock a node-managed account for signing. Returns the node's verdict."""
        return bool(self.call("personal_unlockAccount", [address, credential, duration]))

    def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """
        Look up a transaction by hash.

        Returns:
            Transaction dict with ``input`` decoded to bytes, or None if unknown
        """
        tx = self.call("eth_getTransactionByHash", [tx_hash])
        if tx is None:
            return None
        tx = dict(tx)
        tx["input"] = _from_hex(tx.get("input"))
        return tx

    def estimate_deployment_gas(
        self, contract: CompiledContract, args: Sequence[Any], sender: str
    ) -> int:
        """
        Estimate the gas needed to deploy a contract.

        Raises:
            ValueError: If constructor arguments cannot be encoded
            LedgerRPCError: If the node rejects the estimate
        """
        data = deployment_data(contract, args)
        return int(self.call("eth_estimateGas", [{"from": sender, "data": _to_hex(data)}]), 16)

    def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """
        Wait until the transaction is mined.

        Raises:
            LedgerRPCError: If no receipt appears within the receipt timeout,
                            or the node cannot be reached while waiting
        """
        try:
            receipt = self._web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout, poll_latency=self._poll_interval
            )
        except TimeExhausted as e:
            raise LedgerRPCError(
                f"No receipt for {tx_hash} after {self._receipt_timeout}s"
            ) from e
        except (Web3Exception, ValueError, requests.RequestException) as e:
            raise LedgerRPCError(f"Error while waiting for {tx_hash}: {e}") from e
        return dict(receipt)

    def submit_deployment(
        self,
        contract: CompiledContract,
        args: Sequence[Any],
        sender: str,
        gas_limit: int,
    ) -> Iterator[SubmissionEvent]:
        """
        Send a deployment transaction and report its milestones.

        Yields a TRANSACTION_HASH event once the node accepts the transaction,
        then a CONTRACT_ADDRESS event once it is mined.

        Raises:
            LedgerRPCError: If sending fails, the receipt never arrives,
                            the transaction reverts or no address is created
        """
        data = deployment_data(contract, args)
        tx_hash = self.call(
            "eth_sendTransaction",
            [{"from": sender, "data": _to_hex(data), "gas": hex(gas_limit)}],
        )
        yield SubmissionEvent(SubmissionStage.TRANSACTION_HASH, tx_hash)

        receipt = self.wait_for_receipt(tx_hash)
        if receipt.get("status") == 0:
            raise LedgerRPCError(f"Deployment transaction {tx_hash} reverted")

        address = receipt.get("contractAddress")
        if not address:
            raise LedgerRPCError(f"Receipt for {tx_hash} has no contract address")

        yield SubmissionEvent(
            SubmissionStage.CONTRACT_ADDRESS, Web3.to_checksum_address(address)
        )
