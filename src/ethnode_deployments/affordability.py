"""Balance-versus-cost check for deployments."""

from decimal import Decimal
from typing import Tuple

from web3 import Web3

from .constants import NATIVE_UNIT


class AffordabilityCheck:
    """
    Compares an account balance against the cost of a gas amount.

    Balance and gas price are read from the ledger on every call and never
    cached, since either may change between calls.
    """

    def __init__(self, ledger, address: str):
        self._ledger = ledger
        self.address = address

    def estimate(self, gas_amount: int) -> Tuple[Decimal, Decimal]:
        """
        Price a gas amount at the current gas price.

        Returns:
            Tuple of (estimated_cost, balance), both in ether
        """
        gas_price = Web3.from_wei(self._ledger.get_gas_price(), NATIVE_UNIT)
        balance = Web3.from_wei(self._ledger.get_balance(self.address), NATIVE_UNIT)
        return gas_amount * gas_price, balance

    def can_afford(self, gas_amount: int) -> bool:
        estimated_cost, balance = self.estimate(gas_amount)
        return balance >= estimated_cost
