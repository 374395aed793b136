"""Process-wide gas spending budget."""

import logging
import threading

_LOGGER = logging.getLogger(__name__)


class SpendBudget:
    """
    Shared counter of gas that deployments are still allowed to spend.

    One instance is meant to be shared by every deployment in the process.
    All reads and writes go through a single lock, so concurrent callers
    see a serialized view and can never be authorized past ``capacity``.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"Budget capacity must be non-negative, got {capacity}")
        self._capacity = capacity
        self._remaining = capacity
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    def authorize(self, amount: int) -> bool:
        """
        Reserve ``amount`` gas if it fits in the remaining budget.

        Returns:
            True if granted (the remaining budget is decremented), False otherwise

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Cannot authorize a negative amount: {amount}")

        with self._lock:
            if amount > self._remaining:
                _LOGGER.warning(
                    "Budget denied %d gas (%d remaining)", amount, self._remaining
                )
                return False
            self._remaining -= amount
            return True

    def refund(self, amount: int) -> None:
        """Return previously authorized gas to the budget."""
        if amount < 0:
            raise ValueError(f"Cannot refund a negative amount: {amount}")

        with self._lock:
            self._remaining = min(self._capacity, self._remaining + amount)
