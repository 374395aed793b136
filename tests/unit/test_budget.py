"""Unit tests for the shared spend budget."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from ethnode_deployments.budget import SpendBudget


class TestAuthorize:
    """Test SpendBudget.authorize()."""

    def test_grants_amount_within_budget(self):
        """Test authorizing less than the remaining budget."""
        budget = SpendBudget(100)
        assert budget.authorize(40) is True
        assert budget.remaining == 60

    def test_grants_exact_remaining_amount(self):
        """Test authorizing exactly the remaining budget."""
        budget = SpendBudget(100)
        assert budget.authorize(100) is True
        assert budget.remaining == 0

    def test_denies_amount_over_remaining(self):
        """Test authorizing more than the remaining budget."""
        budget = SpendBudget(3)
        assert budget.authorize(4) is False
        assert budget.remaining == 3

    def test_denial_after_partial_spend(self):
        """Test a denial once earlier grants have used most of the budget."""
        budget = SpendBudget(10)
        assert budget.authorize(6)
        assert not budget.authorize(6)
        assert budget.authorize(4)
        assert budget.remaining == 0

    def test_zero_amount_always_granted(self):
        """Test a zero amount is granted even from an empty budget."""
        budget = SpendBudget(0)
        assert budget.authorize(0) is True

    def test_negative_amount_rejected(self):
        """Test a negative amount raises ValueError."""
        with pytest.raises(ValueError):
            SpendBudget(10).authorize(-1)

    def test_negative_capacity_rejected(self):
        """Test a negative capacity raises ValueError."""
        with pytest.raises(ValueError):
            SpendBudget(-5)


class TestRefund:
    """Test SpendBudget.refund()."""

    def test_refund_restores_amount(self):
        """Test a refund makes the amount available again."""
        budget = SpendBudget(10)
        budget.authorize(7)
        budget.refund(7)
        assert budget.remaining == 10

    def test_refund_never_exceeds_capacity(self):
        """Test refunds are capped at the original capacity."""
        budget = SpendBudget(10)
        budget.refund(5)
        assert budget.remaining == 10
        assert budget.capacity == 10


class TestConcurrentAuthorization:
    """Concurrent callers must never be authorized past capacity."""

    @pytest.mark.parametrize(
        "capacity,amount,callers",
        [(100, 7, 50), (10, 10, 20), (3, 4, 8), (1000, 1, 2000)],
    )
    def test_grants_at_most_floor_capacity_over_amount(self, capacity, amount, callers):
        """Test concurrent callers never get more grants than the budget holds."""
        budget = SpendBudget(capacity)

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: budget.authorize(amount), range(callers)))

        granted = sum(results)
        assert granted == min(callers, capacity // amount)
        assert budget.remaining == capacity - granted * amount
