"""
Tests for the knapsack pricing module.

This module tests:
- solve_unbounded_knapsack against brute-force enumeration
- Tie-breaking and degenerate inputs
- Time-limited sweeps
- KnapsackPricing statuses and the PricingProblem lifecycle
"""

import random
from types import SimpleNamespace

import pytest

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern
from opencsp.exceptions import SolverFailure, TimeLimitApprox
from opencsp.pricing import (
    KnapsackPricing,
    PricingConfig,
    PricingSolution,
    PricingStatus,
    solve_unbounded_knapsack,
)
from opencsp.pricing import knapsack
from opencsp.pricing.knapsack import CARRY, KnapsackStatus


def _fake_clock(monkeypatch, start=0.0, later=1000.0):
    """Clock that reads `start` once, then `later` forever."""
    readings = iter([start])

    def fake_time():
        return next(readings, later)

    monkeypatch.setattr(knapsack, "time", SimpleNamespace(time=fake_time))


# =============================================================================
# Test solve_unbounded_knapsack
# =============================================================================

class TestUnboundedKnapsack:
    """Tests for the exact DP."""

    def test_docstring_example(self):
        result = solve_unbounded_knapsack([3, 4], [0.3, 0.5], 10)

        assert result.counts == (2, 1)
        assert result.objective == pytest.approx(1.1)
        assert result.status == KnapsackStatus.OPTIMAL
        assert result.capacity_reached == 10

    def test_single_item(self):
        result = solve_unbounded_knapsack([5], [0.5], 10)
        assert result.counts == (2,)
        assert result.objective == pytest.approx(1.0)

    @pytest.mark.parametrize("n_range,length_range", [
        ((1, 5), (3, 15)),
        ((6, 8), (6, 25)),
    ])
    def test_matches_brute_force(self, feasible_patterns, n_range, length_range):
        rng = random.Random(12345)
        for _ in range(25):
            n = rng.randint(*n_range)
            capacity = rng.randint(1, 50)
            lengths = [rng.randint(*length_range) for _ in range(n)]
            values = [round(rng.uniform(-0.2, 1.0), 3) for _ in range(n)]

            result = solve_unbounded_knapsack(lengths, values, capacity)

            best = max(
                sum(c * v for c, v in zip(counts, values))
                for counts in feasible_patterns(lengths, capacity)
            )
            assert result.objective == pytest.approx(best)
            assert sum(c * l for c, l in zip(result.counts, lengths)) <= capacity
            assert sum(c * v for c, v in zip(result.counts, values)) == pytest.approx(
                result.objective
            )

    def test_non_positive_values_give_empty_pattern(self):
        result = solve_unbounded_knapsack([3, 4], [0.0, -1.0], 10)
        assert result.counts == (0, 0)
        assert result.objective == 0.0
        assert result.status == KnapsackStatus.OPTIMAL

    def test_negative_values_never_selected(self):
        result = solve_unbounded_knapsack([3, 4], [0.4, -0.1], 10)
        assert result.counts == (3, 0)

    def test_zero_capacity(self):
        result = solve_unbounded_knapsack([3, 4], [1.0, 1.0], 0)
        assert result.counts == (0, 0)
        assert result.objective == 0.0

    def test_items_too_long(self):
        result = solve_unbounded_knapsack([11, 12], [1.0, 1.0], 10)
        assert result.counts == (0, 0)

    def test_tie_goes_to_lowest_index(self):
        result = solve_unbounded_knapsack([2, 2], [1.0, 1.0], 4)
        assert result.counts == (2, 0)

    def test_tie_goes_to_carry(self):
        # dp[4] = dp[3] = 1 either way; the carry keeps one piece
        result = solve_unbounded_knapsack([3], [1.0], 4)
        assert result.counts == (1,)

    def test_deterministic(self):
        args = ([3, 5, 7, 2], [0.31, 0.52, 0.73, 0.2], 37)
        first = solve_unbounded_knapsack(*args)
        for _ in range(5):
            assert solve_unbounded_knapsack(*args) == first

    def test_mismatched_inputs(self):
        with pytest.raises(ValueError):
            solve_unbounded_knapsack([3, 4], [0.5], 10)

    def test_negative_capacity(self):
        with pytest.raises(ValueError):
            solve_unbounded_knapsack([3], [0.5], -1)

    def test_time_limit_returns_partial_incumbent(self, monkeypatch):
        _fake_clock(monkeypatch)

        result = solve_unbounded_knapsack(
            [3, 4], [0.3, 0.5], 50, time_limit=1.0, check_interval=10
        )

        assert result.status == KnapsackStatus.TIME_LIMIT
        assert result.capacity_reached == 10
        assert result.counts == (2, 1)
        assert result.objective == pytest.approx(1.1)

    def test_unlimited_time_ignores_clock(self, monkeypatch):
        _fake_clock(monkeypatch)
        result = solve_unbounded_knapsack([3, 4], [0.3, 0.5], 50, check_interval=10)
        assert result.status == KnapsackStatus.OPTIMAL
        assert result.capacity_reached == 50


class TestReconstruct:
    """Tests for table consistency checks."""

    def test_inconsistent_carry(self):
        dp = [0.0, 0.0, 1.0]
        choice = [CARRY, CARRY, CARRY]
        with pytest.raises(SolverFailure):
            knapsack._reconstruct(dp, choice, [2], [1.0], 2, 1)

    def test_inconsistent_item(self):
        dp = [0.0, 0.0, 5.0]
        choice = [CARRY, CARRY, 0]
        with pytest.raises(SolverFailure):
            knapsack._reconstruct(dp, choice, [2], [1.0], 2, 1)

    def test_consistent_table(self):
        dp = [0.0, 0.0, 1.0, 1.0, 2.0]
        choice = [CARRY, CARRY, 0, CARRY, 0]
        assert knapsack._reconstruct(dp, choice, [2], [1.0], 4, 1) == [2]


# =============================================================================
# Test PricingSolution
# =============================================================================

class TestPricingSolution:
    """Tests for PricingSolution."""

    def test_default(self):
        sol = PricingSolution()
        assert sol.status == PricingStatus.NO_COLUMNS
        assert sol.is_exact
        assert not sol.has_negative_reduced_cost

    def test_negative_reduced_cost(self):
        sol = PricingSolution(
            status=PricingStatus.COLUMNS_FOUND,
            pattern=Pattern((2, 1)),
            objective=1.1,
            reduced_cost=-0.1,
        )
        assert sol.has_negative_reduced_cost

    def test_within_tolerance_is_not_improving(self):
        sol = PricingSolution(pattern=Pattern((1,)), reduced_cost=-1e-9)
        assert not sol.has_negative_reduced_cost

    def test_time_limit_is_not_exact(self):
        assert not PricingSolution(status=PricingStatus.TIME_LIMIT).is_exact


# =============================================================================
# Test KnapsackPricing
# =============================================================================

class TestKnapsackPricing:
    """Tests for the knapsack pricing problem."""

    def test_solve_requires_duals(self, small_instance):
        pricing = KnapsackPricing(small_instance)
        with pytest.raises(RuntimeError):
            pricing.solve()

    def test_dual_length_mismatch(self, small_instance):
        pricing = KnapsackPricing(small_instance)
        with pytest.raises(ValueError):
            pricing.set_dual_values([0.5])

    def test_columns_found(self, small_instance):
        pricing = KnapsackPricing(small_instance)
        pricing.set_dual_values([1 / 3, 1 / 2])

        result = pricing.solve()

        assert result.status == PricingStatus.COLUMNS_FOUND
        assert result.pattern == Pattern((2, 1))
        assert result.objective == pytest.approx(7 / 6)
        assert result.reduced_cost == pytest.approx(-1 / 6)
        assert result.has_negative_reduced_cost
        assert result.solve_time >= 0.0

    def test_no_columns_at_optimum(self, small_instance):
        pricing = KnapsackPricing(small_instance)
        pricing.set_dual_values([0.25, 0.5])

        result = pricing.solve()

        assert result.status == PricingStatus.NO_COLUMNS
        assert result.objective == pytest.approx(1.0)
        assert not result.has_negative_reduced_cost

    def test_zero_duals(self, small_instance):
        pricing = KnapsackPricing(small_instance)
        pricing.set_dual_values([0.0, 0.0])

        result = pricing.solve()

        assert result.status == PricingStatus.NO_COLUMNS
        assert result.pattern.is_empty
        assert result.reduced_cost == pytest.approx(1.0)

    def test_time_limit_warns(self, monkeypatch):
        _fake_clock(monkeypatch)
        instance = Instance(50, (3, 4), (5, 3))
        pricing = KnapsackPricing(instance, PricingConfig(max_time=1.0, check_interval=10))
        pricing.set_dual_values([0.3, 0.5])

        with pytest.warns(TimeLimitApprox):
            result = pricing.solve()

        assert result.status == PricingStatus.TIME_LIMIT
        assert not result.is_exact
        assert result.capacity_reached == 10
        assert result.pattern.is_feasible(instance)

    def test_repr(self, small_instance):
        assert repr(KnapsackPricing(small_instance)) == "KnapsackPricing(items=2)"
