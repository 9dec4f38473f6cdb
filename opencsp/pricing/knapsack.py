"""
Exact unbounded knapsack pricing for the cutting stock problem.

Given item prices w (master duals), the pricing subproblem is:

    max  sum_i w_i * a_i
    s.t. sum_i l_i * a_i <= L
         a_i >= 0, integer

Each item type may be used any number of times, so this is the unbounded
knapsack problem. It is solved exactly by dynamic programming over
capacity:

    dp[0] = 0
    dp[c] = max(dp[c-1], max_{i : l_i <= c} dp[c - l_i] + w_i)

choice[c] records how dp[c] was reached: CARRY (from dp[c-1]) or the item
index. Only strict improvements replace the incumbent, so ties go to the
carry and then to the lowest item index; the result is deterministic.

Complexity: O(n * L) time, O(L) space.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

from opencsp.core.pattern import Pattern
from opencsp.exceptions import SolverFailure
from opencsp.pricing.base import PricingProblem, PricingSolution, PricingStatus

logger = logging.getLogger(__name__)

CARRY = -1


class KnapsackStatus(Enum):
    OPTIMAL = auto()
    TIME_LIMIT = auto()


@dataclass(frozen=True)
class KnapsackResult:
    """
    Result of an unbounded knapsack solve.

    Attributes:
        counts: Copies of each item in the best pattern
        objective: sum_i values[i] * counts[i]
        status: OPTIMAL, or TIME_LIMIT if the sweep was cut short
        capacity_reached: Largest capacity whose dp entry was computed
    """
    counts: Tuple[int, ...]
    objective: float
    status: KnapsackStatus
    capacity_reached: int


def solve_unbounded_knapsack(
    item_lengths: Sequence[int],
    values: Sequence[float],
    capacity: int,
    time_limit: Optional[float] = None,
    check_interval: int = 1024,
) -> KnapsackResult:
    """
    Solve the unbounded knapsack problem exactly.

    Args:
        item_lengths: Positive integer length of each item
        values: Value (price) of each item, may be negative
        capacity: Knapsack capacity (stock length), >= 0
        time_limit: Budget in seconds (None or 0 = unlimited). When it runs
            out, the best pattern for the largest capacity reached so far
            is returned; it is feasible but not proven optimal.
        check_interval: Capacities evaluated between clock checks

    Returns:
        KnapsackResult

    Raises:
        ValueError: On mismatched inputs or negative capacity
        SolverFailure: If the dp/choice table is inconsistent

    Example:
        >>> r = solve_unbounded_knapsack([3, 4], [0.3, 0.5], 10)
        >>> r.counts, round(r.objective, 2)
        ((2, 1), 1.1)
    """
    n = len(item_lengths)
    if len(values) != n:
        raise ValueError(f"Got {n} item lengths but {len(values)} values")
    if capacity < 0:
        raise ValueError(f"capacity must be non-negative, got {capacity}")

    zero = KnapsackResult((0,) * n, 0.0, KnapsackStatus.OPTIMAL, capacity)

    # Items with w_i <= 0 never strictly improve dp, which is non-decreasing
    candidates = [
        (i, int(item_lengths[i]), float(values[i]))
        for i in range(n)
        if values[i] > 0 and 0 < item_lengths[i] <= capacity
    ]
    if capacity == 0 or not candidates:
        return zero

    deadline = time.time() + time_limit if time_limit else None
    status = KnapsackStatus.OPTIMAL
    reached = capacity

    dp = [0.0] * (capacity + 1)
    choice = [CARRY] * (capacity + 1)

    for c in range(1, capacity + 1):
        best = dp[c - 1]
        best_item = CARRY
        for i, length, value in candidates:
            if length <= c:
                candidate = dp[c - length] + value
                if candidate > best:
                    best = candidate
                    best_item = i
        dp[c] = best
        choice[c] = best_item

        if deadline is not None and c % check_interval == 0 and c < capacity:
            if time.time() >= deadline:
                status = KnapsackStatus.TIME_LIMIT
                reached = c
                break

    counts = _reconstruct(dp, choice, item_lengths, values, reached, n)
    return KnapsackResult(tuple(counts), dp[reached], status, reached)


def _reconstruct(dp, choice, item_lengths, values, capacity: int, n: int) -> list:
    """Walk choice[] back from capacity and count the items used."""
    counts = [0] * n
    c = capacity
    while c > 0:
        i = choice[c]
        if i == CARRY:
            if dp[c] != dp[c - 1]:
                raise SolverFailure(
                    f"Inconsistent knapsack table: carry at capacity {c} "
                    f"but dp[{c}]={dp[c]} != dp[{c - 1}]={dp[c - 1]}"
                )
            c -= 1
            continue

        length = item_lengths[i]
        if length > c or dp[c] != dp[c - length] + values[i]:
            raise SolverFailure(
                f"Inconsistent knapsack table: item {i} recorded at capacity {c}"
            )
        counts[i] += 1
        c -= length
    return counts


class KnapsackPricing(PricingProblem):
    """
    Pricing problem for cutting stock (unbounded knapsack, exact DP).

    Finds the pattern maximizing sum_i pi_i * a_i over all patterns that fit
    in one stock unit. The pattern improves the master LP when its reduced
    cost 1 - z* is negative.

    Example:
        >>> pricing = KnapsackPricing(instance, PricingConfig(max_time=60.0))
        >>> pricing.set_dual_values(solution.dual_values)
        >>> result = pricing.solve()
        >>> if result.has_negative_reduced_cost:
        ...     master.add_pattern(result.pattern)
    """

    def _solve_impl(self) -> PricingSolution:
        """Solve the knapsack for the current duals."""
        instance = self._instance
        result = solve_unbounded_knapsack(
            instance.item_lengths,
            self._dual_values,
            instance.stock_length,
            time_limit=self._config.max_time,
            check_interval=self._config.check_interval,
        )

        pattern = Pattern(result.counts)
        reduced_cost = 1.0 - result.objective

        if result.status == KnapsackStatus.TIME_LIMIT:
            status = PricingStatus.TIME_LIMIT
        elif reduced_cost < -self._config.reduced_cost_tolerance and not pattern.is_empty:
            status = PricingStatus.COLUMNS_FOUND
        else:
            status = PricingStatus.NO_COLUMNS

        return PricingSolution(
            status=status,
            pattern=pattern,
            objective=result.objective,
            reduced_cost=reduced_cost,
            capacity_reached=result.capacity_reached,
            tolerance=self._config.reduced_cost_tolerance,
        )
