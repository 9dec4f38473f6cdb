"""
Pricing module - the column generation subproblem.

For the cutting stock problem the pricing problem is an unbounded knapsack:
find the pattern maximizing the dual value it covers. This module provides:

- PricingProblem: Abstract base class for pricing solvers
- PricingConfig: Time budget and tolerance
- PricingSolution / PricingStatus: Result types
- KnapsackPricing: Exact dynamic-programming pricing (default)
- solve_unbounded_knapsack: The DP routine itself

Usage:
------
    >>> from opencsp.pricing import KnapsackPricing, PricingConfig
    >>> pricing = KnapsackPricing(instance, PricingConfig(max_time=60.0))
    >>> pricing.set_dual_values(duals)
    >>> solution = pricing.solve()
    >>> print(solution.pattern, solution.reduced_cost)
"""

from opencsp.pricing.base import (
    PricingConfig,
    PricingProblem,
    PricingSolution,
    PricingStatus,
)
from opencsp.pricing.knapsack import (
    KnapsackPricing,
    KnapsackResult,
    KnapsackStatus,
    solve_unbounded_knapsack,
)

__all__ = [
    # Base
    'PricingProblem',
    'PricingConfig',
    'PricingSolution',
    'PricingStatus',

    # Knapsack
    'KnapsackPricing',
    'KnapsackResult',
    'KnapsackStatus',
    'solve_unbounded_knapsack',
]
