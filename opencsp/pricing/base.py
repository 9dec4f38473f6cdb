"""
Pricing problem abstract base class.

The pricing problem searches for a pattern (column) with negative reduced
cost. With master duals pi, the reduced cost of pattern a is:

    RC(a) = 1 - sum_i pi_i * a_i

so the best pattern maximizes sum_i pi_i * a_i subject to fitting in one
stock unit. If the maximum z* satisfies z* <= 1, no pattern can improve the
master LP and column generation has converged.

Customization Guide:
-------------------
1. Subclass PricingProblem
2. Implement _solve_impl() returning a PricingSolution
3. The public solve() handles timing, logging and time-limit warnings
"""

import logging
import time
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern
from opencsp.exceptions import TimeLimitApprox

logger = logging.getLogger(__name__)


class PricingStatus(Enum):
    """
    Status of the pricing problem solution.
    """
    COLUMNS_FOUND = auto()    # Found a pattern with negative RC
    NO_COLUMNS = auto()       # Proven: no pattern has negative RC
    TIME_LIMIT = auto()       # Time limit reached, best incumbent returned
    ERROR = auto()            # Error occurred


@dataclass
class PricingSolution:
    """
    Result of solving the pricing problem.

    Attributes:
        status: Solution status
        pattern: Best pattern found (all-zero when nothing has positive value)
        objective: z* = sum_i pi_i * pattern_i
        reduced_cost: 1 - z*
        solve_time: Time spent solving in seconds
        capacity_reached: Largest capacity fully evaluated (stock length
            unless the time limit cut the search short)
    """
    status: PricingStatus = PricingStatus.NO_COLUMNS
    pattern: Optional[Pattern] = None
    objective: float = 0.0
    reduced_cost: float = 1.0
    solve_time: float = 0.0
    capacity_reached: int = 0
    tolerance: float = 1e-6

    @property
    def is_exact(self) -> bool:
        """True if the objective is the proven maximum."""
        return self.status in (PricingStatus.COLUMNS_FOUND, PricingStatus.NO_COLUMNS)

    @property
    def has_negative_reduced_cost(self) -> bool:
        """Check if the returned pattern improves the master LP."""
        return (
            self.pattern is not None
            and not self.pattern.is_empty
            and self.reduced_cost < -self.tolerance
        )

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            "PricingSolution:",
            f"  Status: {self.status.name}",
            f"  Pattern: {self.pattern!r}",
            f"  Objective (z*): {self.objective:.6f}",
            f"  Reduced cost: {self.reduced_cost:.6f}",
            f"  Solve time: {self.solve_time:.3f}s",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"PricingSolution({self.status.name}, z={self.objective:.4f})"


@dataclass
class PricingConfig:
    """
    Configuration for pricing problem solving.

    Attributes:
        max_time: Maximum solve time in seconds (0 = unlimited)
        reduced_cost_tolerance: A pattern improves only if RC < -tolerance
        check_interval: Capacities evaluated between clock checks
    """
    max_time: float = 0.0
    reduced_cost_tolerance: float = 1e-6
    check_interval: int = 1024


class PricingProblem(ABC):
    """
    Abstract base class for pricing problem solvers.

    Lifecycle:
    ---------
    1. Create: pricing = KnapsackPricing(instance)
    2. Set duals: pricing.set_dual_values(duals)
    3. Solve: solution = pricing.solve()
    4. Update duals and repeat

    Attributes:
        instance: The cutting stock instance
        config: Pricing configuration
    """

    def __init__(self, instance: Instance, config: Optional[PricingConfig] = None):
        """
        Initialize the pricing problem.

        Args:
            instance: The cutting stock instance
            config: Optional configuration (uses defaults if not provided)
        """
        self._instance = instance
        self._config = config or PricingConfig()
        self._dual_values: Tuple[float, ...] = ()

    @property
    def instance(self) -> Instance:
        return self._instance

    @property
    def config(self) -> PricingConfig:
        return self._config

    @property
    def dual_values(self) -> Tuple[float, ...]:
        return self._dual_values

    def set_dual_values(self, duals: Sequence[float]) -> None:
        """
        Set the item prices for the next solve.

        Args:
            duals: One dual value per item

        Raises:
            ValueError: If the number of duals does not match the items
        """
        if len(duals) != self._instance.num_items:
            raise ValueError(
                f"Expected {self._instance.num_items} dual values, got {len(duals)}"
            )
        self._dual_values = tuple(float(d) for d in duals)

    def solve(self) -> PricingSolution:
        """
        Solve the pricing problem with the current duals.

        Returns:
            PricingSolution

        Raises:
            RuntimeError: If no dual values were set
        """
        if not self._dual_values:
            raise RuntimeError("Dual values not set; call set_dual_values() first")

        start_time = time.time()
        solution = self._solve_impl()
        solution.solve_time = time.time() - start_time

        logger.debug(
            "Pricing solve: status=%s z*=%.6f rc=%.6f time=%.3fs",
            solution.status.name, solution.objective,
            solution.reduced_cost, solution.solve_time,
        )

        if solution.status == PricingStatus.TIME_LIMIT:
            message = (
                f"Pricing stopped on its {self._config.max_time}s time limit at "
                f"capacity {solution.capacity_reached}/{self._instance.stock_length}; "
                f"pattern is not proven optimal"
            )
            logger.warning(message)
            warnings.warn(message, TimeLimitApprox, stacklevel=2)

        return solution

    @abstractmethod
    def _solve_impl(self) -> PricingSolution:
        """
        Solve with self._dual_values.

        Returns:
            PricingSolution (solve_time is filled in by solve())
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(items={self._instance.num_items})"
