"""
Master problem abstract base class.

This module defines the interface every LP engine used for the restricted
master problem must implement. The master problem of the cutting stock
problem over the current pattern set P is:

    min  sum_p x_p
    s.t. sum_p a_ip * x_p >= d_i     for every item i
         x_p >= 0

where a_ip is the number of copies of item i in pattern p and d_i is the
demand of item i. The dual values pi_i of the demand rows are the prices
used by the pricing problem.

Users can either:
1. Use the provided HiGHSMasterProblem (default implementation)
2. Implement their own by subclassing MasterProblem

Customization Guide:
-------------------
1. Subclass MasterProblem
2. Implement _build_model, _add_column_impl and _solve_lp_impl
3. Report the engine outcome through MasterSolution.status

The public solve_lp() turns engine outcomes into the library's error
policy: a time-limited solve with values is returned with a TimeLimitApprox
warning, anything without a usable primal/dual pair raises SolverFailure.

Example:
    >>> class MyEngineMaster(MasterProblem):
    ...     def _build_model(self) -> None:
    ...         self._model = MyEngine()
    ...         # ... one >= demand row per item ...
    ...
    ...     def _add_column_impl(self, pattern: Pattern) -> int:
    ...         ...
    ...
    ...     def _solve_lp_impl(self) -> MasterSolution:
    ...         ...
"""

import logging
import warnings
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern
from opencsp.exceptions import SolverFailure, TimeLimitApprox
from opencsp.master.solution import MasterSolution, SolutionStatus

logger = logging.getLogger(__name__)


class MasterProblem(ABC):
    """
    Abstract base class for restricted master problem solvers.

    Lifecycle:
    ---------
    1. Create: master = HiGHSMasterProblem(instance, time_limit=10.0)
    2. Add seed patterns: master.add_patterns(patterns)
    3. Solve LP: solution = master.solve_lp()
    4. Read duals for pricing: solution.dual_values
    5. Add the priced pattern: master.add_pattern(new_pattern)
    6. Repeat 3-5 until no pattern has negative reduced cost

    Attributes:
        instance: The cutting stock instance
        time_limit: Per-solve time budget in seconds (None = no limit)
    """

    def __init__(self, instance: Instance, time_limit: Optional[float] = None):
        """
        Initialize the master problem.

        Args:
            instance: The cutting stock instance
            time_limit: Per-solve time budget in seconds (None or 0 = no limit)
        """
        self._instance = instance
        self._time_limit = time_limit if time_limit else None

        # Column tracking, index = pattern index in the loop's PatternSet
        self._patterns: List[Pattern] = []

        self._last_solution: Optional[MasterSolution] = None

        self._build_model()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def instance(self) -> Instance:
        """The underlying Instance."""
        return self._instance

    @property
    def num_columns(self) -> int:
        """Number of pattern columns currently in the model."""
        return len(self._patterns)

    @property
    def num_constraints(self) -> int:
        """Number of demand rows."""
        return self._instance.num_items

    @property
    def patterns(self) -> List[Pattern]:
        """Patterns in column order."""
        return self._patterns.copy()

    @property
    def time_limit(self) -> Optional[float]:
        return self._time_limit

    @property
    def last_solution(self) -> Optional[MasterSolution]:
        """Solution of the most recent solve_lp() call."""
        return self._last_solution

    # =========================================================================
    # Abstract Methods (MUST be implemented by subclasses)
    # =========================================================================

    @abstractmethod
    def _build_model(self) -> None:
        """
        Build the initial model.

        Called once during initialization. Should create the engine model,
        set the objective sense to minimize and add one empty row
        sum_p a_ip x_p >= d_i per item.
        """
        pass

    @abstractmethod
    def _add_column_impl(self, pattern: Pattern) -> int:
        """
        Add a unit-cost column with coefficients pattern.counts.

        Args:
            pattern: The pattern to add

        Returns:
            The index of the column in the engine model
        """
        pass

    @abstractmethod
    def _solve_lp_impl(self) -> MasterSolution:
        """
        Solve the LP relaxation and report the raw engine outcome.

        Returns:
            MasterSolution with status, objective, primal and dual values
            (values only when the engine provides them)
        """
        pass

    # =========================================================================
    # Public API
    # =========================================================================

    def add_pattern(self, pattern: Pattern) -> int:
        """
        Add a pattern column to the master problem.

        Args:
            pattern: The pattern to add

        Returns:
            Index of the column in the master problem

        Raises:
            ValueError: If the pattern has the wrong number of items
        """
        if pattern.num_items != self._instance.num_items:
            raise ValueError(
                f"Pattern has {pattern.num_items} entries, "
                f"instance has {self._instance.num_items} items"
            )
        idx = len(self._patterns)
        self._patterns.append(pattern)
        self._add_column_impl(pattern)
        return idx

    def add_patterns(self, patterns: Sequence[Pattern]) -> List[int]:
        """Add several patterns; returns their indices."""
        return [self.add_pattern(p) for p in patterns]

    def solve_lp(self) -> MasterSolution:
        """
        Solve the LP relaxation over the current patterns.

        Returns:
            MasterSolution; is_approximate is set when the solve stopped on
            its time limit but still produced primal and dual values

        Raises:
            SolverFailure: If the LP is infeasible, unbounded, failed, or
                stopped without usable values
        """
        if self.num_columns == 0:
            raise SolverFailure("Master problem has no columns", status="MODEL_EMPTY")

        solution = self._solve_lp_impl()
        self._last_solution = solution

        logger.debug(
            "RMP solve: status=%s obj=%s columns=%d time=%.3fs",
            solution.status.name, solution.objective_value,
            solution.num_columns, solution.solve_time,
        )

        if solution.status == SolutionStatus.OPTIMAL and solution.has_solution:
            return solution

        if solution.status in (SolutionStatus.TIME_LIMIT, SolutionStatus.ITERATION_LIMIT) \
                and solution.has_solution:
            solution.is_approximate = True
            message = (
                f"Master LP stopped at {solution.status.name} after "
                f"{solution.solve_time:.2f}s; continuing with approximate duals"
            )
            logger.warning(message)
            warnings.warn(message, TimeLimitApprox, stacklevel=2)
            return solution

        raise SolverFailure(
            "Failed to solve the restricted master problem",
            status=solution.status.name,
        )

    def get_dual_values(self) -> Tuple[float, ...]:
        """
        Dual values from the last LP solve.

        Raises:
            RuntimeError: If solve_lp() has not produced a solution yet
        """
        if self._last_solution is None or not self._last_solution.dual_values:
            raise RuntimeError("No dual values available; call solve_lp() first")
        return self._last_solution.dual_values

    def set_time_limit(self, seconds: Optional[float]) -> None:
        """
        Set the per-solve time budget.

        Args:
            seconds: Budget in seconds (None or 0 = no limit)
        """
        self._time_limit = seconds if seconds else None

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"{self.__class__.__name__}:",
            f"  Rows (items): {self.num_constraints}",
            f"  Columns (patterns): {self.num_columns}",
            f"  Time limit: {self._time_limit if self._time_limit else 'none'}",
        ]
        if self._last_solution is not None:
            lines.append(f"  Last solve: {self._last_solution!r}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(items={self.num_constraints}, "
            f"columns={self.num_columns})"
        )
