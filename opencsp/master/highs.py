"""
Restricted master problem on top of HiGHS.

This module provides the default LP engine for the restricted master
problem using HiGHS, a high-performance open-source LP/MIP solver, through
its highspy bindings.

HiGHS keeps the model between solves, so adding a pattern column and
re-running warm starts from the previous basis.

Usage:
    >>> from opencsp.master import HiGHSMasterProblem
    >>> master = HiGHSMasterProblem(instance, time_limit=10.0)
    >>> master.add_patterns(initial_patterns(instance))
    >>> solution = master.solve_lp()
    >>> duals = solution.dual_values
"""

import time
from typing import Any, Dict, Optional

try:
    import highspy
    HIGHS_AVAILABLE = True
except ImportError:
    HIGHS_AVAILABLE = False

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern
from opencsp.master.base import MasterProblem
from opencsp.master.solution import MasterSolution, SolutionStatus


# HighsModelStatus member name -> SolutionStatus; anything unlisted is ERROR
_HIGHS_STATUS_NAMES = {
    'kNotset': SolutionStatus.NOT_SOLVED,
    'kOptimal': SolutionStatus.OPTIMAL,
    'kInfeasible': SolutionStatus.INFEASIBLE,
    'kUnbounded': SolutionStatus.UNBOUNDED,
    'kUnboundedOrInfeasible': SolutionStatus.INF_OR_UNBOUNDED,
    'kTimeLimit': SolutionStatus.TIME_LIMIT,
    'kIterationLimit': SolutionStatus.ITERATION_LIMIT,
}

_status_map: Dict[Any, SolutionStatus] = {}


def _map_highs_status(status: Any) -> SolutionStatus:
    """Translate a highspy.HighsModelStatus into a SolutionStatus."""
    if not HIGHS_AVAILABLE:
        return SolutionStatus.ERROR

    if not _status_map:
        for name, mapped in _HIGHS_STATUS_NAMES.items():
            member = getattr(highspy.HighsModelStatus, name, None)
            if member is not None:
                _status_map[member] = mapped

    return _status_map.get(status, SolutionStatus.ERROR)


class HiGHSMasterProblem(MasterProblem):
    """
    Restricted master problem solved with HiGHS.

    Row i is sum_p a_ip * x_p >= d_i with bounds [d_i, +inf); every column
    has cost 1 and bounds [0, +inf).

    Example:
        >>> master = HiGHSMasterProblem(instance, time_limit=10.0)
        >>> for pattern in initial_patterns(instance):
        ...     master.add_pattern(pattern)
        >>> solution = master.solve_lp()
        >>> print(f"Objective: {solution.objective_value}")

    Attributes:
        time_limit: Maximum solve time in seconds (None = no limit)
        verbosity: HiGHS output level (0 = silent, 1 = normal)
    """

    def __init__(
        self,
        instance: Instance,
        time_limit: Optional[float] = None,
        verbosity: int = 0,
    ):
        """
        Create the HiGHS model with one demand row per item.

        Args:
            instance: The cutting stock instance
            time_limit: Maximum solve time in seconds (None = no limit)
            verbosity: HiGHS output level (0 = silent)

        Raises:
            ImportError: If highspy is not installed
        """
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )

        self._verbosity = verbosity
        self._highs: Optional[highspy.Highs] = None

        super().__init__(instance, time_limit)

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _build_model(self) -> None:
        """Build the HiGHS model with one demand row per item."""
        self._highs = highspy.Highs()

        self._highs.setOptionValue('output_flag', self._verbosity > 0)
        self._highs.setOptionValue('log_to_console', self._verbosity > 0)

        if self._time_limit is not None:
            self._highs.setOptionValue('time_limit', float(self._time_limit))

        self._highs.changeObjectiveSense(highspy.ObjSense.kMinimize)

        # sum_p a_ip * x_p >= d_i, no columns yet
        for demand in self._instance.item_demands:
            self._highs.addRow(float(demand), highspy.kHighsInf, 0, [], [])

    def _add_column_impl(self, pattern: Pattern) -> int:
        """Add a unit-cost pattern column to the HiGHS model."""
        indices = []
        values = []
        for item_idx, count in enumerate(pattern.counts):
            if count > 0:
                indices.append(item_idx)
                values.append(float(count))

        # addCol(cost, lower, upper, num_nz, indices, values)
        self._highs.addCol(
            1.0,
            0.0,
            highspy.kHighsInf,
            len(indices),
            indices,
            values,
        )

        return self._highs.getNumCol() - 1

    def _solve_lp_impl(self) -> MasterSolution:
        """Run HiGHS and collect status, usages and duals."""
        start_time = time.time()
        self._highs.run()
        solve_time = time.time() - start_time

        status = _map_highs_status(self._highs.getModelStatus())
        info = self._highs.getInfo()

        solution = MasterSolution(
            status=status,
            solve_time=solve_time,
            iterations=info.simplex_iteration_count,
            num_columns=self.num_columns,
        )

        if status not in (
            SolutionStatus.OPTIMAL,
            SolutionStatus.TIME_LIMIT,
            SolutionStatus.ITERATION_LIMIT,
        ):
            return solution

        sol = self._highs.getSolution()
        if not getattr(sol, 'value_valid', True) or not getattr(sol, 'dual_valid', True):
            return solution

        col_value = list(sol.col_value)
        row_dual = list(sol.row_dual)
        if len(col_value) != self.num_columns or len(row_dual) != self.num_constraints:
            return solution

        solution.objective_value = info.objective_function_value
        solution.primal_values = [float(v) for v in col_value]
        solution.dual_values = tuple(float(v) for v in row_dual)

        return solution

    # =========================================================================
    # HiGHS-specific Methods
    # =========================================================================

    def set_time_limit(self, seconds: Optional[float]) -> None:
        """
        Set the solver time limit.

        Args:
            seconds: Maximum solve time in seconds (None or 0 = no limit)
        """
        super().set_time_limit(seconds)
        limit = self._time_limit if self._time_limit is not None else highspy.kHighsInf
        self._highs.setOptionValue('time_limit', float(limit))

    def set_verbosity(self, level: int) -> None:
        """
        Switch HiGHS console output on or off.

        Args:
            level: 0 = silent, 1 = normal
        """
        self._verbosity = level
        self._highs.setOptionValue('output_flag', level > 0)
        self._highs.setOptionValue('log_to_console', level > 0)

    def get_model_stats(self) -> Dict[str, Any]:
        """
        Size of the underlying HiGHS model.

        Returns:
            Column, row and nonzero counts
        """
        return {
            'num_columns': self._highs.getNumCol(),
            'num_rows': self._highs.getNumRow(),
            'num_nonzeros': self._highs.getNumNz(),
        }
