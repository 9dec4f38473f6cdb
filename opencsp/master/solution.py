"""
Restricted master problem results.

Every solve of the restricted master problem (RMP) is reported as a
MasterSolution: the engine status mapped to SolutionStatus, the pattern
usages x_p and one dual price per demand row.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class SolutionStatus(Enum):
    """Outcome of one master LP solve."""
    OPTIMAL = auto()           # Proven LP optimum, values available
    INFEASIBLE = auto()        # Some demand row cannot be met by the columns
    UNBOUNDED = auto()         # Cannot happen with unit costs and x >= 0
    INF_OR_UNBOUNDED = auto()  # Engine could not tell which
    TIME_LIMIT = auto()        # Per-solve budget hit; values may still be usable
    ITERATION_LIMIT = auto()   # Simplex iteration cap hit
    NOT_SOLVED = auto()        # solve_lp() has not run
    ERROR = auto()             # Engine failure of any other kind


@dataclass
class MasterSolution:
    """
    Result of solving the restricted master problem.

    Attributes:
        status: Engine outcome mapped to SolutionStatus
        objective_value: Objective value sum_p x_p (None if not available)
        primal_values: Usage x_p of every pattern, indexed like the PatternSet
        dual_values: One shadow price per item-demand row
        solve_time: Wall-clock seconds of the engine call
        iterations: Simplex pivots reported by the engine
        num_columns: Number of patterns in the model when solved
        is_approximate: True if the solve stopped on its time limit

    Example:
        >>> solution = master.solve_lp()
        >>> if solution.is_optimal:
        ...     print(f"Objective: {solution.objective_value}")
        ...     for i, pi in enumerate(solution.dual_values):
        ...         print(f"  Dual[{i}] = {pi}")
    """
    status: SolutionStatus = SolutionStatus.NOT_SOLVED
    objective_value: Optional[float] = None
    primal_values: List[float] = field(default_factory=list)
    dual_values: Tuple[float, ...] = ()
    solve_time: float = 0.0
    iterations: int = 0
    num_columns: int = 0
    is_approximate: bool = False

    # =========================================================================
    # Convenience Properties
    # =========================================================================

    @property
    def is_optimal(self) -> bool:
        """True for a proven LP optimum."""
        return self.status == SolutionStatus.OPTIMAL

    @property
    def is_infeasible(self) -> bool:
        """True when the columns cannot cover some demand."""
        return self.status in (SolutionStatus.INFEASIBLE, SolutionStatus.INF_OR_UNBOUNDED)

    @property
    def has_solution(self) -> bool:
        """Check if a primal/dual pair is available."""
        return (
            self.status in (
                SolutionStatus.OPTIMAL,
                SolutionStatus.TIME_LIMIT,
                SolutionStatus.ITERATION_LIMIT,
            )
            and self.objective_value is not None
            and len(self.primal_values) == self.num_columns
            and len(self.dual_values) > 0
        )

    # =========================================================================
    # Methods
    # =========================================================================

    def get_active_columns(self, tol: float = 1e-9) -> List[int]:
        """
        Get pattern indices with positive usage.

        Args:
            tol: Tolerance for considering a value positive

        Returns:
            Indices p with x_p > tol
        """
        return [p for p, value in enumerate(self.primal_values) if value > tol]

    def get_dual(self, item_idx: int, default: float = 0.0) -> float:
        """Get the dual value of an item row."""
        if 0 <= item_idx < len(self.dual_values):
            return self.dual_values[item_idx]
        return default

    def summary(self) -> str:
        """
        Multi-line report of the solve.

        Returns:
            Summary string
        """
        lines = [
            "MasterSolution:",
            f"  Status: {self.status.name}",
        ]

        if self.objective_value is not None:
            lines.append(f"  Objective: {self.objective_value:.6f}")
        if self.is_approximate:
            lines.append("  (time limit reached, values not proven optimal)")

        active = self.get_active_columns()
        lines.extend([
            f"  Active columns: {len(active)} / {self.num_columns}",
            f"  Solve time: {self.solve_time:.3f}s",
            f"  Iterations: {self.iterations}",
        ])

        return "\n".join(lines)

    def __repr__(self) -> str:
        obj_str = f", obj={self.objective_value:.4f}" if self.objective_value is not None else ""
        return f"MasterSolution({self.status.name}{obj_str})"
