"""
Column generation solution module.

This module defines the loop states and the data structures for
representing the results of the column generation algorithm.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern


class LoopState(Enum):
    """
    State of the column generation loop.

    INITIALIZING -> ITERATING -> one of the terminal states.
    """
    NOT_STARTED = auto()       # solve() not called yet
    INITIALIZING = auto()      # Building seed patterns and components
    ITERATING = auto()         # Master/pricing rounds in progress
    CONVERGED = auto()         # No pattern with negative reduced cost
    TIME_EXPIRED = auto()      # Global budget exhausted (or pricing cut short)
    ITERATION_LIMIT = auto()   # max_iterations reached
    STOPPED = auto()           # A callback asked to stop
    FAILED = auto()            # Unrecovered solver failure

    @property
    def is_terminal(self) -> bool:
        return self not in (
            LoopState.NOT_STARTED,
            LoopState.INITIALIZING,
            LoopState.ITERATING,
        )


@dataclass
class CGIteration:
    """
    Information about a single column generation round.

    Attributes:
        iteration: Round number (1-based)
        master_objective: RMP objective value
        pricing_objective: z* returned by pricing
        reduced_cost: 1 - z*
        pattern_index: Index of the pattern added this round (None if none)
        master_time: Time spent on the master problem
        pricing_time: Time spent on the pricing problem
        total_patterns: Patterns in the set after this round
        master_approximate: Master stopped on its time limit
        pricing_exact: Pricing result is proven optimal
    """
    iteration: int
    master_objective: float
    pricing_objective: float
    reduced_cost: float
    pattern_index: Optional[int]
    master_time: float
    pricing_time: float
    total_patterns: int
    master_approximate: bool = False
    pricing_exact: bool = True


@dataclass
class CGSolution:
    """
    Result of the column generation algorithm.

    Attributes:
        status: Terminal loop state
        instance: The solved instance
        patterns: Final pattern set, in master column order
        usage: LP usage x_p of every pattern (same order as patterns)
        objective_value: sum_p x_p
        dual_values: Duals of the last master solve
        iterations: Number of rounds run
        total_time: Total wall-clock time
        master_time: Time spent in master solves
        pricing_time: Time spent in pricing solves
        iteration_history: Per-round records
        message: Diagnostic message (failures, early stops)
        approximate: Some value in the final round came from a time-limited solve

    Example:
        >>> solution = cg.solve()
        >>> if solution.is_optimal:
        ...     for pattern, x in solution.active_patterns():
        ...         print(f"{pattern} x {x:.3f}")
    """
    status: LoopState = LoopState.NOT_STARTED
    instance: Optional[Instance] = None
    patterns: List[Pattern] = field(default_factory=list)
    usage: List[float] = field(default_factory=list)
    objective_value: Optional[float] = None
    dual_values: Tuple[float, ...] = ()
    iterations: int = 0
    total_time: float = 0.0
    master_time: float = 0.0
    pricing_time: float = 0.0
    iteration_history: List[CGIteration] = field(default_factory=list)
    message: str = ""
    approximate: bool = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_optimal(self) -> bool:
        """Check if the LP relaxation is proven optimal."""
        return self.status == LoopState.CONVERGED and not self.approximate

    @property
    def is_feasible(self) -> bool:
        """Check if a usage vector meeting all demands is available."""
        return self.objective_value is not None and self.status != LoopState.FAILED

    @property
    def num_patterns(self) -> int:
        return len(self.patterns)

    @property
    def lower_bound(self) -> Optional[int]:
        """
        Lower bound on the integer number of stock units.

        Only valid at proven LP optimality: ceil of the LP objective.
        """
        if not self.is_optimal or self.objective_value is None:
            return None
        return math.ceil(self.objective_value - 1e-6)

    # =========================================================================
    # Methods
    # =========================================================================

    def active_patterns(self, tol: float = 1e-9) -> List[Tuple[Pattern, float]]:
        """
        Patterns with positive usage.

        Args:
            tol: Tolerance for considering a value positive

        Returns:
            List of (pattern, usage) pairs in column order
        """
        return [(p, x) for p, x in zip(self.patterns, self.usage) if x > tol]

    def cut_offsets(self) -> List[List[int]]:
        """Cut positions along the stock unit for every pattern."""
        if self.instance is None:
            return []
        return [p.cut_offsets(self.instance.item_lengths) for p in self.patterns]

    def demand_coverage(self) -> List[float]:
        """Pieces produced per item: sum_p pattern_p[i] * x_p."""
        if self.instance is None:
            return []
        coverage = [0.0] * self.instance.num_items
        for pattern, x in zip(self.patterns, self.usage):
            for i, count in enumerate(pattern.counts):
                coverage[i] += count * x
        return coverage

    def get_convergence_history(self) -> List[float]:
        """Master objective after every round."""
        return [it.master_objective for it in self.iteration_history]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view for reporting collaborators."""
        lengths = self.instance.item_lengths if self.instance is not None else ()
        return {
            "status": self.status.name,
            "proven_optimal": self.is_optimal,
            "objective": self.objective_value,
            "iterations": self.iterations,
            "total_time": self.total_time,
            "message": self.message,
            "dual_values": list(self.dual_values),
            "patterns": [
                {
                    "counts": list(p.counts),
                    "usage": x,
                    "cut_offsets": p.cut_offsets(lengths),
                }
                for p, x in zip(self.patterns, self.usage)
            ],
        }

    def summary(self) -> str:
        """
        Return a human-readable summary.

        Returns:
            Summary string
        """
        lines = [
            "Column Generation Solution:",
            f"  Status: {self.status.name}",
        ]

        if self.objective_value is not None:
            lines.append(f"  LP objective: {self.objective_value:.6f}")
        if self.lower_bound is not None:
            lines.append(f"  Lower bound (rolls): {self.lower_bound}")
        if not self.is_optimal:
            lines.append("  Not proven optimal")
        if self.message:
            lines.append(f"  Message: {self.message}")

        lines.extend([
            "",
            f"  Iterations: {self.iterations}",
            f"  Total patterns: {self.num_patterns}",
            f"  Active patterns: {len(self.active_patterns())}",
            "",
            f"  Total time: {self.total_time:.3f}s",
            f"  Master time: {self.master_time:.3f}s",
            f"  Pricing time: {self.pricing_time:.3f}s",
        ])

        active = self.active_patterns()
        if active:
            lines.append("")
            lines.append("  Patterns in use:")
            for pattern, x in active:
                lines.append(f"    {list(pattern.counts)} x {x:.4f}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        obj_str = f", obj={self.objective_value:.4f}" if self.objective_value is not None else ""
        return f"CGSolution({self.status.name}{obj_str}, iter={self.iterations})"
