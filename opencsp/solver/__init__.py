"""
Solver module - the column generation loop.

This module provides:
- ColumnGeneration: Main algorithm controller
- CGConfig: Budgets and tolerances
- CGSolution: Solution data structure
- LoopState: Loop state / terminal status enum
- CGIteration: Per-round information
- solve_cutting_stock: One-call convenience wrapper

Usage:
------
Basic usage:

    >>> from opencsp.solver import ColumnGeneration, CGConfig
    >>> cg = ColumnGeneration(instance, CGConfig(max_time=600.0))
    >>> solution = cg.solve()
    >>> if solution.is_optimal:
    ...     print(f"LP optimum: {solution.objective_value}")

With callbacks for monitoring:

    >>> def progress_callback(cg, iteration):
    ...     print(f"Iter {iteration.iteration}: obj={iteration.master_objective:.2f}")
    ...     return iteration.iteration < 50  # Stop after 50 rounds
    >>>
    >>> cg = ColumnGeneration(instance)
    >>> cg.add_callback(progress_callback)
    >>> solution = cg.solve()
"""

from opencsp.solver.solution import CGIteration, CGSolution, LoopState
from opencsp.solver.column_generation import (
    CGCallback,
    CGConfig,
    ColumnGeneration,
    solve_cutting_stock,
)

__all__ = [
    # Main class
    'ColumnGeneration',
    'solve_cutting_stock',

    # Configuration
    'CGConfig',
    'CGCallback',

    # Solution
    'CGSolution',
    'LoopState',
    'CGIteration',
]
