"""
Master problem module - LP solvers for the restricted master problem.

The restricted master problem of the cutting stock problem is:

    min  sum_p x_p
    s.t. sum_p a_ip * x_p >= d_i   for each item i
         x_p >= 0

This module provides:
- MasterProblem: Abstract base class (the swappable LP capability)
- HiGHSMasterProblem: Default implementation using HiGHS
- MasterSolution: Solution data structure
- SolutionStatus: Enum for solution status

Usage:
------
    >>> from opencsp.master import HiGHSMasterProblem
    >>> master = HiGHSMasterProblem(instance, time_limit=10.0)
    >>> master.add_patterns(initial_patterns(instance))
    >>> solution = master.solve_lp()
    >>> duals = solution.dual_values
"""

from opencsp.master.solution import MasterSolution, SolutionStatus
from opencsp.master.base import MasterProblem

from opencsp.master.highs import HiGHSMasterProblem, HIGHS_AVAILABLE


__all__ = [
    # Solution
    'MasterSolution',
    'SolutionStatus',

    # Base class
    'MasterProblem',

    # HiGHS implementation
    'HiGHSMasterProblem',
    'HIGHS_AVAILABLE',
]
