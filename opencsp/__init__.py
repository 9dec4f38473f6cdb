"""
OpenCSP: Column Generation for the One-Dimensional Cutting Stock Problem

Computes the LP relaxation optimum of the cutting stock problem with the
Gilmore-Gomory column generation algorithm: a HiGHS restricted master
problem priced by an exact unbounded-knapsack dynamic program.

Usage:
------
    from opencsp import Instance, solve_cutting_stock

    instance = Instance(stock_length=10, item_lengths=[3, 4], item_demands=[5, 3])
    solution = solve_cutting_stock(instance)
    print(f"LP rolls: {solution.objective_value}")
    for pattern, usage in solution.active_patterns():
        print(f"  {list(pattern.counts)} x {usage:.3f}")
"""

__version__ = "0.1.0"

# Configuration
from opencsp.config import CSPConfig, config, get_config, set_config

# Core classes
from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern, PatternSet, initial_patterns

# Errors and warnings
from opencsp.exceptions import (
    CSPError,
    GlobalBudgetExceeded,
    InfeasibleInstance,
    InvalidInstance,
    OversizedItemWarning,
    SolverFailure,
    TimeLimitApprox,
)

# Master problem
from opencsp.master import (
    HIGHS_AVAILABLE,
    HiGHSMasterProblem,
    MasterProblem,
    MasterSolution,
    SolutionStatus,
)

# Pricing problem
from opencsp.pricing import (
    KnapsackPricing,
    PricingConfig,
    PricingProblem,
    PricingSolution,
    PricingStatus,
    solve_unbounded_knapsack,
)

# Column generation solver
from opencsp.solver import (
    CGConfig,
    CGIteration,
    CGSolution,
    ColumnGeneration,
    LoopState,
    solve_cutting_stock,
)

# Instance I/O
from opencsp.generator import generate_instance
from opencsp.parsers import CSVInstanceParser, write_instance_csv

__all__ = [
    # Version
    "__version__",
    # Configuration
    "CSPConfig",
    "config",
    "get_config",
    "set_config",
    # Core classes
    "Instance",
    "Pattern",
    "PatternSet",
    "initial_patterns",
    # Errors and warnings
    "CSPError",
    "InvalidInstance",
    "InfeasibleInstance",
    "SolverFailure",
    "OversizedItemWarning",
    "TimeLimitApprox",
    "GlobalBudgetExceeded",
    # Master problem
    "MasterProblem",
    "MasterSolution",
    "SolutionStatus",
    "HiGHSMasterProblem",
    "HIGHS_AVAILABLE",
    # Pricing problem
    "PricingProblem",
    "PricingConfig",
    "PricingSolution",
    "PricingStatus",
    "KnapsackPricing",
    "solve_unbounded_knapsack",
    # Column generation solver
    "ColumnGeneration",
    "CGConfig",
    "CGSolution",
    "CGIteration",
    "LoopState",
    "solve_cutting_stock",
    # Instance I/O
    "generate_instance",
    "CSVInstanceParser",
    "write_instance_csv",
]
