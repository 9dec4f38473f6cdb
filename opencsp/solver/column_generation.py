"""
Column Generation controller for the cutting stock problem.

This module implements the Gilmore-Gomory column generation loop that
coordinates the restricted master problem and the knapsack pricing problem.

Algorithm Overview:
------------------
1. Seed the pattern set with one homogeneous pattern per item type
2. Solve the master problem LP relaxation
3. Extract dual values
4. Solve the knapsack pricing problem with those duals
5. If z* > 1 (negative reduced cost), add the new pattern and go to step 2
6. Otherwise the LP relaxation is optimal

Loop states:
-----------
    INITIALIZING -> ITERATING -> CONVERGED | TIME_EXPIRED | FAILED

plus ITERATION_LIMIT (max_iterations) and STOPPED (callback request).

The global time budget is checked once per round. Each sub-solve has its
own budget, so a slow round can overrun the global budget by at most one
sub-solve budget.

References:
----------
- Gilmore, P. C., & Gomory, R. E. (1961). A linear programming approach to
  the cutting-stock problem. Operations Research, 9(6), 849-859.
"""

import logging
import time
import warnings
from dataclasses import dataclass
from typing import Callable, List, Optional

from opencsp.core.instance import Instance
from opencsp.core.pattern import Pattern, PatternSet, initial_patterns
from opencsp.exceptions import GlobalBudgetExceeded, InfeasibleInstance, SolverFailure
from opencsp.master import HIGHS_AVAILABLE, HiGHSMasterProblem, MasterProblem, MasterSolution
from opencsp.pricing import KnapsackPricing, PricingConfig, PricingProblem
from opencsp.solver.solution import CGIteration, CGSolution, LoopState

logger = logging.getLogger(__name__)


@dataclass
class CGConfig:
    """
    Configuration for the column generation algorithm.

    Attributes:
        max_time: Global wall-clock budget in seconds (0 = unlimited)
        master_time_limit: Per-solve budget of the master LP (0 = unlimited)
        pricing_time_limit: Per-solve budget of the pricing DP (0 = unlimited)
        max_iterations: Maximum number of rounds (0 = unlimited)
        optimality_tolerance: Converged when z* <= 1 + tolerance
        primal_tolerance: Usage values below this count as zero
        raise_on_failure: Re-raise SolverFailure instead of returning FAILED
        verbosity: LP engine output level
    """
    max_time: float = 600.0
    master_time_limit: float = 10.0
    pricing_time_limit: float = 60.0
    max_iterations: int = 0
    optimality_tolerance: float = 1e-6
    primal_tolerance: float = 1e-9
    raise_on_failure: bool = False
    verbosity: int = 0


# Type alias for callback functions
CGCallback = Callable[['ColumnGeneration', CGIteration], bool]


class ColumnGeneration:
    """
    Column generation algorithm controller.

    Owns the instance's PatternSet and drives the master and pricing
    problems until convergence or a budget is exhausted.

    Example:
        >>> from opencsp.solver import ColumnGeneration, CGConfig
        >>> cg = ColumnGeneration(instance, CGConfig(max_time=60.0))
        >>> solution = cg.solve()
        >>> print(f"LP optimum: {solution.objective_value}")

    Customization:
        Any MasterProblem (LP engine) or PricingProblem can be plugged in:

        >>> cg = ColumnGeneration(instance)
        >>> cg.set_master(MyEngineMaster(instance, time_limit=10.0))
        >>> solution = cg.solve()

    Callbacks:
        Called after each round; return False to stop.

        >>> def my_callback(cg, iteration):
        ...     print(f"Iteration {iteration.iteration}: obj={iteration.master_objective}")
        ...     return True
        >>> cg.add_callback(my_callback)
    """

    def __init__(self, instance: Instance, config: Optional[CGConfig] = None):
        """
        Initialize the column generation controller.

        Args:
            instance: The Instance to solve
            config: Configuration options (uses defaults if not provided)
        """
        self._instance = instance
        self._config = config or CGConfig()

        # Components (created lazily or can be set externally)
        self._master: Optional[MasterProblem] = None
        self._pricing: Optional[PricingProblem] = None

        self._patterns = PatternSet(instance)
        self._callbacks: List[CGCallback] = []

        self._state = LoopState.NOT_STARTED
        self._solution: Optional[CGSolution] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def instance(self) -> Instance:
        return self._instance

    @property
    def config(self) -> CGConfig:
        return self._config

    @property
    def state(self) -> LoopState:
        """Current loop state."""
        return self._state

    @property
    def patterns(self) -> PatternSet:
        """The append-only pattern set."""
        return self._patterns

    @property
    def master(self) -> Optional[MasterProblem]:
        return self._master

    @property
    def pricing(self) -> Optional[PricingProblem]:
        return self._pricing

    @property
    def solution(self) -> Optional[CGSolution]:
        """The solution (None if not yet solved)."""
        return self._solution

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_master(self, master: MasterProblem) -> None:
        """
        Set a custom master problem solver.

        Args:
            master: An empty MasterProblem built for this instance

        Raises:
            ValueError: If the master belongs to another instance or has columns
        """
        if master.instance != self._instance:
            raise ValueError("Master problem was built for a different instance")
        if master.num_columns != 0:
            raise ValueError("Master problem must be empty; seed patterns are added by solve()")
        self._master = master

    def set_pricing(self, pricing: PricingProblem) -> None:
        """
        Set a custom pricing problem solver.

        Args:
            pricing: PricingProblem built for this instance
        """
        if pricing.instance != self._instance:
            raise ValueError("Pricing problem was built for a different instance")
        self._pricing = pricing

    def add_callback(self, callback: CGCallback) -> None:
        """
        Add a callback function.

        Args:
            callback: Function taking (ColumnGeneration, CGIteration) -> bool
        """
        self._callbacks.append(callback)

    # =========================================================================
    # Main Algorithm
    # =========================================================================

    def solve(self) -> CGSolution:
        """
        Run the column generation algorithm.

        Returns:
            CGSolution with results and statistics

        Raises:
            InfeasibleInstance: If a demanded item fits in no pattern
            SolverFailure: On failure when config.raise_on_failure is set
            RuntimeError: If called twice without reset()
        """
        if self._state != LoopState.NOT_STARTED:
            raise RuntimeError("solve() already called; use reset() to solve again")

        start_time = time.time()

        self._state = LoopState.INITIALIZING
        self._initialize()

        self._state = LoopState.ITERATING
        solution = self._run_column_generation(start_time)

        solution.total_time = time.time() - start_time
        self._state = solution.status
        self._solution = solution

        self._report(solution)

        return solution

    def _initialize(self) -> None:
        """Check feasibility, create components and add seed patterns."""
        instance = self._instance

        unsatisfiable = [
            i for i in instance.oversized_items if instance.item_demands[i] > 0
        ]
        if unsatisfiable:
            raise InfeasibleInstance(
                f"Items {unsatisfiable} have positive demand but exceed the "
                f"stock length {instance.stock_length}"
            )

        if self._master is None:
            if not HIGHS_AVAILABLE:
                raise RuntimeError(
                    "HiGHS is not available. Install it with: pip install highspy\n"
                    "Or provide a custom MasterProblem implementation."
                )
            self._master = HiGHSMasterProblem(
                instance,
                time_limit=self._config.master_time_limit,
                verbosity=self._config.verbosity,
            )

        if self._pricing is None:
            self._pricing = KnapsackPricing(
                instance,
                PricingConfig(
                    max_time=self._config.pricing_time_limit,
                    reduced_cost_tolerance=self._config.optimality_tolerance,
                ),
            )

        for pattern in initial_patterns(instance):
            if self._patterns.add(pattern) is not None:
                self._master.add_pattern(pattern)

        logger.info(
            "Initialized %s with %d seed patterns",
            instance, len(self._patterns),
        )

    def _run_column_generation(self, start_time: float) -> CGSolution:
        """
        Run the master/pricing rounds.

        Args:
            start_time: Algorithm start time

        Returns:
            CGSolution with LP results
        """
        history: List[CGIteration] = []
        total_master_time = 0.0
        total_pricing_time = 0.0

        iteration = 0
        status = LoopState.ITERATING
        message = ""
        failure: Optional[SolverFailure] = None
        approximate = False
        last_master_solution: Optional[MasterSolution] = None

        while True:
            elapsed = time.time() - start_time
            if self._config.max_time > 0 and elapsed >= self._config.max_time:
                status = LoopState.TIME_EXPIRED
                message = f"Global time budget of {self._config.max_time}s exhausted"
                break

            if self._config.max_iterations > 0 and iteration >= self._config.max_iterations:
                status = LoopState.ITERATION_LIMIT
                message = f"Iteration limit of {self._config.max_iterations} reached"
                break

            iteration += 1

            # Solve master problem
            master_start = time.time()
            try:
                master_solution = self._master.solve_lp()
            except SolverFailure as e:
                failure = e.with_context(iteration, time.time() - start_time)
                status = LoopState.FAILED
                message = str(failure)
                break
            finally:
                total_master_time += time.time() - master_start

            last_master_solution = master_solution
            duals = master_solution.dual_values

            # Solve pricing problem
            pricing_start = time.time()
            try:
                self._pricing.set_dual_values(duals)
                pricing_solution = self._pricing.solve()
            except SolverFailure as e:
                failure = e.with_context(iteration, time.time() - start_time)
                status = LoopState.FAILED
                message = str(failure)
                break
            finally:
                total_pricing_time += time.time() - pricing_start

            approximate = master_solution.is_approximate or not pricing_solution.is_exact

            iter_info = CGIteration(
                iteration=iteration,
                master_objective=master_solution.objective_value,
                pricing_objective=pricing_solution.objective,
                reduced_cost=pricing_solution.reduced_cost,
                pattern_index=None,
                master_time=master_solution.solve_time,
                pricing_time=pricing_solution.solve_time,
                total_patterns=len(self._patterns),
                master_approximate=master_solution.is_approximate,
                pricing_exact=pricing_solution.is_exact,
            )
            history.append(iter_info)

            # Convergence test: z* <= 1 means no negative reduced cost
            if not pricing_solution.has_negative_reduced_cost:
                if pricing_solution.is_exact:
                    status = LoopState.CONVERGED
                    logger.info(
                        "Iteration %d: z*=%.6f <= 1, no improving pattern. LP optimal.",
                        iteration, pricing_solution.objective,
                    )
                else:
                    status = LoopState.TIME_EXPIRED
                    message = "Pricing time limit reached without an improving pattern"
                break

            pattern = pricing_solution.pattern
            pattern_index = self._patterns.add(pattern)
            if pattern_index is None and master_solution.is_approximate:
                # Approximate duals can price out an existing column
                status = LoopState.TIME_EXPIRED
                message = (
                    f"Master time limit left approximate duals; pricing returned "
                    f"existing pattern {pattern!r} (index {self._patterns.index_of(pattern)})"
                )
                break
            if pattern_index is None:
                failure = SolverFailure(
                    f"Pricing regenerated existing pattern {pattern!r} "
                    f"(index {self._patterns.index_of(pattern)}) with reduced cost "
                    f"{pricing_solution.reduced_cost:.3e}",
                    iteration=iteration,
                    elapsed=time.time() - start_time,
                    status="DUPLICATE_PATTERN",
                )
                status = LoopState.FAILED
                message = str(failure)
                break

            self._master.add_pattern(pattern)
            iter_info.pattern_index = pattern_index
            iter_info.total_patterns = len(self._patterns)

            logger.info(
                "Iteration %d: obj=%.4f, z*=%.4f, rc=%.4f, added=%s, total=%d",
                iteration,
                master_solution.objective_value,
                pricing_solution.objective,
                pricing_solution.reduced_cost,
                list(pattern.counts),
                len(self._patterns),
            )

            if not self._invoke_callbacks(iter_info):
                status = LoopState.STOPPED
                message = f"Stopped by callback after iteration {iteration}"
                break

        solution = self._build_solution(
            status=status,
            master_solution=last_master_solution,
            history=history,
            total_master_time=total_master_time,
            total_pricing_time=total_pricing_time,
            message=message,
            approximate=approximate,
        )

        if failure is not None and self._config.raise_on_failure:
            solution.total_time = time.time() - start_time
            self._solution = solution
            self._state = LoopState.FAILED
            self._report(solution)
            raise failure

        return solution

    def _build_solution(
        self,
        status: LoopState,
        master_solution: Optional[MasterSolution],
        history: List[CGIteration],
        total_master_time: float,
        total_pricing_time: float,
        message: str,
        approximate: bool,
    ) -> CGSolution:
        """Build the CGSolution from the last master solve."""
        patterns: List[Pattern] = list(self._patterns)
        usage: List[float] = [0.0] * len(patterns)
        objective = None
        duals = ()

        if master_solution is not None and master_solution.has_solution:
            tol = self._config.primal_tolerance
            usage = [x if x > tol else 0.0 for x in master_solution.primal_values]
            # Patterns added after the last solve are unused in its solution
            usage.extend([0.0] * (len(patterns) - len(usage)))
            objective = master_solution.objective_value
            duals = master_solution.dual_values

        return CGSolution(
            status=status,
            instance=self._instance,
            patterns=patterns,
            usage=usage,
            objective_value=objective,
            dual_values=duals,
            iterations=len(history),
            master_time=total_master_time,
            pricing_time=total_pricing_time,
            iteration_history=history,
            message=message,
            approximate=approximate or status != LoopState.CONVERGED,
        )

    def _report(self, solution: CGSolution) -> None:
        """Log the terminal outcome."""
        obj = (
            f"{solution.objective_value:.6f}"
            if solution.objective_value is not None else "n/a"
        )
        if solution.status == LoopState.FAILED:
            logger.error(
                "Column generation FAILED after %d iterations (%.2fs): %s",
                solution.iterations, solution.total_time, solution.message,
            )
            return

        logger.info(
            "Column generation %s after %d iterations (%.2fs): obj=%s, patterns=%d%s",
            solution.status.name, solution.iterations, solution.total_time,
            obj, solution.num_patterns,
            "" if solution.is_optimal else " (not proven optimal)",
        )

        if solution.status == LoopState.TIME_EXPIRED:
            warnings.warn(
                f"{solution.message}; pattern set is not proven optimal",
                GlobalBudgetExceeded,
                stacklevel=3,
            )

    def _invoke_callbacks(self, iteration: CGIteration) -> bool:
        """
        Invoke all callbacks.

        Returns:
            True to continue, False to stop
        """
        for callback in self._callbacks:
            if not callback(self, iteration):
                return False
        return True

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_iteration_history(self) -> List[CGIteration]:
        """History of all rounds of the last solve."""
        if self._solution is None:
            return []
        return self._solution.iteration_history

    def reset(self) -> None:
        """
        Reset the solver for a new solve.

        Clears the pattern set and drops the master and pricing problems;
        default components are recreated by the next solve().
        """
        self._patterns = PatternSet(self._instance)
        self._master = None
        self._pricing = None
        self._state = LoopState.NOT_STARTED
        self._solution = None

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"ColumnGeneration: {self._instance!r}",
            "  Config:",
            f"    Max time: {self._config.max_time}s",
            f"    Master time limit: {self._config.master_time_limit}s",
            f"    Pricing time limit: {self._config.pricing_time_limit}s",
            f"    Max iterations: {self._config.max_iterations or 'unlimited'}",
        ]

        if self._solution is not None:
            lines.extend(["", self._solution.summary()])
        else:
            lines.append(f"\n  State: {self._state.name}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ColumnGeneration(instance={self._instance!r}, state={self._state.name})"


def solve_cutting_stock(
    instance: Instance,
    config: Optional[CGConfig] = None,
    **overrides,
) -> CGSolution:
    """
    Solve the LP relaxation of a cutting stock instance.

    Args:
        instance: The instance
        config: Loop configuration (defaults if None)
        **overrides: CGConfig fields to override

    Returns:
        CGSolution

    Example:
        >>> solution = solve_cutting_stock(Instance(10, [3, 4], [5, 3]), max_time=30)
        >>> solution.status
        <LoopState.CONVERGED: 4>
    """
    config = config or CGConfig()
    if overrides:
        config = CGConfig(**{**config.__dict__, **overrides})
    return ColumnGeneration(instance, config).solve()
