"""
Exceptions and warning categories for OpenCSP.

Fatal conditions are exceptions derived from CSPError. Non-fatal conditions
(time limits, oversized items) are warning categories issued through the
``warnings`` module so callers can filter or escalate them.

Hierarchy:
---------
    CSPError
    +-- InvalidInstance      (also a ValueError)
    +-- InfeasibleInstance
    +-- SolverFailure

    UserWarning
    +-- OversizedItemWarning
    +-- TimeLimitApprox
    +-- GlobalBudgetExceeded
"""

from typing import Optional


class CSPError(Exception):
    """Base class for all OpenCSP errors."""


class InvalidInstance(CSPError, ValueError):
    """Malformed instance data (sizes, counts or lengths)."""


class InfeasibleInstance(CSPError):
    """Some demanded item can never be cut from a stock unit."""


class SolverFailure(CSPError):
    """
    A sub-solve failed where a result was required.

    Attributes:
        iteration: Column generation round in which the failure occurred
        elapsed: Seconds since the loop started
        status: Solver status name reported at failure (if any)
    """

    def __init__(
        self,
        message: str,
        iteration: Optional[int] = None,
        elapsed: Optional[float] = None,
        status: Optional[str] = None,
    ):
        super().__init__(message)
        self.iteration = iteration
        self.elapsed = elapsed
        self.status = status

    def with_context(self, iteration: int, elapsed: float) -> 'SolverFailure':
        """Return the same failure annotated with loop position."""
        self.iteration = iteration
        self.elapsed = elapsed
        return self

    def __str__(self) -> str:
        msg = super().__str__()
        details = []
        if self.status is not None:
            details.append(f"status={self.status}")
        if self.iteration is not None:
            details.append(f"iteration={self.iteration}")
        if self.elapsed is not None:
            details.append(f"elapsed={self.elapsed:.2f}s")
        if details:
            return f"{msg} ({', '.join(details)})"
        return msg


class OversizedItemWarning(UserWarning):
    """Some item types are longer than the stock unit."""


class TimeLimitApprox(UserWarning):
    """A sub-solve hit its time budget; its result is not proven optimal."""


class GlobalBudgetExceeded(UserWarning):
    """The loop ran out of wall-clock time before convergence."""
