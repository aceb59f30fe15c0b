"""
Error taxonomy for the route engine.

Every error raised to callers derives from RouteEngineError so the Celery
task and any outer surface can catch the whole family in one place.
"""
from typing import Optional


class RouteEngineError(Exception):
    """Base class for route engine errors."""


class RequestValidationError(RouteEngineError):
    """Malformed or missing request fields. Raised before any work begins."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class SolverError(RouteEngineError):
    """A single solver strategy failed, timed out, or found no feasible route."""

    def __init__(self, algorithm: str, reason: str):
        super().__init__(f"{algorithm}: {reason}")
        self.algorithm = algorithm
        self.reason = reason


class AllSolversFailedError(RouteEngineError):
    """Every solver strategy failed. Fatal for the optimization run."""

    def __init__(self, failures: dict[str, str]):
        details = "; ".join(f"{name}: {reason}" for name, reason in failures.items())
        super().__init__(f"All solvers failed ({details})")
        self.failures = dict(failures)


class ContextUnavailableError(RouteEngineError):
    """
    A real-time data source could not be reached.

    Raised by data clients only; the context provider recovers from it
    with last-known-good or default signals.
    """


class ConstraintViolationError(RouteEngineError):
    """
    A route breaches a constraint.

    Raised by individual validation checks and collected into the
    ValidationResult; validate_route never lets it escape.
    """

    def __init__(self, constraint: str, message: str, severity: str = "error"):
        super().__init__(message)
        self.constraint = constraint
        self.message = message
        self.severity = severity


class PersistenceError(RouteEngineError):
    """Saved-route storage failed."""


class OptimizationTimeoutError(RouteEngineError):
    """The overall optimization deadline was exceeded."""

    def __init__(self, deadline_seconds: float):
        super().__init__(f"Optimization exceeded its deadline of {deadline_seconds:.1f}s")
        self.deadline_seconds = deadline_seconds


class LegSequenceError(RouteEngineError):
    """Multimodal legs are not contiguous or not sequenced 1..n."""
