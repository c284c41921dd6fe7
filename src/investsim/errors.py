"""
Exception hierarchy for investsim.

All invalid input is rejected with ``ValidationError`` before any trajectory
is simulated. ``ValidationError`` also derives from ``ValueError`` so callers
that already guard numerical code with ``except ValueError`` keep working.
"""


class InvestSimError(Exception):
    """Base class for all investsim errors."""


class ValidationError(InvestSimError, ValueError):
    """Raised when simulation or model parameters are invalid."""


class SimulationInterrupted(InvestSimError):
    """Raised when a run stops before every trajectory has completed."""

    def __init__(self, message: str, completed: int, requested: int) -> None:
        super().__init__(message)
        self.completed = completed
        self.requested = requested


class SimulationCancelled(SimulationInterrupted):
    """Raised when the caller's cancel event is set during a run."""


class SimulationTimeout(SimulationInterrupted):
    """Raised when a run exceeds its time budget."""
