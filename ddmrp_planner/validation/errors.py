"""Error taxonomy for the buffer placement planner.

Every error carries a context dictionary (station index, field, expected and
actual values, ...) that is appended to the message so failures point at the
offending declaration or state without a debugger.
"""

from typing import Dict, Optional


class PlanningError(Exception):
    """Base exception for planner errors with context."""

    prefix = "Planning Error"

    def __init__(self, message: str, context: Optional[Dict] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = f"{self.prefix}: {self.message}"
        if self.context:
            msg += "\n\nContext:"
            for key, value in self.context.items():
                msg += f"\n  {key}: {value}"
        return msg


class ConfigurationError(PlanningError):
    """Raised when station declarations or planning inputs are inconsistent."""

    prefix = "Configuration Error"


class SimulationInvariantError(PlanningError):
    """Raised when the simulation reaches a state that should be impossible.

    Examples are reading a station state that has not been computed yet, a
    buffered station whose zones are undefined, or a station with no supply
    source upstream.
    """

    prefix = "Simulation Invariant Violated"


class SolverError(PlanningError):
    """Raised when the genetic optimizer is misused or cannot produce a plan."""

    prefix = "Solver Error"
