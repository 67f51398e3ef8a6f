"""Data models for the buffer placement planner."""

from .station import StationDeclaration, StationFlow
from .planning_inputs import PlanningInputs
from .station_state import Station, PastState, FutureState

__all__ = [
    # Declarations
    "StationDeclaration",
    "StationFlow",
    "PlanningInputs",
    # Runtime state
    "Station",
    "PastState",
    "FutureState",
]
