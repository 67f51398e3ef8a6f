"""Error taxonomy and pre-flight checks for station networks."""

from .errors import (
    PlanningError,
    ConfigurationError,
    SimulationInvariantError,
    SolverError,
)
from .network_topology_validator import NetworkTopologyValidator, validate_network_topology

__all__ = [
    "PlanningError",
    "ConfigurationError",
    "SimulationInvariantError",
    "SolverError",
    "NetworkTopologyValidator",
    "validate_network_topology",
]
