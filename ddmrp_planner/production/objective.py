"""
Objective function for a simulated buffer placement.

The cost of a plan is

    w1 x mean_buffer_level + w2 x mean_unmet_demand + w3 x activated_buffer_count

Lower is better. Weights default to 1, 100 and 10.
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from ddmrp_planner.models.station_state import Station
from ddmrp_planner.network.graph_builder import StationNetwork
from ddmrp_planner.production.constants import (
    DEFAULT_BUFFER_WEIGHT,
    DEFAULT_UNMET_DEMAND_WEIGHT,
    DEFAULT_ACTIVATION_WEIGHT,
    UNMET_DEMAND_PENALTY,
)


class ObjectiveWeights(BaseModel):
    """Weights of the three objective terms."""

    model_config = ConfigDict(frozen=True)

    buffer: float = Field(
        default=DEFAULT_BUFFER_WEIGHT,
        description="Weight of the mean buffer level",
        ge=0
    )
    unmet_demand: float = Field(
        default=DEFAULT_UNMET_DEMAND_WEIGHT,
        description="Weight of the mean unmet demand",
        ge=0
    )
    activation: float = Field(
        default=DEFAULT_ACTIVATION_WEIGHT,
        description="Weight of each activated buffer",
        ge=0
    )


@dataclass
class ObjectiveBreakdown:
    """
    Objective terms of a simulated plan.

    Attributes:
        mean_buffer_level: Mean over buffered stations of the time-averaged buffer
        mean_unmet_demand: Unmet demand at key buffered stations (or the penalty)
        activated_buffer_count: Number of buffered stations
        weights: Weights applied to the terms
    """
    mean_buffer_level: float
    mean_unmet_demand: float
    activated_buffer_count: int
    weights: ObjectiveWeights

    @property
    def total(self) -> float:
        return (
            self.weights.buffer * self.mean_buffer_level
            + self.weights.unmet_demand * self.mean_unmet_demand
            + self.weights.activation * self.activated_buffer_count
        )

    def __str__(self) -> str:
        return (
            f"Objective {self.total:,.2f} (buffer={self.mean_buffer_level:.2f}, "
            f"unmet={self.mean_unmet_demand:.2f}, buffers={self.activated_buffer_count})"
        )


def _time_average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def mean_buffer_level(stations: List[Station]) -> float:
    """Average over buffered stations of their time-averaged buffer level."""
    levels = [
        _time_average([state.buffer for state in station.future_states])
        for station in stations
        if station.has_buffer
    ]
    return _time_average(levels)


def key_stations(network: StationNetwork, stations: List[Station]) -> Optional[List[int]]:
    """
    Buffered stations that protect the input stations.

    For each input station, the station itself if buffered, otherwise its
    nearest buffered ancestors.

    Returns:
        Sorted distinct key station indices, or None if some input station
        has no buffered station protecting it
    """
    keys = set()

    for s in network.input_stations:
        if stations[s].has_buffer:
            keys.add(s)
            continue
        ancestors = network.nearest_upstream(s, lambda u: stations[u].has_buffer)
        if not ancestors:
            return None
        keys.update(ancestors)

    return sorted(keys)


def mean_unmet_demand(network: StationNetwork, stations: List[Station]) -> float:
    """Sum over key stations of the time-averaged shortfall of buffer against demand."""
    keys = key_stations(network, stations)
    if keys is None:
        return UNMET_DEMAND_PENALTY

    return sum(
        _time_average([
            max(state.demand - state.buffer, 0)
            for state in stations[s].future_states
        ])
        for s in keys
    )


def activated_buffer_count(stations: List[Station]) -> int:
    return sum(1 for station in stations if station.has_buffer)


def evaluate_objective(network: StationNetwork, stations: List[Station],
                       weights: Optional[ObjectiveWeights] = None) -> ObjectiveBreakdown:
    """
    Evaluate the objective terms of simulated stations.

    Args:
        network: Station network
        stations: Simulated stations
        weights: Objective weights (defaults if None)

    Returns:
        ObjectiveBreakdown with the individual terms and the weighted total
    """
    return ObjectiveBreakdown(
        mean_buffer_level=mean_buffer_level(stations),
        mean_unmet_demand=mean_unmet_demand(network, stations),
        activated_buffer_count=activated_buffer_count(stations),
        weights=weights or ObjectiveWeights(),
    )
