"""Planning inputs: horizons plus the station declarations."""

from typing import List
from pydantic import BaseModel, Field, ConfigDict

from .station import StationDeclaration


class PlanningInputs(BaseModel):
    """
    Everything needed to build a station network.

    Attributes:
        planning_horizon: Number of future instants simulated (0..H-1)
        peak_horizon: Look-ahead window used to qualify order spikes
        past_horizon: Number of past instants in the history (-P+1..0)
        peak_threshold: Peak threshold setting, carried through for callers
        station_declarations: One declaration per station
    """

    model_config = ConfigDict(frozen=True)

    planning_horizon: int = Field(
        ...,
        description="Number of future instants",
        ge=1
    )
    peak_horizon: int = Field(
        ...,
        description="Look-ahead window for qualified demand",
        ge=1
    )
    past_horizon: int = Field(
        ...,
        description="Number of past instants, instant 0 included",
        ge=1
    )
    peak_threshold: float = Field(
        default=0.0,
        description="Peak threshold setting",
        ge=0
    )
    station_declarations: List[StationDeclaration] = Field(
        ...,
        description="Station declarations",
        min_length=1
    )

    def __str__(self) -> str:
        return (
            f"PlanningInputs({len(self.station_declarations)} stations, "
            f"H={self.planning_horizon}, peak={self.peak_horizon}, past={self.past_horizon})"
        )
