"""Station declaration data models.

A station declaration is the caller-facing description of one processing
station: its processing time, its history, its downstream flows and, for output
stations, the demand forecast and variability that drive the whole network.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class StationFlow(BaseModel):
    """
    Quantity sent from a station to one downstream station.

    Attributes:
        target_index: Index of the downstream station
        amount: Units of this station consumed per unit produced downstream
    """

    target_index: int = Field(
        ...,
        description="Index of the downstream station receiving the flow",
        ge=0
    )
    amount: int = Field(
        default=1,
        description="Units sent to the target per unit it produces",
        ge=1
    )

    def __str__(self) -> str:
        return f"-> {self.target_index} (x{self.amount})"


class StationDeclaration(BaseModel):
    """
    Declaration of a single station of the production network.

    Index and processing time are optional at this level so that a missing
    value is reported by the network builder with the station context instead
    of a bare pydantic error.

    Attributes:
        station_index: Dense, unique index of the station (0..n-1)
        processing_time: Time needed to process one unit at this station
        initial_buffer: Buffer level at the start of the planning horizon
        past_buffer: Recorded buffer levels for the past instants (oldest first).
            Informational only: the simulation starts from initial_buffer
        past_order_amount: Replenishment orders placed in the past instants (oldest first)
        demand_variability: Demand variability factor (required for output stations)
        demand_forecast: Forecasted demand per planning instant (output stations only)
        next_stations: Downstream flows (empty for output stations)
    """

    station_index: Optional[int] = Field(
        None,
        description="Dense, unique station index",
        ge=0
    )
    processing_time: Optional[float] = Field(
        None,
        description="Processing time of one unit at this station",
        ge=0
    )
    initial_buffer: int = Field(
        default=0,
        description="Buffer level at instant 0",
        ge=0
    )
    past_buffer: Optional[List[int]] = Field(
        None,
        description="Recorded buffer levels for past instants, oldest first (defaults to zeros); not read by the simulation"
    )
    past_order_amount: Optional[List[int]] = Field(
        None,
        description="Order amounts for past instants, oldest first (defaults to zeros)"
    )
    demand_variability: Optional[float] = Field(
        None,
        description="Demand variability factor, required for output stations",
        ge=0
    )
    demand_forecast: Optional[List[int]] = Field(
        None,
        description="Forecasted demand per planning instant, output stations only"
    )
    next_stations: List[StationFlow] = Field(
        default_factory=list,
        description="Downstream flows; empty for output stations"
    )

    @field_validator('past_buffer', 'past_order_amount', 'demand_forecast')
    @classmethod
    def validate_non_negative(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        """Quantities in time series cannot be negative."""
        if v is not None and any(quantity < 0 for quantity in v):
            raise ValueError(f"Quantities must be non-negative, got {v}")
        return v

    @property
    def is_output_station(self) -> bool:
        """An output station sends nothing downstream."""
        return not self.next_stations

    def __str__(self) -> str:
        flows = ", ".join(str(flow) for flow in self.next_stations) or "output"
        return f"Station {self.station_index} (PT={self.processing_time}) [{flows}]"
