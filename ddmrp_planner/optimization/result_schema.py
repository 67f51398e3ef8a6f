"""Pydantic schemas for optimization results.

This module defines the caller-facing contract of an optimization run: the
chosen buffer placement, the simulated trajectory of every station and the
convergence curves. Callers serialize these models; the planner itself does
no import or export.

Design Principles:
1. Fail Fast: Invalid data raises ValidationError at the result boundary
2. Open Extension: Extra fields are allowed (extra="allow")
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator


class FutureStateResult(BaseModel):
    """Simulated state of a station at one instant."""
    instant: int = Field(..., ge=0, description="Planning instant")
    demand: int = Field(..., description="Demand seen by the station")
    qualified_demand: Optional[int] = Field(None, description="Demand plus qualified spike")
    buffer: Optional[int] = Field(None, ge=0, description="On-hand buffer level")
    on_order_inventory: Optional[int] = Field(None, description="Ordered, not yet received")
    order_amount: Optional[int] = Field(None, ge=0, description="Replenishment order placed")
    replenishment: Optional[int] = Field(None, ge=0, le=1, description="Replenishment flag")
    net_flow: Optional[int] = Field(None, description="Net flow position")

    model_config = ConfigDict(extra="allow")


class StationPlanResult(BaseModel):
    """Plan of one station: propagated attributes, zones and trajectory."""
    station_index: int = Field(..., ge=0, description="Station index")
    has_buffer: bool = Field(..., description="Whether the station holds a buffer")
    is_input_station: bool = Field(..., description="No incoming flow")
    is_output_station: bool = Field(..., description="No outgoing flow")
    lead_time: float = Field(..., ge=0, description="Decoupled lead time")
    lead_time_factor: float = Field(..., ge=0, description="Lead time factor")
    average_demand: float = Field(..., ge=0, description="Average forecast demand")
    demand_variability: float = Field(..., ge=0, description="Demand variability")
    tor: Optional[float] = Field(None, description="Top of red")
    toy: Optional[float] = Field(None, description="Top of yellow")
    tog: Optional[float] = Field(None, description="Top of green")
    states: List[FutureStateResult] = Field(default_factory=list, description="Trajectory")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode='after')
    def validate_zone_order(self):
        """Zones of a buffered station must be ordered TOR <= TOY <= TOG."""
        if self.has_buffer and None not in (self.tor, self.toy, self.tog):
            if not self.tor <= self.toy <= self.tog:
                raise ValueError(
                    f"Station {self.station_index}: zones out of order "
                    f"(TOR={self.tor}, TOY={self.toy}, TOG={self.tog})"
                )
        return self


class OptimizationSummary(BaseModel):
    """Outcome of a genetic buffer placement search."""
    best_genes: List[int] = Field(..., description="Effective buffer placement")
    objective_value: float = Field(..., ge=0, description="Objective of the best plan")
    best_fitness: float = Field(..., gt=0, description="Fitness of the best plan")
    average_buffer_level: float = Field(..., ge=0, description="Mean buffer level term")
    average_unmet_demand: float = Field(..., ge=0, description="Mean unmet demand term")
    activated_buffer_count: int = Field(..., ge=1, description="Number of buffered stations")
    fitness_curve: List[float] = Field(default_factory=list, description="Distinct fitness values, best first")
    objective_curve: List[float] = Field(default_factory=list, description="Distinct objective values, worst first")
    generations: int = Field(..., ge=0, description="Generations evolved")
    evaluations: int = Field(..., ge=1, description="Distinct placements simulated")
    termination_reason: str = Field(..., description="Why the search stopped")
    solve_time_seconds: float = Field(..., ge=0, description="Wall-clock duration")
    stations: List[StationPlanResult] = Field(default_factory=list, description="Per-station plans")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode='after')
    def validate_genes_match_stations(self):
        if self.stations and len(self.stations) != len(self.best_genes):
            raise ValueError(
                f"{len(self.best_genes)} genes for {len(self.stations)} stations"
            )
        return self
