"""Runtime station state used while planning one buffer placement."""

from dataclasses import dataclass, field
from typing import List, Optional

from ddmrp_planner.production.buffer_zones import (
    BufferZones,
    top_of_red,
    top_of_yellow,
    top_of_green,
)
from ddmrp_planner.validation.errors import SimulationInvariantError


@dataclass(frozen=True)
class PastState:
    """
    Observed buffer and order amount at a past instant (instant <= 0).

    Only order_amount feeds the simulation. The buffer is kept as recorded
    history; instant 0 starts from the declared initial buffer.
    """
    instant: int
    buffer: int
    order_amount: int


@dataclass(frozen=True)
class FutureState:
    """
    Simulated state of a station at a future instant.

    Unbuffered stations only carry demand; every other field stays None so
    that upstream stations see their demand passed through unchanged.

    Instant 0 overlaps the last past instant, so its order_amount is the
    order already placed there. Replenishment still reports the trigger
    (net flow at or below TOY), so a state can read replenishment=1 next
    to a seeded order that was not sized from TOG, possibly 0.

    Attributes:
        instant: Planning instant (0..H-1)
        demand: Demand seen by the station
        qualified_demand: Demand plus qualified order spike (buffered only)
        buffer: On-hand buffer level (buffered only)
        on_order_inventory: Ordered but not yet received quantity (buffered only)
        order_amount: Replenishment order placed at this instant (buffered only)
        replenishment: 1 if a replenishment is triggered, else 0 (buffered only)
    """
    instant: int
    demand: int
    qualified_demand: Optional[int] = None
    buffer: Optional[int] = None
    on_order_inventory: Optional[int] = None
    order_amount: Optional[int] = None
    replenishment: Optional[int] = None

    @property
    def net_flow(self) -> Optional[int]:
        """Net flow position: on-hand plus on-order minus qualified demand."""
        if None in (self.buffer, self.on_order_inventory, self.qualified_demand):
            return None
        return self.buffer + self.on_order_inventory - self.qualified_demand


@dataclass
class Station:
    """
    Mutable station record for one plan evaluation.

    Derived scalars start undefined and are filled in by the propagation
    passes; the zone thresholds stay undefined until all of them are set.
    """
    index: int
    processing_time: float
    is_input_station: bool
    is_output_station: bool
    past_states: List[PastState]
    demand_forecast: Optional[List[int]] = None
    demand_variability: Optional[float] = None
    has_buffer: bool = False
    lead_time: Optional[float] = None
    lead_time_factor: Optional[float] = None
    average_demand: Optional[float] = None
    future_states: List[FutureState] = field(default_factory=list)

    @property
    def tor(self) -> Optional[float]:
        return top_of_red(self.lead_time, self.average_demand,
                          self.lead_time_factor, self.demand_variability)

    @property
    def toy(self) -> Optional[float]:
        return top_of_yellow(self.lead_time, self.average_demand,
                             self.lead_time_factor, self.demand_variability)

    @property
    def tog(self) -> Optional[float]:
        return top_of_green(self.lead_time, self.average_demand,
                            self.lead_time_factor, self.demand_variability)

    def zones(self) -> BufferZones:
        """Zone thresholds, which must all be defined at this point.

        Raises:
            SimulationInvariantError: If any threshold is still undefined
        """
        tor, toy, tog = self.tor, self.toy, self.tog
        if tor is None or toy is None or tog is None:
            raise SimulationInvariantError(
                "Buffer zones read before propagation defined them",
                context={
                    'station_index': self.index,
                    'lead_time': self.lead_time,
                    'lead_time_factor': self.lead_time_factor,
                    'average_demand': self.average_demand,
                    'demand_variability': self.demand_variability,
                }
            )
        return BufferZones(tor=tor, toy=toy, tog=tog)

    def past_order_amount(self, instant: int) -> int:
        """Order amount placed at a past instant, 0 outside the recorded history."""
        if not self.past_states:
            return 0
        position = instant - self.past_states[0].instant
        if 0 <= position < len(self.past_states):
            return self.past_states[position].order_amount
        return 0

    def has_state_at(self, instant: int) -> bool:
        return 0 <= instant < len(self.future_states)

    def state_at(self, instant: int) -> FutureState:
        """Future state at an already simulated instant.

        Raises:
            SimulationInvariantError: If the instant has not been simulated yet
        """
        if not self.has_state_at(instant):
            raise SimulationInvariantError(
                "Station state read before it was computed",
                context={
                    'station_index': self.index,
                    'instant': instant,
                    'computed_instants': len(self.future_states),
                }
            )
        return self.future_states[instant]

    def record_state(self, state: FutureState) -> None:
        """Store the state of an instant, replacing any earlier record of it."""
        if state.instant < len(self.future_states):
            self.future_states[state.instant] = state
        elif state.instant == len(self.future_states):
            self.future_states.append(state)
        else:
            raise SimulationInvariantError(
                "Future states must be recorded in instant order",
                context={
                    'station_index': self.index,
                    'instant': state.instant,
                    'expected_instant': len(self.future_states),
                }
            )

    def __str__(self) -> str:
        buffer_str = "buffered" if self.has_buffer else "unbuffered"
        return f"Station {self.index} ({buffer_str}, LT={self.lead_time}, AD={self.average_demand})"
