"""
DDMRP production control model.

A ProductionControlModel plans one buffer placement over a station network:
it propagates lead times and demand, then simulates every instant of the
planning horizon, stations in descending index order (downstream first) so
that each station sees the orders of the stations it feeds.

Phases run in a fixed order (CREATED -> PROPAGATED -> SIMULATED) and every
call to plan() starts again from fresh station records.
"""

import logging
import math
from enum import Enum
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ddmrp_planner.models.station_state import FutureState, Station
from ddmrp_planner.network.graph_builder import StationNetwork
from ddmrp_planner.production.constraints import FeasibilityResult, ReplenishmentConstraint
from ddmrp_planner.production.objective import ObjectiveBreakdown, ObjectiveWeights, evaluate_objective
from ddmrp_planner.production.propagation import propagate
from ddmrp_planner.validation.errors import SimulationInvariantError

logger = logging.getLogger(__name__)


class ModelStatus(Enum):
    """Planning phase reached by a production control model."""
    CREATED = "created"
    PROPAGATED = "propagated"
    SIMULATED = "simulated"


class ProductionControlModel:
    """
    Plans and evaluates one buffer placement.

    Example:
        >>> model = ProductionControlModel(network)
        >>> model.plan([0, 1, 1])
        >>> model.objective_value
    """

    def __init__(self, network: StationNetwork, weights: Optional[ObjectiveWeights] = None):
        """
        Initialize the model from a station network.

        Args:
            network: Read-only station network
            weights: Objective weights (defaults if None)
        """
        self.network = network
        self.weights = weights or ObjectiveWeights()
        self.status = ModelStatus.CREATED
        self.stations: List[Station] = []
        self.constraints: List[ReplenishmentConstraint] = []
        self._supply_sources: Dict[int, List[int]] = {}
        self._reset()

    def _reset(self) -> None:
        network = self.network
        self.stations = [
            Station(
                index=declaration.station_index,
                processing_time=declaration.processing_time,
                is_input_station=network.is_input_station(declaration.station_index),
                is_output_station=network.is_output_station(declaration.station_index),
                past_states=network.past_states(declaration.station_index),
                demand_forecast=(
                    list(declaration.demand_forecast)
                    if declaration.demand_forecast is not None else None
                ),
                demand_variability=declaration.demand_variability,
            )
            for declaration in network.declarations
        ]
        self.constraints = []
        self._supply_sources = {}
        self.status = ModelStatus.CREATED

    def plan(self, buffer_activation: Sequence[int]) -> 'ProductionControlModel':
        """
        Propagate and simulate a buffer placement.

        Args:
            buffer_activation: One 0/1 gene per station, in index order

        Returns:
            self, fully simulated

        Raises:
            ValueError: If the activation vector does not match the station count
            SimulationInvariantError: If the simulation reaches an impossible state
        """
        if len(buffer_activation) != self.network.station_count:
            raise ValueError(
                f"Expected {self.network.station_count} buffer genes, got {len(buffer_activation)}"
            )

        self._reset()
        propagate(self.network, self.stations, buffer_activation)
        self.status = ModelStatus.PROPAGATED
        self.simulate()
        return self

    def simulate(self) -> None:
        """
        Simulate every instant of the planning horizon.

        Raises:
            SimulationInvariantError: If propagation has not run, or any state
                is read before it is computed
        """
        if self.status != ModelStatus.PROPAGATED:
            raise SimulationInvariantError(
                "Simulation requires propagated stations",
                context={'status': self.status.value}
            )

        for t in range(self.network.planning_horizon):
            for station in reversed(self.stations):
                self._step(station, t)

        self.constraints = [ReplenishmentConstraint(station) for station in self.stations]
        self.status = ModelStatus.SIMULATED
        logger.debug(f"Simulated {self.network.planning_horizon} instants for {self}")

    def _step(self, station: Station, t: int) -> None:
        demand = self._demand(station, t)

        if not station.has_buffer:
            station.record_state(FutureState(instant=t, demand=demand))
            return

        zones = station.zones()
        qualified_demand = self._qualified_demand(station, t, demand, zones.tor)

        if t == 0:
            # Instant 0 overlaps the last past instant: its order is already placed
            order_amount = station.past_order_amount(0)
            supply = self.incoming_supply(station, -1)
            buffer = self.network.initial_buffer[station.index]
            on_order_inventory = order_amount - supply
            net_flow = buffer + on_order_inventory - qualified_demand
            replenishment = 1 if net_flow <= zones.toy else 0
        else:
            previous = station.state_at(t - 1)
            supply = self.incoming_supply(station, t - 1)
            buffer = max(previous.buffer - previous.demand + supply, 0)
            on_order_inventory = previous.on_order_inventory - supply + previous.order_amount
            net_flow = buffer + on_order_inventory - qualified_demand
            replenishment = 1 if net_flow <= zones.toy else 0
            order_amount = max(replenishment * math.ceil(zones.tog - net_flow), 0)

        station.record_state(FutureState(
            instant=t,
            demand=demand,
            qualified_demand=qualified_demand,
            buffer=buffer,
            on_order_inventory=on_order_inventory,
            order_amount=order_amount,
            replenishment=replenishment,
        ))

    def _demand(self, station: Station, t: int) -> int:
        if station.is_output_station:
            return station.demand_forecast[t]

        demand = 0
        for d in self.network.successors[station.index]:
            downstream = self.stations[d].state_at(t)
            pulled = downstream.order_amount if downstream.order_amount is not None else downstream.demand
            demand += self.network.input_amount[station.index][d] * pulled
        return demand

    def _qualified_demand(self, station: Station, t: int, demand: int, tor: float) -> int:
        """Demand plus the first forecast spike within the peak horizon, if any."""
        end = min(t + self.network.peak_horizon, self.network.planning_horizon)
        for i in range(t, end):
            spike = station.demand_forecast[i]
            if spike >= (i - t + 1) * tor:
                return demand + spike
        return demand

    def supply_sources(self, station: Station) -> List[int]:
        """Nearest buffered or input ancestors of a station (cached per plan)."""
        if station.index not in self._supply_sources:
            has_buffer = [s.has_buffer for s in self.stations]
            self._supply_sources[station.index] = self.network.supply_sources(station.index, has_buffer)
        return self._supply_sources[station.index]

    def incoming_supply(self, station: Station, t: int) -> int:
        """
        Quantity received by a station at instant t.

        Supply arrives lead time after ordering. Orders placed before instant 0
        come from the past history. An input station is fed externally; any
        other station receives its order capped by the buffer of its nearest
        buffered ancestors (unbuffered input ancestors supply in full).

        Raises:
            SimulationInvariantError: If a non-input station has no supply source
        """
        k = math.ceil(t - station.lead_time)

        if station.is_input_station:
            if k < 0:
                return station.past_order_amount(k)
            return station.state_at(t).demand

        sources = self.supply_sources(station)
        if not sources:
            raise SimulationInvariantError(
                "No buffered or input station upstream to supply from",
                context={'station_index': station.index, 'instant': t}
            )

        if k < 0:
            return station.past_order_amount(k)

        ordered = station.state_at(k).order_amount
        supplies = []
        for s in sources:
            source = self.stations[s]
            if source.has_buffer:
                supplies.append(min(source.state_at(k).buffer, ordered))
            else:
                supplies.append(ordered)
        return min(supplies)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _require_simulated(self) -> None:
        if self.status != ModelStatus.SIMULATED:
            raise SimulationInvariantError(
                "Plan evaluated before simulation",
                context={'status': self.status.value}
            )

    def objective(self) -> ObjectiveBreakdown:
        self._require_simulated()
        return evaluate_objective(self.network, self.stations, self.weights)

    @property
    def objective_value(self) -> float:
        return self.objective().total

    def average_buffer_level(self) -> float:
        return self.objective().mean_buffer_level

    def average_unmet_demand(self) -> float:
        return self.objective().mean_unmet_demand

    def activated_buffer_count(self) -> int:
        return self.objective().activated_buffer_count

    def to_genes(self) -> List[int]:
        """Effective buffer placement (output stations always 1)."""
        return [1 if station.has_buffer else 0 for station in self.stations]

    def check_feasibility(self) -> List[FeasibilityResult]:
        self._require_simulated()
        return [constraint.check() for constraint in self.constraints]

    def is_feasible(self) -> bool:
        """True if every replenishment constraint holds."""
        return all(result.is_feasible for result in self.check_feasibility())

    def to_dataframe(self) -> pd.DataFrame:
        """
        Simulated trajectories in long format, one row per station and instant.

        Returns:
            DataFrame with station, instant, has_buffer and every state field
        """
        self._require_simulated()
        columns = [
            'station', 'instant', 'has_buffer', 'demand', 'qualified_demand', 'buffer',
            'on_order_inventory', 'order_amount', 'replenishment', 'net_flow',
        ]
        rows = [
            {
                'station': station.index,
                'instant': state.instant,
                'has_buffer': station.has_buffer,
                'demand': state.demand,
                'qualified_demand': state.qualified_demand,
                'buffer': state.buffer,
                'on_order_inventory': state.on_order_inventory,
                'order_amount': state.order_amount,
                'replenishment': state.replenishment,
                'net_flow': state.net_flow,
            }
            for station in self.stations
            for state in station.future_states
        ]
        return pd.DataFrame(rows, columns=columns)

    def stations_dataframe(self) -> pd.DataFrame:
        """Per-station propagated attributes and buffer zones."""
        columns = [
            'station', 'is_input', 'is_output', 'has_buffer', 'processing_time', 'lead_time',
            'lead_time_factor', 'average_demand', 'demand_variability', 'tor', 'toy', 'tog',
        ]
        rows = [
            {
                'station': station.index,
                'is_input': station.is_input_station,
                'is_output': station.is_output_station,
                'has_buffer': station.has_buffer,
                'processing_time': station.processing_time,
                'lead_time': station.lead_time,
                'lead_time_factor': station.lead_time_factor,
                'average_demand': station.average_demand,
                'demand_variability': station.demand_variability,
                'tor': station.tor,
                'toy': station.toy,
                'tog': station.tog,
            }
            for station in self.stations
        ]
        return pd.DataFrame(rows, columns=columns)

    def __str__(self) -> str:
        genes = "".join(str(g) for g in self.to_genes())
        return f"ProductionControlModel({self.status.value}, genes={genes})"
