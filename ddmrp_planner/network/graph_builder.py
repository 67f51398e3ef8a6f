"""
Station network builder.

This module turns planning inputs into an immutable station network: dense
precedence and input-amount matrices, station roles, precomputed successor
and predecessor lists and a NetworkX directed graph view for analysis.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Sequence, Union

import networkx as nx
from pydantic import ValidationError

from ddmrp_planner.models.planning_inputs import PlanningInputs
from ddmrp_planner.models.station import StationDeclaration
from ddmrp_planner.models.station_state import PastState
from ddmrp_planner.validation.errors import ConfigurationError
from ddmrp_planner.validation.network_topology_validator import validate_network_topology

logger = logging.getLogger(__name__)


class StationNetwork:
    """
    Read-only station network shared by every plan evaluation.

    Attributes:
        planning_horizon: Number of future instants
        peak_horizon: Look-ahead window for qualified demand
        past_horizon: Number of past instants
        peak_threshold: Peak threshold setting
        declarations: Station declarations ordered by index
        precedence: precedence[i][j] == 1 iff station i feeds station j
        input_amount: input_amount[i][j] units of i per unit of j
        initial_buffer: Buffer level at instant 0 per station
        successors: Downstream station indices per station
        predecessors: Upstream station indices per station
        graph: NetworkX directed graph with 'amount' edge attributes
    """

    def __init__(self, inputs: PlanningInputs, declarations: List[StationDeclaration]):
        self.planning_horizon = inputs.planning_horizon
        self.peak_horizon = inputs.peak_horizon
        self.past_horizon = inputs.past_horizon
        self.peak_threshold = inputs.peak_threshold
        self.declarations = declarations

        n = len(declarations)
        self.precedence = [[0] * n for _ in range(n)]
        self.input_amount = [[0] * n for _ in range(n)]
        self.successors: List[List[int]] = [[] for _ in range(n)]
        self.predecessors: List[List[int]] = [[] for _ in range(n)]
        self.graph = nx.DiGraph()

        for declaration in declarations:
            self.graph.add_node(declaration.station_index,
                                processing_time=declaration.processing_time)

        for declaration in declarations:
            source = declaration.station_index
            for flow in declaration.next_stations:
                self.precedence[source][flow.target_index] = 1
                self.input_amount[source][flow.target_index] = flow.amount
                self.successors[source].append(flow.target_index)
                self.predecessors[flow.target_index].append(source)
                self.graph.add_edge(source, flow.target_index, amount=flow.amount)

        for adjacency in self.successors + self.predecessors:
            adjacency.sort()

        self.initial_buffer = [d.initial_buffer for d in declarations]

    @property
    def station_count(self) -> int:
        return len(self.declarations)

    def is_output_station(self, index: int) -> bool:
        return not self.successors[index]

    def is_input_station(self, index: int) -> bool:
        return not self.predecessors[index]

    @property
    def input_stations(self) -> List[int]:
        return [i for i in range(self.station_count) if self.is_input_station(i)]

    @property
    def output_stations(self) -> List[int]:
        return [i for i in range(self.station_count) if self.is_output_station(i)]

    def past_states(self, index: int) -> List[PastState]:
        """Past states of a station for instants -past_horizon+1..0, oldest first."""
        declaration = self.declarations[index]
        buffers = declaration.past_buffer or [0] * self.past_horizon
        orders = declaration.past_order_amount or [0] * self.past_horizon
        first_instant = 1 - self.past_horizon
        return [
            PastState(instant=first_instant + offset, buffer=buffer, order_amount=order)
            for offset, (buffer, order) in enumerate(zip(buffers, orders))
        ]

    def nearest_upstream(self, index: int, is_stop: Callable[[int], bool]) -> List[int]:
        """
        Nearest upstream stations satisfying a stop condition.

        Walks predecessors breadth-first from the given station (excluded),
        stopping each branch at the first station for which is_stop is true.

        Args:
            index: Station to start from
            is_stop: Predicate marking the stations to collect

        Returns:
            Sorted list of distinct collected station indices
        """
        found = set()
        visited = {index}
        frontier = list(self.predecessors[index])

        while frontier:
            next_frontier = []
            for station in frontier:
                if station in visited:
                    continue
                visited.add(station)
                if is_stop(station):
                    found.add(station)
                else:
                    next_frontier.extend(self.predecessors[station])
            frontier = next_frontier

        return sorted(found)

    def supply_sources(self, index: int, has_buffer: Sequence[bool]) -> List[int]:
        """Nearest buffered or input ancestors supplying a station."""
        return self.nearest_upstream(
            index, lambda s: has_buffer[s] or self.is_input_station(s)
        )

    def get_network_stats(self) -> Dict[str, Any]:
        """Get network statistics."""
        return {
            'num_stations': self.station_count,
            'num_flows': self.graph.number_of_edges(),
            'input_stations': self.input_stations,
            'output_stations': self.output_stations,
            'longest_chain': nx.dag_longest_path_length(self.graph),
        }

    def __str__(self) -> str:
        return (
            f"StationNetwork({self.station_count} stations, "
            f"{self.graph.number_of_edges()} flows, H={self.planning_horizon})"
        )


class StationNetworkBuilder:
    """
    Validates planning inputs and builds a StationNetwork.

    Per-declaration checks raise ConfigurationError naming the station and
    field; flow structure checks are delegated to the topology validator.
    """

    def __init__(self, inputs: PlanningInputs):
        self.inputs = inputs

    def build(self) -> StationNetwork:
        """
        Build the station network.

        Returns:
            Immutable StationNetwork

        Raises:
            ConfigurationError: If any declaration is inconsistent
        """
        declarations = self._validate_indices()

        flows = [
            (d.station_index, flow.target_index, flow.amount)
            for d in declarations
            for flow in d.next_stations
        ]
        validate_network_topology([d.station_index for d in declarations], flows)

        for declaration in declarations:
            self._validate_declaration(declaration)

        network = StationNetwork(self.inputs, declarations)
        logger.info(
            f"Built station network: {network.station_count} stations, "
            f"{len(network.input_stations)} input, {len(network.output_stations)} output"
        )
        return network

    def _validate_indices(self) -> List[StationDeclaration]:
        """Check indices are present, unique and dense; return declarations sorted by index."""
        declarations = list(self.inputs.station_declarations)

        for position, declaration in enumerate(declarations):
            if declaration.station_index is None:
                raise ConfigurationError(
                    "Station declaration is missing its index",
                    {'declaration_position': position, 'field': 'station_index'}
                )

        indices = sorted(d.station_index for d in declarations)
        expected = list(range(len(declarations)))
        if indices != expected:
            raise ConfigurationError(
                "Station indices must be unique and dense from 0",
                {'field': 'station_index', 'expected': expected, 'actual': indices}
            )

        return sorted(declarations, key=lambda d: d.station_index)

    def _validate_declaration(self, declaration: StationDeclaration) -> None:
        index = declaration.station_index
        horizon = self.inputs.planning_horizon
        past_horizon = self.inputs.past_horizon

        if declaration.processing_time is None:
            raise ConfigurationError(
                "Station is missing its processing time",
                {'station_index': index, 'field': 'processing_time'}
            )

        if declaration.is_output_station:
            if declaration.demand_variability is None:
                raise ConfigurationError(
                    "Output station must declare its demand variability",
                    {'station_index': index, 'field': 'demand_variability'}
                )
            if declaration.demand_forecast is None:
                raise ConfigurationError(
                    "Output station must declare its demand forecast",
                    {'station_index': index, 'field': 'demand_forecast'}
                )
        elif declaration.demand_forecast is not None:
            raise ConfigurationError(
                "Only output stations declare a demand forecast; "
                "other stations derive theirs from downstream",
                {'station_index': index, 'field': 'demand_forecast'}
            )

        if declaration.demand_forecast is not None and len(declaration.demand_forecast) != horizon:
            raise ConfigurationError(
                "Demand forecast length does not match the planning horizon",
                {
                    'station_index': index,
                    'field': 'demand_forecast',
                    'expected': horizon,
                    'actual': len(declaration.demand_forecast),
                }
            )

        for field_name in ('past_buffer', 'past_order_amount'):
            history = getattr(declaration, field_name)
            if history is not None and len(history) != past_horizon:
                raise ConfigurationError(
                    "Past history length does not match the past horizon",
                    {
                        'station_index': index,
                        'field': field_name,
                        'expected': past_horizon,
                        'actual': len(history),
                    }
                )


def build_network(inputs: Union[PlanningInputs, Mapping[str, Any]]) -> StationNetwork:
    """
    Build an immutable station network from planning inputs.

    Args:
        inputs: PlanningInputs instance or a mapping with the same fields

    Returns:
        StationNetwork ready for planning and optimization

    Raises:
        ConfigurationError: If the inputs are invalid or inconsistent

    Example:
        >>> network = build_network({
        ...     'planning_horizon': 5, 'peak_horizon': 2, 'past_horizon': 1,
        ...     'station_declarations': [...],
        ... })
    """
    if not isinstance(inputs, PlanningInputs):
        try:
            inputs = PlanningInputs.model_validate(inputs)
        except ValidationError as e:
            raise ConfigurationError(
                "Planning inputs failed validation",
                {
                    'error_count': e.error_count(),
                    'errors': [
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                        for err in e.errors()
                    ],
                }
            ) from e

    return StationNetworkBuilder(inputs).build()
