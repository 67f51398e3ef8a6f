"""
Tests for station network construction and topology validation.

This module tests:
- Station roles, matrices and adjacency of built networks
- ConfigurationError for every inconsistent declaration
- Topology warnings for isolated stations
"""

import logging

import pytest

from ddmrp_planner.models import StationDeclaration, StationFlow
from ddmrp_planner.network import StationNetwork, build_network
from ddmrp_planner.production.control_model import ProductionControlModel
from ddmrp_planner.validation import ConfigurationError, NetworkTopologyValidator
from tests.fixtures.networks import chain_declarations, create_planning_inputs, raw_chain_inputs


def _output(index, horizon=3, **kwargs):
    return StationDeclaration(station_index=index, processing_time=1, demand_variability=0.2,
                              demand_forecast=[5] * horizon, **kwargs)


def _feeder(index, *targets, **kwargs):
    return StationDeclaration(
        station_index=index, processing_time=1,
        next_stations=[StationFlow(target_index=t) for t in targets], **kwargs,
    )


class TestBuildNetwork:
    """Tests for building a valid network."""

    def test_chain_roles(self, chain_network):
        """Test input and output stations of a chain."""
        assert chain_network.input_stations == [0]
        assert chain_network.output_stations == [2]
        assert chain_network.is_input_station(0)
        assert not chain_network.is_input_station(1)
        assert chain_network.is_output_station(2)

    def test_chain_matrices(self, chain_network):
        """Test precedence and input amount matrices."""
        assert chain_network.precedence == [[0, 1, 0], [0, 0, 1], [0, 0, 0]]
        assert chain_network.input_amount == [[0, 1, 0], [0, 0, 1], [0, 0, 0]]

    def test_assembly_adjacency(self, assembly_network):
        """Test successor and predecessor lists of an assembly network."""
        assert assembly_network.predecessors[2] == [0, 1]
        assert assembly_network.successors[0] == [2]
        assert assembly_network.input_amount[0][2] == 2
        assert assembly_network.input_stations == [0, 1]
        assert assembly_network.output_stations == [3]

    def test_graph_view(self, assembly_network):
        """Test the NetworkX view carries flow amounts."""
        graph = assembly_network.graph
        assert graph.number_of_nodes() == 4
        assert graph.edges[0, 2]['amount'] == 2
        assert assembly_network.get_network_stats()['longest_chain'] == 2

    def test_declarations_sorted_by_index(self):
        """Test declarations may come in any order."""
        declarations = list(reversed(chain_declarations([1, 2, 3], forecast=[5] * 3)))
        network = build_network(create_planning_inputs(declarations, planning_horizon=3))
        assert [d.station_index for d in network.declarations] == [0, 1, 2]
        assert network.declarations[1].processing_time == 2

    def test_build_from_mapping(self):
        """Test a plain mapping is validated into planning inputs."""
        network = build_network(raw_chain_inputs(horizon=4))
        assert isinstance(network, StationNetwork)
        assert network.station_count == 3
        assert network.planning_horizon == 4

    def test_past_states_default_to_zero(self, chain_network):
        """Test omitted history yields zero past states ending at instant 0."""
        past = chain_network.past_states(1)
        assert [p.instant for p in past] == [0]
        assert past[0].order_amount == 0

    def test_declared_past_states(self):
        """Test declared history maps to instants -P+1..0."""
        declarations = chain_declarations([1, 1], forecast=[5] * 3)
        declarations[1] = declarations[1].model_copy(
            update={'past_buffer': [3, 4, 5], 'past_order_amount': [1, 2, 3]}
        )
        network = build_network(create_planning_inputs(declarations, planning_horizon=3, past_horizon=3))
        past = network.past_states(1)
        assert [p.instant for p in past] == [-2, -1, 0]
        assert [p.order_amount for p in past] == [1, 2, 3]
        assert [p.buffer for p in past] == [3, 4, 5]

    def test_past_buffer_does_not_seed_simulation(self):
        """Test instant 0 starts from the initial buffer, not the recorded past buffer."""
        declarations = chain_declarations([1, 1], forecast=[5] * 3, initial_buffers=[0, 7])
        declarations[1] = declarations[1].model_copy(update={'past_buffer': [30, 40, 50]})
        network = build_network(create_planning_inputs(declarations, planning_horizon=3, past_horizon=3))
        model = ProductionControlModel(network).plan([0, 1])
        assert model.stations[1].past_states[-1].buffer == 50
        assert model.stations[1].state_at(0).buffer == 7

    def test_supply_sources_skip_unbuffered_stations(self, chain_network):
        """Test the upstream walk stops at buffered or input stations."""
        assert chain_network.supply_sources(2, [False, False, True]) == [0]
        assert chain_network.supply_sources(2, [False, True, True]) == [1]

    def test_supply_sources_assembly(self, assembly_network):
        """Test every branch of an assembly contributes a source."""
        assert assembly_network.supply_sources(3, [False, False, False, True]) == [0, 1]
        assert assembly_network.supply_sources(3, [False, False, True, True]) == [2]


class TestConfigurationErrors:
    """Tests for ConfigurationError on inconsistent declarations."""

    def test_forecast_length_mismatch(self):
        """Test a forecast shorter than the horizon is rejected with context."""
        inputs = create_planning_inputs(
            chain_declarations([1, 1, 1], forecast=[10] * 4), planning_horizon=5,
        )
        with pytest.raises(ConfigurationError) as exc_info:
            build_network(inputs)
        context = exc_info.value.context
        assert context['station_index'] == 2
        assert context['field'] == 'demand_forecast'
        assert context['expected'] == 5
        assert context['actual'] == 4
        assert "Context:" in str(exc_info.value)

    def test_missing_station_index(self):
        """Test a declaration without index is rejected."""
        inputs = create_planning_inputs(
            [StationDeclaration(processing_time=1, demand_variability=0.1, demand_forecast=[1, 1])],
            planning_horizon=2,
        )
        with pytest.raises(ConfigurationError, match="missing its index"):
            build_network(inputs)

    def test_duplicate_station_index(self):
        """Test duplicate indices are rejected."""
        inputs = create_planning_inputs([_output(0), _output(0)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="unique and dense"):
            build_network(inputs)

    def test_sparse_station_index(self):
        """Test indices must start at 0 without gaps."""
        inputs = create_planning_inputs([_feeder(0, 2), _output(2)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="unique and dense"):
            build_network(inputs)

    def test_missing_processing_time(self):
        """Test a declaration without processing time is rejected."""
        declaration = StationDeclaration(station_index=0, demand_variability=0.1, demand_forecast=[1])
        with pytest.raises(ConfigurationError) as exc_info:
            build_network(create_planning_inputs([declaration], planning_horizon=1))
        assert exc_info.value.context['field'] == 'processing_time'

    def test_output_missing_variability(self):
        """Test an output station must declare its demand variability."""
        declaration = StationDeclaration(station_index=0, processing_time=1, demand_forecast=[1, 2])
        with pytest.raises(ConfigurationError) as exc_info:
            build_network(create_planning_inputs([declaration], planning_horizon=2))
        assert exc_info.value.context == {'station_index': 0, 'field': 'demand_variability'}

    def test_output_missing_forecast(self):
        """Test an output station must declare its forecast."""
        declaration = StationDeclaration(station_index=0, processing_time=1, demand_variability=0.3)
        with pytest.raises(ConfigurationError, match="demand forecast"):
            build_network(create_planning_inputs([declaration], planning_horizon=2))

    def test_non_output_declares_forecast(self):
        """Test only output stations may declare a forecast."""
        inputs = create_planning_inputs(
            [_feeder(0, 1, demand_forecast=[1, 1, 1]), _output(1)], planning_horizon=3,
        )
        with pytest.raises(ConfigurationError, match="Only output stations"):
            build_network(inputs)

    def test_past_history_length_mismatch(self):
        """Test past arrays must span the past horizon."""
        inputs = create_planning_inputs(
            [_feeder(0, 1, past_order_amount=[1, 2]), _output(1)],
            planning_horizon=3, past_horizon=3,
        )
        with pytest.raises(ConfigurationError) as exc_info:
            build_network(inputs)
        assert exc_info.value.context['field'] == 'past_order_amount'
        assert exc_info.value.context['expected'] == 3
        assert exc_info.value.context['actual'] == 2

    def test_unknown_flow_target(self):
        """Test flows must target declared stations."""
        inputs = create_planning_inputs([_feeder(0, 5), _output(1)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="unknown target station 5"):
            build_network(inputs)

    def test_backward_flow(self):
        """Test flows must go from lower to higher index."""
        inputs = create_planning_inputs([_output(0), _feeder(1, 0)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="lower-indexed"):
            build_network(inputs)

    def test_self_flow(self):
        """Test a station cannot feed itself."""
        inputs = create_planning_inputs([_feeder(0, 0, 1), _output(1)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="feeds itself"):
            build_network(inputs)

    def test_duplicate_flow(self):
        """Test a target may appear once per station."""
        inputs = create_planning_inputs([_feeder(0, 1, 1), _output(1)], planning_horizon=3)
        with pytest.raises(ConfigurationError, match="more than once"):
            build_network(inputs)

    def test_invalid_mapping(self):
        """Test pydantic errors of raw input are wrapped."""
        raw = raw_chain_inputs()
        raw['planning_horizon'] = 0
        with pytest.raises(ConfigurationError) as exc_info:
            build_network(raw)
        assert exc_info.value.context['error_count'] == 1
        assert 'planning_horizon' in exc_info.value.context['errors'][0]


class TestTopologyValidator:
    """Tests for NetworkTopologyValidator checks."""

    def test_valid_chain(self):
        """Test a chain has no errors or warnings."""
        results = NetworkTopologyValidator([0, 1, 2], [(0, 1, 1), (1, 2, 1)]).validate_all()
        assert results["valid"]
        assert results["errors"] == []
        assert results["warnings"] == []

    def test_isolated_station_warns(self, caplog):
        """Test isolated stations are logged as warnings, not errors."""
        inputs = create_planning_inputs([_feeder(0, 1), _output(1), _output(2)], planning_horizon=3)
        with caplog.at_level(logging.WARNING):
            network = build_network(inputs)
        assert network.station_count == 3
        assert "isolated stations" in caplog.text
        assert "disconnected sub-networks" in caplog.text

    def test_cycle_detected(self):
        """Test flow cycles are errors."""
        results = NetworkTopologyValidator([0, 1], [(0, 1, 1), (1, 0, 1)]).validate_all()
        assert not results["valid"]
        assert any("cycle" in error for error in results["errors"])

    def test_summary(self):
        """Test the summary counts input and output stations."""
        summary = NetworkTopologyValidator([0, 1, 2], [(0, 2, 1), (1, 2, 1)]).get_network_summary()
        assert "Input stations: 2" in summary
        assert "Output stations: 1" in summary
