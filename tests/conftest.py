"""Pytest configuration and shared fixtures."""

import pytest

from ddmrp_planner.models import PlanningInputs, StationDeclaration, StationFlow
from ddmrp_planner.network import build_network
from ddmrp_planner.optimization import GeneticConfig
from tests.fixtures.networks import chain_declarations, create_planning_inputs


@pytest.fixture
def chain_inputs():
    """Three station chain, unit processing times, flat forecast of 10 over 5 instants."""
    return create_planning_inputs(
        chain_declarations([1, 1, 1], forecast=[10] * 5, variability=0.2),
        planning_horizon=5,
    )


@pytest.fixture
def chain_network(chain_inputs):
    """Fixture for the three station chain network."""
    return build_network(chain_inputs)


@pytest.fixture
def trajectory_network():
    """
    Three station chain with hand-checked trajectory.

    Lead times 2, 3, 4 with only the output buffered; the output station
    starts with 40 units and faces a flat demand of 8 over 7 instants.
    """
    inputs = create_planning_inputs(
        chain_declarations([2, 1, 1], forecast=[8] * 7, variability=0.2,
                           initial_buffers=[0, 0, 40]),
        planning_horizon=7,
        peak_horizon=2,
    )
    return build_network(inputs)


@pytest.fixture
def assembly_network():
    """
    Two input stations assembled at station 2, finished at output station 3.

    Station 0 supplies two units per assembly, station 1 one unit.
    """
    forecast = [4, 6, 8, 6, 4, 6, 8, 6]
    declarations = [
        StationDeclaration(station_index=0, processing_time=1, initial_buffer=20,
                           next_stations=[StationFlow(target_index=2, amount=2)]),
        StationDeclaration(station_index=1, processing_time=3, initial_buffer=10,
                           next_stations=[StationFlow(target_index=2, amount=1)]),
        StationDeclaration(station_index=2, processing_time=1, initial_buffer=10,
                           next_stations=[StationFlow(target_index=3, amount=1)]),
        StationDeclaration(station_index=3, processing_time=2, initial_buffer=15,
                           demand_variability=0.5, demand_forecast=forecast),
    ]
    return build_network(PlanningInputs(
        planning_horizon=len(forecast),
        peak_horizon=3,
        past_horizon=2,
        station_declarations=declarations,
    ))


@pytest.fixture
def fast_ga_config():
    """Seeded configuration that stops quickly."""
    return GeneticConfig(population_size=50, stagnation_generations=5, seed=42)
