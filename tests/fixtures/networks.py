"""Station network builders for planner testing.

Provides compact declaration builders so tests can describe a network as a
few lists instead of repeating full declarations.
"""

from typing import Dict, List, Optional

from ddmrp_planner.models import PlanningInputs, StationDeclaration, StationFlow


def chain_declarations(
    processing_times: List[float],
    forecast: List[int],
    variability: float = 0.2,
    initial_buffers: Optional[List[int]] = None,
) -> List[StationDeclaration]:
    """Declarations of a linear chain 0 -> 1 -> ... -> n-1 (last station is the output)."""
    n = len(processing_times)
    initial_buffers = initial_buffers or [0] * n
    declarations = []
    for index, processing_time in enumerate(processing_times):
        is_output = index == n - 1
        declarations.append(StationDeclaration(
            station_index=index,
            processing_time=processing_time,
            initial_buffer=initial_buffers[index],
            demand_variability=variability if is_output else None,
            demand_forecast=list(forecast) if is_output else None,
            next_stations=[] if is_output else [StationFlow(target_index=index + 1, amount=1)],
        ))
    return declarations


def create_planning_inputs(
    declarations: List[StationDeclaration],
    planning_horizon: int,
    peak_horizon: int = 2,
    past_horizon: int = 1,
) -> PlanningInputs:
    return PlanningInputs(
        planning_horizon=planning_horizon,
        peak_horizon=peak_horizon,
        past_horizon=past_horizon,
        station_declarations=declarations,
    )


def raw_chain_inputs(horizon: int = 5) -> Dict:
    """Plain mapping form of a three station chain, as a caller would pass it."""
    return {
        'planning_horizon': horizon,
        'peak_horizon': 2,
        'past_horizon': 1,
        'station_declarations': [
            {'station_index': 0, 'processing_time': 1, 'next_stations': [{'target_index': 1}]},
            {'station_index': 1, 'processing_time': 1, 'next_stations': [{'target_index': 2}]},
            {
                'station_index': 2,
                'processing_time': 1,
                'demand_variability': 0.2,
                'demand_forecast': [10] * horizon,
            },
        ],
    }
