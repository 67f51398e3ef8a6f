"""
Static propagation of station attributes for a buffer placement.

Demand related attributes flow upstream (descending index, downstream
stations first) while lead times flow downstream (ascending index). A buffer
at a station decouples it: its lead time no longer adds to the lead time of
the stations it feeds.
"""

import logging
from typing import List, Sequence

from ddmrp_planner.models.station_state import Station
from ddmrp_planner.network.graph_builder import StationNetwork

logger = logging.getLogger(__name__)


def propagate(network: StationNetwork, stations: List[Station], buffer_activation: Sequence[int]) -> None:
    """
    Fill in every derived station scalar for a buffer placement.

    Args:
        network: Station network
        stations: Fresh station records ordered by index
        buffer_activation: One 0/1 gene per station (output stations are
            always buffered whatever their gene)
    """
    propagate_demand(network, stations, buffer_activation)
    propagate_lead_times(network, stations)
    propagate_lead_time_factors(stations)

    logger.debug(
        "Propagated lead times: "
        + ", ".join(f"{s.index}={s.lead_time}" for s in stations)
    )


def propagate_demand(network: StationNetwork, stations: List[Station],
                     buffer_activation: Sequence[int]) -> None:
    """Average demand, buffer flag and demand variability, downstream first."""
    horizon = network.planning_horizon

    for station in reversed(stations):
        s = station.index

        if not station.is_output_station:
            station.demand_forecast = [
                sum(network.input_amount[s][d] * stations[d].demand_forecast[t]
                    for d in network.successors[s])
                for t in range(horizon)
            ]
        station.average_demand = sum(station.demand_forecast) / horizon

        station.has_buffer = station.is_output_station or bool(buffer_activation[s])

        if not station.is_output_station:
            station.demand_variability = sum(
                network.input_amount[s][d] * stations[d].demand_variability
                for d in network.successors[s]
            )


def propagate_lead_times(network: StationNetwork, stations: List[Station]) -> None:
    """Decoupled lead times, upstream first."""
    for station in stations:
        s = station.index

        if station.is_input_station:
            station.lead_time = station.processing_time
            continue

        # Buffered upstream stations decouple their lead time
        station.lead_time = station.processing_time + sum(
            network.input_amount[u][s] * (1 - int(stations[u].has_buffer)) * stations[u].lead_time
            for u in network.predecessors[s]
        )


def propagate_lead_time_factors(stations: List[Station]) -> None:
    """Lead time factor: shortest non-zero lead time over the station's own."""
    nonzero = [station.lead_time for station in stations if station.lead_time > 0]
    shortest = min(nonzero) if nonzero else 0.0

    for station in stations:
        if station.lead_time == 0:
            station.lead_time_factor = 0.0
        else:
            station.lead_time_factor = shortest / station.lead_time
