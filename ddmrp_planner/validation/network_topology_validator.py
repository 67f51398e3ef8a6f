"""
Station Network Topology Validation.

Validates the flow structure of a station network to ensure:
- All flows reference declared stations
- No station feeds itself
- Flows run from lower to higher station index (index order is a topological order)
- No station feeds the same target twice
- No cycles
- No isolated stations or disconnected sub-networks (warnings only)
"""

from typing import Dict, List, Set, Tuple
from collections import defaultdict
import logging

import networkx as nx

from ddmrp_planner.validation.errors import ConfigurationError

logger = logging.getLogger(__name__)

#: A flow as (source_index, target_index, amount)
Flow = Tuple[int, int, int]


class NetworkTopologyValidator:
    """Validates station network topology and connectivity."""

    def __init__(self, station_indices: List[int], flows: List[Flow]):
        """Initialize validator.

        Args:
            station_indices: Indices of all declared stations
            flows: Flows as (source_index, target_index, amount) tuples
        """
        self.stations = set(station_indices)
        self.flows = flows

        # Build adjacency lists
        self.outgoing = defaultdict(list)  # source -> [target]
        self.incoming = defaultdict(list)  # target -> [source]

        for source, target, _ in flows:
            self.outgoing[source].append(target)
            self.incoming[target].append(source)

    def validate_all(self) -> Dict[str, any]:
        """Run all topology checks.

        Returns:
            Dictionary with validation results, errors and warnings
        """
        results = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        # Check 1: Flows reference valid stations
        try:
            self._validate_flow_references()
        except ConfigurationError as e:
            results["valid"] = False
            results["errors"].append(str(e))

        # Check 2: Flows run forward and are not duplicated
        invalid = self._find_backward_flows() + self._find_duplicate_flows()
        if invalid:
            results["valid"] = False
            results["errors"].extend(invalid)

        # Check 3: No cycles
        cycle = self._find_cycle()
        if cycle:
            results["valid"] = False
            results["errors"].append(f"Flow cycle detected through stations {cycle}")

        # Check 4: Isolated stations (warnings only)
        isolated = self._find_isolated_stations()
        if isolated:
            results["warnings"].append(
                f"Found {len(isolated)} isolated stations (no incoming/outgoing flows): {sorted(isolated)[:5]}"
            )

        # Check 5: Disconnected sub-networks (warnings only)
        components = self._count_components()
        if components > 1:
            results["warnings"].append(
                f"Station network splits into {components} disconnected sub-networks"
            )

        return results

    def _validate_flow_references(self):
        """Validate all flows reference declared stations."""
        invalid_flows = []

        for source, target, _ in self.flows:
            if target not in self.stations:
                invalid_flows.append(f"Station {source}: unknown target station {target}")

        if invalid_flows:
            raise ConfigurationError(
                f"Found {len(invalid_flows)} flows with invalid station references:\n" +
                "\n".join(invalid_flows[:10]),
                {
                    "total_flows": len(self.flows),
                    "invalid_count": len(invalid_flows),
                    "declared_stations": sorted(self.stations)
                }
            )

    def _find_backward_flows(self) -> List[str]:
        """Find flows whose target index is not greater than the source index."""
        backward = []

        for source, target, _ in self.flows:
            if target == source:
                backward.append(f"Station {source} feeds itself")
            elif target < source:
                backward.append(
                    f"Station {source} feeds lower-indexed station {target}; "
                    f"flows must go from lower to higher index"
                )

        return backward

    def _find_duplicate_flows(self) -> List[str]:
        """Find sources that declare the same target more than once."""
        duplicates = []

        for source, targets in self.outgoing.items():
            seen = set()
            for target in targets:
                if target in seen:
                    duplicates.append(f"Station {source} declares target {target} more than once")
                seen.add(target)

        return duplicates

    def _graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        graph.add_nodes_from(self.stations)
        graph.add_edges_from((source, target) for source, target, _ in self.flows)
        return graph

    def _find_cycle(self) -> List[int]:
        """Return the stations of one flow cycle, or an empty list."""
        try:
            edges = nx.find_cycle(self._graph())
        except nx.NetworkXNoCycle:
            return []
        return [source for source, _ in edges]

    def _find_isolated_stations(self) -> Set[int]:
        """Find stations with no incoming or outgoing flows."""
        connected = set()

        for source, target, _ in self.flows:
            connected.add(source)
            connected.add(target)

        # A single-station network is trivially connected
        if len(self.stations) == 1:
            return set()

        return self.stations - connected

    def _count_components(self) -> int:
        if not self.stations:
            return 0
        return nx.number_weakly_connected_components(self._graph())

    def get_network_summary(self) -> str:
        """Generate human-readable network summary."""
        input_count = sum(1 for s in self.stations if not self.incoming[s])
        output_count = sum(1 for s in self.stations if not self.outgoing[s])

        return f"""
Station Network Summary:
  Total stations: {len(self.stations)}
  Input stations: {input_count}
  Output stations: {output_count}
  Total flows: {len(self.flows)}
"""


def validate_network_topology(station_indices: List[int], flows: List[Flow]) -> Dict[str, any]:
    """Validate station network topology, logging warnings.

    Args:
        station_indices: Indices of all declared stations
        flows: Flows as (source_index, target_index, amount) tuples

    Returns:
        Validation results dictionary

    Raises:
        ConfigurationError: If any topology error is found
    """
    validator = NetworkTopologyValidator(station_indices, flows)
    results = validator.validate_all()

    for warning in results["warnings"]:
        logger.warning(warning)

    if not results["valid"]:
        raise ConfigurationError(
            "Station network topology is invalid:\n" + "\n".join(results["errors"]),
            {
                "error_count": len(results["errors"]),
                "station_count": len(station_indices),
                "flow_count": len(flows),
            }
        )

    logger.debug(validator.get_network_summary())
    return results
