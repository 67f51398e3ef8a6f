"""
Replenishment consistency constraint.

For every buffered station and instant, the replenishment flag must agree
with the sign of TOY minus net flow:

    M x (r - 1) <= has_buffer x (TOY - net_flow) <= M x r

so a replenishment is flagged exactly when the net flow position is at or
below the top of yellow. Unbuffered stations satisfy it trivially.
"""

from dataclasses import dataclass
from typing import Optional

from ddmrp_planner.models.station_state import Station
from ddmrp_planner.production.constants import REPLENISHMENT_BIG_NUMBER
from ddmrp_planner.validation.errors import SimulationInvariantError


@dataclass
class FeasibilityResult:
    """
    Result of a constraint check.

    Attributes:
        is_feasible: Whether every instant satisfies the constraint
        reason: Explanation of result
        station_index: Station checked
        instant: First violating instant (if any)
    """
    is_feasible: bool
    reason: str
    station_index: Optional[int] = None
    instant: Optional[int] = None

    def __str__(self) -> str:
        if self.is_feasible:
            return f"Feasible: {self.reason}"
        else:
            return f"Infeasible: {self.reason}"


class ReplenishmentConstraint:
    """Checks replenishment flags of one station against its TOY and net flow."""

    def __init__(self, station: Station, big_number: float = REPLENISHMENT_BIG_NUMBER):
        self.station = station
        self.big_number = big_number

    def check(self) -> FeasibilityResult:
        """
        Check every simulated instant of the station.

        Raises:
            SimulationInvariantError: If the station's TOY is undefined
        """
        station = self.station
        toy = station.toy
        if toy is None:
            raise SimulationInvariantError(
                "Replenishment constraint needs a defined TOY",
                context={'station_index': station.index}
            )

        has_buffer = station.has_buffer
        for state in station.future_states:
            replenishment = state.replenishment or 0
            gap = toy - state.net_flow if has_buffer else 0.0
            lower = self.big_number * (replenishment - 1)
            upper = self.big_number * replenishment
            if not lower <= gap <= upper:
                return FeasibilityResult(
                    is_feasible=False,
                    reason=(
                        f"station {station.index} instant {state.instant}: replenishment={replenishment} "
                        f"but TOY - net flow = {gap:.2f}"
                    ),
                    station_index=station.index,
                    instant=state.instant,
                )

        return FeasibilityResult(
            is_feasible=True,
            reason=f"station {station.index} replenishments consistent",
            station_index=station.index,
        )

    def is_verified(self) -> bool:
        return self.check().is_feasible
