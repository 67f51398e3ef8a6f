"""
DDMRP buffer zone thresholds.

The three thresholds delimit the red, yellow and green zones of a decoupling
buffer:

- TOR (top of red)    = LT x AD x (LTF + LTF x DV)
- TOY (top of yellow) = TOR + LT x AD
- TOG (top of green)  = TOY + LT x AD x LTF

where LT is the lead time, AD the average daily demand, LTF the lead time
factor and DV the demand variability. Any undefined input yields an undefined
threshold rather than an error.
"""

from dataclasses import dataclass
from typing import Optional


def top_of_red(
    lead_time: Optional[float],
    average_demand: Optional[float],
    lead_time_factor: Optional[float],
    demand_variability: Optional[float],
) -> Optional[float]:
    """Top of the red zone, or None if any input is undefined."""
    if None in (lead_time, average_demand, lead_time_factor, demand_variability):
        return None
    return lead_time * average_demand * (lead_time_factor + lead_time_factor * demand_variability)


def top_of_yellow(
    lead_time: Optional[float],
    average_demand: Optional[float],
    lead_time_factor: Optional[float],
    demand_variability: Optional[float],
) -> Optional[float]:
    """Top of the yellow zone, or None if any input is undefined."""
    tor = top_of_red(lead_time, average_demand, lead_time_factor, demand_variability)
    if tor is None:
        return None
    return tor + lead_time * average_demand


def top_of_green(
    lead_time: Optional[float],
    average_demand: Optional[float],
    lead_time_factor: Optional[float],
    demand_variability: Optional[float],
) -> Optional[float]:
    """Top of the green zone, or None if any input is undefined."""
    toy = top_of_yellow(lead_time, average_demand, lead_time_factor, demand_variability)
    if toy is None:
        return None
    return toy + lead_time * average_demand * lead_time_factor


@dataclass(frozen=True)
class BufferZones:
    """
    Fully defined zone thresholds of a buffered station.

    Attributes:
        tor: Top of red
        toy: Top of yellow
        tog: Top of green
    """
    tor: float
    toy: float
    tog: float

    @property
    def red_zone(self) -> float:
        return self.tor

    @property
    def yellow_zone(self) -> float:
        return self.toy - self.tor

    @property
    def green_zone(self) -> float:
        return self.tog - self.toy

    def __str__(self) -> str:
        return f"TOR={self.tor:.2f} TOY={self.toy:.2f} TOG={self.tog:.2f}"
