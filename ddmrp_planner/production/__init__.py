"""DDMRP production control: propagation, buffer zones, simulation and evaluation."""

from .buffer_zones import BufferZones, top_of_red, top_of_yellow, top_of_green

__all__ = [
    "BufferZones",
    "top_of_red",
    "top_of_yellow",
    "top_of_green",
]
