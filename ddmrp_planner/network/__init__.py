"""
Station network construction.

This module validates station declarations and builds the immutable network
shared by every plan evaluation.
"""

from .graph_builder import StationNetwork, StationNetworkBuilder, build_network

__all__ = [
    'StationNetwork',
    'StationNetworkBuilder',
    'build_network',
]
