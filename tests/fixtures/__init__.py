"""Test fixtures for station network testing."""

from .networks import chain_declarations, create_planning_inputs, raw_chain_inputs

__all__ = ['chain_declarations', 'create_planning_inputs', 'raw_chain_inputs']
