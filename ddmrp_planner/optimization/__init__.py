"""Optimization module for buffer placement.

This module provides the genetic search over decoupling buffer placements.
Each candidate placement is planned on a fresh production control model and
scored by the reciprocal of its objective.
"""

from .solver_config import GeneticConfig
from .genetic import Chromosome
from .fitness import FitnessEvaluator, objective_to_fitness
from .solver import (
    GeneticOptimizer,
    OptimizationResult,
    TerminationReason,
    optimize,
)
from .result_schema import (
    OptimizationSummary,
    StationPlanResult,
    FutureStateResult,
)

__all__ = [
    # Configuration
    "GeneticConfig",
    # Search
    "Chromosome",
    "FitnessEvaluator",
    "objective_to_fitness",
    "GeneticOptimizer",
    "OptimizationResult",
    "TerminationReason",
    "optimize",
    # Result schema
    "OptimizationSummary",
    "StationPlanResult",
    "FutureStateResult",
]
