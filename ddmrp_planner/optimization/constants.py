"""Centralized constants for the genetic buffer placement search.

This module contains the default parameters of the genetic algorithm and the
bounds its configuration is validated against.
"""

# ============================================================================
# POPULATION
# ============================================================================

#: Smallest allowed population
MIN_POPULATION_SIZE = 50

#: Largest allowed population
MAX_POPULATION_SIZE = 100

#: Number of best chromosomes copied unchanged into the next generation
DEFAULT_ELITE_COUNT = 1


# ============================================================================
# OPERATORS
# ============================================================================

#: Probability that a child gets one random gene flipped
DEFAULT_MUTATION_PROBABILITY = 0.1

#: Probability that uniform crossover takes a gene from the second parent
DEFAULT_CROSSOVER_MIX_PROBABILITY = 0.5

#: Number of chromosomes competing in each tournament
DEFAULT_TOURNAMENT_SIZE = 2


# ============================================================================
# TERMINATION AND FITNESS
# ============================================================================

#: Generations without best-fitness improvement before the search stops
DEFAULT_STAGNATION_GENERATIONS = 100

#: Objective values are floored at this value before taking the reciprocal
OBJECTIVE_FLOOR = 1e-6

#: Fitness assigned to chromosomes whose simulation failed
INVALID_FITNESS = 0.0
