"""Genetic Algorithm Configuration - population, operators and termination settings."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from .constants import (
    MIN_POPULATION_SIZE,
    MAX_POPULATION_SIZE,
    DEFAULT_ELITE_COUNT,
    DEFAULT_MUTATION_PROBABILITY,
    DEFAULT_CROSSOVER_MIX_PROBABILITY,
    DEFAULT_TOURNAMENT_SIZE,
    DEFAULT_STAGNATION_GENERATIONS,
)


class GeneticConfig(BaseModel):
    """
    Settings of the genetic buffer placement search.

    Attributes:
        population_size: Chromosomes per generation (50-100)
        mutation_probability: Chance that a child gets one gene flipped
        crossover_mix_probability: Chance a gene comes from the second parent
        tournament_size: Chromosomes competing per selection
        elite_count: Best chromosomes kept unchanged each generation
        stagnation_generations: Stop after this many generations without improvement
        max_generations: Optional hard cap on generations
        time_limit_seconds: Optional wall-clock limit, checked between generations
        seed: Seed of the private random generator (None for nondeterministic runs)
        workers: Worker processes for fitness evaluation (1 evaluates in-process)
    """

    model_config = ConfigDict(frozen=True)

    population_size: int = Field(
        default=MIN_POPULATION_SIZE,
        description="Chromosomes per generation",
        ge=MIN_POPULATION_SIZE,
        le=MAX_POPULATION_SIZE
    )
    mutation_probability: float = Field(
        default=DEFAULT_MUTATION_PROBABILITY,
        description="Probability that a child gets one random gene flipped",
        ge=0,
        le=1
    )
    crossover_mix_probability: float = Field(
        default=DEFAULT_CROSSOVER_MIX_PROBABILITY,
        description="Probability that a gene is taken from the second parent",
        ge=0,
        le=1
    )
    tournament_size: int = Field(
        default=DEFAULT_TOURNAMENT_SIZE,
        description="Chromosomes competing in each tournament",
        ge=1
    )
    elite_count: int = Field(
        default=DEFAULT_ELITE_COUNT,
        description="Best chromosomes copied to the next generation",
        ge=0
    )
    stagnation_generations: int = Field(
        default=DEFAULT_STAGNATION_GENERATIONS,
        description="Generations without improvement before stopping",
        ge=1
    )
    max_generations: Optional[int] = Field(
        None,
        description="Optional cap on the number of generations",
        ge=1
    )
    time_limit_seconds: Optional[float] = Field(
        None,
        description="Optional wall-clock limit in seconds",
        gt=0
    )
    seed: Optional[int] = Field(
        None,
        description="Random seed for reproducible runs"
    )
    workers: int = Field(
        default=1,
        description="Worker processes used to evaluate fitness",
        ge=1
    )

    @model_validator(mode='after')
    def validate_elite_count(self):
        """Elites must leave room for offspring."""
        if self.elite_count >= self.population_size:
            raise ValueError(
                f"elite_count ({self.elite_count}) must be smaller than "
                f"population_size ({self.population_size})"
            )
        return self
