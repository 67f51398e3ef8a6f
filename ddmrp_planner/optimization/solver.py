"""Genetic optimizer for buffer placement.

The optimizer evolves binary buffer placements (one gene per station) and
scores each one by planning it on a fresh ProductionControlModel. It runs in
two steps, initialize() then resolve(), and stops when the best fitness has
not improved for a number of generations (or on the optional generation and
time limits, checked between generations).
"""

import logging
import random
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from itertools import repeat
from typing import Any, Dict, List, Mapping, Optional, Union

from ddmrp_planner.models.planning_inputs import PlanningInputs
from ddmrp_planner.network.graph_builder import StationNetwork, build_network
from ddmrp_planner.optimization.fitness import FitnessEvaluator, evaluate_placement
from ddmrp_planner.optimization.genetic import (
    Chromosome,
    flip_bit_mutation,
    random_chromosome,
    tournament_selection,
    uniform_crossover,
)
from ddmrp_planner.optimization.result_schema import (
    FutureStateResult,
    OptimizationSummary,
    StationPlanResult,
)
from ddmrp_planner.optimization.solver_config import GeneticConfig
from ddmrp_planner.production.control_model import ProductionControlModel
from ddmrp_planner.production.objective import ObjectiveWeights
from ddmrp_planner.validation.errors import SolverError

logger = logging.getLogger(__name__)


class TerminationReason(str, Enum):
    """Why a genetic search stopped."""
    STAGNATION = "stagnation"
    MAX_GENERATIONS = "max_generations"
    TIME_LIMIT = "time_limit"


@dataclass
class OptimizationResult:
    """
    Results of a genetic buffer placement search.

    Attributes:
        best_plan: Fully simulated model of the best placement
        best_genes: Effective genes of the best placement
        objective_value: Objective of the best plan (lower is better)
        best_fitness: Fitness of the best plan (higher is better)
        fitness_curve: Distinct fitness values observed, best first
        objective_curve: Distinct objective values observed, worst first
        generations: Generations evolved after the initial population
        evaluations: Distinct placements simulated
        termination_reason: Why the search stopped
        solve_time_seconds: Wall-clock duration of the search
        metadata: Additional result metadata
    """
    best_plan: ProductionControlModel
    best_genes: List[int]
    objective_value: float
    best_fitness: float
    fitness_curve: List[float]
    objective_curve: List[float]
    generations: int
    evaluations: int
    termination_reason: TerminationReason
    solve_time_seconds: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_converged(self) -> bool:
        """Check if the search stopped because it stopped improving."""
        return self.termination_reason == TerminationReason.STAGNATION

    def to_summary(self) -> OptimizationSummary:
        """Validated, serializable summary of the run."""
        plan = self.best_plan
        stations = [
            StationPlanResult(
                station_index=station.index,
                has_buffer=station.has_buffer,
                is_input_station=station.is_input_station,
                is_output_station=station.is_output_station,
                lead_time=station.lead_time,
                lead_time_factor=station.lead_time_factor,
                average_demand=station.average_demand,
                demand_variability=station.demand_variability,
                tor=station.tor,
                toy=station.toy,
                tog=station.tog,
                states=[
                    FutureStateResult(
                        instant=state.instant,
                        demand=state.demand,
                        qualified_demand=state.qualified_demand,
                        buffer=state.buffer,
                        on_order_inventory=state.on_order_inventory,
                        order_amount=state.order_amount,
                        replenishment=state.replenishment,
                        net_flow=state.net_flow,
                    )
                    for state in station.future_states
                ],
            )
            for station in plan.stations
        ]
        objective = plan.objective()
        return OptimizationSummary(
            best_genes=self.best_genes,
            objective_value=self.objective_value,
            best_fitness=self.best_fitness,
            average_buffer_level=objective.mean_buffer_level,
            average_unmet_demand=objective.mean_unmet_demand,
            activated_buffer_count=objective.activated_buffer_count,
            fitness_curve=self.fitness_curve,
            objective_curve=self.objective_curve,
            generations=self.generations,
            evaluations=self.evaluations,
            termination_reason=self.termination_reason.value,
            solve_time_seconds=self.solve_time_seconds,
            stations=stations,
        )

    def __str__(self) -> str:
        genes = "".join(str(g) for g in self.best_genes)
        return (
            f"OptimizationResult: genes={genes}, objective={self.objective_value:,.2f}, "
            f"generations={self.generations}, evaluations={self.evaluations}, "
            f"stopped on {self.termination_reason.value} after {self.solve_time_seconds:.2f}s"
        )


class GeneticOptimizer:
    """
    Genetic search over buffer placements.

    Example:
        >>> optimizer = GeneticOptimizer(GeneticConfig(seed=42))
        >>> optimizer.initialize(network)
        >>> result = optimizer.resolve()
    """

    def __init__(self, config: Optional[GeneticConfig] = None,
                 weights: Optional[ObjectiveWeights] = None):
        self.config = config or GeneticConfig()
        self.weights = weights or ObjectiveWeights()
        self.network: Optional[StationNetwork] = None

        logger.info(
            f"GeneticOptimizer initialized: pop={self.config.population_size}, "
            f"mutation={self.config.mutation_probability}, tournament={self.config.tournament_size}, "
            f"elitism={self.config.elite_count}, stagnation={self.config.stagnation_generations}"
        )

    @property
    def is_initialized(self) -> bool:
        return self.network is not None

    def initialize(self, network: Union[StationNetwork, PlanningInputs, Mapping[str, Any]]) -> None:
        """
        Bind the optimizer to a station network.

        Args:
            network: StationNetwork, or planning inputs to build one from

        Raises:
            ConfigurationError: If planning inputs are given and invalid
        """
        if not isinstance(network, StationNetwork):
            network = build_network(network)
        self.network = network

    def resolve(self) -> OptimizationResult:
        """
        Run the genetic search.

        Returns:
            OptimizationResult with the best simulated plan and the curves

        Raises:
            SolverError: If called before initialize(), or if no placement
                could be simulated
        """
        if not self.is_initialized:
            raise SolverError(
                "resolve() called before initialize()",
                {'config': self.config.model_dump()}
            )

        if self.config.workers > 1:
            with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
                return self._run(executor)
        return self._run(None)

    def _run(self, executor: Optional[ProcessPoolExecutor]) -> OptimizationResult:
        config = self.config
        network = self.network
        rng = random.Random(config.seed)
        evaluator = FitnessEvaluator(network, self.weights)
        start_time = time.time()

        logger.info(f"Genetic search started on {network}")

        population = [random_chromosome(network.station_count, rng)
                      for _ in range(config.population_size)]
        self._evaluate(population, evaluator, executor)

        best = max(population, key=lambda c: c.fitness).copy()
        logger.info(f"Generation 0: best fitness={best.fitness:.6g}, objective={best.objective}")

        generations = 0
        stagnant = 0
        while True:
            reason = self._termination_reason(generations, stagnant, start_time)
            if reason is not None:
                break

            population = self._next_generation(population, rng)
            self._evaluate(population, evaluator, executor)
            generations += 1

            generation_best = max(population, key=lambda c: c.fitness)
            if generation_best.fitness > best.fitness:
                best = generation_best.copy()
                stagnant = 0
                logger.info(
                    f"Generation {generations}: best fitness={best.fitness:.6g}, objective={best.objective}"
                )
            else:
                stagnant += 1
                logger.debug(f"Generation {generations}: no improvement ({stagnant} stagnant)")

        if best.objective is None:
            raise SolverError(
                "No buffer placement could be simulated",
                {
                    'generations': generations,
                    'evaluations': evaluator.evaluation_count,
                    'station_count': network.station_count,
                }
            )

        best_genes = list(evaluator.placement_key(best.genes))
        best_plan = ProductionControlModel(network, self.weights).plan(best_genes)
        solve_time = time.time() - start_time

        result = OptimizationResult(
            best_plan=best_plan,
            best_genes=best_genes,
            objective_value=best.objective,
            best_fitness=best.fitness,
            fitness_curve=evaluator.fitness_curve(),
            objective_curve=evaluator.objective_curve(),
            generations=generations,
            evaluations=evaluator.evaluation_count,
            termination_reason=reason,
            solve_time_seconds=solve_time,
            metadata={'seed': config.seed, 'population_size': config.population_size},
        )
        logger.info(f"Genetic search completed: {result}")
        return result

    def _termination_reason(self, generations: int, stagnant: int,
                            start_time: float) -> Optional[TerminationReason]:
        config = self.config
        if stagnant >= config.stagnation_generations:
            return TerminationReason.STAGNATION
        if config.max_generations is not None and generations >= config.max_generations:
            return TerminationReason.MAX_GENERATIONS
        if config.time_limit_seconds is not None and time.time() - start_time >= config.time_limit_seconds:
            return TerminationReason.TIME_LIMIT
        return None

    def _evaluate(self, population: List[Chromosome], evaluator: FitnessEvaluator,
                  executor: Optional[ProcessPoolExecutor]) -> None:
        if executor is not None:
            pending = evaluator.pending_keys(population)
            evaluations = executor.map(
                evaluate_placement, repeat(evaluator.network), repeat(evaluator.weights), pending
            )
            for key, evaluation in zip(pending, evaluations):
                evaluator.store(key, evaluation)
        evaluator.assign(population)

    def _next_generation(self, population: List[Chromosome], rng: random.Random) -> List[Chromosome]:
        config = self.config

        # Elitism: keep best chromosomes unchanged
        ranked = sorted(population, key=lambda c: c.fitness, reverse=True)
        offspring = [c.copy() for c in ranked[:config.elite_count]]

        while len(offspring) < config.population_size:
            parent1 = tournament_selection(population, rng, config.tournament_size)
            parent2 = tournament_selection(population, rng, config.tournament_size)
            children = uniform_crossover(parent1, parent2, rng, config.crossover_mix_probability)
            for child in children:
                flip_bit_mutation(child, rng, config.mutation_probability)
                if len(offspring) < config.population_size:
                    offspring.append(child)

        return offspring


def optimize(network: Union[StationNetwork, PlanningInputs, Mapping[str, Any]],
             config: Optional[GeneticConfig] = None,
             weights: Optional[ObjectiveWeights] = None) -> OptimizationResult:
    """
    Search for the best buffer placement of a station network.

    Args:
        network: StationNetwork, or planning inputs to build one from
        config: Genetic algorithm settings (defaults if None)
        weights: Objective weights (defaults if None)

    Returns:
        OptimizationResult with the best simulated plan

    Raises:
        ConfigurationError: If planning inputs are given and invalid
        SolverError: If no placement could be simulated
    """
    optimizer = GeneticOptimizer(config, weights)
    optimizer.initialize(network)
    return optimizer.resolve()
