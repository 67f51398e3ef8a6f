"""
Fitness evaluation of buffer placements.

Fitness is the reciprocal of the plan objective (floored to stay finite), so
higher is better. A placement whose simulation breaks an invariant is logged
and scored with the lowest possible fitness instead of aborting the search.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ddmrp_planner.network.graph_builder import StationNetwork
from ddmrp_planner.optimization.constants import INVALID_FITNESS, OBJECTIVE_FLOOR
from ddmrp_planner.production.control_model import ProductionControlModel
from ddmrp_planner.production.objective import ObjectiveWeights
from ddmrp_planner.validation.errors import SimulationInvariantError

logger = logging.getLogger(__name__)

#: Genes with output stations forced to 1, used as evaluation cache key
PlacementKey = Tuple[int, ...]


@dataclass(frozen=True)
class Evaluation:
    """Fitness and objective of one placement (objective None if the plan failed)."""
    fitness: float
    objective: Optional[float]


def objective_to_fitness(objective: float) -> float:
    """Reciprocal of the objective, floored so that a zero cost stays finite."""
    return 1.0 / max(objective, OBJECTIVE_FLOOR)


def evaluate_placement(network: StationNetwork, weights: ObjectiveWeights,
                       genes: Sequence[int]) -> Evaluation:
    """
    Plan a placement on a fresh model and score it.

    Module-level so that worker processes can run it.
    """
    try:
        model = ProductionControlModel(network, weights).plan(genes)
        objective = model.objective_value
    except SimulationInvariantError:
        logger.exception(f"Simulation failed for placement {list(genes)}")
        return Evaluation(fitness=INVALID_FITNESS, objective=None)
    return Evaluation(fitness=objective_to_fitness(objective), objective=objective)


class FitnessEvaluator:
    """
    Scores chromosomes, caching results by effective placement.

    Output station genes do not change the plan (those stations are always
    buffered) so they are normalized before caching.
    """

    def __init__(self, network: StationNetwork, weights: ObjectiveWeights):
        self.network = network
        self.weights = weights
        self.cache: Dict[PlacementKey, Evaluation] = {}
        self.history: List[Evaluation] = []
        self._output_stations = set(network.output_stations)

    def placement_key(self, genes: Sequence[int]) -> PlacementKey:
        return tuple(
            1 if index in self._output_stations else int(gene)
            for index, gene in enumerate(genes)
        )

    def pending_keys(self, chromosomes: Sequence) -> List[PlacementKey]:
        """Distinct placements of the chromosomes that are not cached yet, in order."""
        pending = []
        for chromosome in chromosomes:
            key = self.placement_key(chromosome.genes)
            if key not in self.cache and key not in pending:
                pending.append(key)
        return pending

    def store(self, key: PlacementKey, evaluation: Evaluation) -> None:
        self.cache[key] = evaluation

    def evaluate(self, genes: Sequence[int]) -> Evaluation:
        key = self.placement_key(genes)
        if key not in self.cache:
            self.cache[key] = evaluate_placement(self.network, self.weights, key)
        return self.cache[key]

    def assign(self, chromosomes: Sequence) -> None:
        """Set fitness and objective of every chromosome and record them in the history."""
        for chromosome in chromosomes:
            evaluation = self.evaluate(chromosome.genes)
            chromosome.fitness = evaluation.fitness
            chromosome.objective = evaluation.objective
            self.history.append(evaluation)

    @property
    def evaluation_count(self) -> int:
        """Number of distinct placements actually simulated."""
        return len(self.cache)

    def fitness_curve(self) -> List[float]:
        """Distinct fitness values observed, best first."""
        return sorted({e.fitness for e in self.history}, reverse=True)

    def objective_curve(self) -> List[float]:
        """Distinct objective values of successful evaluations, worst first."""
        return sorted({e.objective for e in self.history if e.objective is not None}, reverse=True)
