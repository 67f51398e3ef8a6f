"""Tests for chromosome operators and fitness evaluation."""

import random

import pytest

from ddmrp_planner.optimization.constants import INVALID_FITNESS, OBJECTIVE_FLOOR
from ddmrp_planner.optimization.fitness import (
    FitnessEvaluator,
    evaluate_placement,
    objective_to_fitness,
)
from ddmrp_planner.optimization.genetic import (
    Chromosome,
    flip_bit_mutation,
    random_chromosome,
    tournament_selection,
    uniform_crossover,
)
from ddmrp_planner.production.control_model import ProductionControlModel
from ddmrp_planner.production.objective import ObjectiveWeights


def _scored(genes, fitness):
    chromosome = Chromosome(genes)
    chromosome.fitness = fitness
    return chromosome


class TestOperators:
    """Tests for selection, crossover and mutation."""

    def test_random_chromosome_reproducible(self):
        """Test the same seed draws the same genes."""
        first = random_chromosome(12, random.Random(3))
        second = random_chromosome(12, random.Random(3))
        assert first.genes == second.genes
        assert set(first.genes) <= {0, 1}

    def test_copy_is_independent(self):
        """Test copies keep the evaluation but not the gene list."""
        original = _scored([0, 1, 0], 0.5)
        clone = original.copy()
        clone.genes[0] = 1
        assert original.genes == [0, 1, 0]
        assert clone.fitness == 0.5

    def test_tournament_picks_fittest_contestant(self):
        """Test a tournament over the whole population returns the fittest."""
        population = [_scored([0, 0], 0.1), _scored([1, 1], 0.9), _scored([0, 1], 0.4)]
        winner = tournament_selection(population, random.Random(0), size=3)
        assert winner.genes == [1, 1]

    def test_uniform_crossover_extremes(self):
        """Test mix probability 0 keeps parents and 1 swaps every gene."""
        parent1, parent2 = Chromosome([0, 0, 0, 0]), Chromosome([1, 1, 1, 1])
        kept = uniform_crossover(parent1, parent2, random.Random(0), 0.0)
        swapped = uniform_crossover(parent1, parent2, random.Random(0), 1.0)
        assert [c.genes for c in kept] == [[0, 0, 0, 0], [1, 1, 1, 1]]
        assert [c.genes for c in swapped] == [[1, 1, 1, 1], [0, 0, 0, 0]]

    def test_uniform_crossover_conserves_genes(self):
        """Test children together carry exactly the parents' genes per position."""
        parent1, parent2 = Chromosome([0, 1, 0, 1, 1]), Chromosome([1, 1, 0, 0, 0])
        child1, child2 = uniform_crossover(parent1, parent2, random.Random(11), 0.5)
        for position in range(5):
            assert sorted([child1.genes[position], child2.genes[position]]) == \
                sorted([parent1.genes[position], parent2.genes[position]])

    def test_flip_bit_mutation(self):
        """Test a certain mutation flips exactly one gene and clears the evaluation."""
        chromosome = _scored([0, 0, 0, 0, 0], 0.3)
        assert flip_bit_mutation(chromosome, random.Random(5), 1.0)
        assert sum(chromosome.genes) == 1
        assert not chromosome.is_evaluated

    def test_no_mutation(self):
        """Test probability zero never mutates."""
        chromosome = _scored([1, 0, 1], 0.3)
        assert not flip_bit_mutation(chromosome, random.Random(5), 0.0)
        assert chromosome.genes == [1, 0, 1]
        assert chromosome.fitness == 0.3


class TestFitness:
    """Tests for fitness evaluation."""

    def test_reciprocal_of_objective(self):
        """Test fitness is the reciprocal of the objective."""
        assert objective_to_fitness(250.0) == pytest.approx(0.004)

    def test_zero_objective_floored(self):
        """Test a zero objective stays finite."""
        assert objective_to_fitness(0.0) == pytest.approx(1 / OBJECTIVE_FLOOR)

    def test_evaluate_placement(self, chain_network):
        """Test a placement is scored from a fresh plan."""
        evaluation = evaluate_placement(chain_network, ObjectiveWeights(), [1, 0, 1])
        expected = ProductionControlModel(chain_network).plan([1, 0, 1]).objective_value
        assert evaluation.objective == pytest.approx(expected)
        assert evaluation.fitness == pytest.approx(1 / expected)

    def test_failed_simulation_scores_invalid(self, chain_network, monkeypatch, caplog):
        """Test a simulation invariant violation is logged and scored as unfit."""
        monkeypatch.setattr(chain_network, 'supply_sources', lambda index, has_buffer: [])
        evaluation = evaluate_placement(chain_network, ObjectiveWeights(), [1, 1, 1])
        assert evaluation.fitness == INVALID_FITNESS
        assert evaluation.objective is None
        assert "Simulation failed for placement" in caplog.text

    def test_output_gene_normalized(self, chain_network):
        """Test output station genes do not create distinct placements."""
        evaluator = FitnessEvaluator(chain_network, ObjectiveWeights())
        assert evaluator.placement_key([1, 0, 0]) == (1, 0, 1)
        evaluator.evaluate([1, 0, 0])
        evaluator.evaluate([1, 0, 1])
        assert evaluator.evaluation_count == 1

    def test_curves(self, chain_network):
        """Test curves are distinct values, fitness best first and objective worst first."""
        evaluator = FitnessEvaluator(chain_network, ObjectiveWeights())
        population = [Chromosome(g) for g in ([1, 0, 0], [0, 0, 0], [1, 0, 0], [1, 1, 1])]
        evaluator.assign(population)
        assert len(evaluator.history) == 4
        assert evaluator.fitness_curve() == sorted(set(evaluator.fitness_curve()), reverse=True)
        assert len(evaluator.fitness_curve()) == 3
        assert evaluator.objective_curve()[-1] == pytest.approx(min(c.objective for c in population))
