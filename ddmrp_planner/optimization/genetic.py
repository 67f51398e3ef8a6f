"""Binary chromosome and genetic operators for buffer placement.

One gene per station: 1 places a decoupling buffer at the station, 0 does
not. Operators draw from an explicit random.Random so a seeded run is
reproducible.
"""

import random
from typing import List, Optional, Sequence, Tuple


class Chromosome:
    """A buffer placement candidate."""

    def __init__(self, genes: Sequence[int]):
        self.genes: List[int] = list(genes)
        self.fitness: Optional[float] = None
        self.objective: Optional[float] = None

    @property
    def is_evaluated(self) -> bool:
        return self.fitness is not None

    def invalidate(self) -> None:
        """Forget the evaluation after the genes changed."""
        self.fitness = None
        self.objective = None

    def copy(self) -> 'Chromosome':
        """Create a copy of this chromosome, evaluation included."""
        clone = Chromosome(self.genes)
        clone.fitness = self.fitness
        clone.objective = self.objective
        return clone

    def __str__(self) -> str:
        genes = "".join(str(g) for g in self.genes)
        return f"Chromosome({genes}, fitness={self.fitness})"


def random_chromosome(length: int, rng: random.Random) -> Chromosome:
    return Chromosome([rng.randint(0, 1) for _ in range(length)])


def tournament_selection(population: List[Chromosome], rng: random.Random, size: int) -> Chromosome:
    """Best of `size` chromosomes drawn at random (without replacement when possible)."""
    if size >= len(population):
        contestants = list(population)
    else:
        contestants = rng.sample(population, size)
    return max(contestants, key=lambda c: c.fitness)


def uniform_crossover(parent1: Chromosome, parent2: Chromosome, rng: random.Random,
                      mix_probability: float) -> Tuple[Chromosome, Chromosome]:
    """Two children swapping each gene of the parents with the mix probability."""
    genes1, genes2 = [], []
    for gene1, gene2 in zip(parent1.genes, parent2.genes):
        if rng.random() < mix_probability:
            gene1, gene2 = gene2, gene1
        genes1.append(gene1)
        genes2.append(gene2)
    return Chromosome(genes1), Chromosome(genes2)


def flip_bit_mutation(chromosome: Chromosome, rng: random.Random, probability: float) -> bool:
    """
    With the given probability, flip one randomly chosen gene in place.

    Returns:
        True if the chromosome was mutated
    """
    if not chromosome.genes or rng.random() >= probability:
        return False
    position = rng.randrange(len(chromosome.genes))
    chromosome.genes[position] = 1 - chromosome.genes[position]
    chromosome.invalidate()
    return True
