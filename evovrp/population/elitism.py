"""Elitist population: keeps the best N individuals."""

from dataclasses import dataclass
from typing import List, Optional

from ..core.errors import ConfigurationError
from ..core.randomness import Random
from ..core.solution import Solution
from .base import Population


@dataclass(frozen=True)
class ElitismConfig:
    max_size: int = 4
    selection_size: int = 4

    def __post_init__(self):
        if self.max_size < 1:
            raise ConfigurationError(f"Population size must be positive: {self.max_size}")
        if self.selection_size < 1:
            raise ConfigurationError(f"Selection size must be positive: {self.selection_size}")

    def create(self, problem, random: Random) -> 'Elitism':
        return Elitism(random, self.max_size, self.selection_size)


class Elitism(Population):
    """
    Sorted by fitness and truncated to `max_size` on every insertion.
    Individuals with the same fitness as a kept one are dropped.
    """

    def __init__(self, random: Random, max_size: int = 4, selection_size: int = 4):
        super().__init__()
        self.random = random
        self.max_size = max_size
        self.selection_size = selection_size
        self.individuals: List[Solution] = []

    def _add(self, individual: Solution) -> bool:
        best = self.individuals[0] if self.individuals else None
        if any(other.fitness == individual.fitness for other in self.individuals):
            return False

        self.individuals.append(individual)
        self.individuals.sort(key=lambda ind: ind.fitness)
        del self.individuals[self.max_size:]

        return best is None or self.individuals[0].fitness < best.fitness

    def select(self) -> List[Solution]:
        """Best individual first, the rest drawn uniformly from the archive."""
        individuals = list(self.individuals)
        if not individuals:
            return []
        return [individuals[0]] + [self.random.choice(individuals) for _ in range(self.selection_size - 1)]

    def best(self) -> Optional[Solution]:
        individuals = self.individuals
        return individuals[0] if individuals else None

    def ranked(self) -> List[Solution]:
        return list(self.individuals)
