"""Per-run mutable state threaded through every generation."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..core.problem import Problem
from ..core.randomness import Random
from ..population.base import Population


@dataclass
class Statistics:
    """Run statistics reported with the best solution."""
    generation: int = 0
    elapsed: float = 0.0
    improvements: int = 0
    history: List[float] = field(default_factory=list)

    @property
    def improvement_ratio(self) -> float:
        return self.improvements / self.generation if self.generation else 0.0


class RefinementContext:
    """
    Problem, population and random source of one run, plus statistics and
    a free-form `state` dict used by stateful termination criteria.
    """

    def __init__(self, problem: Problem, population: Population, random: Random):
        self.problem = problem
        self.population = population
        self.random = random
        self.state: Dict[str, Any] = {}
        self.statistics = Statistics()
        self._started = time.monotonic()

    @property
    def generation(self) -> int:
        return self.statistics.generation

    def elapsed(self) -> float:
        return time.monotonic() - self._started

    def on_generation(self, improved: bool):
        stats = self.statistics
        stats.generation += 1
        stats.elapsed = self.elapsed()
        if improved:
            stats.improvements += 1

        best = self.population.best()
        if best is not None:
            stats.history.append(best.cost)

        self.population.on_generation(stats.generation)
