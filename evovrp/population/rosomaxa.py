"""Rosomaxa: elite archive plus a growing self-organizing map of diverse individuals."""

import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from ..algorithms.gsom import Network
from ..core.errors import ConfigurationError
from ..core.randomness import Random
from ..core.solution import Solution
from .base import Population
from .elitism import Elitism

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosomaxaConfig:
    selection_size: int = 8
    max_elite_size: int = 2
    max_node_size: int = 2
    spread_factor: float = 0.25
    reduction_factor: float = 0.1
    distribution_factor: float = 0.25
    learning_rate: float = 0.1
    hit_memory: int = 1000
    rebalance_count: int = 10
    exploration_ratio: float = 0.9

    def __post_init__(self):
        for name in ('selection_size', 'max_elite_size', 'max_node_size', 'hit_memory', 'rebalance_count'):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"Rosomaxa {name} must be positive")
        if not 0.0 < self.spread_factor < 1.0:
            raise ConfigurationError(f"Rosomaxa spread_factor must be in (0, 1): {self.spread_factor}")
        for name in ('reduction_factor', 'distribution_factor', 'learning_rate', 'exploration_ratio'):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ConfigurationError(f"Rosomaxa {name} must be in [0, 1]")

    def create(self, problem, random: Random) -> 'Rosomaxa':
        return Rosomaxa(problem, random, self)


class Rosomaxa(Population):
    """
    Every individual goes to a small elite archive (which owns `best()`)
    and to a GSOM keyed by solution features. With probability
    `exploration_ratio`, `select` mixes node representatives into the
    elite parents; the map is compacted every `rebalance_count` generations.
    """

    def __init__(self, problem, random: Random, config: Optional[RosomaxaConfig] = None):
        super().__init__()
        self.problem = problem
        self.random = random
        self.config = config or RosomaxaConfig()
        self.elite = Elitism(random, self.config.max_elite_size, self.config.selection_size)
        self.network: Optional[Network[Solution]] = None
        self._reference_cost: Optional[float] = None

    def _add(self, individual: Solution) -> bool:
        improved = self.elite.add(individual)

        vector = self._features(individual)
        if self.network is None:
            roots = [vector + np.array([self.random.uniform_real(-0.01, 0.01) for _ in vector])
                     for _ in range(4)]
            self.network = Network(roots, key=lambda ind: ind.fitness,
                                   spread_factor=self.config.spread_factor,
                                   distribution_factor=self.config.distribution_factor,
                                   learning_rate=self.config.learning_rate,
                                   hit_memory=self.config.hit_memory,
                                   max_node_size=self.config.max_node_size)
        self.network.store(individual, vector)
        return improved

    def select(self) -> List[Solution]:
        parents = self.elite.select()
        if not parents or self.network is None or not self.random.is_hit(self.config.exploration_ratio):
            return parents

        candidates = self.network.representatives()
        explore = min(len(candidates), max(1, self.config.selection_size - self.config.max_elite_size))
        diverse = self.random.sample(candidates, explore)
        return (parents[:1] + diverse + parents[1:])[:self.config.selection_size]

    def best(self) -> Optional[Solution]:
        return self.elite.best()

    def ranked(self) -> List[Solution]:
        return self.elite.ranked()

    def size(self) -> int:
        network = 0 if self.network is None else len(list(self.network.items()))
        return self.elite.size() + network

    def on_generation(self, generation: int):
        if self.network is None or generation % self.config.rebalance_count != 0:
            return
        with self._lock:
            self.network.compact(self.config.reduction_factor)
        logger.debug(f"Rosomaxa rebalanced at generation {generation}: {self.network.size()} nodes")

    def _features(self, individual: Solution) -> np.ndarray:
        """Scale-free coordinates: unassigned share, fleet usage, relative cost, route shape."""
        problem = self.problem
        unassigned, _, cost = individual.fitness
        used = [r for r in individual.routes if r.jobs]

        if self._reference_cost is None:
            self._reference_cost = cost if cost > 0 else 1.0

        if used:
            sizes = np.array([len(r.jobs) for r in used], dtype=np.float64)
            loads = np.array([r.schedule(problem).load / r.vehicle.capacity if r.vehicle.capacity > 0 else 0.0
                              for r in used])
            size_mean = sizes.mean() / problem.n_jobs
            size_std = sizes.std() / problem.n_jobs
            load_mean = float(loads.mean())
        else:
            size_mean = size_std = load_mean = 0.0

        return np.array([
            unassigned / problem.n_jobs,
            len(used) / len(problem.fleet.vehicles),
            cost / self._reference_cost,
            size_mean,
            size_std,
            load_mean,
        ], dtype=np.float64)
