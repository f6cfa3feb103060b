"""Fluent construction of an immutable solver configuration."""

import logging
from typing import List, Optional, Sequence, Tuple

from ..core.errors import ConfigurationError
from ..core.problem import Problem
from ..core.randomness import Random
from ..core.solution import Solution
from ..mutation import Mutation, Recreate, CheapestInsertion, WeightedSelector, create_default_mutation
from ..population import ElitismConfig
from .solver import Logger, PopulationConfig, Solver, SolverConfig
from .termination import CompositeTermination, CostVariation, MaxGeneration, MaxTime, Termination

logger = logging.getLogger(__name__)

DEFAULT_MAX_TIME = 300.0
DEFAULT_MAX_GENERATIONS = 3000
DEFAULT_LOG_EVERY = 100


class Builder:
    """
    Collects optional settings; `build()` validates them, fills defaults
    and returns a `Solver`.
    """

    def __init__(self, problem: Problem):
        self.problem = problem
        self.random: Optional[Random] = None
        self.logger: Logger = logger.info
        self.initial_methods: List[Tuple[Recreate, float]] = [(CheapestInsertion(), 1.0)]
        self.initial_size = 1
        self.initial_individuals: List[Solution] = []
        self.population: PopulationConfig = ElitismConfig()
        self.mutations: Optional[List[Tuple[Mutation, float]]] = None
        self.max_time: Optional[float] = None
        self.max_generations: Optional[int] = None
        self.cost_variation: Optional[Tuple[int, float]] = None
        self.parallelism = 1
        self.log_every = DEFAULT_LOG_EVERY

    def with_random(self, random: Random) -> 'Builder':
        self.random = random
        return self

    def with_seed(self, seed: Optional[int]) -> 'Builder':
        self.random = Random(seed)
        return self

    def with_logger(self, sink: Logger) -> 'Builder':
        self.logger = sink
        return self

    def with_logging(self, enabled: bool) -> 'Builder':
        """Disabling installs a no-op sink."""
        self.logger = logger.info if enabled else (lambda _: None)
        return self

    def with_initial_methods(self, methods: Sequence[Tuple[Recreate, float]]) -> 'Builder':
        self.initial_methods = list(methods)
        return self

    def with_initial_size(self, size: int) -> 'Builder':
        self.initial_size = size
        return self

    def with_initial_individuals(self, individuals: Sequence[Solution]) -> 'Builder':
        self.initial_individuals = list(individuals)
        return self

    def with_population(self, config: PopulationConfig) -> 'Builder':
        self.population = config
        return self

    def with_mutation(self, mutation: Mutation) -> 'Builder':
        self.mutations = [(mutation, 1.0)]
        return self

    def with_mutations(self, mutations: Sequence[Tuple[Mutation, float]]) -> 'Builder':
        self.mutations = list(mutations)
        return self

    def with_max_time(self, seconds: Optional[float]) -> 'Builder':
        self.max_time = seconds
        return self

    def with_max_generations(self, generations: Optional[int]) -> 'Builder':
        self.max_generations = generations
        return self

    def with_cost_variation(self, variation: Optional[Tuple[int, float]]) -> 'Builder':
        """(sample, cv) pair."""
        self.cost_variation = variation
        return self

    def with_parallelism(self, workers: int) -> 'Builder':
        self.parallelism = workers
        return self

    def with_log_every(self, generations: int) -> 'Builder':
        self.log_every = generations
        return self

    def build(self) -> Solver:
        return Solver(self.build_config())

    def build_config(self) -> SolverConfig:
        self.problem.validate()

        if self.initial_size < 1:
            raise ConfigurationError(f"Initial population size must be positive: {self.initial_size}")
        if self.parallelism < 1:
            raise ConfigurationError(f"Parallelism must be positive: {self.parallelism}")
        if self.log_every < 1:
            raise ConfigurationError(f"Logging period must be positive: {self.log_every}")

        mutations = self.mutations
        if mutations is None:
            mutations = [(create_default_mutation(self.problem), 1.0)]

        return SolverConfig(
            problem=self.problem,
            random=self.random or Random(),
            logger=self.logger,
            initial_methods=WeightedSelector(self.initial_methods, "initial method"),
            initial_size=self.initial_size,
            initial_individuals=tuple(self.initial_individuals),
            population=self.population,
            mutations=WeightedSelector(mutations, "mutation"),
            termination=self._termination(),
            parallelism=self.parallelism,
            log_every=self.log_every,
        )

    def _termination(self) -> Termination:
        max_time, max_generations = self.max_time, self.max_generations
        if max_time is None and max_generations is None and self.cost_variation is None:
            max_time, max_generations = DEFAULT_MAX_TIME, DEFAULT_MAX_GENERATIONS

        terminations: List[Termination] = []
        if max_time is not None:
            terminations.append(MaxTime(max_time))
        if max_generations is not None:
            terminations.append(MaxGeneration(max_generations))
        if self.cost_variation is not None:
            sample, cv = self.cost_variation
            terminations.append(CostVariation(sample, cv))
        return CompositeTermination(terminations)
