"""Evolutionary ruin and recreate search loop."""

import threading
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Tuple, Union

from ..core.errors import InfeasibilityWarning
from ..core.problem import Problem
from ..core.randomness import Random
from ..core.solution import Solution, verify_jobs
from ..mutation import WeightedSelector
from ..population import ElitismConfig, RosomaxaConfig
from .context import RefinementContext, Statistics
from .termination import Termination

Logger = Callable[[str], None]
PopulationConfig = Union[ElitismConfig, RosomaxaConfig]


@dataclass(frozen=True)
class SolverConfig:
    """Everything a solver run needs. Built and validated by `Builder`."""
    problem: Problem
    random: Random
    logger: Logger
    initial_methods: WeightedSelector
    initial_size: int
    initial_individuals: Tuple[Solution, ...]
    population: PopulationConfig
    mutations: WeightedSelector
    termination: Termination
    parallelism: int
    log_every: int


class Solver:
    """
    Runs generations of select -> mutate -> admit until termination.

    Offspring of one generation are mutated in a worker pool against the
    same population snapshot, then admitted one by one from the loop
    thread. `stop()` takes effect at the next generation boundary.
    """

    def __init__(self, config: SolverConfig):
        self.config = config
        self._stop = threading.Event()

    def stop(self):
        self._stop.set()

    def solve(self) -> Tuple[Solution, Statistics]:
        """Returns the best individual found and run statistics."""
        config = self.config
        log = config.logger
        population = config.population.create(config.problem, config.random)
        context = RefinementContext(config.problem, population, config.random)

        self._create_initial_population(context)
        best = population.best()
        log(f"Initial population: {population.size()} individuals, best fitness {best.fitness}")

        with ThreadPoolExecutor(max_workers=config.parallelism) as executor:
            while True:
                parents = population.select()
                variants = [config.mutations.select(config.random) for _ in parents]
                offspring = list(executor.map(
                    lambda pair: pair[0].mutate(context, pair[1]), zip(variants, parents)))

                for child in offspring:
                    verify_jobs(child)
                improved = population.add_all(offspring)
                context.on_generation(improved)
                self._log_generation(context, improved)

                if self._stop.is_set() or config.termination.is_termination(context):
                    break

        best = population.best()
        stats = context.statistics
        log(f"Finished after {stats.generation} generations in {stats.elapsed:.2f}s, "
            f"best fitness {best.fitness}")

        if best.unassigned:
            warnings.warn(f"{len(best.unassigned)} jobs could not be assigned", InfeasibilityWarning)

        return best, stats

    def _create_initial_population(self, context: RefinementContext):
        config = self.config
        individuals: List[Solution] = [ind.copy() for ind in config.initial_individuals]

        for _ in range(max(0, config.initial_size - len(individuals))):
            method = config.initial_methods.select(config.random)
            individuals.append(method.run(context, Solution.empty(config.problem)))

        for individual in individuals:
            verify_jobs(individual)
        context.population.add_all(individuals)

    def _log_generation(self, context: RefinementContext, improved: bool):
        stats = context.statistics
        if not improved and stats.generation % self.config.log_every != 0:
            return

        best = context.population.best()
        self.config.logger(
            f"Generation {stats.generation} ({stats.elapsed:.2f}s): best fitness {best.fitness}, "
            f"improvement ratio {stats.improvement_ratio:.3f}"
            + (" *" if improved else ""))
