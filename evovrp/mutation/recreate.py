"""Recreate strategies: insert required jobs back into a solution."""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.errors import ConfigurationError
from ..core.problem import Job
from ..core.solution import (
    INFEASIBLE, InsertionResult, Solution, evaluate_position, find_insertions, unassigned_reason
)

logger = logging.getLogger(__name__)

# Upper bound of the job window used by gaps insertion
MAX_GAP_SIZE = 20


class Recreate(ABC):
    """
    Inserts every required (and previously unassigned) job it can.

    Never raises for infeasible jobs: they end up in `unassigned` with
    a reason code and are penalised by the goal.
    """

    def run(self, context, solution: Solution) -> Solution:
        solution.retry_unassigned()
        self.insert_all(context, solution)

        for job in list(solution.required):
            solution.mark_unassigned(job, unassigned_reason(solution, job))
        if solution.unassigned:
            logger.debug(f"{len(solution.unassigned)} jobs left unassigned")

        solution.finalize()
        return solution

    @abstractmethod
    def insert_all(self, context, solution: Solution):
        ...


def cheapest(results: List[InsertionResult]) -> Optional[InsertionResult]:
    """Lowest cost result; the first one wins ties."""
    best = None
    for result in results:
        if best is None or result.cost < best.cost:
            best = result
    return best


def _fail(solution: Solution, job: Job):
    solution.mark_unassigned(job, unassigned_reason(solution, job))


class CheapestInsertion(Recreate):
    """Each job, in order, goes to its globally cheapest feasible position."""

    def insert_all(self, context, solution: Solution):
        for job in list(solution.required):
            best = cheapest(find_insertions(solution, job))
            if best is None:
                _fail(solution, job)
            else:
                solution.insert(best)


class RegretInsertion(Recreate):
    """
    Regret-k insertion with k drawn from [start, end] per call.

    Repeatedly inserts the job with the largest gap between its best and
    k-th best route; jobs with fewer than k options go first.
    """

    def __init__(self, start: int = 2, end: int = 3):
        if start < 1 or start > end:
            raise ConfigurationError(f"Invalid regret range: [{start}, {end}]")
        self.start = start
        self.end = end

    def insert_all(self, context, solution: Solution):
        k = context.random.uniform_int(self.start, self.end)

        while solution.required:
            chosen, chosen_regret = None, -1.0
            for job in list(solution.required):
                results = sorted(find_insertions(solution, job), key=lambda r: r.cost)
                if not results:
                    _fail(solution, job)
                    continue

                regret = results[k - 1].cost - results[0].cost if len(results) >= k else math.inf
                if chosen is None or regret > chosen_regret:
                    chosen, chosen_regret = results[0], regret

            if chosen is not None:
                solution.insert(chosen)


class BlinkInsertion(Recreate):
    """
    Cheapest insertion with blinks: each position is skipped with a small
    probability and its cost is multiplied by random noise. Jobs are sorted
    by a randomly chosen rule first.
    """

    def __init__(self, blink_ratio: float = 0.01, noise: float = 0.05):
        if not 0.0 <= blink_ratio < 1.0:
            raise ConfigurationError(f"blink_ratio must be in [0, 1): {blink_ratio}")
        if not 0.0 <= noise < 1.0:
            raise ConfigurationError(f"noise must be in [0, 1): {noise}")
        self.blink_ratio = blink_ratio
        self.noise = noise

    def insert_all(self, context, solution: Solution):
        random = context.random
        jobs = list(solution.required)
        self._sort(random, jobs)

        def cost_fn(cost: float) -> float:
            return cost * random.uniform_real(1.0 - self.noise, 1.0 + self.noise)

        def skip_fn() -> bool:
            return random.is_hit(self.blink_ratio)

        for job in jobs:
            best = cheapest(find_insertions(solution, job, cost_fn, skip_fn))
            if best is None:
                # every feasible position may have blinked
                best = cheapest(find_insertions(solution, job))
            if best is None:
                _fail(solution, job)
            else:
                solution.insert(best)

    @staticmethod
    def _sort(random, jobs: List[Job]):
        rule = random.uniform_int(0, 3)
        if rule == 0:
            random.shuffle(jobs)
        elif rule == 1:
            jobs.sort(key=lambda j: j.demand, reverse=True)
        elif rule == 2:
            jobs.sort(key=lambda j: j.due_date - j.ready_time)
        else:
            jobs.sort(key=lambda j: j.ready_time)


class GapsInsertion(Recreate):
    """
    Works on random windows ("gaps") of at least `min` required jobs:
    only jobs inside the current window are evaluated, the cheapest one
    is inserted, and the next window is drawn. Once every job has gone
    through a window without success it is unassigned.
    """

    def __init__(self, min: int = 2):
        if min < 1:
            raise ConfigurationError(f"Gap size must be positive: {min}")
        self.min = min

    def insert_all(self, context, solution: Solution):
        random = context.random

        while solution.required:
            gap = random.uniform_int(self.min, max(self.min, MAX_GAP_SIZE))
            random.shuffle(solution.required)
            window = solution.required[:gap]

            best = None
            for job in window:
                result = cheapest(find_insertions(solution, job))
                if result is None:
                    # routes only get tighter, so this job stays infeasible
                    _fail(solution, job)
                elif best is None or result.cost < best.cost:
                    best = result

            if best is not None:
                solution.insert(best)


class NearestNeighborInsertion(Recreate):
    """
    Places each job right before or after its nearest assigned neighbor.
    Falls back to cheapest insertion when no adjacent slot is feasible.
    """

    def insert_all(self, context, solution: Solution):
        problem = solution.problem
        profile = context.random.choice(problem.fleet.profiles)

        for job in list(solution.required):
            index = solution.route_index()
            best = None
            for neighbor, _ in problem.neighbors(profile, job):
                route_idx = index.get(neighbor)
                if route_idx is None:
                    continue

                route = solution.routes[route_idx]
                position = route.jobs.index(neighbor)
                for pos in (position, position + 1):
                    cost = evaluate_position(problem, route, job, pos)
                    if cost != INFEASIBLE and (best is None or cost < best.cost):
                        best = InsertionResult(job, cost, route_idx, pos, route.vehicle)
                if best is not None:
                    break

            if best is None:
                best = cheapest(find_insertions(solution, job))
            if best is None:
                _fail(solution, job)
            else:
                solution.insert(best)
