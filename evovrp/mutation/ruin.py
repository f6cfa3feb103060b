"""Ruin strategies: remove part of the assigned jobs from a solution."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Set, Tuple

from ..core.errors import ConfigurationError
from ..core.problem import Job
from ..core.solution import Solution


@dataclass(frozen=True)
class RemovalLimit:
    """How many jobs (or routes) one ruin call removes."""
    min: int
    max: int
    threshold: float

    def __post_init__(self):
        if self.min < 0 or self.max < 0:
            raise ConfigurationError(f"Removal limits must be non-negative: {self}")
        if self.min > self.max:
            raise ConfigurationError(f"Removal min {self.min} exceeds max {self.max}")
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"Removal threshold must be in [0, 1]: {self.threshold}")

    def count(self, size: int) -> int:
        """clamp(round(threshold * size), min, max), never above `size`."""
        target = int(math.floor(self.threshold * size + 0.5))
        target = max(self.min, min(self.max, target))
        return min(target, size)


class Ruin(ABC):
    """Moves a strategy-chosen subset of assigned jobs to `required`."""

    @abstractmethod
    def run(self, context, solution: Solution) -> Solution:
        ...


# =============================================================================
# RANDOM REMOVALS
# =============================================================================

class RandomJobRemoval(Ruin):
    """Uniformly samples jobs without replacement."""

    def __init__(self, limit: RemovalLimit):
        self.limit = limit

    def run(self, context, solution: Solution) -> Solution:
        jobs = solution.removable_jobs()
        count = self.limit.count(len(jobs))
        if count > 0:
            solution.remove_jobs(context.random.sample(jobs, count))
        return solution


class RandomRouteRemoval(Ruin):
    """Empties randomly chosen routes; the limit counts routes, not jobs."""

    def __init__(self, min: int, max: int, threshold: float):
        self.limit = RemovalLimit(min, max, threshold)

    def run(self, context, solution: Solution) -> Solution:
        routes = [r for r in solution.routes if any(solution.is_removable(j) for j in r.jobs)]
        count = self.limit.count(len(routes))

        for route in context.random.sample(routes, count):
            solution.remove_jobs(list(route.jobs))
        return solution


# =============================================================================
# PROXIMITY REMOVALS
# =============================================================================

class NeighbourRemoval(Ruin):
    """Removes a random seed job and its closest assigned neighbors."""

    def __init__(self, limit: RemovalLimit):
        self.limit = limit

    def run(self, context, solution: Solution) -> Solution:
        jobs = solution.removable_jobs()
        count = self.limit.count(len(jobs))
        if count == 0:
            return solution

        index = solution.route_index()
        seed = context.random.choice(jobs)
        profile = solution.routes[index[seed]].vehicle.profile

        selected = [seed]
        for neighbor, _ in solution.problem.neighbors(profile, seed):
            if len(selected) >= count:
                break
            if neighbor in index and solution.is_removable(neighbor):
                selected.append(neighbor)

        solution.remove_jobs(selected)
        return solution


class AdjustedStringRemoval(Ruin):
    """
    SISR string removal (Christiaens & Vanden Berghe, 2020).

    Removes up to `ks` strings from distinct routes, walking the seed's
    neighborhood. A string either is a contiguous block or a block with a
    preserved sub-string whose length grows while a draw stays above `alpha`.
    """

    def __init__(self, lmax: int = 10, cavg: int = 10, alpha: float = 0.01):
        if lmax < 1 or cavg < 1:
            raise ConfigurationError("lmax and cavg must be positive")
        if not 0.0 <= alpha <= 1.0:
            raise ConfigurationError(f"alpha must be in [0, 1]: {alpha}")
        self.lmax = lmax
        self.cavg = cavg
        self.alpha = alpha

    def run(self, context, solution: Solution) -> Solution:
        random = context.random
        routes = [r for r in solution.routes if r.jobs]
        if not routes:
            return solution

        avg_tour = sum(len(r.jobs) for r in routes) / len(routes)
        ls_max = min(float(self.lmax), avg_tour)
        ks_max = 4.0 * self.cavg / (1.0 + ls_max) - 1.0
        ks = max(1, int(random.uniform_real(1.0, ks_max + 1.0)))

        index = solution.route_index()
        seed = random.choice(list(index))
        profile = solution.routes[index[seed]].vehicle.profile

        ruined: Set[int] = set()
        removed: List[Job] = []
        candidates = [seed] + [job for job, _ in solution.problem.neighbors(profile, seed)]
        for job in candidates:
            if len(ruined) >= ks:
                break
            route_idx = index.get(job)
            if route_idx is None or route_idx in ruined:
                continue

            route_jobs = solution.routes[route_idx].jobs
            size = len(route_jobs)
            l_max = min(float(size), ls_max)
            length = min(size, max(1, int(random.uniform_real(1.0, l_max + 1.0))))
            position = route_jobs.index(job)

            if length == size or random.is_head_not_tails():
                start, end = self._string(random, position, length, size)
                removed.extend(route_jobs[start:end])
            else:
                removed.extend(self._split_string(random, route_jobs, position, length))

            ruined.add(route_idx)

        solution.remove_jobs(removed)
        return solution

    @staticmethod
    def _string(random, position: int, length: int, size: int) -> Tuple[int, int]:
        """Random window of `length` containing `position`."""
        low = max(0, position - length + 1)
        high = min(position, size - length)
        start = random.uniform_int(low, high)
        return start, start + length

    def _split_string(self, random, route_jobs: List[Job], position: int, length: int) -> List[Job]:
        size = len(route_jobs)
        preserved = 1
        while preserved < size - length and random.uniform_real(0.0, 1.0) >= self.alpha:
            preserved += 1

        start, end = self._string(random, position, length + preserved, size)
        keep_from = start + random.uniform_int(0, length)
        return [job for i, job in enumerate(route_jobs[start:end], start)
                if not keep_from <= i < keep_from + preserved]


# =============================================================================
# COST-DRIVEN REMOVAL
# =============================================================================

class WorstJobRemoval(Ruin):
    """
    Removes jobs whose removal saves the most route cost, after skipping
    the `skip` most expensive ones.
    """

    def __init__(self, skip: int, limit: RemovalLimit):
        if skip < 0:
            raise ConfigurationError(f"skip must be non-negative: {skip}")
        self.skip = skip
        self.limit = limit

    def run(self, context, solution: Solution) -> Solution:
        savings = self._savings(solution)
        count = self.limit.count(len(savings))
        if count == 0:
            return solution

        ranked = [job for job, _ in sorted(savings, key=lambda entry: entry[1], reverse=True)]
        ordered = ranked[self.skip:] + ranked[:self.skip]
        solution.remove_jobs(ordered[:count])
        return solution

    @staticmethod
    def _savings(solution: Solution) -> List[Tuple[Job, float]]:
        problem = solution.problem
        transport = problem.transport
        result = []

        for route in solution.routes:
            vehicle = route.vehicle
            locations = route.schedule(problem).locations
            for i, job in enumerate(route.jobs, 1):
                if not solution.is_removable(job):
                    continue
                prev_loc, next_loc = locations[i - 1], locations[i + 1]
                profile = vehicle.profile
                saving = vehicle.per_distance * (
                    transport.distance(profile, prev_loc, job.location)
                    + transport.distance(profile, job.location, next_loc)
                    - transport.distance(profile, prev_loc, next_loc))
                saving += vehicle.per_time * (
                    transport.duration(profile, prev_loc, job.location)
                    + transport.duration(profile, job.location, next_loc)
                    - transport.duration(profile, prev_loc, next_loc))
                if len(route.jobs) == 1:
                    saving += vehicle.fixed_cost
                result.append((job, saving))

        return result
