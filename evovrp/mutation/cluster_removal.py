"""Ruin strategy removing spatial job clusters found with DBSCAN."""

import logging
from typing import List, Tuple

from ..algorithms.dbscan import create_clusters
from ..algorithms.geometry import Point, get_max_curvature
from ..core.errors import ConfigurationError
from ..core.problem import Job, Problem
from ..core.randomness import Random
from ..core.solution import Solution
from .ruin import RemovalLimit, Ruin

logger = logging.getLogger(__name__)

ORDERINGS = ("shuffled", "smallest")
OVERSHOOT_POLICIES = ("truncate", "skip")


class ClusterRemoval(Ruin):
    """
    Removes whole job clusters.

    For every `min_pts` in the cluster size range an epsilon is estimated
    once from the problem. Each call picks one pair (epsilon jittered by
    ±10%) and one routing profile, clusters all jobs and removes clusters
    until the removal limit is reached. A cluster that would overshoot the
    limit is truncated (`overshoot="truncate"`) or passed over (`"skip"`).
    """

    def __init__(self, problem: Problem, cluster_size: Tuple[int, int], limit: RemovalLimit,
                 ordering: str = "shuffled", overshoot: str = "truncate"):
        if ordering not in ORDERINGS:
            raise ConfigurationError(f"Unknown cluster ordering: {ordering}")
        if overshoot not in OVERSHOOT_POLICIES:
            raise ConfigurationError(f"Unknown overshoot policy: {overshoot}")
        problem.validate()

        cmin, cmax = cluster_size
        low = max(cmin, 3)
        high = max(min(cmax, problem.n_jobs), low + 1)

        self.params = [(min_pts, estimate_epsilon(problem, min_pts - 1)) for min_pts in range(low, high)]
        self.limit = limit
        self.ordering = ordering
        self.overshoot = overshoot

    def run(self, context, solution: Solution) -> Solution:
        random = context.random
        target = self.limit.count(len(solution.removable_jobs()))
        if target == 0:
            return solution

        clusters = create_job_clusters(solution.problem, random, self.params)
        random.shuffle(clusters)
        if self.ordering == "smallest":
            clusters.sort(key=len)

        index = solution.route_index()
        selected: List[Job] = []
        for cluster in clusters:
            if len(selected) >= target:
                break
            members = [job for job in cluster if job in index and solution.is_removable(job)]
            if not members:
                continue

            left = target - len(selected)
            if len(members) > left:
                if self.overshoot == "skip":
                    continue
                members = members[:left]
            selected.extend(members)

        logger.debug(f"Cluster removal: {len(clusters)} clusters, {len(selected)} jobs removed")
        solution.remove_jobs(selected)
        return solution


def create_job_clusters(problem: Problem, random: Random,
                        params: List[Tuple[int, float]]) -> List[List[Job]]:
    """Clusters all jobs with a random profile and a jittered parameter pair."""
    profile = random.choice(problem.fleet.profiles)
    min_points, epsilon = random.choice(params)
    epsilon = random.uniform_real(epsilon * 0.9, epsilon * 1.1)

    def neighborhood(job: Job, eps: float):
        for other, cost in problem.neighbors(profile, job):
            if cost >= eps:
                break
            yield other

    return create_clusters(problem.jobs, epsilon, min_points, neighborhood)


def estimate_epsilon(problem: Problem, nth_neighbor: int) -> float:
    """
    Knee of the sorted k-distance curve: for every job the cost to its
    `nth_neighbor`-th nearest neighbor, averaged over profiles.
    """
    costs = sorted(get_average_costs(problem, nth_neighbor))
    curve = [Point(float(idx), cost) for idx, cost in enumerate(costs)]
    return get_max_curvature(curve)


def get_average_costs(problem: Problem, nth_neighbor: int) -> List[float]:
    """Per job cost to its n-th nearest neighbor (1-based), 0 if there is none."""
    profiles = problem.fleet.profiles
    costs = [0.0] * problem.n_jobs

    for profile in profiles:
        for idx, job in enumerate(problem.jobs):
            neighbors = problem.neighbors(profile, job)
            # 1-based: nth_neighbor=1 reads the closest other job, not the one after it
            if 0 < nth_neighbor <= len(neighbors):
                costs[idx] += neighbors[nth_neighbor - 1][1]

    return [cost / len(profiles) for cost in costs]
