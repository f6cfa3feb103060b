import numpy as np
import pytest

from evovrp.algorithms import Network, Point, create_clusters, get_max_curvature
from evovrp.mutation import estimate_epsilon
from evovrp.mutation.cluster_removal import create_job_clusters, get_average_costs

from conftest import make_problem


def line_neighborhood(items):
    def neighborhood(item, eps):
        return [other for other in items if other != item and abs(other - item) < eps]
    return neighborhood


def test_dbscan_finds_dense_groups():
    items = [0, 1, 2, 10, 11, 12, 50]
    clusters = create_clusters(items, 1.5, 3, line_neighborhood(items))

    assert sorted(sorted(c) for c in clusters) == [[0, 1, 2], [10, 11, 12]]


def test_dbscan_noise_becomes_border():
    items = [0, 1, 2]
    # 0 is visited first and has a single neighbor, so it starts as noise
    clusters = create_clusters(items, 1.5, 3, line_neighborhood(items))

    assert len(clusters) == 1
    assert sorted(clusters[0]) == [0, 1, 2]


def test_dbscan_clusters_are_disjoint_subsets():
    rng = np.random.default_rng(7)
    items = [float(v) for v in rng.uniform(0, 100, size=200)]
    for eps, min_points in ((0.5, 2), (1.0, 3), (3.0, 5)):
        clusters = create_clusters(items, eps, min_points, line_neighborhood(items))

        seen = [item for cluster in clusters for item in cluster]
        assert all(len(cluster) >= 1 for cluster in clusters)
        assert len(seen) == len(set(seen))
        assert set(seen) <= set(items)


def test_job_clusters_are_disjoint(problem, random):
    params = [(3, estimate_epsilon(problem, 2))]
    for _ in range(10):
        clusters = create_job_clusters(problem, random, params)
        jobs = [job for cluster in clusters for job in cluster]
        assert len(jobs) == len(set(jobs))
        assert set(jobs) <= set(problem.jobs)


def test_max_curvature():
    curve = [Point(0, 1), Point(1, 1), Point(2, 1), Point(3, 10)]
    assert get_max_curvature(curve) == 1.0
    assert get_max_curvature([]) == 0.0
    assert get_max_curvature([Point(0, 4)]) == 4.0


def test_estimate_epsilon_is_deterministic(problem):
    first = estimate_epsilon(problem, 2)
    assert first > 0
    assert estimate_epsilon(problem, 2) == first
    assert estimate_epsilon(make_problem(), 2) == first


def test_average_costs_use_nth_neighbor(problem):
    costs = get_average_costs(problem, 1)
    nearest = [problem.neighbors(0, job)[0][1] for job in problem.jobs]
    assert costs == pytest.approx(nearest)

    assert get_average_costs(problem, 100) == [0.0] * problem.n_jobs


def test_estimate_epsilon_without_neighbors():
    problem = make_problem(n_jobs=1)
    assert estimate_epsilon(problem, 2) == 0.0


def test_network_grows_and_bounds_storage():
    rng = np.random.default_rng(3)
    roots = [np.zeros(2) + rng.uniform(-0.01, 0.01, size=2) for _ in range(4)]
    network = Network(roots, key=lambda item: item, spread_factor=0.25, distribution_factor=0.25,
                      learning_rate=0.1, hit_memory=50, max_node_size=2)

    for i in range(200):
        network.store(i, rng.uniform(0, 10, size=2))

    assert network.size() > 4
    items = list(network.items())
    assert len(items) <= 2 * network.size()
    assert network.representatives()

    network.compact(0.1)
    assert network.size() >= 1
    assert len(list(network.items())) <= len(items)
