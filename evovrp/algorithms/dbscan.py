"""Density-based clustering (DBSCAN) over an arbitrary neighborhood function."""

from typing import Callable, Dict, Hashable, Iterable, List, Sequence, TypeVar

T = TypeVar('T', bound=Hashable)

# (item, epsilon) -> items within epsilon, item itself excluded
NeighborhoodFn = Callable[[T, float], Iterable[T]]

Cluster = List[T]

_NOISE = -1


def create_clusters(items: Sequence[T], epsilon: float, min_points: int,
                    neighborhood_fn: NeighborhoodFn) -> List[Cluster]:
    """
    Group items into disjoint clusters.

    A core item has at least `min_points - 1` neighbors within `epsilon`.
    Clusters grow from core items; border items join the first cluster
    that reaches them. Unreachable items are left out.
    """
    labels: Dict[T, int] = {}
    clusters: List[Cluster] = []

    for item in items:
        if item in labels:
            continue

        neighbors = list(neighborhood_fn(item, epsilon))
        if len(neighbors) < min_points - 1:
            labels[item] = _NOISE
            continue

        cluster_id = len(clusters)
        cluster = [item]
        labels[item] = cluster_id

        queue = neighbors
        idx = 0
        while idx < len(queue):
            other = queue[idx]
            idx += 1

            label = labels.get(other)
            if label == _NOISE:
                labels[other] = cluster_id
                cluster.append(other)
                continue
            if label is not None:
                continue

            labels[other] = cluster_id
            cluster.append(other)

            other_neighbors = list(neighborhood_fn(other, epsilon))
            if len(other_neighbors) >= min_points - 1:
                queue.extend(other_neighbors)

        clusters.append(cluster)

    return clusters
