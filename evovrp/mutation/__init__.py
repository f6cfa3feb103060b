"""Mutation framework: ruin, recreate, local search and their combinations."""

from ..core.problem import Problem
from .selector import WeightedSelector
from .ruin import (
    Ruin, RemovalLimit, AdjustedStringRemoval, NeighbourRemoval,
    RandomJobRemoval, RandomRouteRemoval, WorstJobRemoval
)
from .cluster_removal import ClusterRemoval, estimate_epsilon
from .recreate import (
    Recreate, CheapestInsertion, RegretInsertion, BlinkInsertion,
    GapsInsertion, NearestNeighborInsertion
)
from .composite import (
    Mutation, RuinGroup, CompositeRuin, CompositeRecreate,
    RuinAndRecreate, CompositeMutation, WeightedMutation
)
from .local_search import (
    LocalOperator, LocalSearch, InterRouteBest, InterRouteRandom,
    IntraRouteRandom, create_default_local_search
)


def create_default_ruin(problem: Problem) -> CompositeRuin:
    """Ruin groups used when nothing is configured."""
    small = RemovalLimit(1, 8, 0.2)
    groups = [
        ([(AdjustedStringRemoval(), 1.0), (RandomJobRemoval(small), 0.05)], 100),
        ([(NeighbourRemoval(small), 1.0), (RandomJobRemoval(small), 0.05)], 10),
        ([(WorstJobRemoval(4, small), 1.0), (AdjustedStringRemoval(), 0.1)], 10),
        ([(RandomRouteRemoval(1, 4, 0.1), 1.0)], 2),
        ([(RandomJobRemoval(RemovalLimit(1, 12, 0.3)), 1.0)], 2),
    ]
    if problem.n_jobs >= 10:
        groups.append(([(ClusterRemoval(problem, (3, 9), small), 1.0)], 5))
    return CompositeRuin(groups)


def create_default_recreate() -> CompositeRecreate:
    return CompositeRecreate([
        (CheapestInsertion(), 20),
        (RegretInsertion(2, 3), 10),
        (BlinkInsertion(), 50),
        (GapsInsertion(2), 5),
        (NearestNeighborInsertion(), 5),
    ])


def create_default_mutation(problem: Problem) -> Mutation:
    """Ruin and recreate, occasionally followed by local search."""
    return CompositeMutation([
        (RuinAndRecreate(create_default_ruin(problem), create_default_recreate()), 1.0),
        (create_default_local_search(), 0.05),
    ])


__all__ = [
    'WeightedSelector', 'Ruin', 'RemovalLimit', 'AdjustedStringRemoval', 'NeighbourRemoval',
    'RandomJobRemoval', 'RandomRouteRemoval', 'WorstJobRemoval', 'ClusterRemoval', 'estimate_epsilon',
    'Recreate', 'CheapestInsertion', 'RegretInsertion', 'BlinkInsertion', 'GapsInsertion',
    'NearestNeighborInsertion', 'Mutation', 'RuinGroup', 'CompositeRuin', 'CompositeRecreate',
    'RuinAndRecreate', 'CompositeMutation', 'WeightedMutation', 'LocalOperator', 'LocalSearch',
    'InterRouteBest', 'InterRouteRandom', 'IntraRouteRandom', 'create_default_local_search',
    'create_default_ruin', 'create_default_recreate', 'create_default_mutation'
]
