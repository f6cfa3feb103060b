import pytest

from evovrp.core import ConfigurationError, Random, verify_jobs
from evovrp.mutation import (
    CheapestInsertion, CompositeMutation, CompositeRecreate, CompositeRuin, InterRouteBest,
    InterRouteRandom, IntraRouteRandom, LocalSearch, Mutation, RandomJobRemoval, RegretInsertion,
    RemovalLimit, RuinAndRecreate, WeightedMutation, WeightedSelector, create_default_local_search,
    create_default_mutation
)
from evovrp.mutation.ruin import Ruin


class Counting(Mutation):
    def __init__(self):
        self.calls = 0

    def mutate(self, context, individual):
        self.calls += 1
        return individual.copy()


class Recording(Ruin):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def run(self, context, solution):
        self.log.append(self.name)
        return solution


def test_weighted_selector_honours_zero_weight():
    selector = WeightedSelector([("never", 0.0), ("always", 1.0)])
    random = Random(1)
    assert {selector.select(random) for _ in range(50)} == {"always"}


@pytest.mark.parametrize("items", [[], [("a", -1.0)], [("a", 0.0), ("b", 0.0)]])
def test_weighted_selector_rejects_invalid(items):
    with pytest.raises(ConfigurationError):
        WeightedSelector(items)


def test_ruin_and_recreate_keeps_parent(context, solution):
    parent_routes = [r.jobs[:] for r in solution.routes]
    mutation = RuinAndRecreate(RandomJobRemoval(RemovalLimit(4, 4, 0.0)), CheapestInsertion())

    child = mutation.mutate(context, solution)

    assert child is not solution
    assert [r.jobs for r in solution.routes] == parent_routes
    verify_jobs(child)
    assert child.fitness[0] == 0


def test_composite_ruin_applies_hit_methods_in_order(context, solution):
    log = []
    ruin = CompositeRuin([
        ([(Recording("first", log), 1.0), (Recording("skipped", log), 0.0), (Recording("last", log), 1.0)], 1.0),
    ])
    ruin.run(context, solution.copy())
    assert log == ["first", "last"]


def test_composite_ruin_rejects_empty_group():
    with pytest.raises(ConfigurationError):
        CompositeRuin([([], 1.0)])


def test_composite_recreate_selects_one(context, solution):
    recreate = CompositeRecreate([(CheapestInsertion(), 1.0), (RegretInsertion(), 1.0)])
    candidate = RandomJobRemoval(RemovalLimit(5, 5, 0.0)).run(context, solution.copy())

    candidate = recreate.run(context, candidate)
    verify_jobs(candidate)
    assert candidate.required == []


def test_composite_mutation_runs_hits_or_first(context, solution):
    first, second = Counting(), Counting()

    CompositeMutation([(first, 1.0), (second, 1.0)]).mutate(context, solution)
    assert (first.calls, second.calls) == (1, 1)

    CompositeMutation([(first, 0.0), (second, 0.0)]).mutate(context, solution)
    assert (first.calls, second.calls) == (2, 1)

    with pytest.raises(ConfigurationError):
        CompositeMutation([])


def test_weighted_mutation_runs_exactly_one(context, solution):
    first, second = Counting(), Counting()
    mutation = WeightedMutation([(first, 1.0), (second, 3.0)])
    for _ in range(40):
        mutation.mutate(context, solution)

    assert first.calls + second.calls == 40
    assert second.calls > 0


@pytest.mark.parametrize("operator", [InterRouteBest(), InterRouteRandom(), IntraRouteRandom()],
                         ids=lambda op: type(op).__name__)
def test_local_operators_keep_jobs(context, solution, operator):
    for _ in range(10):
        moved = operator.explore(context, solution)
        if moved is not None:
            verify_jobs(moved)
            assert all(route.schedule(solution.problem).feasible for route in moved.routes)
    verify_jobs(solution)


def test_local_search_never_worsens(context, solution):
    search = LocalSearch([(InterRouteBest(), 1.0), (InterRouteRandom(), 1.0), (IntraRouteRandom(), 1.0)],
                         times=(3, 5))
    current = solution
    for _ in range(10):
        improved = search.mutate(context, current)
        verify_jobs(improved)
        assert improved.fitness <= current.fitness
        current = improved


def test_local_search_rejects_bad_range():
    with pytest.raises(ConfigurationError):
        LocalSearch([(InterRouteBest(), 1.0)], times=(3, 1))


def test_default_mutation(problem, context, solution):
    mutation = create_default_mutation(problem)
    for _ in range(10):
        child = mutation.mutate(context, solution)
        verify_jobs(child)

    assert create_default_local_search().times == (1, 2)
