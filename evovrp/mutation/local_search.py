"""Local search operators applied on top of ruin and recreate."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ..core.errors import ConfigurationError
from ..core.solution import INFEASIBLE, InsertionResult, Solution, best_in_route, evaluate_position
from .composite import Mutation
from .selector import WeightedSelector


class LocalOperator(ABC):
    """Explores one move; returns a modified copy or None when no move applies."""

    @abstractmethod
    def explore(self, context, solution: Solution) -> Optional[Solution]:
        ...


def _pick_job(context, solution: Solution):
    candidates = [(idx, job) for idx, route in enumerate(solution.routes)
                  for job in route.jobs if solution.is_removable(job)]
    if not candidates:
        return None
    return context.random.choice(candidates)


def _relocate(solution: Solution, route_idx: int, job, target_idx: int, position: int,
              cost: float) -> Solution:
    """Copy of `solution` with `job` moved from `route_idx` to `target_idx`."""
    result = solution.copy()
    result.remove_jobs([job])
    result.insert(InsertionResult(job, cost, target_idx, position, result.routes[target_idx].vehicle))
    result.finalize()
    return result


class InterRouteBest(LocalOperator):
    """Moves a random job to the best position of another route."""

    def explore(self, context, solution: Solution) -> Optional[Solution]:
        picked = _pick_job(context, solution)
        if picked is None:
            return None
        route_idx, job = picked

        best: Tuple[float, int, int] = (INFEASIBLE, -1, -1)
        for idx, route in enumerate(solution.routes):
            if idx == route_idx:
                continue
            cost, pos = best_in_route(solution.problem, route, job)
            if pos >= 0 and cost < best[0]:
                best = (cost, idx, pos)

        if best[1] < 0:
            return None
        return _relocate(solution, route_idx, job, best[1], best[2], best[0])


class InterRouteRandom(LocalOperator):
    """Moves a random job to a random feasible position of another random route."""

    def explore(self, context, solution: Solution) -> Optional[Solution]:
        picked = _pick_job(context, solution)
        if picked is None or len(solution.routes) < 2:
            return None
        route_idx, job = picked

        target_idx = context.random.choice([i for i in range(len(solution.routes)) if i != route_idx])
        return _random_move(context, solution, route_idx, job, target_idx)


class IntraRouteRandom(LocalOperator):
    """Moves a random job to a random feasible position in its own route."""

    def explore(self, context, solution: Solution) -> Optional[Solution]:
        picked = _pick_job(context, solution)
        if picked is None:
            return None
        route_idx, job = picked
        return _random_move(context, solution, route_idx, job, route_idx)


def _random_move(context, solution: Solution, route_idx: int, job, target_idx: int) -> Optional[Solution]:
    work = solution.copy()
    work.remove_jobs([job])
    route = work.routes[target_idx]

    positions = []
    for pos in range(len(route.jobs) + 1):
        cost = evaluate_position(work.problem, route, job, pos)
        if cost != INFEASIBLE:
            positions.append((pos, cost))
    if not positions:
        return None

    pos, cost = context.random.choice(positions)
    work.insert(InsertionResult(job, cost, target_idx, pos, route.vehicle))
    work.finalize()
    return work


class LocalSearch(Mutation):
    """
    Applies between `times[0]` and `times[1]` operator moves, each picked by
    weight. A move is kept only if it does not worsen fitness.
    """

    def __init__(self, operators: Sequence[Tuple[LocalOperator, float]], times: Tuple[int, int] = (1, 2)):
        if times[0] < 0 or times[0] > times[1]:
            raise ConfigurationError(f"Invalid local search repetition range: {times}")
        self.selector = WeightedSelector(operators, "local search operator")
        self.times = times

    def mutate(self, context, individual: Solution) -> Solution:
        current = individual.copy()
        for _ in range(context.random.uniform_int(*self.times)):
            operator = self.selector.select(context.random)
            candidate = operator.explore(context, current)
            if candidate is not None and candidate.fitness <= current.fitness:
                current = candidate
        return current


def create_default_local_search() -> LocalSearch:
    operators: List[Tuple[LocalOperator, float]] = [
        (InterRouteBest(), 100),
        (InterRouteRandom(), 30),
        (IntraRouteRandom(), 30),
    ]
    return LocalSearch(operators, (1, 2))
