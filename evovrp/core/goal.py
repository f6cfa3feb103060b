"""Goal model: how candidate solutions are ranked."""

from typing import Tuple

Fitness = Tuple[float, float, float]


class Goal:
    """
    Lexicographic objective: fewer unassigned jobs, then fewer routes,
    then lower total cost.
    """

    def __init__(self, minimize_routes: bool = True):
        self.minimize_routes = minimize_routes

    def fitness(self, solution) -> Fitness:
        routes = [r for r in solution.routes if r.jobs]
        unassigned = len(solution.unassigned) + len(solution.required)
        cost = sum(r.schedule(solution.problem).cost for r in routes)
        return (float(unassigned), float(len(routes)) if self.minimize_routes else 0.0, cost)
