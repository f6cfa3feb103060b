"""Shared fixtures: a small deterministic problem and helpers to build solutions."""

import math

import pytest

from evovrp.core import Fleet, Job, Problem, Random, Solution, TransportCost, Vehicle
from evovrp.mutation import CheapestInsertion
from evovrp.population import ElitismConfig
from evovrp.solver import RefinementContext

SOLOMON_TEXT = """TINY01

VEHICLE
NUMBER     CAPACITY
  3         50

CUSTOMER
CUST NO.  XCOORD.   YCOORD.    DEMAND   READY TIME  DUE DATE   SERVICE   TIME

    0      40         50          0          0       1000          0
    1      45         68         10        100        300         10
    2      45         70         20          0        900         10
    3      42         66         10          0        900         10
    4      42         68         10        500        700         10
    5      35         30         20          0        900         10
"""


def make_problem(n_jobs: int = 20, n_vehicles: int = 3, capacity: float = 100.0,
                 demand: float = 10.0, locks=None) -> Problem:
    """Jobs on a ring of two radii around a central depot; wide time windows."""
    coords = [(50.0, 50.0)]
    for i in range(n_jobs):
        angle = 2 * math.pi * i / n_jobs
        radius = 20.0 if i % 2 == 0 else 35.0
        coords.append((50.0 + radius * math.cos(angle), 50.0 + radius * math.sin(angle)))

    jobs = [Job(id=f"job{i + 1}", location=i + 1, demand=demand, ready_time=0.0,
                due_date=10000.0, service_time=5.0)
            for i in range(n_jobs)]
    vehicles = [Vehicle(id=f"v{i + 1}", capacity=capacity, shift_end=10000.0)
                for i in range(n_vehicles)]

    return Problem(jobs=jobs, fleet=Fleet(vehicles), transport=TransportCost.from_coordinates(coords),
                   locks=locks or {}, name="ring")


@pytest.fixture
def problem():
    return make_problem()


@pytest.fixture
def random():
    return Random(42)


@pytest.fixture
def context(problem, random):
    population = ElitismConfig().create(problem, random)
    return RefinementContext(problem, population, random)


@pytest.fixture
def solution(problem, context):
    """All 20 jobs assigned by cheapest insertion."""
    return CheapestInsertion().run(context, Solution.empty(problem))


@pytest.fixture
def solomon_text():
    return SOLOMON_TEXT
