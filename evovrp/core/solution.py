"""Candidate solutions: routes, schedules and insertion evaluation."""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import RuntimeInvariantViolation
from .goal import Fitness
from .problem import Job, Problem, Vehicle

INFEASIBLE = math.inf

# Unassigned reason codes
REASON_CAPACITY = "capacity"
REASON_TIME_WINDOW = "time window"
REASON_LOCK = "vehicle lock"
REASON_NO_VEHICLE = "no vehicle"


@dataclass
class RouteSchedule:
    """Timing and cost of one route. Stop 0 is the start, the last stop is the end."""
    locations: List[Optional[int]]
    departures: List[float]
    latest: List[float]
    ready: List[float]
    load: float
    distance: float
    duration: float
    cost: float
    feasible: bool


@dataclass
class Route:
    """Jobs served by one vehicle, in visiting order."""
    vehicle: Vehicle
    jobs: List[Job] = field(default_factory=list)

    def __post_init__(self):
        self._schedule: Optional[RouteSchedule] = None

    def copy(self) -> 'Route':
        return Route(self.vehicle, self.jobs[:])

    def insert(self, position: int, job: Job):
        self.jobs.insert(position, job)
        self._schedule = None

    def remove(self, job: Job):
        self.jobs.remove(job)
        self._schedule = None

    def schedule(self, problem: Problem) -> RouteSchedule:
        if self._schedule is None:
            self._schedule = schedule_route(problem, self.vehicle, self.jobs)
        return self._schedule


def schedule_route(problem: Problem, vehicle: Vehicle, jobs: List[Job]) -> RouteSchedule:
    """Forward pass for departures, backward pass for latest service starts."""
    transport = problem.transport
    profile = vehicle.profile

    locations = [vehicle.start_location] + [j.location for j in jobs] + [vehicle.end_location]
    ready = [vehicle.shift_start] + [j.ready_time for j in jobs] + [vehicle.shift_start]
    due = [vehicle.shift_end] + [j.due_date for j in jobs] + [vehicle.shift_end]
    service = [0.0] + [j.service_time for j in jobs] + [0.0]

    feasible = True
    load = sum(j.demand for j in jobs)
    if load > vehicle.capacity:
        feasible = False

    departures = [vehicle.shift_start]
    distance = 0.0
    duration = 0.0
    for i in range(1, len(locations)):
        travel = transport.duration(profile, locations[i - 1], locations[i])
        distance += transport.distance(profile, locations[i - 1], locations[i])
        duration += travel

        start = max(departures[i - 1] + travel, ready[i])
        if start > due[i]:
            feasible = False
        departures.append(start + service[i])

    latest = [0.0] * len(locations)
    latest[-1] = vehicle.shift_end
    for i in range(len(locations) - 2, -1, -1):
        travel = transport.duration(profile, locations[i], locations[i + 1])
        latest[i] = min(due[i], latest[i + 1] - travel - service[i])

    cost = vehicle.per_distance * distance + vehicle.per_time * duration
    if jobs:
        cost += vehicle.fixed_cost

    return RouteSchedule(locations=locations, departures=departures, latest=latest,
                         ready=ready, load=load, distance=distance, duration=duration,
                         cost=cost, feasible=feasible)


def evaluate_position(problem: Problem, route: Route, job: Job, position: int) -> float:
    """Cost delta of inserting `job` before `route.jobs[position]`, or INFEASIBLE."""
    vehicle = route.vehicle
    allowed = problem.allowed_vehicle(job)
    if allowed is not None and allowed != vehicle.id:
        return INFEASIBLE

    schedule = route.schedule(problem)
    if not schedule.feasible or schedule.load + job.demand > vehicle.capacity:
        return INFEASIBLE

    transport = problem.transport
    profile = vehicle.profile
    prev_loc = schedule.locations[position]
    next_loc = schedule.locations[position + 1]

    start = max(schedule.departures[position] + transport.duration(profile, prev_loc, job.location),
                job.ready_time)
    if start > job.due_date:
        return INFEASIBLE

    arrival_next = start + job.service_time + transport.duration(profile, job.location, next_loc)
    if max(arrival_next, schedule.ready[position + 1]) > schedule.latest[position + 1]:
        return INFEASIBLE

    delta_distance = (transport.distance(profile, prev_loc, job.location)
                      + transport.distance(profile, job.location, next_loc)
                      - transport.distance(profile, prev_loc, next_loc))
    delta_duration = (transport.duration(profile, prev_loc, job.location)
                      + transport.duration(profile, job.location, next_loc)
                      - transport.duration(profile, prev_loc, next_loc))

    cost = vehicle.per_distance * delta_distance + vehicle.per_time * delta_duration
    if not route.jobs:
        cost += vehicle.fixed_cost
    return cost


@dataclass(frozen=True)
class InsertionResult:
    """Best place for a job in one route. `route_index == -1` opens a new route."""
    job: Job
    cost: float
    route_index: int
    position: int
    vehicle: Vehicle


CostFn = Callable[[float], float]
SkipFn = Callable[[], bool]


def best_in_route(problem: Problem, route: Route, job: Job,
                  cost_fn: Optional[CostFn] = None,
                  skip_fn: Optional[SkipFn] = None) -> Tuple[float, int]:
    """Cheapest position in a route; first found wins ties."""
    best_cost, best_pos = INFEASIBLE, -1
    for pos in range(len(route.jobs) + 1):
        if skip_fn is not None and skip_fn():
            continue
        cost = evaluate_position(problem, route, job, pos)
        if cost == INFEASIBLE:
            continue
        if cost_fn is not None:
            cost = cost_fn(cost)
        if cost < best_cost:
            best_cost, best_pos = cost, pos
    return best_cost, best_pos


def find_insertions(solution: 'Solution', job: Job,
                    cost_fn: Optional[CostFn] = None,
                    skip_fn: Optional[SkipFn] = None) -> List[InsertionResult]:
    """
    Best insertion per existing route plus one per distinct idle vehicle type.

    Results keep route order (existing routes first), so picking the
    minimum by strict comparison breaks ties by first found.
    """
    problem = solution.problem
    results = []

    for idx, route in enumerate(solution.routes):
        cost, pos = best_in_route(problem, route, job, cost_fn, skip_fn)
        if pos >= 0:
            results.append(InsertionResult(job, cost, idx, pos, route.vehicle))

    seen = set()
    for vehicle in solution.idle_vehicles():
        key = (vehicle.capacity, vehicle.start_location, vehicle.end_location, vehicle.shift_start,
               vehicle.shift_end, vehicle.profile, vehicle.fixed_cost, vehicle.per_distance,
               vehicle.per_time)
        allowed = problem.allowed_vehicle(job)
        if allowed is None:
            if key in seen:
                continue
            seen.add(key)
        elif allowed != vehicle.id:
            continue

        cost, pos = best_in_route(problem, Route(vehicle), job, cost_fn, skip_fn)
        if pos >= 0:
            results.append(InsertionResult(job, cost, -1, pos, vehicle))

    return results


def unassigned_reason(solution: 'Solution', job: Job) -> str:
    """Best guess why a job cannot be inserted anywhere."""
    problem = solution.problem
    allowed = problem.allowed_vehicle(job)
    vehicles = [r.vehicle for r in solution.routes] + solution.idle_vehicles()
    if allowed is not None:
        vehicles = [v for v in vehicles if v.id == allowed]
        if not vehicles:
            return REASON_LOCK
    if not vehicles:
        return REASON_NO_VEHICLE
    if all(job.demand > v.capacity for v in vehicles):
        return REASON_CAPACITY
    return REASON_TIME_WINDOW


class Solution:
    """
    A candidate solution (individual).

    Every job is in exactly one of: a route, `required` (waiting for
    insertion) or `unassigned` (insertion failed, with a reason).
    """

    def __init__(self, problem: Problem, routes: Optional[List[Route]] = None,
                 required: Optional[List[Job]] = None,
                 unassigned: Optional[Dict[Job, str]] = None):
        self.problem = problem
        self.routes = routes if routes is not None else []
        self.required = required if required is not None else []
        self.unassigned = unassigned if unassigned is not None else {}
        self._fitness: Optional[Fitness] = None

    @classmethod
    def empty(cls, problem: Problem) -> 'Solution':
        """No routes, every job required."""
        return cls(problem, required=list(problem.jobs))

    def copy(self) -> 'Solution':
        clone = Solution(self.problem, [r.copy() for r in self.routes],
                         self.required[:], dict(self.unassigned))
        clone._fitness = self._fitness
        return clone

    @property
    def fitness(self) -> Fitness:
        if self._fitness is None:
            self._fitness = self.problem.goal.fitness(self)
        return self._fitness

    @property
    def cost(self) -> float:
        return self.fitness[-1]

    @property
    def num_vehicles(self) -> int:
        return len([r for r in self.routes if r.jobs])

    def invalidate(self):
        self._fitness = None

    def idle_vehicles(self) -> List[Vehicle]:
        used = {r.vehicle.id for r in self.routes}
        return [v for v in self.problem.fleet.vehicles if v.id not in used]

    def assigned_jobs(self) -> Iterator[Job]:
        for route in self.routes:
            yield from route.jobs

    def route_index(self) -> Dict[Job, int]:
        return {job: idx for idx, route in enumerate(self.routes) for job in route.jobs}

    def is_removable(self, job: Job) -> bool:
        return job not in self.problem.locked_jobs

    def removable_jobs(self) -> List[Job]:
        return [job for job in self.assigned_jobs() if self.is_removable(job)]

    def remove_jobs(self, jobs) -> List[Job]:
        """Move assigned, unlocked jobs to `required`. Returns what was removed."""
        index = self.route_index()
        removed = []
        for job in jobs:
            idx = index.pop(job, None)
            if idx is None or not self.is_removable(job):
                continue
            self.routes[idx].remove(job)
            self.required.append(job)
            removed.append(job)

        if removed:
            self.invalidate()
        return removed

    def insert(self, result: InsertionResult):
        """Apply an insertion and take the job off the waiting lists."""
        job = result.job
        if result.route_index < 0:
            self.routes.append(Route(result.vehicle))
            route = self.routes[-1]
        else:
            route = self.routes[result.route_index]
        route.insert(result.position, job)

        if job in self.unassigned:
            del self.unassigned[job]
        else:
            self.required.remove(job)
        self.invalidate()

    def mark_unassigned(self, job: Job, reason: str):
        if job in self.required:
            self.required.remove(job)
        self.unassigned[job] = reason
        self.invalidate()

    def retry_unassigned(self):
        """Put previously failed jobs back into `required`."""
        if self.unassigned:
            self.required.extend(self.unassigned)
            self.unassigned.clear()
            self.invalidate()

    def finalize(self):
        """Drop empty routes so their vehicles become idle again."""
        self.routes = [r for r in self.routes if r.jobs]
        self.invalidate()


def verify_jobs(solution: Solution):
    """Raise unless every problem job appears exactly once in the solution."""
    counts = Counter(solution.assigned_jobs())
    counts.update(solution.required)
    counts.update(solution.unassigned.keys())

    duplicated = [job.id for job, n in counts.items() if n > 1]
    if duplicated:
        raise RuntimeInvariantViolation(f"Jobs duplicated by mutation: {sorted(duplicated)}")

    expected = set(solution.problem.jobs)
    actual = set(counts)
    if expected != actual:
        lost = sorted(job.id for job in expected - actual)
        extra = sorted(job.id for job in actual - expected)
        raise RuntimeInvariantViolation(f"Job set changed: lost {lost}, unknown {extra}")
