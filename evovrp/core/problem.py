"""Problem model: jobs, fleet, transport costs."""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .goal import Goal


@dataclass(frozen=True)
class Job:
    """A work unit: a location with demand, time window and service time."""
    id: str
    location: int
    demand: float = 0.0
    ready_time: float = 0.0
    due_date: float = math.inf
    service_time: float = 0.0


@dataclass(frozen=True)
class Vehicle:
    """A vehicle shift. `end_location=None` means the route ends at its last job."""
    id: str
    capacity: float
    start_location: int = 0
    end_location: Optional[int] = 0
    shift_start: float = 0.0
    shift_end: float = math.inf
    profile: int = 0
    fixed_cost: float = 0.0
    per_distance: float = 1.0
    per_time: float = 0.0


@dataclass
class Fleet:
    """All vehicles available to the solver."""
    vehicles: List[Vehicle]

    def __post_init__(self):
        self.profiles = sorted({v.profile for v in self.vehicles})

    def get(self, vehicle_id: str) -> Optional[Vehicle]:
        return next((v for v in self.vehicles if v.id == vehicle_id), None)


class TransportCost:
    """Distance and duration matrices indexed by [profile, from, to]."""

    def __init__(self, distances: np.ndarray, durations: Optional[np.ndarray] = None):
        distances = np.asarray(distances, dtype=np.float64)
        if distances.ndim == 2:
            distances = distances[np.newaxis, :, :]
        if distances.ndim != 3 or distances.shape[1] != distances.shape[2]:
            raise ConfigurationError(f"Expected square matrices per profile, got shape {distances.shape}")

        if durations is None:
            durations = distances
        durations = np.asarray(durations, dtype=np.float64)
        if durations.ndim == 2:
            durations = durations[np.newaxis, :, :]
        if durations.shape != distances.shape:
            raise ConfigurationError("Duration and distance matrices must have the same shape")

        self.distances = distances
        self.durations = durations

    @classmethod
    def from_coordinates(cls, coords: Sequence[Tuple[float, float]],
                         speeds: Sequence[float] = (1.0,)) -> 'TransportCost':
        """Euclidean matrices; one routing profile per speed."""
        points = np.asarray(coords, dtype=np.float64)
        diff = points[:, np.newaxis, :] - points[np.newaxis, :, :]
        dist = np.sqrt((diff ** 2).sum(axis=-1))

        distances = np.stack([dist for _ in speeds])
        durations = np.stack([dist / speed for speed in speeds])
        return cls(distances, durations)

    @property
    def n_profiles(self) -> int:
        return self.distances.shape[0]

    @property
    def n_locations(self) -> int:
        return self.distances.shape[1]

    def distance(self, profile: int, from_loc: Optional[int], to_loc: Optional[int]) -> float:
        """Travel distance; `None` on either side (open route end) costs nothing."""
        if from_loc is None or to_loc is None:
            return 0.0
        return float(self.distances[profile, from_loc, to_loc])

    def duration(self, profile: int, from_loc: Optional[int], to_loc: Optional[int]) -> float:
        if from_loc is None or to_loc is None:
            return 0.0
        return float(self.durations[profile, from_loc, to_loc])


@dataclass
class Problem:
    """
    Immutable routing problem shared by every strategy.

    `locks` maps a job id to the only vehicle id allowed to serve it.
    Neighbor lists are precomputed per routing profile.
    """
    jobs: List[Job]
    fleet: Fleet
    transport: TransportCost
    goal: Goal = field(default_factory=Goal)
    locks: Dict[str, str] = field(default_factory=dict)
    name: str = "problem"

    def __post_init__(self):
        self.jobs = list(self.jobs)
        self.job_index = {job: idx for idx, job in enumerate(self.jobs)}
        self.locked_jobs = frozenset(job for job in self.jobs if job.id in self.locks)
        self._neighbors: Dict[int, List[List[Tuple[Job, float]]]] = {}

        if self.jobs and self.fleet.vehicles and self._locations_valid():
            self._build_neighbors()

    def _locations_valid(self) -> bool:
        n = self.transport.n_locations
        return (all(0 <= job.location < n for job in self.jobs)
                and all(0 <= p < self.transport.n_profiles for p in self.fleet.profiles))

    def _build_neighbors(self):
        """Sort every job's neighbors by travel distance, per profile."""
        locations = np.array([job.location for job in self.jobs], dtype=np.int64)

        for profile in self.fleet.profiles:
            costs = self.transport.distances[profile][np.ix_(locations, locations)]
            order = np.argsort(costs, axis=1, kind='stable')

            lists = []
            for i, row in enumerate(order):
                lists.append([(self.jobs[k], float(costs[i, k])) for k in row if k != i])
            self._neighbors[profile] = lists

    def neighbors(self, profile: int, job: Job) -> List[Tuple[Job, float]]:
        """Other jobs ordered by ascending travel distance from `job`."""
        return self._neighbors[profile][self.job_index[job]]

    @property
    def n_jobs(self) -> int:
        return len(self.jobs)

    def allowed_vehicle(self, job: Job) -> Optional[str]:
        return self.locks.get(job.id)

    def validate(self):
        """Reject empty or inconsistent models before any search starts."""
        if not self.jobs:
            raise ConfigurationError("Problem has no jobs")
        if not self.fleet.vehicles:
            raise ConfigurationError("Problem has no vehicles")

        job_ids = [job.id for job in self.jobs]
        if len(set(job_ids)) != len(job_ids):
            raise ConfigurationError("Duplicate job ids")

        vehicle_ids = [v.id for v in self.fleet.vehicles]
        if len(set(vehicle_ids)) != len(vehicle_ids):
            raise ConfigurationError("Duplicate vehicle ids")

        n = self.transport.n_locations
        for job in self.jobs:
            if not 0 <= job.location < n:
                raise ConfigurationError(f"Job '{job.id}' has unknown location {job.location}")
            if job.ready_time > job.due_date:
                raise ConfigurationError(f"Job '{job.id}' has an empty time window")
            if job.demand < 0:
                raise ConfigurationError(f"Job '{job.id}' has negative demand")

        for vehicle in self.fleet.vehicles:
            if vehicle.capacity < 0:
                raise ConfigurationError(f"Vehicle '{vehicle.id}' has negative capacity")
            if not 0 <= vehicle.profile < self.transport.n_profiles:
                raise ConfigurationError(f"Vehicle '{vehicle.id}' has unknown profile {vehicle.profile}")
            for loc in (vehicle.start_location, vehicle.end_location):
                if loc is not None and not 0 <= loc < n:
                    raise ConfigurationError(f"Vehicle '{vehicle.id}' has unknown location {loc}")

        known_jobs = set(job_ids)
        known_vehicles = set(vehicle_ids)
        for job_id, vehicle_id in self.locks.items():
            if job_id not in known_jobs:
                raise ConfigurationError(f"Lock references unknown job '{job_id}'")
            if vehicle_id not in known_vehicles:
                raise ConfigurationError(f"Lock references unknown vehicle '{vehicle_id}'")


def read_solomon(text: str, goal: Optional[Goal] = None) -> Problem:
    """Build a problem from Solomon benchmark text."""
    lines = text.splitlines()

    name = lines[0].strip()
    vehicle_line = lines[4].split()
    num_vehicles = int(vehicle_line[0])
    capacity = float(vehicle_line[1])

    nodes = []
    for line in lines[9:]:
        parts = line.split()
        if len(parts) >= 7:
            nodes.append({
                'id': int(parts[0]),
                'x': float(parts[1]),
                'y': float(parts[2]),
                'demand': float(parts[3]),
                'ready_time': float(parts[4]),
                'due_date': float(parts[5]),
                'service_time': float(parts[6])
            })

    if not nodes:
        raise ConfigurationError("Solomon text has no nodes")

    depot = nodes[0]
    transport = TransportCost.from_coordinates([(n['x'], n['y']) for n in nodes])

    jobs = [
        Job(id=str(n['id']), location=idx + 1, demand=n['demand'],
            ready_time=n['ready_time'], due_date=n['due_date'],
            service_time=n['service_time'])
        for idx, n in enumerate(nodes[1:])
    ]

    vehicles = [
        Vehicle(id=f"vehicle_{i + 1}", capacity=capacity,
                shift_start=depot['ready_time'], shift_end=depot['due_date'])
        for i in range(num_vehicles)
    ]

    return Problem(jobs=jobs, fleet=Fleet(vehicles), transport=transport,
                   goal=goal or Goal(), name=name)
