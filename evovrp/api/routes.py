"""
FastAPI routes for the evolutionary VRP solver.
"""

import json
import logging

from fastapi import FastAPI, HTTPException

from .schemas import (
    SolveRequest, SolveResponse, ConfigValidateRequest, ConfigValidateResponse,
    RouteData, UnassignedJob, StatisticsData
)
from ..config import Config, create_builder_from_config, read_config
from ..core import ConfigurationError, Fleet, Job, Problem, Solution, TransportCost, Vehicle, read_solomon
from ..solver import Statistics

logger = logging.getLogger(__name__)

app = FastAPI(
    title="evovrp",
    description="Evolutionary ruin and recreate vehicle routing solver",
    version="0.1.0"
)


# ===== HELPER FUNCTIONS =====

def build_problem(request: SolveRequest) -> Problem:
    """Problem from Solomon text or from explicit depot/vehicles/customers"""
    if request.instance is not None:
        return read_solomon(request.instance)

    if request.depot is None:
        raise ConfigurationError("Either 'instance' or 'depot' must be provided")

    depot = request.depot
    coords = [(depot.x, depot.y)] + [(c.x, c.y) for c in request.customers]

    jobs = [
        Job(id=c.id, location=idx + 1, demand=c.demand, ready_time=c.ready_time,
            due_date=c.due_time, service_time=c.service_time)
        for idx, c in enumerate(request.customers)
    ]

    vehicles = [
        Vehicle(id=f"{vt.id}_{i + 1}", capacity=vt.capacity,
                end_location=None if vt.open_route else 0,
                shift_start=depot.ready_time, shift_end=depot.due_time,
                fixed_cost=vt.fixed_cost, per_distance=vt.cost_per_distance)
        for vt in request.vehicles
        for i in range(vt.count)
    ]

    return Problem(jobs=jobs, fleet=Fleet(vehicles), transport=TransportCost.from_coordinates(coords),
                   locks=dict(request.locks), name="request")


def format_solution(problem: Problem, solution: Solution, stats: Statistics) -> SolveResponse:
    routes = []
    for route in solution.routes:
        if not route.jobs:
            continue
        schedule = route.schedule(problem)
        routes.append(RouteData(
            vehicle_id=route.vehicle.id,
            jobs=[job.id for job in route.jobs],
            distance=round(schedule.distance, 2),
            duration=round(schedule.duration, 2),
            cost=round(schedule.cost, 2)
        ))

    unassigned = [UnassignedJob(job_id=job.id, reason=reason) for job, reason in solution.unassigned.items()]

    return SolveResponse(
        routes=routes,
        unassigned=unassigned,
        fitness=list(solution.fitness),
        cost=round(solution.cost, 2),
        vehicles=solution.num_vehicles,
        statistics=StatisticsData(
            generations=stats.generation,
            elapsed=round(stats.elapsed, 3),
            improvements=stats.improvements
        )
    )


# ===== ENDPOINTS =====

@app.post("/api/solve")
def solve(request: SolveRequest) -> SolveResponse:
    """Run the solver on the submitted problem"""
    try:
        problem = build_problem(request)
        config = read_config(json.dumps(request.config)) if request.config else Config()
        solver = create_builder_from_config(problem, config).build()
    except (ConfigurationError, ValueError, IndexError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Solving '{problem.name}': {problem.n_jobs} jobs, {len(problem.fleet.vehicles)} vehicles")
    best, stats = solver.solve()
    return format_solution(problem, best, stats)


@app.post("/api/config/validate")
def validate_config(request: ConfigValidateRequest) -> ConfigValidateResponse:
    """Check a configuration document without solving"""
    try:
        read_config(json.dumps(request.config))
    except ConfigurationError as e:
        return ConfigValidateResponse(valid=False, error=str(e))
    return ConfigValidateResponse(valid=True)
