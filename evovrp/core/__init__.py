"""Core model package."""

from .errors import SolverError, ConfigurationError, RuntimeInvariantViolation, InfeasibilityWarning
from .goal import Goal
from .problem import Job, Vehicle, Fleet, TransportCost, Problem, read_solomon
from .randomness import Random
from .solution import (
    Route, RouteSchedule, Solution, InsertionResult,
    find_insertions, evaluate_position, verify_jobs
)

__all__ = [
    'SolverError', 'ConfigurationError', 'RuntimeInvariantViolation', 'InfeasibilityWarning',
    'Goal', 'Job', 'Vehicle', 'Fleet', 'TransportCost', 'Problem', 'read_solomon',
    'Random', 'Route', 'RouteSchedule', 'Solution', 'InsertionResult',
    'find_insertions', 'evaluate_position', 'verify_jobs'
]
