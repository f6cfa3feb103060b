"""
evovrp - evolutionary ruin and recreate solver for rich vehicle routing problems.
"""

from .core import (
    Goal, Job, Vehicle, Fleet, TransportCost, Problem, Solution, Random,
    ConfigurationError, RuntimeInvariantViolation, InfeasibilityWarning, read_solomon
)
from .solver import Builder, Solver, SolverConfig, Statistics
from .config import Config, read_config, create_builder_from_config

__version__ = "0.1.0"

__all__ = [
    'Goal', 'Job', 'Vehicle', 'Fleet', 'TransportCost', 'Problem', 'Solution', 'Random',
    'ConfigurationError', 'RuntimeInvariantViolation', 'InfeasibilityWarning', 'read_solomon',
    'Builder', 'Solver', 'SolverConfig', 'Statistics', 'Config', 'read_config',
    'create_builder_from_config'
]
