"""Solver loop, its configuration and termination criteria."""

from .context import RefinementContext, Statistics
from .termination import Termination, MaxTime, MaxGeneration, CostVariation, CompositeTermination
from .solver import Solver, SolverConfig
from .builder import Builder

__all__ = [
    'RefinementContext', 'Statistics', 'Termination', 'MaxTime', 'MaxGeneration',
    'CostVariation', 'CompositeTermination', 'Solver', 'SolverConfig', 'Builder'
]
