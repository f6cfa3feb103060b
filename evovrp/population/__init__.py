"""Population archives."""

from .base import Population
from .elitism import Elitism, ElitismConfig
from .rosomaxa import Rosomaxa, RosomaxaConfig

__all__ = ['Population', 'Elitism', 'ElitismConfig', 'Rosomaxa', 'RosomaxaConfig']
