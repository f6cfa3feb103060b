"""API package."""

from .routes import app
from .schemas import SolveRequest, SolveResponse

__all__ = ['app', 'SolveRequest', 'SolveResponse']
