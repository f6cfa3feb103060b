"""Generic algorithms used by the solver."""

from .dbscan import create_clusters, NeighborhoodFn
from .geometry import Point, get_max_curvature
from .gsom import Network

__all__ = ['create_clusters', 'NeighborhoodFn', 'Point', 'get_max_curvature', 'Network']
