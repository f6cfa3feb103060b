"""
Pydantic schemas for API requests/responses.
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


# ===== PROBLEM INPUT =====

class NodeData(BaseModel):
    """A customer (job) with coordinates and time window"""
    id: str
    x: float
    y: float
    demand: float = 0
    ready_time: float = 0
    due_time: float = math.inf
    service_time: float = 0


class DepotData(BaseModel):
    """Depot location and opening hours"""
    x: float
    y: float
    ready_time: float = 0
    due_time: float = math.inf


class VehicleType(BaseModel):
    """A group of identical vehicles"""
    id: str
    capacity: float
    count: int = 1
    fixed_cost: float = 0
    cost_per_distance: float = 1.0
    open_route: bool = False


class SolveRequest(BaseModel):
    """
    Either a Solomon instance as text, or depot + vehicles + customers.
    `config` is an optional solver configuration document.
    """
    instance: Optional[str] = None
    depot: Optional[DepotData] = None
    vehicles: List[VehicleType] = []
    customers: List[NodeData] = []
    locks: Dict[str, str] = {}
    config: Optional[Dict[str, Any]] = None


class ConfigValidateRequest(BaseModel):
    config: Dict[str, Any]


# ===== RESULTS =====

class RouteData(BaseModel):
    """Route as an ordered list of job ids"""
    vehicle_id: str
    jobs: List[str]
    distance: float
    duration: float
    cost: float


class UnassignedJob(BaseModel):
    """Job that could not be served"""
    job_id: str
    reason: str


class StatisticsData(BaseModel):
    generations: int
    elapsed: float
    improvements: int


class SolveResponse(BaseModel):
    routes: List[RouteData]
    unassigned: List[UnassignedJob]
    fitness: List[float]
    cost: float
    vehicles: int
    statistics: StatisticsData


class ConfigValidateResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
