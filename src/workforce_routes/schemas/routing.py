"""Route-planning request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import WaypointKind


class AddWaypointRequest(BaseModel):
    kind: WaypointKind = Field(..., description="Source record kind ('lodging' or 'worksite').")
    record_id: int = Field(..., description="Primary key of the lodging or work site.")


class MoveWaypointRequest(BaseModel):
    direction: Literal["up", "down"]


class AssignmentRequest(BaseModel):
    """Only the fields present in the body are applied; an explicit null clears that slot."""

    work_order_id: Optional[int] = Field(default=None, description="Work order to annotate the route with; null clears it.")
    vehicle_id: Optional[int] = Field(default=None, description="Vehicle assigned to the route; null clears it.")


class CoordinatesModel(BaseModel):
    longitude: float
    latitude: float


class WaypointModel(BaseModel):
    id: str
    kind: WaypointKind
    display_name: str
    position: int
    coordinates: CoordinatesModel
    source: Dict[str, Any]


class RouteModel(BaseModel):
    geometry: Dict[str, Any]
    distance_km: float
    duration_min: float
    waypoint_keys: List[str]


class RouteStatsModel(BaseModel):
    route_count: int
    total_distance_km: float
    total_duration_min: float
    waypoint_count: int
    planned: int
    in_progress: int
    completed: int


class WorkOrderModel(BaseModel):
    id: int
    service_role: str
    worksite_id: Optional[int] = None
    service_id: Optional[int] = None
    employee_name: Optional[str] = None
    employee_registration: Optional[str] = None
    created_at: Optional[str] = None


class VehicleModel(BaseModel):
    id: int
    fleet: str
    vehicle_type: str
    plate: str
    capacity: int


class AssignmentModel(BaseModel):
    work_order: Optional[WorkOrderModel] = None
    vehicle: Optional[VehicleModel] = None


class NoticeModel(BaseModel):
    action: str
    message: str
    level: str
    created_at: datetime


class MapStateModel(BaseModel):
    features: Dict[str, Any] = Field(..., description="GeoJSON FeatureCollection of markers and route layers.")
    viewport: Dict[str, Any]


class SessionResponse(BaseModel):
    session_id: str
    waypoints: List[WaypointModel]
    route: Optional[RouteModel] = None
    stats: RouteStatsModel
    assignment: AssignmentModel
    notices: List[NoticeModel]
    map: MapStateModel
