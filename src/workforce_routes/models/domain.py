"""Domain models for source records, waypoints and routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional, Union


class WaypointKind(str, Enum):
    LODGING = "lodging"
    WORKSITE = "worksite"
    # Declared for work-order stops; the add flow does not build these yet.
    WORK_ORDER = "work-order"


@dataclass(frozen=True, slots=True)
class Coordinates:
    longitude: float
    latitude: float

    def as_lon_lat(self) -> list[float]:
        return [self.longitude, self.latitude]


@dataclass(frozen=True, slots=True)
class Address:
    """Structured postal address used as geocoding input."""

    street: str
    number: str
    neighborhood: str
    city: str
    postal_code: str

    def to_query(self) -> str:
        """Render the address as a freeform geocoding query."""
        return f"{self.street}, {self.number}, {self.neighborhood}, {self.city}, {self.postal_code}"


@dataclass(slots=True)
class Lodging:
    """Employee lodging registered in the records database."""

    kind: ClassVar[WaypointKind] = WaypointKind.LODGING

    id: int
    street: str
    number: str
    neighborhood: str
    city: str
    postal_code: str
    residents: Optional[int] = None
    active: bool = True

    @property
    def address(self) -> Address:
        return Address(self.street, self.number, self.neighborhood, self.city, self.postal_code)

    @property
    def display_name(self) -> str:
        return f"Lodging: {self.street}, {self.number} ({self.city})"


@dataclass(slots=True)
class WorkSite:
    """Work site ("canteiro") with its registered address and responsible party."""

    kind: ClassVar[WaypointKind] = WaypointKind.WORKSITE

    id: int
    code: str
    responsible: str
    street: str
    number: str
    neighborhood: str
    city: str
    postal_code: str
    state: Optional[str] = None
    complement: Optional[str] = None
    status: str = "ativo"

    @property
    def address(self) -> Address:
        return Address(self.street, self.number, self.neighborhood, self.city, self.postal_code)

    @property
    def display_name(self) -> str:
        return f"Work site: {self.responsible} ({self.code})"


@dataclass(slots=True)
class WorkOrder:
    id: int
    service_role: str
    worksite_id: Optional[int] = None
    service_id: Optional[int] = None
    employee_name: Optional[str] = None
    employee_registration: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(slots=True)
class Vehicle:
    id: int
    fleet: str
    vehicle_type: str
    plate: str
    capacity: int


# Records eligible to become waypoints.
WaypointSource = Union[Lodging, WorkSite]


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A resolved stop in the route under construction."""

    id: str
    kind: WaypointKind
    display_name: str
    coordinates: Coordinates
    source: WaypointSource

    @property
    def key(self) -> tuple[str, WaypointKind]:
        return (self.id, self.kind)


@dataclass(slots=True)
class Route:
    geometry: dict
    distance_km: float
    duration_min: float
    waypoints: list[Waypoint]


@dataclass(slots=True)
class RouteStats:
    route_count: int = 0
    total_distance_km: float = 0.0
    total_duration_min: float = 0.0
    waypoint_count: int = 0
    planned: int = 0
    in_progress: int = 0
    completed: int = 0


@dataclass(slots=True)
class AssignmentContext:
    """Optional work order and vehicle attached to a planning session."""

    work_order: Optional[WorkOrder] = None
    vehicle: Optional[Vehicle] = None

    def clear(self) -> None:
        self.work_order = None
        self.vehicle = None


@dataclass(slots=True)
class Notice:
    action: str
    message: str
    level: str = "error"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
