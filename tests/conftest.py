from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pytest

from workforce_routes.errors import RecordNotFound
from workforce_routes.models.domain import Coordinates, Lodging, Vehicle, WorkOrder, WorkSite
from workforce_routes.services.geocoding.resolver import AddressResolver
from workforce_routes.services.map.adapter import GeoJSONMapAdapter
from workforce_routes.services.routing.session import RoutePlanningSession


def make_lodging(lodging_id: int, street: str = "Rua 20", number: str = "1500") -> Lodging:
    return Lodging(
        id=lodging_id,
        street=street,
        number=number,
        neighborhood="Centro",
        city="Ituiutaba",
        postal_code="38300-000",
        residents=4,
    )


def make_worksite(worksite_id: int, street: str = "Avenida 17", responsible: str = "Carlos Souza") -> WorkSite:
    return WorkSite(
        id=worksite_id,
        code=f"CT-{worksite_id:03d}",
        responsible=responsible,
        street=street,
        number="210",
        neighborhood="Setor Norte",
        city="Ituiutaba",
        postal_code="38302-000",
        state="MG",
    )


LODGING_7 = make_lodging(7)
WORKSITE_3 = make_worksite(3)
WORKSITE_5 = make_worksite(5, street="Rua Sem Saida", responsible="Ana Lima")
WORKSITE_9 = make_worksite(9, street="Rua 36", responsible="Joao Pereira")

KNOWN_LOCATIONS: Dict[str, Coordinates] = {
    LODGING_7.address.to_query(): Coordinates(longitude=-49.46, latitude=-18.97),
    WORKSITE_3.address.to_query(): Coordinates(longitude=-49.40, latitude=-18.90),
    WORKSITE_9.address.to_query(): Coordinates(longitude=-49.45, latitude=-18.95),
}


class FakeGeocoder:
    def __init__(self, locations: Optional[Dict[str, Coordinates]] = None) -> None:
        self.locations = dict(KNOWN_LOCATIONS if locations is None else locations)
        self.queries: List[str] = []
        self.before_answer: Optional[Callable[[str], None]] = None

    def geocode(self, query: str) -> Coordinates | None:
        self.queries.append(query)
        if self.before_answer is not None:
            self.before_answer(query)
        return self.locations.get(query)


class FakeDirections:
    def __init__(self, distance_m: float = 12_500.0, duration_s: float = 1_080.0) -> None:
        self.distance_m = distance_m
        self.duration_s = duration_s
        self.calls: List[dict] = []
        self.result_override: Optional[dict] = None
        self.no_route = False
        self.error: Optional[Exception] = None
        self.before_answer: Optional[Callable[[], None]] = None

    def route(self, origin, via, destination, profile=None):
        self.calls.append({"origin": origin, "via": list(via), "destination": destination, "profile": profile})
        if self.before_answer is not None:
            self.before_answer()
        if self.error is not None:
            raise self.error
        if self.no_route:
            return None
        if self.result_override is not None:
            return self.result_override
        points = [origin, *via, destination]
        return {
            "geometry": {
                "type": "LineString",
                "coordinates": [point.as_lon_lat() for point in points],
            },
            "distance": self.distance_m,
            "duration": self.duration_s,
        }


class FakeRecords:
    def __init__(self) -> None:
        self.lodgings = {7: LODGING_7}
        self.worksites = {3: WORKSITE_3, 5: WORKSITE_5, 9: WORKSITE_9}
        self.work_orders = {
            11: WorkOrder(id=11, service_role="Eletricista", worksite_id=9, employee_name="Paulo"),
            12: WorkOrder(id=12, service_role="Pedreiro", worksite_id=5),
        }
        self.vehicles = {2: Vehicle(id=2, fleet="F-02", vehicle_type="Van", plate="ABC1D23", capacity=12)}

    @staticmethod
    def _lookup(table: dict, record_id: int, label: str):
        try:
            return table[int(record_id)]
        except KeyError:
            raise RecordNotFound(f"find {label.lower()}", f"{label} {record_id} not found.") from None

    def get_lodging(self, record_id: int) -> Lodging:
        return self._lookup(self.lodgings, record_id, "Lodging")

    def get_worksite(self, record_id: int) -> WorkSite:
        return self._lookup(self.worksites, record_id, "Work site")

    def get_work_order(self, record_id: int) -> WorkOrder:
        return self._lookup(self.work_orders, record_id, "Work order")

    def get_vehicle(self, record_id: int) -> Vehicle:
        return self._lookup(self.vehicles, record_id, "Vehicle")


class RecordingMapAdapter(GeoJSONMapAdapter):
    """Map adapter that also keeps the ordered list of draw/undraw commands."""

    def __init__(self) -> None:
        super().__init__(center=(-49.4636, -18.9653), zoom=12, fit_padding=50)
        self.commands: List[tuple] = []

    def draw_marker(self, marker_id, coordinates, color, label):
        self.commands.append(("draw_marker", marker_id, color))
        super().draw_marker(marker_id, coordinates, color, label)

    def remove_marker(self, marker_id):
        self.commands.append(("remove_marker", marker_id))
        super().remove_marker(marker_id)

    def draw_path(self, layer_id, geometry, color, width):
        self.commands.append(("draw_path", layer_id))
        super().draw_path(layer_id, geometry, color, width)

    def remove_path(self, layer_id):
        self.commands.append(("remove_path", layer_id))
        super().remove_path(layer_id)

    def fit_to_bounds(self, geometry):
        self.commands.append(("fit_to_bounds",))
        super().fit_to_bounds(geometry)

    def center_on(self, coordinates, zoom):
        self.commands.append(("center_on", zoom))
        super().center_on(coordinates, zoom)


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def directions() -> FakeDirections:
    return FakeDirections()


@pytest.fixture
def records() -> FakeRecords:
    return FakeRecords()


@pytest.fixture
def map_adapter() -> RecordingMapAdapter:
    return RecordingMapAdapter()


@pytest.fixture
def session(geocoder, directions, records, map_adapter) -> RoutePlanningSession:
    return RoutePlanningSession(
        session_id="test-session",
        resolver=AddressResolver(geocoder),
        directions=directions,
        records=records,
        map_adapter=map_adapter,
    )
