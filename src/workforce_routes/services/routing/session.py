"""Route-planning session: waypoints, current route, assignment and notices."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Protocol, Union

from ...config import settings
from ...errors import PreconditionFailure, RecordNotFound, RoutePlanningError
from ...models.domain import (
    AssignmentContext,
    Lodging,
    Notice,
    Route,
    RouteStats,
    Vehicle,
    Waypoint,
    WaypointKind,
    WaypointSource,
    WorkOrder,
    WorkSite,
)
from ..geocoding.resolver import AddressResolver
from ..map.adapter import GeoJSONMapAdapter
from .composer import Directions, RouteComposer
from .stats import compute_stats
from .waypoints import ADD_ACTION, Direction, WaypointStore


class RecordProvider(Protocol):
    def get_lodging(self, record_id: int) -> Lodging:
        ...

    def get_worksite(self, record_id: int) -> WorkSite:
        ...

    def get_work_order(self, record_id: int) -> WorkOrder:
        ...

    def get_vehicle(self, record_id: int) -> Vehicle:
        ...


class RoutePlanningSession:
    """State behind one open route-planning screen.

    Every failed operator action leaves a notice in ``notices`` before the
    error is re-raised to the caller.
    """

    def __init__(
        self,
        session_id: str,
        resolver: AddressResolver,
        directions: Directions,
        records: RecordProvider,
        map_adapter: Optional[GeoJSONMapAdapter] = None,
    ) -> None:
        self.session_id = session_id
        self.resolver = resolver
        self.records = records
        self.map = map_adapter or GeoJSONMapAdapter(
            center=settings.map_default_center,
            zoom=settings.map_default_zoom,
            fit_padding=settings.route_fit_padding,
        )
        self._lock = threading.RLock()
        self.store = WaypointStore(
            resolver,
            self.map,
            marker_colors={
                WaypointKind.LODGING: settings.lodging_marker_color,
                WaypointKind.WORKSITE: settings.worksite_marker_color,
            },
            focus_zoom=settings.map_focus_zoom,
            lock=self._lock,
        )
        self.composer = RouteComposer(
            directions,
            self.map,
            profile=settings.routing_profile,
            layer_id=settings.route_layer_id,
            line_color=settings.route_line_color,
            line_width=settings.route_line_width,
            work_order_color=settings.work_order_marker_color,
            lock=self._lock,
        )
        self.assignment = AssignmentContext()
        self.notices: List[Notice] = []

    @property
    def waypoints(self) -> List[Waypoint]:
        return self.store.snapshot()

    @property
    def route(self) -> Optional[Route]:
        return self.composer.current

    def stats(self) -> RouteStats:
        with self._lock:
            return compute_stats(self.composer.current, len(self.store))

    def _notify(self, error: RoutePlanningError, level: str = "error") -> None:
        logging.warning(f"[session {self.session_id}] {error.action} failed: {error.message}")
        with self._lock:
            self.notices.append(Notice(action=error.action, message=error.message, level=level))

    def _waypoint_record(self, kind: WaypointKind, record_id: int) -> WaypointSource:
        if kind is WaypointKind.LODGING:
            return self.records.get_lodging(record_id)
        if kind is WaypointKind.WORKSITE:
            return self.records.get_worksite(record_id)
        raise PreconditionFailure(ADD_ACTION, f"Waypoints of kind '{kind.value}' cannot be added.")

    def add_waypoint(self, kind: Union[WaypointKind, str], record_id: int) -> Waypoint:
        try:
            record = self._waypoint_record(WaypointKind(kind), record_id)
            return self.store.add(record)
        except RecordNotFound as exc:
            error = RecordNotFound(ADD_ACTION, exc.message)
            self._notify(error)
            raise error from exc
        except RoutePlanningError as exc:
            self._notify(exc)
            raise
        except ConnectionError as exc:
            self._notify(RoutePlanningError(ADD_ACTION, f"Could not load the record: {exc}"))
            raise

    def remove_waypoint(self, record_id: Union[int, str], kind: Union[WaypointKind, str]) -> bool:
        with self._lock:
            removed = self.store.remove(str(record_id), WaypointKind(kind))
            if len(self.store) < 2:
                if self.composer.current is not None:
                    logging.info(f"[session {self.session_id}] fewer than two waypoints left, clearing route")
                self.composer.invalidate()
            return removed

    def move_waypoint(self, record_id: Union[int, str], kind: Union[WaypointKind, str], direction: Direction) -> bool:
        return self.store.move(str(record_id), WaypointKind(kind), direction)

    def generate_route(self) -> Route:
        try:
            waypoints, ticket = self.store.checkout()
            route = self.composer.generate(
                waypoints,
                still_current=lambda: self.store.is_current(waypoints, ticket),
            )
        except RoutePlanningError as exc:
            self._notify(exc)
            raise

        work_order = self.assignment.work_order
        if work_order is not None:
            self._mark_work_order(work_order)
        return route

    def _mark_work_order(self, work_order: WorkOrder) -> None:
        action = "mark work order"
        if work_order.worksite_id is None:
            self._notify(
                RoutePlanningError(action, f"Work order {work_order.id} has no work site to show."),
                level="warning",
            )
            return
        try:
            worksite = self.records.get_worksite(work_order.worksite_id)
        except RecordNotFound as exc:
            self._notify(RoutePlanningError(action, exc.message), level="warning")
            return
        except (ConnectionError, ValueError) as exc:
            self._notify(RoutePlanningError(action, f"Could not load work site: {exc}"), level="warning")
            return
        if not self.composer.mark_work_order(work_order, worksite, self.resolver):
            self._notify(
                RoutePlanningError(action, f"Could not geocode the work site of work order {work_order.id}."),
                level="warning",
            )

    def set_work_order(self, work_order_id: Optional[int]) -> Optional[WorkOrder]:
        if work_order_id is None:
            self.assignment.work_order = None
            return None
        try:
            work_order = self.records.get_work_order(work_order_id)
        except RecordNotFound as exc:
            error = RecordNotFound("assign work order", exc.message)
            self._notify(error)
            raise error from exc
        self.assignment.work_order = work_order
        return work_order

    def set_vehicle(self, vehicle_id: Optional[int]) -> Optional[Vehicle]:
        if vehicle_id is None:
            self.assignment.vehicle = None
            return None
        try:
            vehicle = self.records.get_vehicle(vehicle_id)
        except RecordNotFound as exc:
            error = RecordNotFound("assign vehicle", exc.message)
            self._notify(error)
            raise error from exc
        self.assignment.vehicle = vehicle
        return vehicle

    def reset(self) -> None:
        with self._lock:
            self.store.clear()
            self.composer.invalidate()
            self.assignment.clear()
            self.notices.clear()
