"""Multi-stop route composition over an external directions service."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol, Sequence

import httpx

from ...errors import PreconditionFailure, RoutingFailure
from ...models.domain import Coordinates, Route, Waypoint, WorkOrder, WorkSite
from ..geocoding.resolver import AddressResolver
from ..map.adapter import MapAdapter

GENERATE_ACTION = "generate route"
WORK_ORDER_MARKER_PREFIX = "work-order"


class Directions(Protocol):
    def route(
        self,
        origin: Coordinates,
        via: Sequence[Coordinates],
        destination: Coordinates,
        profile: str | None = None,
    ) -> dict | None:
        ...


class RouteComposer:
    """Build the current route from an ordered waypoint snapshot.

    The operator's order is used as-is: first waypoint is the origin, last is
    the destination and the rest are visited in between in store order.
    """

    def __init__(
        self,
        directions: Directions,
        map_adapter: MapAdapter,
        *,
        profile: str = "driving",
        layer_id: str = "main-route",
        line_color: str = "#007aff",
        line_width: int = 6,
        work_order_color: str = "#6a0dad",
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self.directions = directions
        self.map = map_adapter
        self.profile = profile
        self.layer_id = layer_id
        self.line_color = line_color
        self.line_width = line_width
        self.work_order_color = work_order_color
        self._lock = lock or threading.RLock()
        self.current: Optional[Route] = None
        self._work_order_marker: Optional[str] = None

    def generate(
        self,
        waypoints: Sequence[Waypoint],
        still_current: Optional[Callable[[], bool]] = None,
    ) -> Route:
        """Request the itinerary for ``waypoints`` and make it the current route.

        ``still_current`` is checked under the lock once the directions service
        answers; when it returns False the answer is dropped and the map is left
        as it is.
        """
        if len(waypoints) < 2:
            raise PreconditionFailure(
                GENERATE_ACTION,
                "Add at least two points (origin and destination) to generate the route.",
            )

        stops = list(waypoints)
        origin = stops[0].coordinates
        via = [waypoint.coordinates for waypoint in stops[1:-1]]
        destination = stops[-1].coordinates

        try:
            result = self.directions.route(origin, via, destination, profile=self.profile)
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            logging.warning(f"Directions request failed for {len(stops)} waypoints: {exc}")
            self.invalidate()
            raise RoutingFailure(GENERATE_ACTION, "An error occurred while generating the route.") from exc

        if result is None:
            logging.warning(f"Directions service returned no itinerary for {len(stops)} waypoints")
            self.invalidate()
            raise RoutingFailure(GENERATE_ACTION, "Could not generate a route through the selected points.")

        route = Route(
            geometry=result["geometry"],
            distance_km=result["distance"] / 1000.0,
            duration_min=result["duration"] / 60.0,
            waypoints=stops,
        )
        with self._lock:
            if still_current is not None and not still_current():
                logging.info(f"Discarding route over {len(stops)} waypoints: waypoints changed while routing")
                raise RoutingFailure(
                    GENERATE_ACTION,
                    "The route was superseded because the points changed while it was being generated.",
                )
            self.current = route
            # A new route starts without the previous work-order annotation.
            self._clear_work_order_marker()
            self.map.draw_path(self.layer_id, route.geometry, self.line_color, self.line_width)
            self.map.fit_to_bounds(route.geometry)
        logging.info(
            f"Generated route over {len(stops)} waypoints: "
            f"{route.distance_km:.2f} km, {route.duration_min:.1f} min"
        )
        return route

    def mark_work_order(self, work_order: WorkOrder, worksite: WorkSite, resolver: AddressResolver) -> bool:
        """Draw the assigned work order at its work site. Does not touch the route."""
        coordinates = resolver.resolve(worksite.address)
        if coordinates is None:
            return False
        label = f"Work order {work_order.id} - {work_order.service_role} (Work site: {worksite.responsible})"
        marker_id = f"{WORK_ORDER_MARKER_PREFIX}:{work_order.id}"
        with self._lock:
            self._clear_work_order_marker()
            self.map.draw_marker(marker_id, coordinates, self.work_order_color, label)
            self._work_order_marker = marker_id
        return True

    def _clear_work_order_marker(self) -> None:
        if self._work_order_marker is not None:
            self.map.remove_marker(self._work_order_marker)
            self._work_order_marker = None

    def invalidate(self) -> None:
        """Drop the current route and everything it drew."""
        with self._lock:
            self.current = None
            self.map.remove_path(self.layer_id)
            self._clear_work_order_marker()
