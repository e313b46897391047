"""Summary counters for the route-planning dashboard."""

from __future__ import annotations

from typing import Optional

from ...models.domain import Route, RouteStats


def compute_stats(route: Optional[Route], waypoint_count: int) -> RouteStats:
    if route is None:
        return RouteStats(waypoint_count=waypoint_count)
    return RouteStats(
        route_count=1,
        total_distance_km=route.distance_km,
        total_duration_min=route.duration_min,
        waypoint_count=waypoint_count,
        planned=1,
    )
