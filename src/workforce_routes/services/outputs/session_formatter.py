"""Serializers for route-planning session state."""

from __future__ import annotations

from dataclasses import asdict

from ...schemas.routing import (
    AssignmentModel,
    CoordinatesModel,
    MapStateModel,
    NoticeModel,
    RouteModel,
    RouteStatsModel,
    SessionResponse,
    VehicleModel,
    WaypointModel,
    WorkOrderModel,
)
from ..routing.session import RoutePlanningSession


def session_to_response(session: RoutePlanningSession) -> SessionResponse:
    waypoints = session.waypoints
    route = session.route
    assignment = session.assignment
    return SessionResponse(
        session_id=session.session_id,
        waypoints=[
            WaypointModel(
                id=waypoint.id,
                kind=waypoint.kind,
                display_name=waypoint.display_name,
                position=position,
                coordinates=CoordinatesModel(
                    longitude=waypoint.coordinates.longitude,
                    latitude=waypoint.coordinates.latitude,
                ),
                source=asdict(waypoint.source),
            )
            for position, waypoint in enumerate(waypoints)
        ],
        route=RouteModel(
            geometry=route.geometry,
            distance_km=route.distance_km,
            duration_min=route.duration_min,
            waypoint_keys=[f"{waypoint.kind.value}:{waypoint.id}" for waypoint in route.waypoints],
        )
        if route is not None
        else None,
        stats=RouteStatsModel(**asdict(session.stats())),
        assignment=AssignmentModel(
            work_order=WorkOrderModel(**asdict(assignment.work_order)) if assignment.work_order else None,
            vehicle=VehicleModel(**asdict(assignment.vehicle)) if assignment.vehicle else None,
        ),
        notices=[NoticeModel(**asdict(notice)) for notice in session.notices],
        map=MapStateModel(
            features=session.map.to_feature_collection(),
            viewport=session.map.viewport_state(),
        ),
    )
