"""Route-planning session endpoints."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException, status

from ...errors import (
    PreconditionFailure,
    RecordNotFound,
    ResolutionFailure,
    RoutePlanningError,
    RoutingFailure,
    SessionNotFound,
)
from ...models.domain import WaypointKind
from ...schemas.routing import (
    AddWaypointRequest,
    AssignmentRequest,
    MoveWaypointRequest,
    SessionResponse,
)
from ...services.outputs.session_formatter import session_to_response
from ...services.routing import service as planning_service
from ...services.routing.session import RoutePlanningSession

router = APIRouter(prefix="/sessions", tags=["sessions"])

T = TypeVar("T")

_STATUS_BY_ERROR = {
    PreconditionFailure: status.HTTP_400_BAD_REQUEST,
    RecordNotFound: status.HTTP_404_NOT_FOUND,
    ResolutionFailure: 422,
    RoutingFailure: status.HTTP_502_BAD_GATEWAY,
}


def _load_session(session_id: str) -> RoutePlanningSession:
    try:
        return planning_service.get_session(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _run(action: str, operation: Callable[[], T]) -> T:
    """Run a session operation, translating planning failures into HTTP errors."""
    try:
        return operation()
    except RoutePlanningError as exc:
        status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
        raise HTTPException(
            status_code=status_code,
            detail={"action": exc.action, "message": exc.message},
        ) from exc
    except ConnectionError as exc:
        logging.warning(f"Upstream service unavailable during '{action}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"action": action, "message": str(exc)},
        ) from exc
    except Exception as exc:
        logging.exception(f"Error during '{action}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"action": action, "message": f"Failed to {action}: {exc}"},
        ) from exc


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def open_session() -> SessionResponse:
    try:
        session = planning_service.create_session()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return session_to_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
def read_session(session_id: str) -> SessionResponse:
    return session_to_response(_load_session(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_200_OK)
def delete_session(session_id: str) -> dict:
    """Discard a session when the operator leaves the route-planning screen."""
    try:
        planning_service.close_session(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"success": True, "session_id": session_id}


@router.post("/{session_id}/waypoints", response_model=SessionResponse)
def add_waypoint(session_id: str, payload: AddWaypointRequest) -> SessionResponse:
    session = _load_session(session_id)
    _run("add waypoint", lambda: session.add_waypoint(payload.kind, payload.record_id))
    return session_to_response(session)


@router.delete("/{session_id}/waypoints/{kind}/{record_id}", response_model=SessionResponse)
def remove_waypoint(session_id: str, kind: WaypointKind, record_id: str) -> SessionResponse:
    session = _load_session(session_id)
    session.remove_waypoint(record_id, kind)
    return session_to_response(session)


@router.post("/{session_id}/waypoints/{kind}/{record_id}/move", response_model=SessionResponse)
def move_waypoint(session_id: str, kind: WaypointKind, record_id: str, payload: MoveWaypointRequest) -> SessionResponse:
    session = _load_session(session_id)
    session.move_waypoint(record_id, kind, payload.direction)
    return session_to_response(session)


@router.post("/{session_id}/route", response_model=SessionResponse)
def generate_route(session_id: str) -> SessionResponse:
    session = _load_session(session_id)
    _run("generate route", session.generate_route)
    return session_to_response(session)


@router.put("/{session_id}/assignment", response_model=SessionResponse)
def update_assignment(session_id: str, payload: AssignmentRequest) -> SessionResponse:
    session = _load_session(session_id)
    if "work_order_id" in payload.model_fields_set:
        _run("assign work order", lambda: session.set_work_order(payload.work_order_id))
    if "vehicle_id" in payload.model_fields_set:
        _run("assign vehicle", lambda: session.set_vehicle(payload.vehicle_id))
    return session_to_response(session)


@router.post("/{session_id}/reset", response_model=SessionResponse)
def reset_session(session_id: str) -> SessionResponse:
    session = _load_session(session_id)
    session.reset()
    return session_to_response(session)
