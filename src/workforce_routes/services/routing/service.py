"""Route-planning session orchestration service."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict

from ...config import settings
from ...data.records_repository import RecordsRepository
from ...errors import SessionNotFound
from ..geocoding.mapbox_client import MapboxGeocoder
from ..geocoding.resolver import AddressResolver
from .directions_client import DirectionsClient
from .session import RoutePlanningSession


class SessionRegistry:
    """In-memory planning sessions, oldest evicted first once ``max_sessions`` is reached."""

    def __init__(self, max_sessions: int) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, RoutePlanningSession] = OrderedDict()
        self._lock = threading.Lock()

    def add(self, session: RoutePlanningSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logging.info(f"Evicted route-planning session {evicted_id}")

    def get(self, session_id: str) -> RoutePlanningSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(f"Route-planning session '{session_id}' not found.")
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(f"Route-planning session '{session_id}' not found.")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


registry = SessionRegistry(max_sessions=settings.max_sessions)


def create_session() -> RoutePlanningSession:
    """Open a session wired to the configured geocoder, directions service and records."""
    try:
        geocoder = MapboxGeocoder()
        directions = DirectionsClient()
    except ValueError as e:
        logging.error(f"Mapping clients could not be initialized: {e}")
        raise ValueError("Mapping services are not configured. Please check WFR_MAPBOX_ACCESS_TOKEN.") from e

    session = RoutePlanningSession(
        session_id=uuid.uuid4().hex,
        resolver=AddressResolver(geocoder),
        directions=directions,
        records=RecordsRepository(),
    )
    registry.add(session)
    logging.info(f"Opened route-planning session {session.session_id}")
    return session


def get_session(session_id: str) -> RoutePlanningSession:
    return registry.get(session_id)


def close_session(session_id: str) -> None:
    registry.remove(session_id)
    logging.info(f"Closed route-planning session {session_id}")
