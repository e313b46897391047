"""Failure taxonomy for the route-planning workflow."""

from __future__ import annotations


class RoutePlanningError(Exception):
    """Base error for operator-facing failures.

    ``action`` names the operator action that failed and ``message`` is the
    notice shown to the operator.
    """

    def __init__(self, action: str, message: str) -> None:
        super().__init__(message)
        self.action = action
        self.message = message


class ResolutionFailure(RoutePlanningError):
    """Geocoding produced no match or the geocoder could not be reached."""


class RoutingFailure(RoutePlanningError):
    """The directions service returned no itinerary or failed."""


class PreconditionFailure(RoutePlanningError):
    """An operation was invoked without the state it requires."""


class RecordNotFound(RoutePlanningError):
    """A referenced lodging, work site, work order or vehicle does not exist."""


class SessionNotFound(LookupError):
    """No route-planning session exists with the given identifier."""
