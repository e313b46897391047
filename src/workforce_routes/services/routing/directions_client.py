"""HTTP client for multi-stop driving directions (Mapbox Directions or OSRM)."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinates

logger = logging.getLogger(__name__)


class DirectionsClient:
    def __init__(
        self,
        base_url: str | None = None,
        provider: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.directions_base_url).rstrip("/")
        self.provider = provider or settings.directions_provider
        self.access_token = access_token or settings.mapbox_access_token
        if self.provider == "mapbox" and not self.access_token:
            raise ValueError("Mapbox access token is not configured.")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    def _build_url(self, coordinates: Sequence[Coordinates], profile: str) -> str:
        # Both services expect "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{point.longitude},{point.latitude}" for point in coordinates)
        profile_path = f"mapbox/{profile}" if self.provider == "mapbox" else profile
        return f"{self.base_url}/{profile_path}/{coordinate_str}"

    def route(
        self,
        origin: Coordinates,
        via: Sequence[Coordinates],
        destination: Coordinates,
        profile: str | None = None,
    ) -> dict | None:
        """Request one itinerary visiting ``origin``, each ``via`` point in order, then ``destination``.

        Returns ``{"geometry", "distance", "duration"}`` for the first candidate
        (distance in meters, duration in seconds), or None when the service finds
        no route.
        """
        coordinates = [origin, *via, destination]
        url = self._build_url(coordinates, profile or settings.routing_profile)
        params = {
            "geometries": "geojson",
            "overview": "full",
            "steps": "false",
        }
        if self.provider == "mapbox":
            params["access_token"] = self.access_token

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    if response.status_code == 400:
                        # Both services answer 400 with a code such as NoRoute/NoSegment.
                        return _parse_route_response(response.json())
                    response.raise_for_status()
                    return _parse_route_response(response.json())
                except httpx.HTTPStatusError as e:
                    if e.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Directions request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Directions timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to connect to directions service at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Directions network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()


_NO_ROUTE_CODES = {"NoRoute", "NoSegment", "NoMatch"}


def _parse_route_response(data: dict) -> dict | None:
    code = data.get("code")
    if code in _NO_ROUTE_CODES:
        logger.info(f"Directions service found no route: {data.get('message', code)}")
        return None
    if code is not None and code != "Ok":
        raise ValueError(f"Directions request failed: {data.get('message', code)}")

    routes = data.get("routes")
    if not isinstance(routes, list):
        raise ValueError("Directions response missing 'routes'.")
    if not routes:
        return None

    best = routes[0]
    try:
        return {
            "geometry": best["geometry"],
            "distance": float(best["distance"]),
            "duration": float(best["duration"]),
        }
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Directions route is missing geometry/distance/duration: {exc}") from exc
