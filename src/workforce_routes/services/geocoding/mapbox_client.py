"""HTTP client for the Mapbox forward geocoding API."""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import httpx

from ...config import settings
from ...models.domain import Coordinates

logger = logging.getLogger(__name__)


class MapboxGeocoder:
    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        country: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoding_base_url).rstrip("/")
        self.access_token = access_token or settings.mapbox_access_token
        if not self.access_token:
            raise ValueError("Mapbox access token is not configured.")
        self.country = country if country is not None else settings.geocoding_country
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    def geocode(self, query: str) -> Coordinates | None:
        """Return the best match for a freeform address, or None when nothing matches.

        Raises ``httpx.HTTPError``/``ConnectionError`` once retries are exhausted and
        ``ValueError`` for payloads that cannot be parsed.
        """
        if not query.strip():
            return None

        url = f"{self.base_url}/{quote(query, safe='')}.json"
        params = {"access_token": self.access_token, "limit": "1"}
        if self.country:
            params["country"] = self.country

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return _parse_first_feature(response.json())
                except httpx.HTTPStatusError as e:
                    # Client errors (bad token, malformed query) will not improve on retry.
                    if e.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Geocoding request timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(f"Failed to connect to geocoding service at {self.base_url}: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Geocoding network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()


def _parse_first_feature(payload: dict) -> Coordinates | None:
    features = payload.get("features")
    if not isinstance(features, list):
        raise ValueError("Geocoding response missing 'features'.")
    if not features:
        return None
    center = features[0].get("center")
    if not isinstance(center, (list, tuple)) or len(center) != 2:
        raise ValueError("Geocoding feature has no usable 'center'.")
    lon, lat = center
    return Coordinates(longitude=float(lon), latitude=float(lat))


def check_health(geocoder: MapboxGeocoder | None = None, probe: str = "Ituiutaba, MG") -> bool:
    """Check geocoder reachability by resolving a well-known place."""
    try:
        client = geocoder or MapboxGeocoder(max_retries=0)
        return client.geocode(probe) is not None
    except (httpx.HTTPError, ConnectionError, ValueError):
        return False
