"""Address resolution on top of a geocoding capability."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from ...models.domain import Address, Coordinates


class Geocoder(Protocol):
    def geocode(self, query: str) -> Coordinates | None:
        ...


class AddressResolver:
    """Turn a structured address into coordinates.

    Transport and parse failures are reported the same way as "no match":
    the caller only ever sees coordinates or ``None``.
    """

    def __init__(self, geocoder: Geocoder) -> None:
        self.geocoder = geocoder

    def resolve(self, address: Address) -> Coordinates | None:
        query = address.to_query()
        try:
            coordinates = self.geocoder.geocode(query)
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            logging.warning(f"Geocoding failed for '{query}': {exc}")
            return None
        if coordinates is None:
            logging.warning(f"Address not found via geocoding: '{query}'")
        return coordinates
