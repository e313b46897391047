"""Map presentation state: markers, route layers and viewport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from shapely.geometry import shape

from ...models.domain import Coordinates, WaypointKind


class MapAdapter(Protocol):
    def draw_marker(self, marker_id: str, coordinates: Coordinates, color: str, label: str) -> None:
        ...

    def remove_marker(self, marker_id: str) -> None:
        ...

    def draw_path(self, layer_id: str, geometry: dict, color: str, width: int) -> None:
        ...

    def remove_path(self, layer_id: str) -> None:
        ...

    def fit_to_bounds(self, geometry: dict) -> None:
        ...

    def center_on(self, coordinates: Coordinates, zoom: float) -> None:
        ...


def geometry_bounds(geometry: dict) -> Tuple[float, float, float, float]:
    """Return (min_lon, min_lat, max_lon, max_lat) for a GeoJSON geometry.

    A precomputed ``bbox`` member is used when the service supplied one.
    """
    bbox = geometry.get("bbox")
    if isinstance(bbox, (list, tuple)) and len(bbox) == 4:
        return tuple(float(value) for value in bbox)  # type: ignore[return-value]
    return shape(geometry).bounds


@dataclass
class _Marker:
    coordinates: Coordinates
    color: str
    label: str


@dataclass
class _Path:
    geometry: dict
    color: str
    width: int


@dataclass
class Viewport:
    center: Tuple[float, float]
    zoom: float
    bounds: Optional[Tuple[float, float, float, float]] = None
    padding: int = 0


class GeoJSONMapAdapter:
    """In-memory map that renders its layer set as GeoJSON for the browser client."""

    def __init__(self, center: Tuple[float, float], zoom: float, fit_padding: int = 50) -> None:
        self.markers: Dict[str, _Marker] = {}
        self.paths: Dict[str, _Path] = {}
        self.viewport = Viewport(center=center, zoom=zoom)
        self.fit_padding = fit_padding

    def draw_marker(self, marker_id: str, coordinates: Coordinates, color: str, label: str) -> None:
        self.markers[marker_id] = _Marker(coordinates=coordinates, color=color, label=label)

    def remove_marker(self, marker_id: str) -> None:
        self.markers.pop(marker_id, None)

    def draw_path(self, layer_id: str, geometry: dict, color: str, width: int) -> None:
        # One layer per id; redrawing replaces the previous path.
        self.paths[layer_id] = _Path(geometry=geometry, color=color, width=width)

    def remove_path(self, layer_id: str) -> None:
        self.paths.pop(layer_id, None)

    def fit_to_bounds(self, geometry: dict) -> None:
        min_lon, min_lat, max_lon, max_lat = geometry_bounds(geometry)
        self.viewport.bounds = (min_lon, min_lat, max_lon, max_lat)
        self.viewport.center = ((min_lon + max_lon) / 2, (min_lat + max_lat) / 2)
        self.viewport.padding = self.fit_padding

    def center_on(self, coordinates: Coordinates, zoom: float) -> None:
        self.viewport.center = (coordinates.longitude, coordinates.latitude)
        self.viewport.zoom = zoom
        self.viewport.bounds = None
        self.viewport.padding = 0

    def clear(self) -> None:
        self.markers.clear()
        self.paths.clear()

    def to_feature_collection(self) -> Dict[str, Any]:
        features: List[Dict[str, Any]] = []
        for layer_id, path in self.paths.items():
            features.append(
                {
                    "type": "Feature",
                    "id": layer_id,
                    "geometry": path.geometry,
                    "properties": {
                        "layer": "route",
                        "line-color": path.color,
                        "line-width": path.width,
                    },
                }
            )
        for marker_id, marker in self.markers.items():
            features.append(
                {
                    "type": "Feature",
                    "id": marker_id,
                    "geometry": {"type": "Point", "coordinates": marker.coordinates.as_lon_lat()},
                    "properties": {
                        "layer": "marker",
                        "color": marker.color,
                        "label": marker.label,
                    },
                }
            )
        return {"type": "FeatureCollection", "features": features}

    def viewport_state(self) -> Dict[str, Any]:
        return {
            "center": list(self.viewport.center),
            "zoom": self.viewport.zoom,
            "bounds": list(self.viewport.bounds) if self.viewport.bounds else None,
            "padding": self.viewport.padding,
        }


def marker_id_for(record_id: str, kind: WaypointKind) -> str:
    return f"{kind.value}:{record_id}"


@dataclass
class MarkerTable:
    """Translate waypoint keys into the marker ids drawn on the map."""

    handles: Dict[Tuple[str, WaypointKind], str] = field(default_factory=dict)

    def bind(self, key: Tuple[str, WaypointKind]) -> str:
        marker_id = marker_id_for(*key)
        self.handles[key] = marker_id
        return marker_id

    def release(self, key: Tuple[str, WaypointKind]) -> Optional[str]:
        return self.handles.pop(key, None)

    def release_all(self) -> List[str]:
        marker_ids = list(self.handles.values())
        self.handles.clear()
        return marker_ids
