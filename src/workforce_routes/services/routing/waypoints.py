"""Ordered waypoint collection for the route under construction."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from ...errors import PreconditionFailure, ResolutionFailure
from ...models.domain import Waypoint, WaypointKind, WaypointSource
from ..geocoding.resolver import AddressResolver
from ..map.adapter import MapAdapter, MarkerTable

ADD_ACTION = "add waypoint"
ADDABLE_KINDS = (WaypointKind.LODGING, WaypointKind.WORKSITE)

WaypointKey = Tuple[str, WaypointKind]
Direction = Literal["up", "down"]
SnapshotTicket = Tuple[int, Tuple[int, ...]]


class WaypointStore:
    """Visit-ordered waypoints: first is the origin, last the destination.

    A ``(id, kind)`` pair appears at most once. Re-adding an existing pair drops
    the old entry and its marker and appends the new one at the end.

    Geocoding runs outside the lock and the store is only mutated once the
    resolver has answered. An answer for a key that was removed (or for a store
    that was cleared) after the add started is discarded.
    """

    def __init__(
        self,
        resolver: AddressResolver,
        map_adapter: MapAdapter,
        marker_colors: Mapping[WaypointKind, str],
        focus_zoom: float,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self.resolver = resolver
        self.map = map_adapter
        self.marker_colors = dict(marker_colors)
        self.focus_zoom = focus_zoom
        self._lock = lock or threading.RLock()
        self._entries: List[Waypoint] = []
        self._markers = MarkerTable()
        self._removals: Dict[WaypointKey, int] = {}
        self._generation = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def snapshot(self) -> List[Waypoint]:
        with self._lock:
            return list(self._entries)

    def checkout(self) -> Tuple[List[Waypoint], SnapshotTicket]:
        """Snapshot the waypoints together with a ticket for ``is_current``."""
        with self._lock:
            entries = list(self._entries)
            return entries, self._snapshot_ticket(entries)

    def is_current(self, waypoints: List[Waypoint], ticket: SnapshotTicket) -> bool:
        """False once any of ``waypoints`` was removed or the store was cleared after checkout."""
        with self._lock:
            return self._snapshot_ticket(waypoints) == ticket

    def _snapshot_ticket(self, waypoints: List[Waypoint]) -> SnapshotTicket:
        return (self._generation, tuple(self._removals.get(waypoint.key, 0) for waypoint in waypoints))

    def _index_of(self, key: WaypointKey) -> int:
        for index, waypoint in enumerate(self._entries):
            if waypoint.key == key:
                return index
        return -1

    def _ticket(self, key: WaypointKey) -> Tuple[int, int]:
        return (self._generation, self._removals.get(key, 0))

    def add(self, record: WaypointSource) -> Waypoint:
        kind = record.kind
        if kind not in ADDABLE_KINDS:
            raise PreconditionFailure(ADD_ACTION, f"Waypoints of kind '{kind.value}' cannot be added.")

        key: WaypointKey = (str(record.id), kind)
        with self._lock:
            ticket = self._ticket(key)

        coordinates = self.resolver.resolve(record.address)
        if coordinates is None:
            raise ResolutionFailure(
                ADD_ACTION,
                f"Could not geocode '{record.display_name}'. Check the registered address.",
            )

        waypoint = Waypoint(
            id=key[0],
            kind=kind,
            display_name=record.display_name,
            coordinates=coordinates,
            source=record,
        )

        with self._lock:
            if self._ticket(key) != ticket:
                logging.info(f"Discarding geocoding result for {key}: waypoint was removed while resolving")
                raise ResolutionFailure(
                    ADD_ACTION,
                    f"'{record.display_name}' was removed before its address was resolved.",
                )
            self._discard(key)
            self._entries.append(waypoint)
            marker_id = self._markers.bind(key)
            self.map.draw_marker(marker_id, coordinates, self.marker_colors[kind], waypoint.display_name)
            self.map.center_on(coordinates, self.focus_zoom)
        return waypoint

    def _discard(self, key: WaypointKey) -> bool:
        index = self._index_of(key)
        if index == -1:
            return False
        del self._entries[index]
        marker_id = self._markers.release(key)
        if marker_id is not None:
            self.map.remove_marker(marker_id)
        return True

    def remove(self, record_id: str, kind: WaypointKind) -> bool:
        key: WaypointKey = (str(record_id), kind)
        with self._lock:
            self._removals[key] = self._removals.get(key, 0) + 1
            return self._discard(key)

    def move(self, record_id: str, kind: WaypointKind, direction: Direction) -> bool:
        """Swap a waypoint with its neighbour. Returns False at the boundaries or when absent."""
        if direction not in ("up", "down"):
            raise ValueError(f"Unknown direction '{direction}'")
        key: WaypointKey = (str(record_id), kind)
        with self._lock:
            index = self._index_of(key)
            if index == -1:
                return False
            target = index - 1 if direction == "up" else index + 1
            if target < 0 or target >= len(self._entries):
                return False
            self._entries[index], self._entries[target] = self._entries[target], self._entries[index]
            return True

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._removals.clear()
            self._entries.clear()
            for marker_id in self._markers.release_all():
                self.map.remove_marker(marker_id)
