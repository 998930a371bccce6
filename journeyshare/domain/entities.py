"""
Domain entities and value objects.

``TripState`` is immutable: every status transition produces a new value
and the owner swaps it in wholesale, so no field is ever mutated in place.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Optional

from .enums import TripStatus, WaypointType

NO_INTERMEDIATE_DESTINATION = -1

_TRIP_NAME_FORMAT = re.compile(r"^providers/([^/]+)/trips/([^/]+)$")
_VEHICLE_NAME_FORMAT = re.compile(r"^providers/(.*)/vehicles/(.*)$")


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Waypoint:
    trip_id: str
    waypoint_type: str
    location: Optional[Point] = None

    @property
    def type(self) -> WaypointType:
        """Parsed waypoint type.  Raises ``InvalidWaypointType`` if unknown."""
        return WaypointType.parse(self.waypoint_type)


@dataclass(frozen=True)
class TripName:
    """Fully qualified trip name: ``providers/<project_id>/trips/<trip_id>``."""

    project_id: str
    trip_id: str

    @classmethod
    def parse(cls, name: str) -> "TripName":
        match = _TRIP_NAME_FORMAT.match(name or "")
        if not match:
            raise ValueError(f"Malformed trip name: {name!r}")
        return cls(project_id=match.group(1), trip_id=match.group(2))

    def __str__(self) -> str:
        return f"providers/{self.project_id}/trips/{self.trip_id}"


def extract_vehicle_id(vehicle_name: str) -> str:
    """``providers/p/vehicles/v`` -> ``v``; anything else is returned as-is."""
    match = _VEHICLE_NAME_FORMAT.match(vehicle_name)
    if match:
        return match.group(2)
    return vehicle_name


# ── Entities ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TripState:
    trip_id: str
    trip_status: TripStatus = TripStatus.NEW
    intermediate_destination_index: int = NO_INTERMEDIATE_DESTINATION

    def with_status(
        self, status: TripStatus, intermediate_destination_index: Optional[int] = None
    ) -> "TripState":
        if intermediate_destination_index is None:
            intermediate_destination_index = self.intermediate_destination_index
        return replace(
            self,
            trip_status=status,
            intermediate_destination_index=intermediate_destination_index,
        )


@dataclass
class DriverTripConfig:
    """A matched trip as seen by the driver."""

    project_id: str
    trip_id: str
    vehicle_id: str
    waypoints: list[Waypoint] = field(default_factory=list)
    route_token: Optional[str] = None

    def get_waypoint(self, index: int) -> Optional[Waypoint]:
        if index < 0 or index >= len(self.waypoints):
            return None
        return self.waypoints[index]

    def has_intermediate_destinations(self) -> bool:
        return len(self.waypoints) > 2


@dataclass(frozen=True)
class TripData:
    """A consumer trip once a vehicle has been matched to it."""

    trip_id: str
    trip_name: str
    vehicle_id: str
    trip_status: TripStatus
    waypoints: tuple[Waypoint, ...] = ()
