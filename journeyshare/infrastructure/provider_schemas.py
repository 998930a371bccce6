"""Pydantic payloads exchanged with the sample journey sharing provider."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from journeyshare.domain.entities import Point, Waypoint


class ProviderModel(BaseModel):
    """Provider JSON is camelCase; attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Shared ────────────────────────────────────────────────────────────


class PointPayload(ProviderModel):
    latitude: float = 0.0
    longitude: float = 0.0


class LocationPayload(ProviderModel):
    point: Optional[PointPayload] = None


class WaypointPayload(ProviderModel):
    trip_id: str = ""
    location: Optional[LocationPayload] = None
    waypoint_type: str = ""

    def to_domain(self, trip_id: Optional[str] = None) -> Waypoint:
        point = None
        if self.location and self.location.point:
            point = Point(self.location.point.latitude, self.location.point.longitude)
        return Waypoint(
            trip_id=self.trip_id or trip_id or "",
            waypoint_type=self.waypoint_type,
            location=point,
        )


# ── Responses ─────────────────────────────────────────────────────────


class TokenResponse(ProviderModel):
    token: Optional[str] = Field(None, alias="jwt")
    creation_timestamp: int = 0
    expiration_timestamp: int = 0


class VehicleModel(ProviderModel):
    name: str = ""
    vehicle_state: str = ""
    waypoints: list[WaypointPayload] = []
    current_trips_ids: list[str] = []
    back_to_back_enabled: bool = False
    supported_trip_types: list[str] = []
    maximum_capacity: int = 5


class TripResponse(ProviderModel):
    name: Optional[str] = None
    trip_name: Optional[str] = None
    vehicle_id: Optional[str] = None
    trip_status: Optional[str] = None
    waypoints: list[WaypointPayload] = []

    @property
    def qualified_name(self) -> Optional[str]:
        return self.trip_name or self.name


class GetTripResponse(ProviderModel):
    trip: Optional[TripResponse] = None
    route_token: Optional[str] = None


# ── Requests ──────────────────────────────────────────────────────────


class CreateVehicleBody(ProviderModel):
    vehicle_id: str
    back_to_back_enabled: bool = False
    maximum_capacity: int = 5
    supported_trip_types: list[str] = ["EXCLUSIVE"]


class TripUpdateBody(ProviderModel):
    status: str
    intermediate_destination_index: Optional[int] = None


class LatLngPayload(ProviderModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WaypointData(ProviderModel):
    pickup: LatLngPayload
    dropoff: LatLngPayload
    intermediate_destinations: list[LatLngPayload] = []
