"""Pydantic request / response schemas for the control API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from journeyshare.domain.enums import TripStatus


# ── Requests ──────────────────────────────────────────────────────────


class LatLng(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ConsumerTripRequest(BaseModel):
    pickup: LatLng
    dropoff: LatLng
    intermediate_destinations: list[LatLng] = []


class TripStatusUpdate(BaseModel):
    status: TripStatus


# ── Responses ─────────────────────────────────────────────────────────


class TripStateResponse(BaseModel):
    trip_id: str
    trip_status: TripStatus
    trip_status_code: int
    intermediate_destination_index: int


class DriverStateResponse(BaseModel):
    vehicle_id: str
    trip_id: Optional[str] = None
    trip_status: TripStatus = TripStatus.UNKNOWN_TRIP_STATUS
    intermediate_destination_index: Optional[int] = None
    matched_trip_ids: list[str] = []


class ConsumerSessionResponse(BaseModel):
    app_state: str
    trip_name: Optional[str] = None
    trip_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    trip_status: Optional[TripStatus] = None
    is_trip_matched: bool = False
    intermediate_destinations: int = 0
    error_message: Optional[str] = None


class TokenResponse(BaseModel):
    token: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
