"""
Shared test fixtures.

Nothing here talks to the network: the provider client and Redis are
replaced by ``AsyncMock`` objects and the retry sleep is a recorder.
"""

from __future__ import annotations

from typing import Optional
from unittest.mock import AsyncMock

import pytest

from journeyshare.infrastructure.provider_schemas import (
    GetTripResponse,
    TripResponse,
    VehicleModel,
    WaypointPayload,
)

PICKUP = "PICKUP_WAYPOINT_TYPE"
DROP_OFF = "DROP_OFF_WAYPOINT_TYPE"
INTERMEDIATE = "INTERMEDIATE_DESTINATION_WAYPOINT_TYPE"


def make_vehicle(*waypoints: tuple[str, str], trips: Optional[list[str]] = None) -> VehicleModel:
    """Build a vehicle from ``(trip_id, waypoint_type)`` pairs."""
    payloads = [WaypointPayload(trip_id=t, waypoint_type=w) for t, w in waypoints]
    if trips is None:
        trips = list(dict.fromkeys(t for t, _ in waypoints))
    return VehicleModel(
        name="providers/test-project/vehicles/Vehicle_1",
        waypoints=payloads,
        current_trips_ids=trips,
        back_to_back_enabled=True,
    )


def make_trip_response(
    trip_id: str,
    vehicle_id: Optional[str] = None,
    status: str = "NEW",
    waypoint_types: tuple[str, ...] = (PICKUP, DROP_OFF),
) -> GetTripResponse:
    return GetTripResponse(
        trip=TripResponse(
            name=f"providers/test-project/trips/{trip_id}",
            vehicle_id=vehicle_id,
            trip_status=status,
            waypoints=[WaypointPayload(trip_id=trip_id, waypoint_type=w) for w in waypoint_types],
        ),
        route_token="route-token",
    )


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def mock_client() -> AsyncMock:
    """Provider client whose trip updates echo back a ``TripResponse``."""
    client = AsyncMock()
    client.update_trip = AsyncMock(
        side_effect=lambda trip_id, body: TripResponse(
            name=f"providers/test-project/trips/{trip_id}", trip_status=body.status
        )
    )
    return client


@pytest.fixture
def mock_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)
    return redis
