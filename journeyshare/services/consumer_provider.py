"""Consumer-side access to the sample provider."""

from __future__ import annotations

from typing import Optional

from journeyshare.config import settings
from journeyshare.domain.entities import TripData, TripName
from journeyshare.domain.enums import TripStatus
from journeyshare.domain.errors import MissingTripState
from journeyshare.infrastructure.provider_client import ProviderClient
from journeyshare.infrastructure.provider_schemas import (
    GetTripResponse,
    TripResponse,
    WaypointData,
)
from journeyshare.infrastructure.retrying import RUN_FOREVER, run_with_retries


def is_trip_matched(response: Optional[GetTripResponse]) -> bool:
    """A trip is matched once the provider reports a vehicle for it."""
    return bool(response and response.trip and response.trip.vehicle_id)


class ConsumerProviderService:
    def __init__(
        self,
        client: ProviderClient,
        poll_interval_seconds: float = settings.trip_poll_interval_seconds,
    ):
        self.client = client
        self.poll_interval_seconds = poll_interval_seconds

    async def create_trip(self, waypoints: WaypointData) -> TripResponse:
        return await self.client.create_trip(waypoints)

    async def fetch_auth_token(self, trip_id: str) -> Optional[str]:
        return (await self.client.get_consumer_token(trip_id)).token

    async def fetch_matched_trip(self, trip_name: str) -> TripData:
        """Poll the trip until a vehicle has been matched to it."""
        trip_id = TripName.parse(trip_name).trip_id
        response: GetTripResponse = await run_with_retries(
            lambda: self.client.get_trip(trip_id),
            RUN_FOREVER,
            self.poll_interval_seconds,
            is_trip_matched,
        )
        trip = response.trip
        if trip is None:
            raise MissingTripState(f"Provider returned no trip for {trip_name}")
        return TripData(
            trip_id=trip_id,
            trip_name=trip.qualified_name or trip_name,
            vehicle_id=trip.vehicle_id or "",
            trip_status=TripStatus.parse(trip.trip_status),
            waypoints=tuple(w.to_domain(trip_id) for w in trip.waypoints),
        )
