"""
Driver-side access to the sample provider.

Wraps ``ProviderClient`` with the driver app's conventions: vehicle
registration falls back to creation, matched trips are polled forever, and
trip state changes are pushed as ``PUT trip/{id}``.
"""

from __future__ import annotations

import logging
from typing import Optional

from journeyshare.config import settings
from journeyshare.domain.entities import DriverTripConfig, TripName, TripState
from journeyshare.domain.enums import TripStatus
from journeyshare.domain.errors import MissingTripState
from journeyshare.infrastructure.provider_client import ProviderClient, ProviderError
from journeyshare.infrastructure.provider_schemas import (
    CreateVehicleBody,
    GetTripResponse,
    TripResponse,
    TripUpdateBody,
    VehicleModel,
)
from journeyshare.infrastructure.retrying import RUN_FOREVER, run_with_retries

logger = logging.getLogger(__name__)


def is_trip_valid(response: Optional[GetTripResponse]) -> bool:
    """A trip is usable once it carries a fully qualified name."""
    if response is None or response.trip is None:
        return False
    try:
        TripName.parse(response.trip.qualified_name or "")
    except ValueError:
        return False
    return True


class DriverProviderService:
    def __init__(
        self,
        client: ProviderClient,
        poll_interval_seconds: float = settings.trip_poll_interval_seconds,
    ):
        self.client = client
        self.poll_interval_seconds = poll_interval_seconds

    async def fetch_auth_token(self, vehicle_id: str) -> Optional[str]:
        return (await self.client.get_driver_token(vehicle_id)).token

    async def fetch_vehicle(self, vehicle_id: str) -> VehicleModel:
        return await self.client.get_vehicle(vehicle_id)

    async def register_vehicle(
        self,
        vehicle_id: str,
        back_to_back_enabled: bool = settings.back_to_back_enabled,
        maximum_capacity: int = settings.maximum_capacity,
    ) -> VehicleModel:
        """Fetch the vehicle; create it when the provider does not know it yet."""
        try:
            return await self.client.get_vehicle(vehicle_id)
        except ProviderError as exc:
            logger.info("Vehicle %s not found (%s); creating it", vehicle_id, exc)
        return await self.client.create_vehicle(
            CreateVehicleBody(
                vehicle_id=vehicle_id,
                back_to_back_enabled=back_to_back_enabled,
                maximum_capacity=maximum_capacity,
            )
        )

    async def poll_available_trip(self, trip_id: str, vehicle_id: str) -> DriverTripConfig:
        """Poll ``trip/{trip_id}`` until the provider returns a usable trip."""
        response: GetTripResponse = await run_with_retries(
            lambda: self.client.get_trip(trip_id),
            RUN_FOREVER,
            self.poll_interval_seconds,
            is_trip_valid,
        )
        if response.trip is None:
            raise MissingTripState(f"Provider returned no trip for {trip_id}")
        name = TripName.parse(response.trip.qualified_name or "")
        return DriverTripConfig(
            project_id=name.project_id,
            trip_id=name.trip_id,
            vehicle_id=vehicle_id,
            waypoints=[w.to_domain(name.trip_id) for w in response.trip.waypoints],
            route_token=response.route_token,
        )

    async def update_trip_status(self, state: TripState) -> TripResponse:
        body = TripUpdateBody(status=state.trip_status.value)
        if state.trip_status is TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION:
            body.intermediate_destination_index = state.intermediate_destination_index

        try:
            trip = await self.client.update_trip(state.trip_id, body)
        except ProviderError:
            logger.error("Error updating trip %s with %s", state.trip_id, body)
            raise
        logger.info("Successfully updated trip %s with %s", state.trip_id, body)
        return trip
