"""
Consumer trip session
=====================

Mirrors one rider's flow through the consumer app:

    INITIALIZED -> SELECTING_PICKUP -> SELECTING_DROPOFF -> CONFIRMING_TRIP
        -> JOURNEY_SHARING -> TRIP_COMPLETE | TRIP_CANCELED -> INITIALIZED

Trip creation returns immediately; matching runs as a background task that
polls the provider until a vehicle is assigned.  The task can be cancelled
with :meth:`ConsumerTripSession.cancel`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from journeyshare.domain.entities import Point, TripData
from journeyshare.domain.enums import AppState, TripStatus
from journeyshare.domain.errors import MissingTripState
from journeyshare.infrastructure.provider_schemas import (
    LatLngPayload,
    TripResponse,
    WaypointData,
)
from journeyshare.services.consumer_provider import ConsumerProviderService

logger = logging.getLogger(__name__)

IDLE_STATE_RESET_DELAY_SECONDS = 3.0


def _lat_lng(point: Point) -> LatLngPayload:
    return LatLngPayload(latitude=point.latitude, longitude=point.longitude)


class ConsumerTripSession:
    def __init__(
        self,
        provider: ConsumerProviderService,
        idle_reset_delay_seconds: float = IDLE_STATE_RESET_DELAY_SECONDS,
    ):
        self.provider = provider
        self.idle_reset_delay_seconds = idle_reset_delay_seconds
        self.app_state = AppState.UNINITIALIZED
        self.pickup: Optional[Point] = None
        self.dropoff: Optional[Point] = None
        self.intermediate_destinations: list[Point] = []
        self.trip_status: Optional[TripStatus] = None
        self.trip: Optional[TripData] = None
        self.trip_name: Optional[str] = None
        self.error_message: Optional[str] = None
        self.matching_task: Optional[asyncio.Task] = None
        self._reset_task: Optional[asyncio.Task] = None

    # ── Location selection ────────────────────────────────────────

    def initialize(self) -> None:
        self.app_state = AppState.INITIALIZED

    def set_state(self, state: AppState) -> None:
        self.app_state = state

    def update_location_for_state(self, location: Point) -> None:
        """Store *location* as pickup or dropoff depending on the selection step."""
        if self.app_state is AppState.SELECTING_PICKUP:
            self.pickup = location
        elif self.app_state is AppState.SELECTING_DROPOFF:
            self.dropoff = location

    def add_intermediate_destination(self) -> None:
        """Promote the currently selected dropoff to an intermediate stop."""
        if self.dropoff is None:
            return
        self.intermediate_destinations = [*self.intermediate_destinations, self.dropoff]

    # ── Trip lifecycle ────────────────────────────────────────────

    async def start_trip(self) -> TripResponse:
        if self.pickup is None or self.dropoff is None:
            raise MissingTripState("Pickup and dropoff must be selected first")

        self._cancel_pending_reset()
        if self.matching_task and not self.matching_task.done():
            self.matching_task.cancel()
        self.app_state = AppState.CONFIRMING_TRIP
        self.error_message = None
        created = await self.provider.create_trip(
            WaypointData(
                pickup=_lat_lng(self.pickup),
                dropoff=_lat_lng(self.dropoff),
                intermediate_destinations=[_lat_lng(p) for p in self.intermediate_destinations],
            )
        )
        self.trip_name = created.qualified_name
        self.trip_status = TripStatus.parse(created.trip_status)
        logger.info("Successfully created trip %s", self.trip_name)

        if self.trip_name:
            self.matching_task = asyncio.create_task(self._wait_for_match(self.trip_name))
        return created

    async def _wait_for_match(self, trip_name: str) -> None:
        try:
            trip = await self.provider.fetch_matched_trip(trip_name)
        except Exception as exc:
            logger.exception("Failed to match trip %s with a driver", trip_name)
            self.error_message = str(exc)
            return
        self.start_journey_sharing(trip)

    def start_journey_sharing(self, trip: TripData) -> None:
        if self.app_state is not AppState.CONFIRMING_TRIP:
            logger.error(
                "App state should be CONFIRMING_TRIP but is %s; journey sharing not started",
                self.app_state.name,
            )
            return
        if len(trip.waypoints) < 2:
            return
        self.trip = trip
        self.trip_status = trip.trip_status
        self.app_state = AppState.JOURNEY_SHARING

    def on_trip_status_update(self, status: TripStatus) -> None:
        self.trip_status = status
        if not status.is_terminal:
            return

        if status is TripStatus.COMPLETE:
            self.app_state = AppState.TRIP_COMPLETE
        elif status is TripStatus.CANCELED:
            self.app_state = AppState.TRIP_CANCELED
        self.intermediate_destinations = []
        self._cancel_pending_reset()
        self._reset_task = asyncio.create_task(self._reset_after_delay())

    async def _reset_after_delay(self) -> None:
        await asyncio.sleep(self.idle_reset_delay_seconds)
        self._reset_task = None
        self.reset()

    def _cancel_pending_reset(self) -> None:
        if self._reset_task and not self._reset_task.done():
            self._reset_task.cancel()
        self._reset_task = None

    def reset(self) -> None:
        """Back to INITIALIZED with an empty location selection."""
        self._cancel_pending_reset()
        self.app_state = AppState.INITIALIZED
        self.pickup = None
        self.dropoff = None
        self.intermediate_destinations = []
        self.trip_status = None
        self.trip = None
        self.trip_name = None
        self.error_message = None

    async def cancel(self) -> None:
        """Stop any in-flight matching poll."""
        for task in (self.matching_task, self._reset_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self.matching_task = None
        self._reset_task = None

    @property
    def is_trip_matched(self) -> bool:
        return bool(self.trip and self.trip.vehicle_id)

    def snapshot(self) -> dict:
        return {
            "app_state": self.app_state.name,
            "trip_name": self.trip_name,
            "trip_id": self.trip.trip_id if self.trip else None,
            "vehicle_id": self.trip.vehicle_id if self.trip else None,
            "trip_status": self.trip_status,
            "is_trip_matched": self.is_trip_matched,
            "intermediate_destinations": len(self.intermediate_destinations),
            "error_message": self.error_message,
        }
