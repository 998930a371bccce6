"""
Vehicle controller
==================

Drives every trip assigned to one vehicle, including back-to-back (B2B)
trips.

State ownership
---------------
``trip_states`` maps trip id -> immutable ``TripState``.  Entries are only
ever replaced, under ``self._lock``, so the controller is the single writer
even when provider updates and "next state" requests interleave.

Waypoint pointers
-----------------
Recomputed on every vehicle update from the provider:

* ``current_waypoint``: first pending waypoint of the vehicle.
* ``next_waypoint``: second pending waypoint (may belong to another trip).
* ``next_waypoint_of_current_trip``: next waypoint after the first one that
  belongs to the same trip; drives the ARRIVED_AT_* branches.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from journeyshare.domain.entities import TripState, Waypoint
from journeyshare.domain.enums import TripStatus, WaypointType
from journeyshare.domain.errors import MissingTripState, TripAlreadyFinished
from journeyshare.domain.state_machine import (
    enroute_state_for_waypoint,
    initial_trip_state,
    is_arrived,
    next_trip_state,
)
from journeyshare.infrastructure.provider_client import ProviderError
from journeyshare.infrastructure.provider_schemas import VehicleModel
from journeyshare.services.driver_provider import DriverProviderService

logger = logging.getLogger(__name__)


class VehicleController:
    def __init__(self, provider: DriverProviderService, vehicle_id: str):
        self.provider = provider
        self.vehicle_id = vehicle_id
        self.trip_states: dict[str, TripState] = {}
        self.finished_trip_ids: set[str] = set()
        self.matched_trip_ids: list[str] = []
        self.waypoints: list[Waypoint] = []
        self.current_waypoint: Optional[Waypoint] = None
        self.next_waypoint: Optional[Waypoint] = None
        self.next_waypoint_of_current_trip: Optional[Waypoint] = None
        self._lock = asyncio.Lock()

    # ── Provider updates ──────────────────────────────────────────

    async def on_vehicle_state_update(self, vehicle: VehicleModel) -> None:
        """Accept newly matched trips and refresh the waypoint pointers."""
        async with self._lock:
            self.waypoints = [w.to_domain() for w in vehicle.waypoints]
            self.matched_trip_ids = list(vehicle.current_trips_ids)
            for trip_id in dict.fromkeys(w.trip_id for w in self.waypoints):
                if trip_id not in self.trip_states and trip_id not in self.finished_trip_ids:
                    await self._accept_trip(trip_id)
            self._refresh_pointers()

        logger.debug(
            "Vehicle %s: %d waypoint(s), matched trips %s",
            self.vehicle_id,
            len(self.waypoints),
            self.matched_trip_ids,
        )

    async def accept_trip(self, trip_id: str) -> TripState:
        """Wait for *trip_id* to be assigned by the provider, then accept it.

        Raises ``TripAlreadyFinished`` for a trip that already reached a
        terminal status on this vehicle.
        """
        if trip_id in self.finished_trip_ids:
            raise TripAlreadyFinished(f"Trip {trip_id} is already finished")
        config = await self.provider.poll_available_trip(trip_id, self.vehicle_id)
        async with self._lock:
            if config.trip_id in self.finished_trip_ids:
                raise TripAlreadyFinished(f"Trip {config.trip_id} is already finished")
            existing = self.trip_states.get(config.trip_id)
            if existing is not None:
                return existing
            return await self._accept_trip(config.trip_id)

    # ── State transitions ─────────────────────────────────────────

    async def process_next_state(self) -> Optional[TripState]:
        """Advance the trip owning the current waypoint by one status.

        Returns the new state, or ``None`` when no trip is in progress.
        """
        async with self._lock:
            if self.current_waypoint is None:
                return None
            trip_id = self.current_waypoint.trip_id
            previous = self.trip_states.get(trip_id)
            if previous is None:
                raise MissingTripState(f"Trip {trip_id} has not been accepted")

            updated = next_trip_state(previous, self.next_waypoint_of_current_trip)
            await self._store_and_push(updated)

            if is_arrived(updated.trip_status):
                await self._advance_next_waypoint_on_arrival()
            if updated.trip_status.is_terminal:
                self._refresh_pointers()

            logger.info(
                "Trip %s: %s -> %s",
                trip_id,
                previous.trip_status.value,
                updated.trip_status.value,
            )
            return updated

    def is_next_current_trip_waypoint_intermediate(self) -> bool:
        waypoint = self.next_waypoint_of_current_trip
        return (
            waypoint is not None
            and waypoint.waypoint_type == WaypointType.INTERMEDIATE_DESTINATION.value
        )

    def snapshot(self) -> dict:
        state = None
        if self.current_waypoint is not None:
            state = self.trip_states.get(self.current_waypoint.trip_id)
        return {
            "vehicle_id": self.vehicle_id,
            "trip_id": state.trip_id if state else None,
            "trip_status": (state.trip_status if state else TripStatus.UNKNOWN_TRIP_STATUS),
            "intermediate_destination_index": (
                state.intermediate_destination_index if state else None
            ),
            "matched_trip_ids": list(self.matched_trip_ids),
        }

    # ── Internals (caller holds the lock) ─────────────────────────

    def _refresh_pointers(self) -> None:
        # Waypoints of finished trips can linger until the provider catches up.
        pending = [w for w in self.waypoints if w.trip_id not in self.finished_trip_ids]
        current = pending[0] if pending else None
        self.current_waypoint = current
        self.next_waypoint = pending[1] if len(pending) > 1 else None
        self.next_waypoint_of_current_trip = None
        if current is not None:
            self.next_waypoint_of_current_trip = next(
                (w for w in pending[1:] if w.trip_id == current.trip_id), None
            )

    async def _accept_trip(self, trip_id: str) -> TripState:
        state = initial_trip_state(trip_id)
        logger.info("Accepting trip %s", trip_id)
        await self._store_and_push(state)
        return state

    async def _advance_next_waypoint_on_arrival(self) -> None:
        """On arrival, move the trip owning the next waypoint to enroute.

        The next waypoint is either the next leg of the same trip or the first
        stop of a back-to-back trip.
        """
        waypoint = self.next_waypoint
        if waypoint is None:
            return
        state = self.trip_states.get(waypoint.trip_id)
        if state is None:
            return
        await self._store_and_push(enroute_state_for_waypoint(state, waypoint))

    async def _store_and_push(self, state: TripState) -> None:
        if state.trip_status.is_terminal:
            self.trip_states.pop(state.trip_id, None)
            self.finished_trip_ids.add(state.trip_id)
        else:
            self.trip_states[state.trip_id] = state

        if state.trip_status is TripStatus.UNKNOWN_TRIP_STATUS:
            return
        try:
            await self.provider.update_trip_status(state)
        except ProviderError:
            logger.exception("Could not push %s for trip %s", state.trip_status.value, state.trip_id)
