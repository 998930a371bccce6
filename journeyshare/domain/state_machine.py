"""
Trip status state machine.

Linear lifecycle with one optional loop through intermediate destinations::

    NEW -> ENROUTE_TO_PICKUP -> ARRIVED_AT_PICKUP
        -> (ENROUTE_TO_INTERMEDIATE_DESTINATION -> ARRIVED_AT_INTERMEDIATE_DESTINATION)*
        -> ENROUTE_TO_DROPOFF -> COMPLETE

COMPLETE, CANCELED and UNKNOWN_TRIP_STATUS are terminal and map to
themselves.  The next waypoint type only matters when leaving one of the
ARRIVED_AT_* statuses; everywhere else it is ignored.
"""

from __future__ import annotations

from typing import Union

from .entities import TripState, Waypoint
from .enums import (
    ARRIVED_TRIP_STATUSES,
    ENROUTE_TRIP_STATUSES,
    TripStatus,
    WaypointType,
)
from .errors import MissingTripState

WaypointLike = Union[Waypoint, WaypointType, str, None]

# Transitions that do not depend on the next waypoint.
_FIXED_TRANSITIONS: dict[TripStatus, TripStatus] = {
    TripStatus.NEW: TripStatus.ENROUTE_TO_PICKUP,
    TripStatus.ENROUTE_TO_PICKUP: TripStatus.ARRIVED_AT_PICKUP,
    TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION: TripStatus.ARRIVED_AT_INTERMEDIATE_DESTINATION,
    TripStatus.ENROUTE_TO_DROPOFF: TripStatus.COMPLETE,
}


def _waypoint_type(current: TripStatus, next_waypoint: WaypointLike) -> WaypointType:
    if next_waypoint is None:
        raise MissingTripState(f"Next waypoint is required to leave {current.value}")
    if isinstance(next_waypoint, Waypoint):
        return next_waypoint.type
    return WaypointType.parse(next_waypoint)


def next_status(current: TripStatus, next_waypoint: WaypointLike = None) -> TripStatus:
    """Return the status following *current*.

    *next_waypoint* may be a ``Waypoint``, a ``WaypointType`` or its string
    form.  It is only consulted (and validated) at the two ARRIVED_AT_*
    branch points.
    """
    if current.is_terminal:
        return current

    fixed = _FIXED_TRANSITIONS.get(current)
    if fixed is not None:
        return fixed

    waypoint_type = _waypoint_type(current, next_waypoint)
    if current is TripStatus.ARRIVED_AT_PICKUP:
        if waypoint_type is WaypointType.INTERMEDIATE_DESTINATION:
            return TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION
        return TripStatus.ENROUTE_TO_DROPOFF

    # ARRIVED_AT_INTERMEDIATE_DESTINATION
    if waypoint_type is WaypointType.DROP_OFF:
        return TripStatus.ENROUTE_TO_DROPOFF
    return TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION


def initial_trip_state(trip_id: str) -> TripState:
    """State of a trip right after it has been matched and accepted."""
    return TripState(trip_id=trip_id, trip_status=TripStatus.NEW)


def next_trip_state(state: TripState, next_waypoint: WaypointLike = None) -> TripState:
    """Advance *state* by one step.

    The intermediate destination index only moves when entering
    ENROUTE_TO_INTERMEDIATE_DESTINATION; it is carried over otherwise.
    """
    status = next_status(state.trip_status, next_waypoint)
    if status is TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION:
        return state.with_status(status, state.intermediate_destination_index + 1)
    return state.with_status(status)


def enroute_state_for_waypoint(state: TripState, waypoint: Waypoint) -> TripState:
    """Jump a trip straight to the enroute status matching *waypoint*.

    Used when the vehicle arrives somewhere and the next waypoint belongs to
    another (back-to-back) trip.
    """
    if state.trip_status.is_terminal:
        return state

    waypoint_type = waypoint.type
    if waypoint_type is WaypointType.PICKUP:
        return TripState(state.trip_id, TripStatus.ENROUTE_TO_PICKUP)
    if waypoint_type is WaypointType.DROP_OFF:
        return TripState(state.trip_id, TripStatus.ENROUTE_TO_DROPOFF)
    return TripState(
        state.trip_id,
        TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION,
        state.intermediate_destination_index + 1,
    )


def is_enroute(status: TripStatus) -> bool:
    return status in ENROUTE_TRIP_STATUSES


def is_arrived(status: TripStatus) -> bool:
    return status in ARRIVED_TRIP_STATUSES

