"""Domain enumerations: trip lifecycle, waypoint types and consumer app states."""

from __future__ import annotations

import enum

from .errors import InvalidWaypointType


class TripStatus(str, enum.Enum):
    UNKNOWN_TRIP_STATUS = "UNKNOWN_TRIP_STATUS"
    NEW = "NEW"
    ENROUTE_TO_PICKUP = "ENROUTE_TO_PICKUP"
    ARRIVED_AT_PICKUP = "ARRIVED_AT_PICKUP"
    ENROUTE_TO_INTERMEDIATE_DESTINATION = "ENROUTE_TO_INTERMEDIATE_DESTINATION"
    ARRIVED_AT_INTERMEDIATE_DESTINATION = "ARRIVED_AT_INTERMEDIATE_DESTINATION"
    ENROUTE_TO_DROPOFF = "ENROUTE_TO_DROPOFF"
    COMPLETE = "COMPLETE"
    CANCELED = "CANCELED"

    @property
    def code(self) -> int:
        """Fleet Engine numeric code (``trips.proto``)."""
        return TRIP_STATUS_CODES[self]

    @property
    def rank(self) -> int:
        """Position in the canonical lifecycle ordering."""
        return CANONICAL_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_TRIP_STATUSES

    @classmethod
    def parse(cls, value: str | None) -> "TripStatus":
        """Map a provider status string to a member; unknown names are UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN_TRIP_STATUS


TRIP_STATUS_CODES: dict[TripStatus, int] = {
    TripStatus.UNKNOWN_TRIP_STATUS: 0,
    TripStatus.NEW: 1,
    TripStatus.ENROUTE_TO_PICKUP: 2,
    TripStatus.ARRIVED_AT_PICKUP: 3,
    TripStatus.ENROUTE_TO_DROPOFF: 4,
    TripStatus.COMPLETE: 5,
    TripStatus.CANCELED: 6,
    TripStatus.ARRIVED_AT_INTERMEDIATE_DESTINATION: 7,
    TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION: 8,
}

CANONICAL_ORDER: tuple[TripStatus, ...] = (
    TripStatus.UNKNOWN_TRIP_STATUS,
    TripStatus.NEW,
    TripStatus.ENROUTE_TO_PICKUP,
    TripStatus.ARRIVED_AT_PICKUP,
    TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION,
    TripStatus.ARRIVED_AT_INTERMEDIATE_DESTINATION,
    TripStatus.ENROUTE_TO_DROPOFF,
    TripStatus.COMPLETE,
    TripStatus.CANCELED,
)

TERMINAL_TRIP_STATUSES: frozenset[TripStatus] = frozenset(
    {TripStatus.COMPLETE, TripStatus.CANCELED, TripStatus.UNKNOWN_TRIP_STATUS}
)

ENROUTE_TRIP_STATUSES: frozenset[TripStatus] = frozenset(
    {
        TripStatus.ENROUTE_TO_PICKUP,
        TripStatus.ENROUTE_TO_INTERMEDIATE_DESTINATION,
        TripStatus.ENROUTE_TO_DROPOFF,
    }
)

ARRIVED_TRIP_STATUSES: frozenset[TripStatus] = frozenset(
    {
        TripStatus.ARRIVED_AT_PICKUP,
        TripStatus.ARRIVED_AT_INTERMEDIATE_DESTINATION,
        TripStatus.COMPLETE,
    }
)


class WaypointType(str, enum.Enum):
    PICKUP = "PICKUP_WAYPOINT_TYPE"
    DROP_OFF = "DROP_OFF_WAYPOINT_TYPE"
    INTERMEDIATE_DESTINATION = "INTERMEDIATE_DESTINATION_WAYPOINT_TYPE"

    @classmethod
    def parse(cls, value: "WaypointType | str") -> "WaypointType":
        """Accept a member, the provider string or the short member name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[value]
        except KeyError:
            raise InvalidWaypointType(f"Invalid waypoint type: {value!r}") from None


class AppState(int, enum.Enum):
    """Consumer session states."""

    UNINITIALIZED = 0
    INITIALIZED = 1
    SELECTING_DROPOFF = 2
    SELECTING_PICKUP = 3
    CONFIRMING_TRIP = 4
    JOURNEY_SHARING = 5
    TRIP_CANCELED = 6
    TRIP_COMPLETE = 7
