"""Error taxonomy shared by the domain and the polling layer."""


class FatalTripError(Exception):
    """Configuration errors that abort immediately and are never retried."""


class InvalidWaypointType(FatalTripError, ValueError):
    """Raised when a waypoint type is not pickup, drop-off or intermediate."""


class MissingTripState(FatalTripError):
    """Raised when an operation needs state that was never provided."""


class SuccessConditionNotMet(Exception):
    """An attempt completed but its result was rejected; retried like a failure."""


class RetriesExhausted(Exception):
    """Raised once the retry budget is spent.  The last failure is chained."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class TripAlreadyFinished(Exception):
    """Raised when accepting a trip this vehicle has already completed or canceled."""
