"""
Error taxonomy for the availability and booking engine.

Every error carries a stable ``code`` for API clients, a user-facing
``message`` and whether retrying the same request may succeed.
"""
from typing import Any, Dict, Optional


class SchedulingError(Exception):
    code = "SCHEDULING_ERROR"
    status_code = 400
    retryable = False
    default_message = "Scheduling request could not be processed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            body["details"] = self.details
        return body


class ScheduleUnavailable(SchedulingError):
    """No working-hours configuration exists for the stylist."""
    code = "SCHEDULE_UNAVAILABLE"
    status_code = 404
    default_message = "Schedule not available"


class InvalidTimeFormat(SchedulingError):
    """A stored or supplied clock time cannot be interpreted."""
    code = "INVALID_TIME_FORMAT"
    status_code = 422
    default_message = "Invalid time format"


class InvalidDuration(SchedulingError):
    code = "INVALID_DURATION"
    status_code = 422
    default_message = "Service duration must be a positive number of minutes"


class SlotUnavailable(SchedulingError):
    """The requested start time is outside bookable hours."""
    code = "SLOT_UNAVAILABLE"
    status_code = 422
    default_message = "The requested time is not bookable"


class DoubleBooking(SchedulingError):
    """An overlapping Scheduled appointment already exists."""
    code = "DOUBLE_BOOKING"
    status_code = 409
    default_message = "This time slot is already booked. Please select a different time."


class StoreUnavailable(SchedulingError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
    retryable = True
    default_message = "Booking service is temporarily unavailable. Please try again."


class BookingTimeout(StoreUnavailable):
    code = "BOOKING_TIMEOUT"
    default_message = "Booking took too long to complete. Please try again."


class TransactionConflict(Exception):
    """
    Raised by a store when a transaction lost a serialization race.

    Never reaches API callers: the store retries the unit of work and turns
    exhausted retries into StoreUnavailable.
    """
