from typing import Any, Dict, Optional
from datetime import datetime, timezone
import asyncio
import logging

from bson import ObjectId

from salon_scheduler.core.config import settings
from salon_scheduler.core.errors import BookingTimeout, DoubleBooking, SlotUnavailable
from salon_scheduler.db.appointment_store import AppointmentStore, AppointmentTransaction
from salon_scheduler.schemas.appointment import AppointmentCreate, AppointmentStatus
from salon_scheduler.services.overlap import first_overlap
from salon_scheduler.services.slot_service import require_positive_duration, working_hours_violation
from salon_scheduler.services.stylist_service import get_availability, stylist_timezone
from salon_scheduler.utils.time_utils import local_day_bounds

logger = logging.getLogger(__name__)

def _appointment_document(appointment_id: str, booking_in: AppointmentCreate, now: datetime) -> Dict[str, Any]:
    booking_data = booking_in.model_dump()
    booking_data["_id"] = appointment_id
    booking_data["dateTime"] = booking_in.dateTime.astimezone(timezone.utc)
    booking_data["status"] = AppointmentStatus.SCHEDULED.value
    booking_data["createdAt"] = now
    return booking_data

async def book_appointment(
    store: AppointmentStore,
    booking_in: AppointmentCreate,
    now: datetime,
    timeout: Optional[float] = None,
) -> str:
    """
    Create a Scheduled appointment unless it would overlap another one.

    The overlap check and the insert run in one transaction scoped to the
    stylist's local calendar day, so of several concurrent requests for
    overlapping times exactly one commits and the rest get DoubleBooking.

    Args:
        store: appointment store
        booking_in: requested appointment
        now: current instant
        timeout: seconds before the attempt is abandoned

    Returns:
        The new appointment's ID

    Raises:
        ScheduleUnavailable, InvalidTimeFormat, InvalidDuration,
        SlotUnavailable: the request failed validation
        DoubleBooking: an overlapping appointment exists
        StoreUnavailable, BookingTimeout: infrastructure failure, retryable
    """
    require_positive_duration(booking_in.duration)

    # Validating
    availability = await get_availability(store, booking_in.stylistId)
    tz = stylist_timezone(availability)

    reason = working_hours_violation(availability, booking_in.dateTime, booking_in.duration, now, tz)
    if reason:
        logger.info(f"Rejected booking for stylist {booking_in.stylistId} at {booking_in.dateTime.isoformat()}: {reason}")
        raise SlotUnavailable(reason, stylistId=booking_in.stylistId, requestedStart=booking_in.dateTime.isoformat())

    day = booking_in.dateTime.astimezone(tz).date()
    day_start, day_end = local_day_bounds(day, tz)

    # Generated up front so a retried transaction can recognise its own
    # insert when the previous commit outcome was unknown
    appointment_id = str(ObjectId())
    document = _appointment_document(appointment_id, booking_in, now)

    # Conflict check
    async def reserve(txn: AppointmentTransaction) -> str:
        existing = await txn.query_scheduled(day_start, day_end)

        if any(appt.id == appointment_id for appt in existing):
            return appointment_id

        conflict = first_overlap(booking_in.dateTime, booking_in.duration, existing)
        if conflict:
            raise DoubleBooking(
                stylistId=booking_in.stylistId,
                requestedStart=booking_in.dateTime.isoformat(),
                conflictingStart=conflict.dateTime.isoformat(),
                conflictingEnd=conflict.end.isoformat(),
            )

        return await txn.insert(document)

    limit = timeout if timeout is not None else settings.BOOKING_TIMEOUT_SECONDS
    try:
        created_id = await asyncio.wait_for(
            store.run_transaction(booking_in.stylistId, day, reserve),
            timeout=limit,
        )
    except asyncio.TimeoutError:
        logger.error(f"Booking for stylist {booking_in.stylistId} timed out after {limit}s")
        raise BookingTimeout(stylistId=booking_in.stylistId)
    except DoubleBooking:
        logger.info(f"Double booking prevented for stylist {booking_in.stylistId} at {booking_in.dateTime.isoformat()}")
        raise

    logger.info(f"Successfully created appointment {created_id} for stylist {booking_in.stylistId}")
    return created_id
