"""
Slot generation and time-slot eligibility.

Candidate start times step by the service duration, so the options shown
for one service never overlap each other: a 60 minute service in a
9:00 AM - 12:00 PM range offers 9:00, 10:00 and 11:00.
"""
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from salon_scheduler.core.config import settings
from salon_scheduler.core.errors import InvalidDuration, InvalidTimeFormat
from salon_scheduler.db.appointment_store import AppointmentStore
from salon_scheduler.schemas.appointment import ScheduledInterval
from salon_scheduler.schemas.schedule import StylistAvailability, WeeklySchedule
from salon_scheduler.schemas.slot import SlotCheck, TimeSlotOption
from salon_scheduler.services.overlap import first_overlap
from salon_scheduler.services.stylist_service import get_availability, stylist_timezone
from salon_scheduler.utils.time_utils import (
    at_minutes,
    format_24h,
    format_display,
    local_day_bounds,
)

logger = logging.getLogger(__name__)

DAY_NOT_ENABLED = "Stylist is not available on this day"
DAY_BLOCKED = "Stylist has marked this day as unavailable"
OUTSIDE_HOURS = "Appointment time is outside of working hours"
IN_THE_PAST = "Appointment time has already passed"
CONFLICTS = "Time slot conflicts with an existing appointment"


def require_positive_duration(duration: int) -> None:
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise InvalidDuration(duration=duration)


def _working_ranges(schedule: WeeklySchedule, day: date) -> List[Tuple[int, int]]:
    """(start, end) minute pairs for the day, sorted by start."""
    ranges = []
    for time_range in schedule.for_date(day).slots:
        start_minutes, end_minutes = time_range.minutes()
        if start_minutes >= end_minutes:
            raise InvalidTimeFormat(
                f"Working hours {time_range.id} end before they start",
                rangeId=time_range.id,
            )
        ranges.append((start_minutes, end_minutes))
    return sorted(ranges)


def is_bookable_day(schedule: WeeklySchedule, exceptions: Iterable[date], day: date) -> bool:
    return schedule.for_date(day).is_bookable and day not in set(exceptions)


def generate_slots(
    schedule: WeeklySchedule,
    exceptions: Iterable[date],
    day: date,
    duration: int,
    existing: Sequence[ScheduledInterval],
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> List[TimeSlotOption]:
    """
    Bookable start times on a local calendar day.

    Args:
        schedule: weekly working hours
        exceptions: dates blocked regardless of the weekly pattern
        day: local calendar date to generate for
        duration: service duration in minutes
        existing: Scheduled appointments of the stylist around that day
        now: current instant; only starts strictly after it are offered
        tz: timezone the working hours are expressed in

    Returns:
        Options in ascending time order. Empty only when the day is not
        bookable or every candidate is taken or past.
    """
    require_positive_duration(duration)

    if not is_bookable_day(schedule, exceptions, day):
        return []

    seen = set()
    options = []

    for start_minutes, end_minutes in _working_ranges(schedule, day):
        for minutes in range(start_minutes, end_minutes - duration + 1, duration):
            if minutes in seen:
                continue

            slot_start = at_minutes(day, minutes, tz)

            # Skip if slot is not in the future
            if not slot_start > now:
                continue

            if first_overlap(slot_start, duration, existing):
                continue

            seen.add(minutes)
            options.append(TimeSlotOption(
                dateTime=slot_start,
                startTime=format_24h(minutes),
                displayTime=format_display(minutes),
            ))

    options.sort(key=lambda option: option.dateTime)
    return options


async def get_candidate_slots(
    store: AppointmentStore,
    stylist_id: str,
    day: date,
    duration: int,
    now: datetime,
) -> List[TimeSlotOption]:
    """
    Load the stylist's schedule and Scheduled appointments, then generate
    the bookable start times for a local calendar day
    """
    require_positive_duration(duration)

    availability = await get_availability(store, stylist_id)
    tz = stylist_timezone(availability)
    exceptions = availability.exception_dates()

    if not is_bookable_day(availability.weeklySchedule, exceptions, day):
        return []

    day_start, day_end = local_day_bounds(day, tz)
    existing = await store.find_scheduled(stylist_id, day_start, day_end)

    return generate_slots(
        availability.weeklySchedule, exceptions, day, duration, existing, now, tz
    )


async def get_available_dates(
    store: AppointmentStore,
    stylist_id: str,
    now: datetime,
    days: Optional[int] = None,
) -> List[date]:
    """
    Dates in the booking window (starting today, in the stylist's timezone)
    that are enabled, have working hours and are not blocked
    """
    availability = await get_availability(store, stylist_id)
    tz = stylist_timezone(availability)
    exceptions = availability.exception_dates()
    today = now.astimezone(tz).date()

    window = days if days is not None else settings.BOOKING_WINDOW_DAYS
    return [
        today + timedelta(days=offset)
        for offset in range(window)
        if is_bookable_day(availability.weeklySchedule, exceptions, today + timedelta(days=offset))
    ]


def working_hours_violation(
    availability: StylistAvailability,
    start: datetime,
    duration: int,
    now: datetime,
    tz: tzinfo,
) -> Optional[str]:
    """
    Reason a start time cannot be booked under the stylist's schedule,
    ignoring other appointments. None when it fits.
    """
    local_start = start.astimezone(tz)
    day = local_start.date()
    day_schedule = availability.weeklySchedule.for_date(day)

    if not day_schedule.is_bookable:
        return DAY_NOT_ENABLED

    if availability.is_exception(day):
        return DAY_BLOCKED

    local_end = local_start + timedelta(minutes=duration)
    fits = any(
        at_minutes(day, range_start, tz) <= local_start and local_end <= at_minutes(day, range_end, tz)
        for range_start, range_end in _working_ranges(availability.weeklySchedule, day)
    )
    if not fits:
        return OUTSIDE_HOURS

    if not start > now:
        return IN_THE_PAST

    return None


async def check_time_slot(
    store: AppointmentStore,
    stylist_id: str,
    start: datetime,
    duration: int,
    now: datetime,
) -> SlotCheck:
    """
    Check whether a stylist can take an appointment at a given time.
    Read-only: a positive answer is not a reservation.
    """
    require_positive_duration(duration)

    availability = await get_availability(store, stylist_id)
    tz = stylist_timezone(availability)

    reason = working_hours_violation(availability, start, duration, now, tz)
    if reason:
        return SlotCheck(available=False, conflictReason=reason)

    day_start, day_end = local_day_bounds(start.astimezone(tz).date(), tz)
    existing = await store.find_scheduled(stylist_id, day_start, day_end)
    if first_overlap(start, duration, existing):
        return SlotCheck(available=False, conflictReason=CONFLICTS)

    return SlotCheck(available=True)
