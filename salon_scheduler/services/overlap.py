"""
Half-open interval overlap used by both slot generation and booking.

[s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1, so an appointment
ending at 11:00 does not conflict with one starting at 11:00.
"""
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from salon_scheduler.schemas.appointment import ScheduledInterval


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def find_overlapping(
    start: datetime,
    duration: int,
    existing: Iterable[ScheduledInterval],
) -> List[ScheduledInterval]:
    start = start.astimezone(timezone.utc)
    end = start + timedelta(minutes=duration)
    return [
        appt for appt in existing
        if intervals_overlap(start, end, appt.dateTime, appt.end)
    ]


def first_overlap(
    start: datetime,
    duration: int,
    existing: Iterable[ScheduledInterval],
) -> Optional[ScheduledInterval]:
    overlapping = find_overlapping(start, duration, existing)
    return overlapping[0] if overlapping else None
