"""
Clock arithmetic on a minutes-since-midnight scale.

Stylist working hours are stored the way the booking UI collects them:
a 12-hour clock string ("9:30") plus a period ("AM"/"PM"). Slot generation
and eligibility checks both go through these helpers so they agree on the
same minute-granularity clock.
"""
import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Tuple

from salon_scheduler.core.errors import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60
PERIODS = ("AM", "PM")
CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)


def to_minutes(hour: int, minute: int, period: str) -> int:
    """
    Convert a 12-hour clock time to minutes since midnight.

    12 AM is midnight (0), 12 PM is noon (720), other PM hours add 12.
    Raises InvalidTimeFormat for hours outside 1-12, minutes outside 0-59
    or an unknown period.
    """
    if isinstance(hour, bool) or not isinstance(hour, int) or not 1 <= hour <= 12:
        raise InvalidTimeFormat(f"Hour must be between 1 and 12, got {hour!r}")
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute <= 59:
        raise InvalidTimeFormat(f"Minute must be between 0 and 59, got {minute!r}")

    period_upper = str(period).upper()
    if period_upper not in PERIODS:
        raise InvalidTimeFormat(f"Period must be AM or PM, got {period!r}")

    hour24 = hour
    if period_upper == "PM" and hour != 12:
        hour24 = hour + 12
    elif period_upper == "AM" and hour == 12:
        hour24 = 0

    return hour24 * 60 + minute


def parse_clock(value: str) -> Tuple[int, int]:
    """Parse "h:mm" / "hh:mm" into (hour, minute) without range checks."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(f"Time must be a string like '9:00', got {value!r}")

    match = CLOCK_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(f"Time must look like 'h:mm', got {value!r}")

    return int(match.group(1)), int(match.group(2))


def clock_to_minutes(value: str, period: str) -> int:
    """Minutes since midnight for a stored "h:mm" + period pair."""
    hour, minute = parse_clock(value)
    return to_minutes(hour, minute, period)


def from_minutes(minutes: int) -> Tuple[int, int, str]:
    """Inverse of to_minutes: (hour 1-12, minute, "AM"/"PM")."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Minutes must be within one day, got {minutes}")

    hour24, minute = divmod(minutes, 60)
    period = "AM" if hour24 < 12 else "PM"
    hour = hour24 % 12 or 12
    return hour, minute, period


def format_24h(minutes: int) -> str:
    """Minutes since midnight as "HH:mm"."""
    hour24, minute = divmod(minutes, 60)
    return f"{hour24:02d}:{minute:02d}"


def format_display(minutes: int) -> str:
    """Minutes since midnight as "h:mm AM"."""
    hour, minute, period = from_minutes(minutes)
    return f"{hour}:{minute:02d} {period}"


def local_day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """
    Aware [start, next_start) instants of a local calendar day.

    Computed through the wall clock so DST transition days come out 23 or
    25 hours long.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def at_minutes(day: date, minutes: int, tz: tzinfo) -> datetime:
    """Aware local datetime for a wall-clock minute on a calendar day."""
    hour24, minute = divmod(minutes, 60)
    return datetime.combine(day, time(hour24, minute), tzinfo=tz)
