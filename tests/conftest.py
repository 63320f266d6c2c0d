import pytest
import pytest_asyncio
from datetime import date, datetime, timezone
from httpx import AsyncClient, ASGITransport

from salon_scheduler.core.clock import FixedClock
from salon_scheduler.db.memory_store import InMemoryAppointmentStore
from salon_scheduler.main import create_app

STYLIST_ID = "stylist-ava"

# 2026-10-26 is a Monday
MONDAY = date(2026, 10, 26)
TUESDAY = date(2026, 10, 27)
WEDNESDAY = date(2026, 10, 28)

DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def time_range(start, start_period, end, end_period, range_id="range"):
    return {
        "start": start,
        "startPeriod": start_period,
        "end": end,
        "endPeriod": end_period,
        "id": range_id,
    }


def availability_document(exceptions=None, tz="UTC", **days):
    """Availability settings with every day disabled unless given."""
    weekly = {day: {"enabled": False, "slots": []} for day in DAYS}
    weekly.update(days)
    return {
        "weeklySchedule": weekly,
        "exceptions": [{"date": d} for d in (exceptions or [])],
        "timezone": tz,
        "lastUpdated": "2026-10-01T08:00:00+00:00",
    }


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    # Sunday noon, the day before MONDAY
    return FixedClock(utc(2026, 10, 25, 12, 0))


@pytest.fixture
def salon_hours():
    """Monday mornings, and a split Tuesday stored afternoon-first."""
    return availability_document(
        monday={
            "enabled": True,
            "slots": [time_range("9:00", "AM", "12:00", "PM", "mon-am")],
        },
        tuesday={
            "enabled": True,
            "slots": [
                time_range("1:00", "PM", "5:00", "PM", "tue-pm"),
                time_range("9:00", "AM", "12:00", "PM", "tue-am"),
            ],
        },
    )


@pytest.fixture
def store(salon_hours):
    store = InMemoryAppointmentStore(max_retries=5, retry_backoff=0.0)
    store.put_availability(STYLIST_ID, salon_hours)
    return store


@pytest_asyncio.fixture
async def client(store, clock):
    app = create_app(store=store, clock=clock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
