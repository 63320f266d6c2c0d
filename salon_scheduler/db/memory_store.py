"""
In-process appointment store for local development and tests.

Transactions read from a snapshot taken when they start and buffer their
inserts. At commit the partition version is compared with the one seen at
start (compare-and-swap); if another booking committed to the same
(stylist, day) in between, the transaction is discarded and reported as a
TransactionConflict so the retry loop re-runs it against fresh data.
"""
import asyncio
import copy
import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId

from salon_scheduler.core.errors import TransactionConflict
from salon_scheduler.db.appointment_store import AppointmentStore, TransactionWork, parse_availability
from salon_scheduler.schemas.appointment import AppointmentStatus, ScheduledInterval
from salon_scheduler.schemas.schedule import StylistAvailability

logger = logging.getLogger(__name__)


def _scheduled_between(
    appointments, stylist_id: str, start: datetime, end: datetime
) -> List[ScheduledInterval]:
    matches = [
        ScheduledInterval(id=doc["_id"], dateTime=doc["dateTime"], duration=doc["duration"])
        for doc in appointments
        if doc["stylistId"] == stylist_id
        and doc["status"] == AppointmentStatus.SCHEDULED.value
        and start <= doc["dateTime"] < end
    ]
    return sorted(matches, key=lambda appt: appt.dateTime)


class MemoryTransaction:
    def __init__(self, stylist_id: str, snapshot: List[Dict[str, Any]]):
        self.stylist_id = stylist_id
        self.snapshot = snapshot
        self.pending: List[Dict[str, Any]] = []

    async def query_scheduled(self, start: datetime, end: datetime) -> List[ScheduledInterval]:
        # yield like a real round trip would, so concurrent bookings interleave
        await asyncio.sleep(0)
        return _scheduled_between(self.snapshot + self.pending, self.stylist_id, start, end)

    async def insert(self, appointment: Dict[str, Any]) -> str:
        await asyncio.sleep(0)
        self.pending.append(dict(appointment))
        return appointment["_id"]


class InMemoryAppointmentStore(AppointmentStore):
    def __init__(self, max_retries: int = 5, retry_backoff: float = 0.0):
        super().__init__(max_retries=max_retries, retry_backoff=retry_backoff)
        self.availability: Dict[str, Dict[str, Any]] = {}
        self.appointments: Dict[str, Dict[str, Any]] = {}
        self._versions: Dict[Tuple[str, date], int] = defaultdict(int)
        self._commit_lock = asyncio.Lock()

    def put_availability(self, stylist_id: str, document: Dict[str, Any]) -> None:
        """Store availability settings as the provider settings screen would."""
        self.availability[stylist_id] = copy.deepcopy(document)

    def put_appointment(
        self,
        stylist_id: str,
        start: datetime,
        duration: int,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
        client_id: str = "client",
    ) -> str:
        """Record an existing appointment outside of the booking flow."""
        appointment_id = str(ObjectId())
        self.appointments[appointment_id] = {
            "_id": appointment_id,
            "stylistId": stylist_id,
            "clientId": client_id,
            "dateTime": start.astimezone(timezone.utc),
            "duration": duration,
            "status": status.value,
            "createdAt": datetime.now(timezone.utc),
        }
        return appointment_id

    async def get_availability(self, stylist_id: str) -> Optional[StylistAvailability]:
        document = self.availability.get(stylist_id)
        if document is None:
            return None
        return parse_availability(stylist_id, document)

    async def find_scheduled(
        self, stylist_id: str, start: datetime, end: datetime
    ) -> List[ScheduledInterval]:
        return _scheduled_between(self.appointments.values(), stylist_id, start, end)

    async def _run_once(self, stylist_id: str, day: date, work: TransactionWork):
        key = (stylist_id, day)
        version = self._versions[key]
        txn = MemoryTransaction(stylist_id, [dict(doc) for doc in self.appointments.values()])

        result = await work(txn)

        async with self._commit_lock:
            if self._versions[key] != version:
                raise TransactionConflict(f"Partition {stylist_id}/{day.isoformat()} changed")
            if txn.pending:
                for doc in txn.pending:
                    self.appointments[doc["_id"]] = doc
                self._versions[key] += 1
        return result
