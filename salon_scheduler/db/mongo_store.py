"""
MongoDB-backed appointment store.

Bookings run in a multi-document transaction. MongoDB transactions use
snapshot isolation, which on its own lets two bookings read the same empty
day and both insert. Every booking transaction therefore first writes the
partition document for its (stylist, day); concurrent transactions on the
same partition then hit a write conflict and all but one are retried.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReadPreference
from pymongo.errors import ConnectionFailure, PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from salon_scheduler.core.errors import StoreUnavailable, TransactionConflict
from salon_scheduler.db.appointment_store import AppointmentStore, TransactionWork, parse_availability
from salon_scheduler.schemas.appointment import AppointmentStatus, ScheduledInterval
from salon_scheduler.schemas.schedule import StylistAvailability

logger = logging.getLogger(__name__)


def _partition_id(stylist_id: str, day: date) -> str:
    return f"{stylist_id}:{day.isoformat()}"


def _scheduled_query(stylist_id: str, start: datetime, end: datetime) -> Dict[str, Any]:
    return {
        "stylistId": stylist_id,
        "status": AppointmentStatus.SCHEDULED.value,
        "dateTime": {"$gte": start, "$lt": end},
    }


def _to_interval(doc: Dict[str, Any]) -> ScheduledInterval:
    return ScheduledInterval(
        id=str(doc["_id"]),
        dateTime=doc["dateTime"],
        duration=doc["duration"],
    )


class MongoTransaction:
    def __init__(self, store: "MongoAppointmentStore", stylist_id: str, session):
        self.store = store
        self.stylist_id = stylist_id
        self.session = session

    async def query_scheduled(self, start: datetime, end: datetime) -> List[ScheduledInterval]:
        cursor = self.store.database.appointments.find(
            _scheduled_query(self.stylist_id, start, end),
            {"dateTime": 1, "duration": 1},
            session=self.session,
        ).sort("dateTime", 1)
        docs = await cursor.to_list(length=None)
        return [_to_interval(doc) for doc in docs]

    async def insert(self, appointment: Dict[str, Any]) -> str:
        document = dict(appointment)
        document["_id"] = ObjectId(document["_id"])
        result = await self.store.database.appointments.insert_one(document, session=self.session)
        return str(result.inserted_id)


class MongoAppointmentStore(AppointmentStore):
    def __init__(self, client, database, max_retries: int = 5, retry_backoff: float = 0.05):
        super().__init__(max_retries=max_retries, retry_backoff=retry_backoff)
        self.client = client
        self.database = database

    async def get_availability(self, stylist_id: str) -> Optional[StylistAvailability]:
        try:
            document = await self.database.stylist_availability.find_one({"stylistId": stylist_id})
        except PyMongoError as e:
            logger.error(f"Could not load availability for stylist {stylist_id}: {e}")
            raise StoreUnavailable(stylistId=stylist_id) from e

        if not document:
            return None
        return parse_availability(stylist_id, document)

    async def find_scheduled(
        self, stylist_id: str, start: datetime, end: datetime
    ) -> List[ScheduledInterval]:
        try:
            cursor = self.database.appointments.find(
                _scheduled_query(stylist_id, start, end),
                {"dateTime": 1, "duration": 1},
            ).sort("dateTime", 1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Could not load appointments for stylist {stylist_id}: {e}")
            raise StoreUnavailable(stylistId=stylist_id) from e
        return [_to_interval(doc) for doc in docs]

    async def _run_once(self, stylist_id: str, day: date, work: TransactionWork):
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction(
                    read_concern=ReadConcern("snapshot"),
                    write_concern=WriteConcern("majority"),
                    read_preference=ReadPreference.PRIMARY,
                ):
                    await self.database.booking_partitions.update_one(
                        {"_id": _partition_id(stylist_id, day)},
                        {
                            "$inc": {"version": 1},
                            "$set": {"updatedAt": datetime.now(timezone.utc)},
                        },
                        upsert=True,
                        session=session,
                    )
                    return await work(MongoTransaction(self, stylist_id, session))
        except PyMongoError as e:
            if e.has_error_label("TransientTransactionError") or e.has_error_label(
                "UnknownTransactionCommitResult"
            ):
                raise TransactionConflict(str(e)) from e
            if isinstance(e, ConnectionFailure):
                logger.error(f"MongoDB unreachable during booking transaction: {e}")
            else:
                logger.error(f"Booking transaction failed: {e}", exc_info=True)
            raise StoreUnavailable(stylistId=stylist_id) from e
