"""
Appointment store contract.

The booking engine only needs two things from storage: the stylist's
availability settings, and a transaction scoped to one stylist's calendar
day in which it can list Scheduled appointments and insert a new one.
Serialization conflicts are retried here, transparently to callers.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypeVar

from pydantic import ValidationError

from salon_scheduler.core.errors import InvalidTimeFormat, StoreUnavailable, TransactionConflict
from salon_scheduler.schemas.appointment import ScheduledInterval
from salon_scheduler.schemas.schedule import StylistAvailability

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AppointmentTransaction(Protocol):
    async def query_scheduled(self, start: datetime, end: datetime) -> List[ScheduledInterval]:
        ...

    async def insert(self, appointment: Dict[str, Any]) -> str:
        ...


TransactionWork = Callable[[AppointmentTransaction], Awaitable[T]]


def parse_availability(stylist_id: str, document: Dict[str, Any]) -> StylistAvailability:
    """Validate a stored availability document."""
    data = dict(document)
    data.pop("_id", None)
    data.setdefault("stylistId", stylist_id)
    try:
        return StylistAvailability.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid availability settings for stylist {stylist_id}: {e}")
        raise InvalidTimeFormat(
            "Stylist working hours are misconfigured",
            stylistId=stylist_id,
            errors=[err["msg"] for err in e.errors()],
        )


class AppointmentStore(ABC):
    def __init__(self, max_retries: int = 5, retry_backoff: float = 0.05):
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

    @abstractmethod
    async def get_availability(self, stylist_id: str) -> Optional[StylistAvailability]:
        """Availability settings, or None when the stylist has none."""

    @abstractmethod
    async def find_scheduled(
        self, stylist_id: str, start: datetime, end: datetime
    ) -> List[ScheduledInterval]:
        """Scheduled appointments starting in [start, end), outside any transaction."""

    @abstractmethod
    async def _run_once(self, stylist_id: str, day: date, work: TransactionWork) -> T:
        """Run work in one transaction attempt; raise TransactionConflict if it lost a race."""

    async def run_transaction(self, stylist_id: str, day: date, work: TransactionWork) -> T:
        """
        Run work atomically against the (stylist, day) partition.

        Business errors raised by work abort the transaction and propagate
        untouched. Lost serialization races are retried with exponential
        backoff up to max_retries attempts.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._run_once(stylist_id, day, work)
            except TransactionConflict:
                if attempt == self.max_retries:
                    break
                delay = self.retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    f"Transaction conflict on {stylist_id}/{day.isoformat()}, "
                    f"retrying (attempt {attempt}/{self.max_retries}) in {delay:.3f}s"
                )
                await asyncio.sleep(delay)

        logger.error(
            f"Giving up on {stylist_id}/{day.isoformat()} after {self.max_retries} conflicting attempts"
        )
        raise StoreUnavailable(
            "The calendar is busy right now. Please try again.",
            stylistId=stylist_id,
        )
