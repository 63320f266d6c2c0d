from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from salon_scheduler.core.config import settings
from salon_scheduler.core.errors import InvalidTimeFormat, ScheduleUnavailable
from salon_scheduler.db.appointment_store import AppointmentStore
from salon_scheduler.schemas.schedule import StylistAvailability

logger = logging.getLogger(__name__)

async def get_availability(store: AppointmentStore, stylist_id: str) -> StylistAvailability:
    """
    Get a stylist's availability settings, raising ScheduleUnavailable when
    the stylist has never configured working hours
    """
    availability = await store.get_availability(stylist_id)
    if availability is None:
        logger.warning(f"No availability settings found for stylist: {stylist_id}")
        raise ScheduleUnavailable(stylistId=stylist_id)
    return availability

def stylist_timezone(availability: StylistAvailability, default: Optional[str] = None) -> ZoneInfo:
    """
    Timezone the stylist's working hours are expressed in
    """
    name = availability.timezone or default or settings.DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimeFormat(
            f"Unknown timezone '{name}'",
            stylistId=availability.stylistId,
        )
