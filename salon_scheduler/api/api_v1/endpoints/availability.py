from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from datetime import date, datetime

from salon_scheduler.api.deps import get_clock, get_store
from salon_scheduler.core.clock import Clock
from salon_scheduler.db.appointment_store import AppointmentStore
from salon_scheduler.schemas.schedule import StylistAvailability
from salon_scheduler.schemas.slot import SlotCheck, TimeSlotOption
from salon_scheduler.services.slot_service import check_time_slot, get_available_dates, get_candidate_slots
from salon_scheduler.services.stylist_service import get_availability

router = APIRouter()

@router.get("/{stylist_id}", response_model=StylistAvailability)
async def get_stylist_availability(
    stylist_id: str,
    store: AppointmentStore = Depends(get_store),
):
    """
    Get a stylist's weekly schedule and exception dates
    """
    return await get_availability(store, stylist_id)

@router.get("/{stylist_id}/slots", response_model=List[TimeSlotOption])
async def get_stylist_slots(
    stylist_id: str,
    date: date = Query(..., description="Calendar date in the stylist's timezone (YYYY-MM-DD)"),
    duration: int = Query(..., gt=0, description="Service duration in minutes"),
    store: AppointmentStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """
    Get bookable start times for a service on a date
    """
    return await get_candidate_slots(store, stylist_id, date, duration, clock.now())

@router.get("/{stylist_id}/dates", response_model=List[date])
async def get_stylist_available_dates(
    stylist_id: str,
    days: Optional[int] = Query(None, ge=1, le=90, description="Number of days to look ahead"),
    store: AppointmentStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """
    Get the upcoming dates on which the stylist takes bookings
    """
    return await get_available_dates(store, stylist_id, clock.now(), days)

@router.get("/{stylist_id}/check", response_model=SlotCheck)
async def check_stylist_time_slot(
    stylist_id: str,
    dateTime: datetime = Query(..., description="Requested start, ISO 8601 with offset"),
    duration: int = Query(..., gt=0, description="Service duration in minutes"),
    store: AppointmentStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """
    Check whether a specific start time can currently be booked
    """
    if dateTime.tzinfo is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="dateTime must include a timezone offset"
        )

    return await check_time_slot(store, stylist_id, dateTime, duration, clock.now())
