from fastapi import APIRouter, Depends, status

from salon_scheduler.api.deps import get_clock, get_store
from salon_scheduler.core.clock import Clock
from salon_scheduler.db.appointment_store import AppointmentStore
from salon_scheduler.schemas.appointment import AppointmentCreate, AppointmentResponse
from salon_scheduler.services.booking_service import book_appointment

router = APIRouter()

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_new_booking(
    booking_in: AppointmentCreate,
    store: AppointmentStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """
    Book an appointment. Responds 409 when the time was taken in the
    meantime, so the client can offer other slots.
    """
    appointment_id = await book_appointment(store, booking_in, clock.now())
    return {"appointmentId": appointment_id}
