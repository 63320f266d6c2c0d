from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, timedelta, timezone
from enum import Enum

class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    PENDING_PAYMENT = "Pending Payment"

class AppointmentCreate(BaseModel):
    stylistId: str
    clientId: str
    dateTime: datetime
    duration: int = Field(..., gt=0)  # Duration in minutes
    clientName: Optional[str] = None
    serviceIds: List[str] = []
    serviceName: Optional[str] = None
    price: Optional[str] = None
    notes: str = ""

    @field_validator("dateTime")
    @classmethod
    def require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("dateTime must include a timezone offset")
        return value.astimezone(timezone.utc)

class ScheduledInterval(BaseModel):
    """The part of an appointment that takes part in overlap checks."""
    id: Optional[str] = None
    dateTime: datetime
    duration: int

    @property
    def end(self) -> datetime:
        return self.dateTime + timedelta(minutes=self.duration)

class AppointmentResponse(BaseModel):
    appointmentId: str
