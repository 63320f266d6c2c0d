from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class TimeSlotOption(BaseModel):
    dateTime: datetime  # aware start instant
    startTime: str  # "14:30"
    displayTime: str  # "2:30 PM"

class SlotCheck(BaseModel):
    available: bool
    conflictReason: Optional[str] = None
