from fastapi import Request

from salon_scheduler.core.clock import Clock
from salon_scheduler.db.appointment_store import AppointmentStore

def get_store(request: Request) -> AppointmentStore:
    return request.app.state.store

def get_clock(request: Request) -> Clock:
    return request.app.state.clock
