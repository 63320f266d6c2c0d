from fastapi import APIRouter
from salon_scheduler.api.api_v1.endpoints import availability, bookings

router = APIRouter()

# Include all routers
router.include_router(availability.router, prefix="/availability", tags=["Availability"])
router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
