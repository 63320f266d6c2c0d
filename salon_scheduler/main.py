import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salon_scheduler.core.config import settings
from salon_scheduler.core.clock import Clock, SystemClock
from salon_scheduler.core.errors import SchedulingError
from salon_scheduler.api.api_v1.api import router as api_router
from salon_scheduler.db.appointment_store import AppointmentStore
from salon_scheduler.db.memory_store import InMemoryAppointmentStore
from salon_scheduler.db.mongo_store import MongoAppointmentStore
from salon_scheduler.db.mongodb import db, connect_to_mongo, close_mongo_connection

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

def create_app(store: Optional[AppointmentStore] = None, clock: Optional[Clock] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Salon availability and booking engine"
    )

    # Set up CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(api_router, prefix="/api/v1")

    app.state.store = store
    app.state.clock = clock or SystemClock()

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})

    # Store lifecycle, only when no store was injected
    @app.on_event("startup")
    async def startup_store():
        if app.state.store is not None:
            return
        if settings.STORE_BACKEND == "memory":
            logger.info("Using in-memory appointment store")
            app.state.store = InMemoryAppointmentStore(
                max_retries=settings.BOOKING_MAX_RETRIES,
                retry_backoff=settings.BOOKING_RETRY_BACKOFF_SECONDS,
            )
        else:
            await connect_to_mongo()
            app.state.store = MongoAppointmentStore(
                db.client,
                db.db,
                max_retries=settings.BOOKING_MAX_RETRIES,
                retry_backoff=settings.BOOKING_RETRY_BACKOFF_SECONDS,
            )

    @app.on_event("shutdown")
    async def shutdown_store():
        if isinstance(app.state.store, MongoAppointmentStore):
            await close_mongo_connection()

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.APP_NAME} API"}

    return app

app = create_app()
