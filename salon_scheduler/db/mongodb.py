from motor.motor_asyncio import AsyncIOMotorClient
from salon_scheduler.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Connect to MongoDB."""
    try:
        logger.info("Connecting to MongoDB...")
        # tz_aware so stored appointment instants come back as aware UTC datetimes
        db.client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
        db.db = db.client[settings.DB_NAME]
        logger.info("Connected to MongoDB.")

        # Create indexes for collections
        await create_indexes()

    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection():
    """Close MongoDB connection."""
    if db.client:
        logger.info("Closing MongoDB connection...")
        db.client.close()
        logger.info("MongoDB connection closed.")

async def create_indexes():
    """Create indexes for collections."""
    try:
        # Stylist availability settings, one document per stylist
        await db.db.stylist_availability.create_index("stylistId", unique=True)

        # Appointments collection indexes
        await db.db.appointments.create_index(
            [("stylistId", 1), ("status", 1), ("dateTime", 1)]
        )
        await db.db.appointments.create_index("clientId")

        logger.info("MongoDB indexes created successfully.")
    except Exception as e:
        logger.error(f"Failed to create MongoDB indexes: {e}")
