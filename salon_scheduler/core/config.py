from pydantic_settings import BaseSettings
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "SalonScheduler")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Store Settings ("mongo" or "memory")
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "mongo")
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017/?replicaSet=rs0")
    DB_NAME: str = os.getenv("DB_NAME", "salon_scheduler_db")

    # Scheduling
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    BOOKING_WINDOW_DAYS: int = int(os.getenv("BOOKING_WINDOW_DAYS", "14"))

    # Booking transactions
    BOOKING_TIMEOUT_SECONDS: float = float(os.getenv("BOOKING_TIMEOUT_SECONDS", "10"))
    BOOKING_MAX_RETRIES: int = int(os.getenv("BOOKING_MAX_RETRIES", "5"))
    BOOKING_RETRY_BACKOFF_SECONDS: float = float(os.getenv("BOOKING_RETRY_BACKOFF_SECONDS", "0.05"))

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Next.js frontend
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
