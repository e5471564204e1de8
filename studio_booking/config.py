import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./studio_booking.db")

# Admin API token - CRITICAL: No default token in production
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")
if not ADMIN_API_TOKEN:
    import warnings

    warnings.warn(
        "ADMIN_API_TOKEN not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ADMIN_API_TOKEN = "INSECURE-DEV-TOKEN-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Default working window used when a weekday has no availability setting (HH:MM, local time)
WORKING_HOURS_START = os.getenv("WORKING_HOURS_START", "09:00")
WORKING_HOURS_END = os.getenv("WORKING_HOURS_END", "17:00")

# Comma-separated list of "days before" offsets for booking reminders, e.g. "7,1"
REMINDER_DAYS_BEFORE = [
    int(days) for days in os.getenv("REMINDER_DAYS_BEFORE", "1").split(",") if days.strip()
]
REMINDER_TYPE = os.getenv("REMINDER_TYPE", "email")

# Frontend base URL for links in emails
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"{FRONTEND_URL},http://localhost:3000",
).split(",")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
STUDIO_NAME = os.getenv("STUDIO_NAME", "Studio Photography")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{STUDIO_NAME} <bookings@example.com>")
# Studio inbox that receives a copy of every new booking request
STUDIO_NOTIFICATION_EMAIL = os.getenv("STUDIO_NOTIFICATION_EMAIL")

# Public booking submission rate limit (requests per window per IP)
BOOKING_RATE_LIMIT = int(os.getenv("BOOKING_RATE_LIMIT", "10"))
BOOKING_RATE_WINDOW = int(os.getenv("BOOKING_RATE_WINDOW", "60"))

# Redis (rate limiting and the background worker)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
