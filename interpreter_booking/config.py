import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interpreter_booking.db")

# Firebase Configuration (ID tokens are issued by Firebase Auth)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Billing defaults
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "GBP")
DEFAULT_PAYMENT_TERMS_DAYS = int(os.getenv("DEFAULT_PAYMENT_TERMS_DAYS", "30"))

# Booking operations
MIN_BOOKING_DURATION_MINUTES = int(os.getenv("MIN_BOOKING_DURATION_MINUTES", "30"))
DEFAULT_ONLINE_PLATFORM_URL = os.getenv(
    "DEFAULT_ONLINE_PLATFORM_URL", "https://meet.google.com/new"
)

# CORS - comma separated list of frontend origins
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")
