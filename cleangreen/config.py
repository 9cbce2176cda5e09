import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# Backend REST API that owns bookings, customers, promo codes, CMS content, etc.
BACKEND_API_URL = os.getenv("BACKEND_API_URL", "http://localhost:5000")
BACKEND_TIMEOUT_SECONDS = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "15"))

# Query cache staleness window for backend reads
QUERY_CACHE_TTL_SECONDS = int(os.getenv("QUERY_CACHE_TTL_SECONDS", "60"))
QUERY_CACHE_MAX_ENTRIES = int(os.getenv("QUERY_CACHE_MAX_ENTRIES", "5000"))

# Fixed daily slots offered by the booking wizard
TIME_SLOTS = [
    s.strip()
    for s in os.getenv("TIME_SLOTS", "8:00 AM,10:00 AM,12:00 PM,2:00 PM,4:00 PM").split(",")
    if s.strip()
]

PROPERTY_SIZES = [
    s.strip()
    for s in os.getenv(
        "PROPERTY_SIZES",
        "Small (< 1000 sq ft);Medium (1000-2000 sq ft);Large (2000-3000 sq ft);Extra Large (> 3000 sq ft)",
    ).split(";")
    if s.strip()
]

RECURRING_FREQUENCIES = ["weekly", "biweekly", "monthly"]

# Late cancellation policy: flat fee (cents) inside the window (hours)
CANCELLATION_FEE_CENTS = int(os.getenv("CANCELLATION_FEE_CENTS", "3500"))
CANCELLATION_WINDOW_HOURS = int(os.getenv("CANCELLATION_WINDOW_HOURS", "24"))

# Hosted payment element - the publishable key is safe to hand to the browser
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY")

# Frontend base URL for links in responses
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"{FRONTEND_URL},http://localhost:3000",
).split(",")

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Optional - rate limit windows are mirrored to Redis when set
REDIS_URL = os.getenv("REDIS_URL")
