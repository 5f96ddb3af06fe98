import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shiftly.db")

# Supabase Auth - access tokens are HS256 JWTs signed with the project secret
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
if not SUPABASE_JWT_SECRET:
    import warnings

    warnings.warn(
        "SUPABASE_JWT_SECRET not set! Authenticated routes will reject every token",
        RuntimeWarning,
        stacklevel=2,
    )

# Frontend base URL for invite links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Shiftly-NoReply <noreply@shiftly.app>")

# Invitations
INVITE_EXPIRY_HOURS = int(os.getenv("INVITE_EXPIRY_HOURS", "24"))

# Chat queue (Redis list per queue name)
CHAT_QUEUE_NAME = os.getenv("CHAT_QUEUE_NAME", "messages")
QUEUE_POLL_INTERVAL = float(os.getenv("QUEUE_POLL_INTERVAL", "1.0"))

# Azure AI Content Safety
CONTENT_SAFETY_ENDPOINT = os.getenv("CONTENT_SAFETY_ENDPOINT", "")
CONTENT_SAFETY_KEY = os.getenv("CONTENT_SAFETY_KEY")
CONTENT_SAFETY_API_VERSION = os.getenv("CONTENT_SAFETY_API_VERSION", "2023-10-01")
# Any category at or above this severity is treated as a violation
CONTENT_SAFETY_SEVERITY_THRESHOLD = int(os.getenv("CONTENT_SAFETY_SEVERITY_THRESHOLD", "2"))

# Nominatim (OpenStreetMap) geocoding
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "Shiftly/1.0")
# Nominatim usage policy allows one request per second
GEOCODE_DELAY_SECONDS = float(os.getenv("GEOCODE_DELAY_SECONDS", "1.1"))

# Clock in/out
CLOCK_RADIUS_METERS = int(os.getenv("CLOCK_RADIUS_METERS", "50"))
DEFAULT_STORE_TIMEZONE = os.getenv("DEFAULT_STORE_TIMEZONE", "America/Toronto")

# Profile photos (public storage bucket)
PROFILE_PHOTO_BASE_URL = os.getenv(
    "PROFILE_PHOTO_BASE_URL",
    f"{SUPABASE_URL}/storage/v1/object/public/profile-photo" if SUPABASE_URL else "",
)
DEFAULT_AVATAR_URL = os.getenv(
    "DEFAULT_AVATAR_URL",
    f"{PROFILE_PHOTO_BASE_URL}/default-profile-photo.jpg" if PROFILE_PHOTO_BASE_URL else "",
)

# Shared secret for the /internal queue routes (open when unset, for local runs)
INTERNAL_API_KEY = os.getenv("INTERNAL_API_KEY")

# CORS
ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", FRONTEND_URL).split(",") if o.strip()
]
