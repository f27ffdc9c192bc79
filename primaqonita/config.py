import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./primaqonita.db")

# Firebase Configuration (admin sign-in happens on the dashboard, we only verify ID tokens)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# All holiday boundaries are evaluated in the clinic's local time
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "Asia/Jakarta")

# Dashboard origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

# Redis (status scan lock)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"

# Schedule status scan
# Lock TTL stays below the worker interval so a crashed tick never blocks the next one for long
STATUS_SCAN_LOCK_KEY = os.getenv("STATUS_SCAN_LOCK_KEY", "primaqonita:status-scan-lock")
STATUS_SCAN_LOCK_TTL = int(os.getenv("STATUS_SCAN_LOCK_TTL", "55"))

# Seconds between worker scans
STATUS_SCAN_INTERVAL = int(os.getenv("STATUS_SCAN_INTERVAL", "60"))
