import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mates_scheduling.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Number of ranked suggestions kept per event
SUGGESTION_LIMIT = int(os.getenv("SUGGESTION_LIMIT", "3"))

# Used when the event collaborator did not set a meeting length
DEFAULT_EVENT_DURATION_MINUTES = int(os.getenv("DEFAULT_EVENT_DURATION_MINUTES", "60"))

# Transaction conflicts on the same event are retried this many times before surfacing
SCHEDULING_MAX_RETRIES = int(os.getenv("SCHEDULING_MAX_RETRIES", "3"))
SCHEDULING_RETRY_BACKOFF_SECONDS = float(os.getenv("SCHEDULING_RETRY_BACKOFF_SECONDS", "0.05"))

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")
