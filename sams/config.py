# sams/config.py
import os
import warnings

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sams.db")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY not set! Using insecure default", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "change-me-later"
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Booking rules
NOTES_MAX_LENGTH = int(os.getenv("NOTES_MAX_LENGTH", "500"))
MAX_STAFF_PREFERENCES = int(os.getenv("MAX_STAFF_PREFERENCES", "3"))
ENFORCE_STATUS_TRANSITIONS = _flag("ENFORCE_STATUS_TRANSITIONS")
ALLOW_PAST_APPOINTMENTS = _flag("ALLOW_PAST_APPOINTMENTS")

# Optional admin bootstrap on startup
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

# API client
API_BASE_URL = os.getenv("API_BASE_URL") or os.getenv("VITE_API_BASE_URL", "http://localhost:5001/api")
TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", os.path.expanduser("~/.sams/storage.json"))
