# config.py
import os
from typing import Final

from dotenv import load_dotenv

# Load .env from the same folder as config.py
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env"))


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cinema.db")
    SQL_ECHO = _as_bool(os.getenv("SQL_ECHO", "false"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


class BookingLimits:
    """Hard limits of a single screening."""

    THEATER_CAPACITY: Final[int] = 100
    MIN_SEAT: Final[int] = 1
    MAX_SEAT: Final[int] = 100


class CatalogLimits:
    MIN_DURATION: Final[int] = 1
    MIN_RATING: Final[float] = 0
    MAX_RATING: Final[float] = 10
    MIN_RELEASE_YEAR: Final[int] = 1888
