from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from config import BookingLimits, CatalogLimits


def _naive(value: datetime) -> datetime:
    # showtimes are naive local wall-clock times
    if value.tzinfo is not None:
        raise ValueError("must be a naive local date-time without a timezone offset")
    return value


LocalDateTime = Annotated[datetime, AfterValidator(_naive)]


def validation_errors(schema, payload: dict) -> List[str]:
    """Return the field violations of ``payload`` against ``schema`` (empty if valid)."""
    try:
        schema.model_validate(payload)
    except ValidationError as e:
        return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
    return []


# -----------------------------
# Movie
# -----------------------------
class MovieBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, description="Movie title")
    genre: str = Field(..., min_length=1)
    duration: int = Field(..., ge=CatalogLimits.MIN_DURATION, description="Duration in minutes")
    rating: float = Field(..., ge=CatalogLimits.MIN_RATING, le=CatalogLimits.MAX_RATING)
    release_year: int = Field(..., ge=CatalogLimits.MIN_RELEASE_YEAR)


class MovieCreate(MovieBase):
    pass


class MovieUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1)
    genre: Optional[str] = Field(None, min_length=1)
    duration: Optional[int] = Field(None, ge=CatalogLimits.MIN_DURATION)
    rating: Optional[float] = Field(None, ge=CatalogLimits.MIN_RATING, le=CatalogLimits.MAX_RATING)
    release_year: Optional[int] = Field(None, ge=CatalogLimits.MIN_RELEASE_YEAR)


class MovieRead(MovieBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


# -----------------------------
# Showtime
# -----------------------------
class ShowtimeBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    movie_id: int = Field(..., ge=1)
    theater: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    price: float = Field(..., ge=0)


class ShowtimeCreate(ShowtimeBase):
    start_time: LocalDateTime
    end_time: LocalDateTime


class ShowtimeUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    movie_id: Optional[int] = Field(None, ge=1)
    theater: Optional[str] = Field(None, min_length=1)
    start_time: Optional[LocalDateTime] = None
    end_time: Optional[LocalDateTime] = None
    price: Optional[float] = Field(None, ge=0)


class ShowtimeRead(ShowtimeBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


class ShowtimeDetail(BaseModel):
    id: int
    theater: str
    movie: MovieRead             # <-- resolved from movie_id
    start_time: datetime
    end_time: datetime
    price: float


# -----------------------------
# Booking
# -----------------------------
class BookingCreate(BaseModel):
    showtime_id: int = Field(..., ge=1)
    seat_number: int = Field(..., ge=BookingLimits.MIN_SEAT, le=BookingLimits.MAX_SEAT)
    user_id: UUID


class BookingRead(BaseModel):
    booking_id: UUID
    movie_id: int
    showtime_id: int
    seat_number: int
    user_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    message: str
