# models.py
import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, DateTime, Uuid, Index, UniqueConstraint

from database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)

    # stored trimmed and lower-cased
    title = Column(String(255), nullable=False)
    genre = Column(String(100), nullable=False)

    duration = Column(Integer, nullable=False)  # minutes
    rating = Column(Float, nullable=False)
    release_year = Column(Integer, nullable=False)

    __table_args__ = (Index("ix_movies_title_release_year", "title", "release_year"),)

    def __repr__(self):
        return f"<Movie(id={self.id}, title={self.title!r}, release_year={self.release_year})>"


class Showtime(Base):
    __tablename__ = "showtimes"

    id = Column(Integer, primary_key=True, index=True)

    # plain reference: deleting a movie leaves its showtimes in place
    movie_id = Column(Integer, nullable=False, index=True)

    theater = Column(String(150), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    price = Column(Float, nullable=False)

    __table_args__ = (Index("ix_showtimes_theater_start_time", "theater", "start_time"),)

    def __repr__(self):
        return f"<Showtime(id={self.id}, theater={self.theater!r}, start={self.start_time}, end={self.end_time})>"


class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    movie_id = Column(Integer, nullable=False)
    showtime_id = Column(Integer, nullable=False, index=True)
    seat_number = Column(Integer, nullable=False)
    user_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # storage-level guard against two concurrent requests taking one seat
    __table_args__ = (UniqueConstraint("showtime_id", "seat_number", name="uq_booking_showtime_seat"),)

    def __repr__(self):
        return f"<Booking(booking_id={self.booking_id}, showtime_id={self.showtime_id}, seat={self.seat_number})>"
