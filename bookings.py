"""
Seat bookings.

A booking reserves one seat of a showtime for one user. Before it is
written the engine checks, in order:

- the showtime exists
- the movie it screens exists
- the theater is not full
- this user has not already booked this seat
- nobody else holds the seat

The checks and the insert are separate round-trips. The unique
(showtime_id, seat_number) constraint is what finally settles two requests
racing for one seat; the loser gets the same "seat taken" error.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import crud
from config import BookingLimits
from errors import BadRequestError, NotFoundError
from models import Booking
from schemas import BookingCreate

logger = logging.getLogger(__name__)


def _seat_taken(seat_number: int) -> BadRequestError:
    return BadRequestError(f"Seat number {seat_number} is already booked for this showtime.")


def add_booking(db: Session, booking: BookingCreate) -> Booking:
    showtime_id, seat_number, user_id = booking.showtime_id, booking.seat_number, booking.user_id

    showtime = crud.get_showtime(db, showtime_id)
    if not showtime:
        raise NotFoundError(f"Showtime with ID {showtime_id} not found.")

    movie = crud.get_movie(db, showtime.movie_id)
    if not movie:
        raise NotFoundError(f"Movie with ID {showtime.movie_id} (referenced by showtime) not found.")

    if crud.count_bookings(db, showtime_id) >= BookingLimits.THEATER_CAPACITY:
        logger.warning("Showtime %s is full", showtime_id)
        raise BadRequestError("The theater is full. No seats available for this showtime.")

    existing = crud.get_bookings_for_showtime(db, showtime_id)
    if any(b.user_id == user_id and b.seat_number == seat_number for b in existing):
        raise BadRequestError(f"User has already booked seat {seat_number} for this showtime.")

    if crud.is_seat_taken(db, showtime_id, seat_number):
        raise _seat_taken(seat_number)

    try:
        created = crud.create_booking(
            db,
            movie_id=movie.id,
            showtime_id=showtime_id,
            seat_number=seat_number,
            user_id=user_id,
        )
    except IntegrityError:
        logger.warning("Seat %s of showtime %s was taken concurrently", seat_number, showtime_id)
        raise _seat_taken(seat_number)

    logger.info("Booked seat %s of showtime %s as %s", seat_number, showtime_id, created.booking_id)
    return created


def list_bookings(db: Session, showtime_id: int) -> List[Booking]:
    if not crud.get_showtime(db, showtime_id):
        raise NotFoundError(f"Showtime with ID {showtime_id} not found.")
    return crud.get_bookings_for_showtime(db, showtime_id)
