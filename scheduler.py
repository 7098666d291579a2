"""
Showtime scheduling.

A showtime ties a movie to a theater for a fixed window. It is accepted
only when its price is positive, its window runs exactly as long as the
movie, and no other showtime in the same theater (case-insensitive) overlaps
it. Checks run in that order and the first failure wins.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

import crud
from errors import BadRequestError, NotFoundError
from models import Movie, Showtime
from scheduling import check_price, check_time_logic, normalize_name
from schemas import ShowtimeCreate, ShowtimeDetail, ShowtimeUpdate, MovieRead

logger = logging.getLogger(__name__)


def _resolve_movie(db: Session, movie_id: int) -> Movie:
    movie = crud.get_movie(db, movie_id)
    if not movie:
        raise NotFoundError(f"Movie with ID {movie_id} not found.")
    return movie


def get_showtime(db: Session, showtime_id: int) -> Showtime:
    showtime = crud.get_showtime(db, showtime_id)
    if not showtime:
        raise NotFoundError(f"Showtime with ID {showtime_id} not found.")
    return showtime


def get_showtime_detail(db: Session, showtime_id: int) -> ShowtimeDetail:
    """Showtime with its movie embedded; fails if the movie was deleted."""
    showtime = get_showtime(db, showtime_id)
    movie = _resolve_movie(db, showtime.movie_id)
    return ShowtimeDetail(
        id=showtime.id,
        theater=showtime.theater,
        movie=MovieRead.model_validate(movie),
        start_time=showtime.start_time,
        end_time=showtime.end_time,
        price=showtime.price,
    )


def list_showtimes(
    db: Session,
    movie_id: Optional[int] = None,
    theater: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Showtime]:
    return crud.list_showtimes(db, movie_id=movie_id, theater=theater, start_date=start_date, end_date=end_date)


def add_showtime(db: Session, show: ShowtimeCreate) -> Showtime:
    check_price(show.price)

    movie = _resolve_movie(db, show.movie_id)
    theater = normalize_name(show.theater)

    check_time_logic(show.start_time, show.end_time, movie.duration)

    if crud.find_overlapping_showtime(db, theater, show.start_time, show.end_time):
        logger.warning("Rejected overlapping showtime in %r at %s", theater, show.start_time)
        raise BadRequestError("Overlapping showtime exists for this theater.")

    created = crud.create_showtime(
        db,
        movie_id=movie.id,
        theater=theater,
        start_time=show.start_time,
        end_time=show.end_time,
        price=show.price,
    )
    logger.info("Scheduled showtime %s: movie %s in %r at %s", created.id, movie.id, theater, created.start_time)
    return created


def update_showtime(db: Session, showtime_id: int, updates: ShowtimeUpdate) -> Showtime:
    existing = get_showtime(db, showtime_id)

    fields = updates.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise BadRequestError("No fields provided for update.")

    if "movie_id" in fields:
        movie = _resolve_movie(db, fields["movie_id"])
    else:
        movie = crud.get_movie(db, existing.movie_id)
        if not movie:
            raise NotFoundError("Movie duration could not be determined.")

    merged = {
        "movie_id": movie.id,
        "theater": normalize_name(fields["theater"]) if "theater" in fields else existing.theater,
        "start_time": fields.get("start_time", existing.start_time),
        "end_time": fields.get("end_time", existing.end_time),
        "price": fields.get("price", existing.price),
    }

    check_price(merged["price"])
    check_time_logic(merged["start_time"], merged["end_time"], movie.duration)

    slot_changed = (
        merged["theater"] != existing.theater
        or merged["start_time"] != existing.start_time
        or merged["end_time"] != existing.end_time
    )
    if slot_changed and crud.find_overlapping_showtime(
        db, merged["theater"], merged["start_time"], merged["end_time"], exclude_id=existing.id
    ):
        logger.warning("Rejected update of showtime %s: overlap in %r", showtime_id, merged["theater"])
        raise BadRequestError("Updated showtime overlaps with another showtime in this theater.")

    updated = crud.update_showtime(db, existing, **merged)
    logger.info("Updated showtime %s with %s", showtime_id, sorted(fields))
    return updated


def delete_showtime(db: Session, showtime_id: int) -> None:
    showtime = get_showtime(db, showtime_id)
    crud.delete_showtime(db, showtime)
    logger.info("Deleted showtime %s", showtime_id)
