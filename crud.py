# crud.py
import functools
import logging
from datetime import date, datetime, time
from typing import Optional, List

from sqlalchemy import and_, func, or_, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import PersistenceError
from models import Movie, Showtime, Booking

logger = logging.getLogger(__name__)


def gateway(action: str):
    """Log a failed query and surface it as PersistenceError.

    IntegrityError is rolled back and re-raised untouched: callers decide
    what a violated constraint means.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return fn(db, *args, **kwargs)
            except IntegrityError:
                db.rollback()
                raise
            except SQLAlchemyError as e:
                logger.exception("DB error on %s", fn.__name__)
                db.rollback()
                raise PersistenceError(f"Failed to {action}.") from e
        return wrapper
    return decorator


# Movies
@gateway("fetch the movie")
def get_movie(db: Session, movie_id: int) -> Optional[Movie]:
    return db.get(Movie, movie_id)


@gateway("fetch the movie by title and release year")
def get_movie_by_title(db: Session, title: str, release_year: Optional[int] = None) -> Optional[Movie]:
    q = db.query(Movie).filter(Movie.title == title)
    if release_year is not None:
        q = q.filter(Movie.release_year == release_year)
    return q.order_by(Movie.release_year.desc(), Movie.id.desc()).first()


@gateway("fetch movies")
def list_movies(db: Session, title: Optional[str] = None, genre: Optional[str] = None) -> List[Movie]:
    q = db.query(Movie)
    if title:
        q = q.filter(Movie.title.ilike(f"%{title}%"))
    if genre:
        q = q.filter(Movie.genre == genre)
    return q.order_by(Movie.id).all()


@gateway("add movie to the database")
def create_movie(db: Session, title: str, genre: str, duration: int, rating: float, release_year: int) -> Movie:
    m = Movie(title=title, genre=genre, duration=duration, rating=rating, release_year=release_year)
    db.add(m)
    db.commit()
    db.refresh(m)
    return m


@gateway("update movie in the database")
def update_movie(db: Session, movie: Movie, **fields) -> Movie:
    for key, value in fields.items():
        setattr(movie, key, value)
    db.add(movie)
    db.commit()
    db.refresh(movie)
    return movie


@gateway("delete movie from the database")
def delete_movie(db: Session, movie: Movie) -> None:
    db.delete(movie)
    db.commit()


# Showtimes
@gateway("fetch the showtime")
def get_showtime(db: Session, showtime_id: int) -> Optional[Showtime]:
    return db.get(Showtime, showtime_id)


@gateway("fetch showtimes")
def list_showtimes(
    db: Session,
    movie_id: Optional[int] = None,
    theater: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Showtime]:
    q = db.query(Showtime)

    if movie_id is not None:
        q = q.filter(Showtime.movie_id == movie_id)

    if theater:
        q = q.filter(func.lower(Showtime.theater) == theater.strip().lower())

    if start_date:
        q = q.filter(Showtime.start_time >= datetime.combine(start_date, time.min))

    if end_date:
        q = q.filter(Showtime.start_time <= datetime.combine(end_date, time.max))

    return q.order_by(Showtime.start_time, Showtime.id).all()


@gateway("check for overlapping showtimes")
def find_overlapping_showtime(
    db: Session,
    theater: str,
    start_time: datetime,
    end_time: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[Showtime]:
    q = db.query(Showtime).filter(
        func.lower(Showtime.theater) == theater.strip().lower(),
        or_(
            and_(Showtime.start_time <= start_time, Showtime.end_time > start_time),
            and_(Showtime.start_time < end_time, Showtime.end_time >= end_time),
            and_(Showtime.start_time >= start_time, Showtime.end_time <= end_time),
        ),
    )
    if exclude_id is not None:
        q = q.filter(Showtime.id != exclude_id)
    return q.first()


@gateway("add showtime to the database")
def create_showtime(db: Session, movie_id: int, theater: str, start_time: datetime, end_time: datetime, price: float) -> Showtime:
    s = Showtime(movie_id=movie_id, theater=theater, start_time=start_time, end_time=end_time, price=price)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


@gateway("update showtime in the database")
def update_showtime(db: Session, showtime: Showtime, **fields) -> Showtime:
    for key, value in fields.items():
        setattr(showtime, key, value)
    db.add(showtime)
    db.commit()
    db.refresh(showtime)
    return showtime


@gateway("delete showtime from the database")
def delete_showtime(db: Session, showtime: Showtime) -> None:
    db.delete(showtime)
    db.commit()


# Bookings
@gateway("count bookings for the showtime")
def count_bookings(db: Session, showtime_id: int) -> int:
    return db.query(func.count(Booking.booking_id)).filter(Booking.showtime_id == showtime_id).scalar() or 0


@gateway("fetch bookings for the showtime")
def get_bookings_for_showtime(db: Session, showtime_id: int) -> List[Booking]:
    return db.query(Booking).filter(Booking.showtime_id == showtime_id).order_by(Booking.seat_number).all()


@gateway("check if the seat is taken")
def is_seat_taken(db: Session, showtime_id: int, seat_number: int) -> bool:
    hit = db.query(Booking.booking_id).filter(
        Booking.showtime_id == showtime_id,
        Booking.seat_number == seat_number,
    ).first()
    return hit is not None


@gateway("add booking to the database")
def create_booking(db: Session, movie_id: int, showtime_id: int, seat_number: int, user_id) -> Booking:
    b = Booking(movie_id=movie_id, showtime_id=showtime_id, seat_number=seat_number, user_id=user_id)
    db.add(b)
    db.commit()
    db.refresh(b)
    return b


@gateway("reach the database")
def ping(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True
