import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

import bookings
import catalog
import crud
from config import BookingLimits
from errors import BadRequestError, NotFoundError, PersistenceError
from schemas import BookingCreate


def book(db, showtime_id, seat, user_id=None):
    return bookings.add_booking(
        db, BookingCreate(showtime_id=showtime_id, seat_number=seat, user_id=user_id or uuid.uuid4())
    )


@pytest.fixture
def showtime(make_movie, make_showtime):
    return make_showtime(make_movie())


def test_booking_is_persisted(db, showtime):
    user = uuid.uuid4()
    created = book(db, showtime.id, 5, user)
    assert isinstance(created.booking_id, uuid.UUID)
    assert created.seat_number == 5
    assert created.user_id == user
    assert created.movie_id == showtime.movie_id
    assert crud.is_seat_taken(db, showtime.id, 5)


def test_unknown_showtime(db):
    with pytest.raises(NotFoundError, match="Showtime with ID 77"):
        book(db, 77, 1)


def test_showtime_whose_movie_was_deleted(db, showtime):
    catalog.delete_movie(db, showtime.movie_id)
    with pytest.raises(NotFoundError, match="referenced by showtime"):
        book(db, showtime.id, 1)


def test_seat_taken_by_someone_else(db, showtime):
    book(db, showtime.id, 5)
    with pytest.raises(BadRequestError, match="Seat number 5 is already booked"):
        book(db, showtime.id, 5)


def test_same_user_same_seat_reports_duplicate(db, showtime):
    user = uuid.uuid4()
    book(db, showtime.id, 5, user)
    with pytest.raises(BadRequestError, match="User has already booked seat 5"):
        book(db, showtime.id, 5, user)


def test_same_seat_in_other_showtime_is_free(db, make_movie, make_showtime, showtime):
    other = make_showtime(make_movie(title="Other"), theater="Hall B")
    book(db, showtime.id, 5)
    book(db, other.id, 5)


def test_theater_full_after_capacity(db, showtime):
    for seat in range(1, BookingLimits.THEATER_CAPACITY + 1):
        book(db, showtime.id, seat)
    assert crud.count_bookings(db, showtime.id) == 100

    with pytest.raises(BadRequestError, match="The theater is full"):
        book(db, showtime.id, 1)


def test_capacity_check_uses_at_least(db, showtime, monkeypatch):
    monkeypatch.setattr(crud, "count_bookings", lambda db, showtime_id: 150)
    with pytest.raises(BadRequestError, match="full"):
        book(db, showtime.id, 3)


def test_capacity_checked_before_seat(db, showtime, monkeypatch):
    book(db, showtime.id, 5)
    monkeypatch.setattr(crud, "count_bookings", lambda db, showtime_id: 100)
    with pytest.raises(BadRequestError, match="full"):
        book(db, showtime.id, 5)


def test_concurrent_insert_is_translated_to_seat_taken(db, showtime, monkeypatch):
    book(db, showtime.id, 9)

    # simulate a second request that passed the pre-checks before the first insert landed
    monkeypatch.setattr(crud, "get_bookings_for_showtime", lambda db, showtime_id: [])
    monkeypatch.setattr(crud, "is_seat_taken", lambda db, showtime_id, seat_number: False)

    with pytest.raises(BadRequestError, match="Seat number 9 is already booked"):
        book(db, showtime.id, 9)

    # the session was rolled back and is still usable
    assert crud.count_bookings(db, showtime.id) == 1


def test_seats_are_pairwise_distinct(db, showtime):
    for seat in (3, 1, 2, 3, 1, 4):
        try:
            book(db, showtime.id, seat)
        except BadRequestError:
            pass
    seats = [b.seat_number for b in bookings.list_bookings(db, showtime.id)]
    assert seats == [1, 2, 3, 4]


def test_list_bookings_unknown_showtime(db):
    with pytest.raises(NotFoundError):
        bookings.list_bookings(db, 12)


def test_persistence_failure_propagates():
    db = MagicMock()
    db.get.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))

    with pytest.raises(PersistenceError, match="Failed to fetch the showtime"):
        book(db, 1, 1)
    db.rollback.assert_called_once()


def test_booking_schema_limits():
    with pytest.raises(ValueError):
        BookingCreate(showtime_id=1, seat_number=0, user_id=uuid.uuid4())
    with pytest.raises(ValueError):
        BookingCreate(showtime_id=1, seat_number=101, user_id=uuid.uuid4())
    with pytest.raises(ValueError):
        BookingCreate(showtime_id=1, seat_number=1, user_id="not-a-uuid")
