"""
Time-window rules for showtimes.

Everything here is pure: no database access, no session. The scheduler
calls these after it has resolved the movie. ``crud.find_overlapping_showtime``
expresses ``windows_overlap`` as an SQL filter with the same three clauses.
"""
from datetime import datetime

from errors import BadRequestError


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between ``start`` and ``end`` (negative if reversed)."""
    return int((end - start).total_seconds() // 60)


def windows_overlap(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Whether the proposed window [start, end) conflicts with [other_start, other_end).

    Three cases: the proposal starts inside the other window, ends inside it,
    or covers it entirely. A window that starts exactly when the other ends
    (or ends exactly when it starts) does not conflict.
    """
    return (
        (start >= other_start and start < other_end)
        or (end > other_start and end <= other_end)
        or (start <= other_start and end >= other_end)
    )


def check_price(price: float) -> None:
    if price <= 0:
        raise BadRequestError("Price must be greater than 0.")


def check_time_logic(start: datetime, end: datetime, expected_duration: int) -> None:
    """Validate ordering of the window and that it matches the movie runtime exactly."""
    if start == end:
        raise BadRequestError("Start time and end time cannot be the same.")

    if start > end:
        raise BadRequestError("End time must be after start time.")

    actual = duration_minutes(start, end)
    # a window with leftover seconds can never equal a whole-minute runtime
    if actual != expected_duration or (end - start).total_seconds() % 60:
        raise BadRequestError(
            f"Showtime duration must match movie duration ({expected_duration} minutes). "
            f"You provided {actual} minutes."
        )


def normalize_name(value: str) -> str:
    return value.strip().lower()
