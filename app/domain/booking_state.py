"""Booking lifecycle state machine.

States:
- pending: Paid booking waiting for a driver
- assigned: Driver attached and payout fixed, waiting for the driver to respond
- confirmed: Driver accepted the job
- completed: Trip done; the record lives in the completed store from here on

A refusal is the only backwards move (assigned -> pending).
"""

from enum import Enum

from app.core.exceptions import StateConflict


class BookingStatus(str, Enum):
    """Job statuses."""

    PENDING = "pending"
    ASSIGNED = "assigned"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.ASSIGNED},
    BookingStatus.ASSIGNED: {
        BookingStatus.CONFIRMED,
        BookingStatus.PENDING,
        BookingStatus.COMPLETED,
    },
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
}

# Statuses in which a driver is attached to the job
DRIVER_STATUSES = frozenset(
    {BookingStatus.ASSIGNED, BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


def assert_booking_transition(current: str, target: str) -> None:
    """Validate a job status transition.

    Args:
        current: Current job status
        target: Target job status

    Raises:
        StateConflict: If the transition is not allowed
    """
    try:
        current_status = BookingStatus(current)
        target_status = BookingStatus(target)
    except ValueError:
        raise StateConflict(f"Invalid booking transition: {current} → {target}")

    if target_status not in BOOKING_TRANSITIONS[current_status]:
        raise StateConflict(
            f"Invalid booking transition: {current_status.value} → {target_status.value}"
        )


def can_transition(current: str, target: str) -> bool:
    """Return True if the transition is allowed."""
    try:
        assert_booking_transition(current, target)
    except StateConflict:
        return False
    return True
