"""
Tests for the booking lifecycle state machine.
"""
import pytest

from app.core.exceptions import StateConflict
from app.domain.booking_state import BookingStatus, assert_booking_transition, can_transition


class TestBookingTransitions:
    """Allowed and rejected status moves."""

    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "assigned"),
            ("assigned", "confirmed"),
            ("assigned", "pending"),
            ("assigned", "completed"),
            ("confirmed", "completed"),
        ],
    )
    def test_allowed(self, current: str, target: str) -> None:
        assert_booking_transition(current, target)
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "confirmed"),
            ("pending", "completed"),
            ("assigned", "assigned"),
            ("confirmed", "pending"),
            ("confirmed", "assigned"),
            ("completed", "pending"),
        ],
    )
    def test_rejected(self, current: str, target: str) -> None:
        with pytest.raises(StateConflict) as exc_info:
            assert_booking_transition(current, target)
        assert exc_info.value.status_code == 400
        assert not can_transition(current, target)

    def test_unknown_status_is_rejected(self) -> None:
        with pytest.raises(StateConflict):
            assert_booking_transition("cancelled", "pending")

    def test_accepts_enum_members(self) -> None:
        assert can_transition(BookingStatus.PENDING, BookingStatus.ASSIGNED)
