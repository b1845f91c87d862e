"""Tests for reservation lifecycle transitions and room release."""

from datetime import date

import pytest

from hotel_reservation.core.exceptions import ErrorCode, InvalidTransitionError, ValidationError
from hotel_reservation.models import Reservation, ReservationStatus, RoomType
from hotel_reservation.services.reservation.state_machine import (
    ALLOWED_TRANSITIONS,
    RELEASING_STATUSES,
    apply_transition,
    can_transition,
    validate_transition,
)

S = ReservationStatus


def reservation_in(status, check_in=date(2024, 6, 1)):
    return Reservation(
        guest_id=1,
        check_in_date=check_in,
        check_out_date=date(2024, 6, 5),
        party_size=1,
        status=status,
    )


class TestStateMachine:
    """Transition table checks, no store involved."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (S.PENDING, S.CONFIRMED),
            (S.PENDING, S.CANCELLED),
            (S.CONFIRMED, S.CHECKED_IN),
            (S.CONFIRMED, S.CANCELLED),
            (S.CHECKED_IN, S.CHECKED_OUT),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (S.PENDING, S.CHECKED_IN),
            (S.CONFIRMED, S.CHECKED_OUT),
            (S.CHECKED_IN, S.CANCELLED),
            (S.CHECKED_OUT, S.CHECKED_IN),
            (S.CANCELLED, S.CONFIRMED),
        ],
    )
    def test_rejected_transitions(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(reservation_in(current), target, date(2024, 6, 1))
        assert exc_info.value.details["from"] == current.value
        assert exc_info.value.details["to"] == target.value

    def test_terminal_statuses_have_no_exits(self):
        assert ALLOWED_TRANSITIONS[S.CHECKED_OUT] == frozenset()
        assert ALLOWED_TRANSITIONS[S.CANCELLED] == frozenset()
        assert RELEASING_STATUSES == {S.CANCELLED, S.CHECKED_OUT}

    def test_check_in_before_arrival_date_is_rejected(self):
        reservation = reservation_in(S.CONFIRMED, check_in=date(2024, 6, 3))
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(reservation, S.CHECKED_IN, today=date(2024, 6, 2))
        assert "future" in exc_info.value.details["reason"]

    def test_late_check_in_is_allowed(self):
        reservation = reservation_in(S.CONFIRMED, check_in=date(2024, 6, 1))
        previous = apply_transition(reservation, S.CHECKED_IN, today=date(2024, 6, 3))
        assert previous == S.CONFIRMED
        assert reservation.status == S.CHECKED_IN


class TestReservationTransitions:
    """Transitions through ReservationService."""

    @pytest.fixture
    def room_id(self, add_rooms):
        return add_rooms([("101", RoomType.SINGLE)])[0]

    def book(self, services, make_reservation, **kwargs):
        result = services.reservations.create_reservation(make_reservation(**kwargs), RoomType.SINGLE)
        assert result.is_success
        return result.data

    def test_pending_must_be_confirmed_before_check_in(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation, status=S.PENDING)

        result = services.reservations.check_in(reservation_id)

        assert result.error_code == ErrorCode.INVALID_TRANSITION
        assert result.error.details == {"from": "Pending", "to": "Checked In"}
        assert services.reservations.get_reservation(reservation_id).data.status == S.PENDING

    def test_full_lifecycle(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation, status=S.PENDING)

        assert services.reservations.confirm(reservation_id).data.status == S.CONFIRMED
        assert services.reservations.check_in(reservation_id).data.status == S.CHECKED_IN
        bill = services.reservations.check_out(reservation_id)

        assert bill.is_success
        assert bill.data.reservation_id == reservation_id
        assert services.reservations.get_reservation(reservation_id).data.status == S.CHECKED_OUT

    def test_check_out_frees_room_for_later_dates(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation)
        services.reservations.check_in(reservation_id)

        blocked = services.reservations.create_reservation(
            make_reservation(date(2024, 6, 3), date(2024, 6, 8)), RoomType.SINGLE
        )
        assert blocked.error_code == ErrorCode.INSUFFICIENT_INVENTORY

        assert services.reservations.check_out(reservation_id).is_success

        rebooked = services.reservations.create_reservation(
            make_reservation(date(2024, 6, 3), date(2024, 6, 8)), RoomType.SINGLE
        )
        assert rebooked.is_success
        rooms = services.reservations.get_reservation(rebooked.data).data.rooms
        assert rooms[0].room_id == room_id

    def test_cancel_keeps_history(self, services, room_id, make_reservation, guest_id):
        reservation_id = self.book(services, make_reservation)

        assert services.reservations.cancel(reservation_id).is_success

        cancelled = services.reservations.get_reservation(reservation_id).data
        assert cancelled.status == S.CANCELLED
        assert [link.room_id for link in cancelled.rooms] == [room_id]
        assert len(services.reservations.get_reservations_by_guest(guest_id).data) == 1

    def test_release_succeeds_only_once(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation)

        assert services.reservations.cancel(reservation_id).is_success
        second = services.reservations.cancel(reservation_id)

        assert second.error_code == ErrorCode.INVALID_TRANSITION

    def test_check_out_twice_fails_and_keeps_single_bill(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation)
        services.reservations.check_in(reservation_id)

        first = services.reservations.check_out(reservation_id)
        second = services.reservations.check_out(reservation_id)

        assert first.is_success
        assert second.error_code == ErrorCode.INVALID_TRANSITION
        assert services.billing.get_bill(reservation_id).data.id == first.data.id

    def test_checked_in_cannot_be_cancelled(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation)
        services.reservations.check_in(reservation_id)

        result = services.reservations.cancel(reservation_id)

        assert result.error_code == ErrorCode.INVALID_TRANSITION

    def test_future_check_in_waits_for_clock(self, services, clock, room_id, make_reservation):
        reservation_id = self.book(
            services, make_reservation, check_in=date(2024, 6, 10), check_out=date(2024, 6, 12)
        )

        early = services.reservations.check_in(reservation_id)
        assert early.error_code == ErrorCode.INVALID_TRANSITION

        clock.today = date(2024, 6, 10)
        assert services.reservations.check_in(reservation_id).is_success

    def test_unknown_reservation_is_not_found(self, services):
        assert services.reservations.cancel(4242).error_code == ErrorCode.NOT_FOUND

    def test_release_frees_rooms_by_cancelling(self, services, room_id, make_reservation):
        reservation_id = self.book(services, make_reservation)

        result = services.allocation.release_reservation(reservation_id)

        assert result.data == S.CANCELLED
        assert services.rooms.is_room_free(room_id, date(2024, 6, 1), date(2024, 6, 5)).data is True

    def test_release_cannot_check_out_without_a_bill(self, services, room_id, make_reservation):
        """A checked-in stay only leaves through check-out, which stores the bill."""
        reservation_id = self.book(services, make_reservation)
        services.reservations.check_in(reservation_id)

        result = services.allocation.release_reservation(reservation_id)

        assert result.error_code == ErrorCode.INVALID_TRANSITION
        assert services.reservations.get_reservation(reservation_id).data.status == S.CHECKED_IN
        assert services.billing.get_bill(reservation_id).error_code == ErrorCode.NOT_FOUND

    def test_internal_release_requires_releasing_status(self, services, room_id, make_reservation, store):
        reservation_id = self.book(services, make_reservation)
        with pytest.raises(ValidationError):
            with store.unit_of_work("test") as session:
                reservation = session.get(Reservation, reservation_id)
                services.allocation.release(session, reservation, S.CHECKED_IN)

    def test_failed_check_out_rolls_back_status(self, services, room_id, make_reservation, monkeypatch):
        """The status change and the bill commit together or not at all."""
        reservation_id = self.book(services, make_reservation)
        services.reservations.check_in(reservation_id)

        def broken_bill(session, reservation):
            raise RuntimeError("printer on fire")

        monkeypatch.setattr(services.billing, "create_bill_for_checkout", broken_bill)
        result = services.reservations.check_out(reservation_id)

        assert result.error_code == ErrorCode.INTERNAL_ERROR
        assert services.reservations.get_reservation(reservation_id).data.status == S.CHECKED_IN
        assert services.billing.get_bill(reservation_id).error_code == ErrorCode.NOT_FOUND
