"""Tests for room allocation, guest distribution and the overlap predicate."""

from datetime import date
from decimal import Decimal

import pytest

from hotel_reservation.core.exceptions import ErrorCode, ValidationError
from hotel_reservation.models import ReservationStatus, RoomType
from hotel_reservation.schemas.reservation import AllocationRequest, RoomRequest
from hotel_reservation.services.allocation import distribute_guests, is_room_free, ranges_overlap


class TestRangesOverlap:
    """Half-open [check_in, check_out) overlap rule."""

    def test_back_to_back_stays_do_not_overlap(self):
        """Check-out day is free for the next check-in."""
        assert not ranges_overlap(date(2024, 6, 1), date(2024, 6, 5), date(2024, 6, 5), date(2024, 6, 8))
        assert not ranges_overlap(date(2024, 6, 5), date(2024, 6, 8), date(2024, 6, 1), date(2024, 6, 5))

    def test_partial_and_contained_ranges_overlap(self):
        assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 5), date(2024, 6, 4), date(2024, 6, 6))
        assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 10), date(2024, 6, 3), date(2024, 6, 4))
        assert ranges_overlap(date(2024, 6, 3), date(2024, 6, 4), date(2024, 6, 1), date(2024, 6, 10))


class TestDistributeGuests:
    """Spreading a party over the allocated rooms."""

    def test_even_split(self):
        assert distribute_guests(4, [2, 2]) == [2, 2]

    def test_remainder_fills_in_allocation_order(self):
        assert distribute_guests(3, [2, 2]) == [2, 1]
        assert distribute_guests(5, [4, 2]) == [3, 2]

    def test_base_share_is_capped_by_capacity(self):
        """A small room takes what it can and the rest goes to larger rooms."""
        assert distribute_guests(6, [2, 4]) == [2, 4]

    def test_rooms_may_receive_no_guests(self):
        assert distribute_guests(1, [2, 2, 2]) == [1, 0, 0]

    def test_party_larger_than_capacity_is_rejected(self):
        with pytest.raises(ValidationError):
            distribute_guests(5, [2, 2])

    def test_no_rooms_is_rejected(self):
        with pytest.raises(ValidationError):
            distribute_guests(1, [])


class TestAllocate:
    """End-to-end allocation through the reservation service."""

    def test_single_room_gets_lowest_free_id(self, services, add_rooms, make_reservation):
        """Two free singles: the first request takes the lower id, the next the other."""
        first_id, second_id = add_rooms([("101", RoomType.SINGLE), ("102", RoomType.SINGLE)])

        first = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)
        second = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)

        assert first.is_success and second.is_success
        assert services.reservations.get_reservation(first.data).data.rooms[0].room_id == first_id
        assert services.reservations.get_reservation(second.data).data.rooms[0].room_id == second_id

    def test_last_room_goes_to_one_request_only(self, services, add_rooms, make_reservation):
        add_rooms([("201", RoomType.DOUBLE)])
        request = make_reservation(date(2024, 7, 1), date(2024, 7, 3), party_size=2)

        first = services.reservations.create_reservation(request, RoomType.DOUBLE)
        second = services.reservations.create_reservation(request, RoomType.DOUBLE)

        assert first.is_success
        assert not second.is_success
        assert second.error_code == ErrorCode.INSUFFICIENT_INVENTORY
        assert second.error.details == {"type": "DOUBLE", "requested": 1, "available": 0}

    def test_multi_type_request_is_all_or_nothing(self, services, add_rooms, make_reservation):
        """A short type rolls back the rooms already picked for earlier types."""
        single_id, _ = add_rooms([("101", RoomType.SINGLE), ("201", RoomType.DOUBLE)])

        result = services.reservations.create_reservation_with_rooms(
            make_reservation(party_size=3),
            {RoomType.SINGLE: 1, RoomType.DOUBLE: 2},
        )

        assert result.error_code == ErrorCode.INSUFFICIENT_INVENTORY
        assert result.error.details["type"] == "DOUBLE"
        assert services.reservations.get_active_reservations().data == []
        assert services.rooms.is_room_free(single_id, date(2024, 6, 1), date(2024, 6, 5)).data is True

    def test_rooms_are_taken_in_request_order(self, services, add_rooms, make_reservation):
        double_id, single_id = add_rooms([("201", RoomType.DOUBLE), ("101", RoomType.SINGLE)])

        result = services.allocation.allocate(
            AllocationRequest.for_room_types(
                make_reservation(party_size=5),
                {RoomType.SINGLE: 1, RoomType.DOUBLE: 1},
            )
        )

        assert result.is_success
        assert result.data.room_ids == [single_id, double_id]
        assert [room.guests_in_room for room in result.data.rooms] == [2, 3]

    def test_repeated_types_are_merged(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE), ("102", RoomType.SINGLE)])

        result = services.reservations.create_reservation_with_rooms(
            make_reservation(party_size=2),
            [RoomRequest(room_type=RoomType.SINGLE), RoomRequest(room_type=RoomType.SINGLE)],
        )

        assert result.is_success
        assert len(services.reservations.get_reservation(result.data).data.rooms) == 2

    def test_price_is_captured_at_booking(self, services, add_rooms, make_reservation):
        (room_id,) = add_rooms([("301", RoomType.DELUXE)])
        result = services.reservations.create_reservation(make_reservation(), RoomType.DELUXE)
        assert result.is_success

        services.rooms.update_room_price(room_id, Decimal("999.00"))

        link = services.reservations.get_reservation_rooms(result.data).data[0]
        assert link.price_per_night == Decimal("250.00")
        assert services.rooms.get_room(room_id).data.price == Decimal("999.00")

    def test_overlapping_dates_block_room(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE)])
        assert services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).is_success

        overlapping = services.reservations.create_reservation(
            make_reservation(date(2024, 6, 4), date(2024, 6, 6)), RoomType.SINGLE
        )
        adjacent = services.reservations.create_reservation(
            make_reservation(date(2024, 6, 5), date(2024, 6, 7)), RoomType.SINGLE
        )

        assert overlapping.error_code == ErrorCode.INSUFFICIENT_INVENTORY
        assert adjacent.is_success

    def test_structurally_unavailable_rooms_are_skipped(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE)], available=False)
        result = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)
        assert result.error_code == ErrorCode.INSUFFICIENT_INVENTORY

    def test_new_reservation_defaults_to_confirmed(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE)])
        result = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)
        assert services.reservations.get_reservation(result.data).data.status.value == "Confirmed"


class TestAllocateValidation:
    """Malformed requests fail before any room is read."""

    @pytest.fixture(autouse=True)
    def _rooms(self, add_rooms):
        add_rooms([("101", RoomType.SINGLE), ("201", RoomType.DOUBLE)])

    def test_check_out_must_follow_check_in(self, services, make_reservation):
        result = services.reservations.create_reservation(
            make_reservation(date(2024, 6, 5), date(2024, 6, 5)), RoomType.SINGLE
        )
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "check_out_date"

    def test_party_size_must_be_positive(self, services, make_reservation):
        result = services.reservations.create_reservation(make_reservation(party_size=0), RoomType.SINGLE)
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_party_must_fit_requested_rooms(self, services, make_reservation):
        result = services.reservations.create_reservation(make_reservation(party_size=3), RoomType.SINGLE)
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "party_size"

    def test_quantity_must_be_positive(self, services, make_reservation):
        result = services.reservations.create_reservation_with_rooms(make_reservation(), {RoomType.SINGLE: 0})
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_empty_room_request_is_rejected(self, services, make_reservation):
        result = services.reservations.create_reservation_with_rooms(make_reservation(), {})
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_unknown_guest_is_not_found(self, services, make_reservation):
        result = services.reservations.create_reservation(make_reservation(guest_id=9999), RoomType.SINGLE)
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_cannot_start_checked_in(self, services, make_reservation):
        result = services.reservations.create_reservation(
            make_reservation(status=ReservationStatus.CHECKED_IN), RoomType.SINGLE
        )
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    @pytest.mark.parametrize(
        "room_requests,field",
        [
            ({"SUITE": 1}, "room_type"),
            ({RoomType.SINGLE: "two"}, "quantity"),
            ([{"room_type": "PENTHOUSE", "quantity": 1}], "room_requests.0.room_type"),
        ],
    )
    def test_malformed_room_request_is_a_validation_result(
        self, services, make_reservation, room_requests, field
    ):
        result = services.reservations.create_reservation_with_rooms(make_reservation(), room_requests)

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == field
        assert services.reservations.get_reservations_by_status(ReservationStatus.CONFIRMED).data == []


class TestOverlapChecker:
    """is_room_free against the store."""

    def test_released_reservation_no_longer_blocks(self, services, store, add_rooms, make_reservation):
        (room_id,) = add_rooms([("101", RoomType.SINGLE)])
        reservation_id = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).data

        with store.read_session() as session:
            assert not is_room_free(session, room_id, date(2024, 6, 2), date(2024, 6, 3))
            assert is_room_free(session, room_id, date(2024, 6, 2), date(2024, 6, 3), reservation_id)

        services.reservations.cancel(reservation_id)

        with store.read_session() as session:
            assert is_room_free(session, room_id, date(2024, 6, 2), date(2024, 6, 3))
