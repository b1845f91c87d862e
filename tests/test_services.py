"""Tests for room administration, guests, admin login and reports."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from hotel_reservation.core.exceptions import ErrorCode
from hotel_reservation.models import ReservationStatus, RoomType
from hotel_reservation.schemas.guest import FeedbackCreate, GuestCreate


class TestRoomService:

    def test_list_rooms_by_type(self, services, add_rooms):
        add_rooms([("101", RoomType.SINGLE), ("201", RoomType.DOUBLE), ("102", RoomType.SINGLE)])

        singles = services.rooms.list_rooms(RoomType.SINGLE).data

        assert [room.room_number for room in singles] == ["101", "102"]
        assert singles[0].max_occupancy == 2
        assert len(services.rooms.list_rooms().data) == 3

    def test_availability_for_type(self, services, add_rooms, make_reservation):
        ids = add_rooms([("201", RoomType.DOUBLE), ("202", RoomType.DOUBLE), ("203", RoomType.DOUBLE)])
        services.rooms.set_room_structural_availability(ids[2], False)
        services.reservations.create_reservation(make_reservation(), RoomType.DOUBLE)

        availability = services.rooms.check_room_type_availability(
            RoomType.DOUBLE, date(2024, 6, 2), date(2024, 6, 3)
        ).data

        assert availability.total_rooms == 3
        assert availability.free_rooms == 1
        assert availability.free_room_ids == [ids[1]]
        assert availability.is_available
        assert services.rooms.count_available(RoomType.DOUBLE, date(2024, 6, 5), date(2024, 6, 6)) == 2

    def test_availability_rejects_bad_range(self, services):
        result = services.rooms.check_room_type_availability(RoomType.SINGLE, date(2024, 6, 3), date(2024, 6, 1))
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert services.rooms.count_available(RoomType.SINGLE, date(2024, 6, 3), date(2024, 6, 1)) == 0

    def test_price_must_be_positive(self, services, add_rooms):
        (room_id,) = add_rooms([("101", RoomType.SINGLE)])
        assert services.rooms.update_room_price(room_id, Decimal("0")).error_code == ErrorCode.VALIDATION_ERROR
        assert services.rooms.update_room_price(room_id, Decimal("120.5")).data.price == Decimal("120.50")

    def test_unknown_room(self, services):
        assert services.rooms.get_room(404).error_code == ErrorCode.NOT_FOUND
        assert services.rooms.is_room_free(404, date(2024, 6, 1), date(2024, 6, 2)).error_code == ErrorCode.NOT_FOUND


class TestGuestService:

    @pytest.fixture
    def guests(self, services, guest_id):
        other = services.guests.register_guest(
            GuestCreate(name="Tom Baker", phone_number="905-555-0199", email="Tom@Example.com")
        ).data
        return guest_id, other.id

    def test_search_by_name_is_partial_and_case_insensitive(self, services, guests):
        jane_id, _ = guests
        assert [g.id for g in services.guests.search_by_name("trav").data] == [jane_id]

    def test_search_by_phone(self, services, guests):
        _, tom_id = guests
        assert [g.id for g in services.guests.search_by_phone("905").data] == [tom_id]

    def test_search_by_email_ignores_case(self, services, guests):
        _, tom_id = guests
        assert [g.id for g in services.guests.search_by_email("tom@example.com").data] == [tom_id]
        assert services.guests.search_by_email("nobody@example.com").data == []

    def test_blank_search_term(self, services):
        assert services.guests.search_by_name("  ").error_code == ErrorCode.VALIDATION_ERROR

    def test_guest_name_required(self, services):
        result = services.guests.register_guest(GuestCreate(name=" ", phone_number="1", email="a@b.c"))
        assert result.error_code == ErrorCode.VALIDATION_ERROR


class TestFeedback:

    @pytest.fixture
    def reservation_id(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE)])
        return services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).data

    def test_record_feedback(self, services, guest_id, reservation_id):
        result = services.guests.record_feedback(
            FeedbackCreate(guest_id=guest_id, reservation_id=reservation_id, rating=4, comments="Quiet room")
        )

        assert result.is_success
        assert result.data.rating == 4
        assert services.guests.get_guest(guest_id).data.feedback == "Quiet room"

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, services, guest_id, reservation_id, rating):
        result = services.guests.record_feedback(
            FeedbackCreate(guest_id=guest_id, reservation_id=reservation_id, rating=rating)
        )
        assert result.error_code == ErrorCode.VALIDATION_ERROR

    def test_feedback_for_someone_elses_reservation(self, services, reservation_id):
        stranger = services.guests.register_guest(
            GuestCreate(name="Stranger", phone_number="0", email="s@example.com")
        ).data
        result = services.guests.record_feedback(
            FeedbackCreate(guest_id=stranger.id, reservation_id=reservation_id, rating=5)
        )
        assert result.error_code == ErrorCode.VALIDATION_ERROR


class TestAdminAuthentication:

    def test_valid_credentials(self, services, admin):
        username, password = admin
        result = services.admins.authenticate(username, password)

        assert result.is_success
        assert result.data.username == username
        assert result.data.last_login is not None

    @pytest.mark.parametrize("username,password", [("admin", "wrong"), ("ghost", "admin123"), ("", "")])
    def test_invalid_credentials_look_the_same(self, services, admin, username, password):
        result = services.admins.authenticate(username, password)
        assert result.error_code == ErrorCode.AUTHENTICATION_FAILED
        assert result.message == "Invalid username or password"

    def test_create_admin_rejects_duplicates(self, services, admin):
        created = services.admins.create_admin("frontdesk", "s3cret", "Front Desk")
        assert created.is_success
        assert services.admins.authenticate("frontdesk", "s3cret").is_success

        duplicate = services.admins.create_admin("frontdesk", "other", "Someone Else")
        assert duplicate.error_code == ErrorCode.VALIDATION_ERROR


class TestReports:

    def test_occupancy_report(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE), ("102", RoomType.SINGLE), ("201", RoomType.DOUBLE)])
        services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)

        lines = services.reports.occupancy_report(date(2024, 6, 2)).data

        assert lines[0] == "Occupancy Report for 2024-06-02"
        assert any(line.startswith("Single Room") and "1/2 occupied" in line for line in lines)
        assert any(line.startswith("Double Room") and "0/1 occupied" in line for line in lines)
        assert lines[-1].endswith("1/3 occupied (33.3%)")

    def test_occupancy_ignores_pending_holds(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE), ("102", RoomType.SINGLE), ("103", RoomType.SINGLE)])
        services.reservations.create_reservation(make_reservation(), RoomType.SINGLE)
        checked_in = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).data
        services.reservations.check_in(checked_in)
        services.reservations.create_reservation(
            make_reservation(status=ReservationStatus.PENDING), RoomType.SINGLE
        )

        lines = services.reports.occupancy_report(date(2024, 6, 2)).data

        assert lines[-1].endswith("2/3 occupied (66.7%)")

    def test_revenue_report(self, services, add_rooms, make_reservation):
        add_rooms([("101", RoomType.SINGLE)])
        reservation_id = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).data
        services.reservations.check_in(reservation_id)
        services.reservations.check_out(reservation_id)
        today = datetime.now(timezone.utc).date()

        lines = services.reports.revenue_report(today, today).data

        assert "Bills:        1 (0 paid)" in lines
        assert "Total:        $452.00" in lines

    def test_feedback_report_without_feedback(self, services):
        lines = services.reports.feedback_report().data
        assert "Responses: 0" in lines
        assert "Average rating: n/a" in lines
