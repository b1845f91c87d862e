from datetime import date
from typing import Dict, List, Sequence, Tuple

import pytest

from hotel_reservation.config.settings import Settings
from hotel_reservation.db.init_db import create_tables, seed_admin
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.models import Room, RoomType
from hotel_reservation.schemas.guest import GuestCreate
from hotel_reservation.schemas.reservation import ReservationCreate
from hotel_reservation.services.service_factory import ServiceFactory

TODAY = date(2024, 6, 1)


class FixedClock:
    """Callable "today" that tests can move"""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'hotel_test.db'}",
        PASSWORD_BCRYPT_ROUNDS=4,
        SEED_SAMPLE_ROOMS=False,
        STORE_LOCK_TIMEOUT=5.0,
        MAX_CLIENTS=4,
        MAX_PENDING_CLIENTS=0,
        SHUTDOWN_GRACE_PERIOD=1.0,
        SERVER_HOST="127.0.0.1",
        SERVER_PORT=0,
    )


@pytest.fixture
def store(settings):
    """Inventory store with an empty schema."""
    store = InventoryStore.from_settings(settings)
    create_tables(store.engine)
    yield store
    store.dispose()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def services(store, settings, clock):
    return ServiceFactory(store, settings, clock)


@pytest.fixture
def add_rooms(store):
    """
    Insert rooms and return their ids in insertion order.

    Usage: add_rooms([("101", RoomType.SINGLE), ("201", RoomType.DOUBLE)])
    """

    def _add(rooms: Sequence[Tuple[str, RoomType]], available: bool = True) -> List[int]:
        with store.unit_of_work("test_rooms") as session:
            created = [
                Room(
                    room_number=number,
                    room_type=room_type,
                    price=room_type.base_price,
                    floor=int(number[0]),
                    is_available=available,
                )
                for number, room_type in rooms
            ]
            session.add_all(created)
            session.flush()
            return [room.id for room in created]

    return _add


@pytest.fixture
def guest_id(services):
    result = services.guests.register_guest(
        GuestCreate(
            name="Jane Traveller",
            phone_number="416-555-0100",
            email="jane@example.com",
            address="1 King St W, Toronto",
        )
    )
    assert result.is_success
    return result.data.id


@pytest.fixture
def admin(store, settings):
    """Default admin account (admin / admin123)."""
    with store.unit_of_work("test_admin") as session:
        seed_admin(session, settings)
    return settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_PASSWORD


@pytest.fixture
def make_reservation(guest_id):
    """Build a ReservationCreate with sensible defaults."""

    def _make(
        check_in: date = date(2024, 6, 1),
        check_out: date = date(2024, 6, 5),
        party_size: int = 1,
        **kwargs,
    ) -> ReservationCreate:
        return ReservationCreate(
            guest_id=kwargs.pop("guest_id", guest_id),
            check_in_date=check_in,
            check_out_date=check_out,
            party_size=party_size,
            **kwargs,
        )

    return _make


@pytest.fixture
def guests_by_room(services):
    """room_id -> guests_in_room for a reservation"""

    def _links(reservation_id: int) -> Dict[int, int]:
        result = services.reservations.get_reservation_rooms(reservation_id)
        assert result.is_success
        return {link.room_id: link.guests_in_room for link in result.data}

    return _links
