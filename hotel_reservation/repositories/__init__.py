from hotel_reservation.repositories.base_repository import BaseRepository
from hotel_reservation.repositories.bill_repository import AdminRepository, BillRepository
from hotel_reservation.repositories.guest_repository import FeedbackRepository, GuestRepository
from hotel_reservation.repositories.reservation_repository import (
    ReservationRepository,
    ReservationRoomRepository,
)
from hotel_reservation.repositories.room_repository import RoomRepository

__all__ = [
    "BaseRepository",
    "AdminRepository",
    "BillRepository",
    "FeedbackRepository",
    "GuestRepository",
    "ReservationRepository",
    "ReservationRoomRepository",
    "RoomRepository",
]
