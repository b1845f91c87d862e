from hotel_reservation.schemas.billing import AdminRead, BillLineItem, BillRead, BillStatement
from hotel_reservation.schemas.guest import FeedbackCreate, FeedbackRead, GuestCreate, GuestRead
from hotel_reservation.schemas.reservation import (
    AllocatedRoom,
    AllocationRequest,
    AllocationResult,
    ReservationCreate,
    ReservationRead,
    ReservationRoomRead,
    RoomRequest,
)
from hotel_reservation.schemas.room import RoomAvailability, RoomRead

__all__ = [
    "AdminRead",
    "BillLineItem",
    "BillRead",
    "BillStatement",
    "FeedbackCreate",
    "FeedbackRead",
    "GuestCreate",
    "GuestRead",
    "AllocatedRoom",
    "AllocationRequest",
    "AllocationResult",
    "ReservationCreate",
    "ReservationRead",
    "ReservationRoomRead",
    "RoomRequest",
    "RoomAvailability",
    "RoomRead",
]
