# models/__init__.py
from .base import Base
from .enums import ACTIVE_STATUSES, AdminRole, ReservationStatus, RoomType
from .admin import Admin
from .bill import Bill
from .guest import Feedback, Guest
from .reservation import Reservation, ReservationRoom
from .room import Room

__all__ = [
    "Base",
    "ACTIVE_STATUSES",
    "AdminRole",
    "ReservationStatus",
    "RoomType",
    "Admin",
    "Bill",
    "Feedback",
    "Guest",
    "Reservation",
    "ReservationRoom",
    "Room",
]
