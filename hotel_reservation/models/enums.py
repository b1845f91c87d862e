"""
Enumerations shared by models, schemas and services.
"""

import enum
from decimal import Decimal


class RoomType(str, enum.Enum):
    """
    Room categories.

    Each member carries its display name, base nightly price and maximum
    occupancy, so callers never need a separate lookup table.
    """

    SINGLE = ("SINGLE", "Single Room", Decimal("100.00"), 2)
    DOUBLE = ("DOUBLE", "Double Room", Decimal("180.00"), 4)
    DELUXE = ("DELUXE", "Deluxe Room", Decimal("250.00"), 2)
    PENT_HOUSE = ("PENT_HOUSE", "Pent House", Decimal("400.00"), 2)

    def __new__(cls, code: str, display_name: str, base_price: Decimal, max_occupancy: int):
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.display_name = display_name
        obj.base_price = base_price
        obj.max_occupancy = max_occupancy
        return obj

    @classmethod
    def parse(cls, value: str) -> "RoomType":
        """Accept the code ("DOUBLE"), the member name or the display name"""
        text = str(value).strip()
        for member in cls:
            if text.upper() in (member.value, member.name) or text.lower() == member.display_name.lower():
                return member
        raise ValueError(f"Unknown room type: {value}")

    def __str__(self) -> str:
        return self.display_name


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CHECKED_IN = "Checked In"
    CHECKED_OUT = "Checked Out"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED)

    def __str__(self) -> str:
        return self.value


# Statuses whose room links block the room for their date range
ACTIVE_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
)


class AdminRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
