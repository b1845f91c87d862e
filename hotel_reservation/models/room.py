# hotel_reservation/models/room.py
"""
Room model.

A room is provisioned once and never deleted while reservations
reference it. Its price and structural availability flag can be changed
by administrative action; neither is touched by booking.
"""

from decimal import Decimal
from typing import List, TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_reservation.models.base import Base
from hotel_reservation.models.enums import RoomType

if TYPE_CHECKING:
    from hotel_reservation.models.reservation import ReservationRoom

__all__ = ["Room"]


class Room(Base):
    """Physical room of the hotel"""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_number: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        unique=True,
    )
    room_type: Mapped[RoomType] = mapped_column(
        Enum(RoomType, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Current nightly price, may diverge from the type's base price",
    )
    floor: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Structural availability (administratively disabled rooms are False)",
    )

    reservation_links: Mapped[List["ReservationRoom"]] = relationship(
        "ReservationRoom",
        back_populates="room",
    )

    @property
    def max_occupancy(self) -> int:
        return self.room_type.max_occupancy

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, number={self.room_number}, type={self.room_type.value})>"
