# hotel_reservation/models/reservation.py
"""
Reservation models.

A reservation owns one ReservationRoom link per allocated room. The link
captures the nightly price at booking time so later price changes on the
room never alter historical bills.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_reservation.models.base import Base, TimestampMixin
from hotel_reservation.models.enums import ACTIVE_STATUSES, ReservationStatus

if TYPE_CHECKING:
    from hotel_reservation.models.bill import Bill
    from hotel_reservation.models.guest import Guest
    from hotel_reservation.models.room import Room

__all__ = ["Reservation", "ReservationRoom"]


class Reservation(TimestampMixin, Base):
    """Stay of one guest over [check_in_date, check_out_date)"""

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guest_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("guests.id"),
        nullable=False,
        index=True,
    )
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Exclusive end of the stay",
    )
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(
            ReservationStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ReservationStatus.PENDING,
        index=True,
    )

    guest: Mapped["Guest"] = relationship("Guest", back_populates="reservations")
    rooms: Mapped[List["ReservationRoom"]] = relationship(
        "ReservationRoom",
        back_populates="reservation",
        order_by="ReservationRoom.id",
        lazy="selectin",
    )
    bill: Mapped[Optional["Bill"]] = relationship(
        "Bill",
        back_populates="reservation",
        uselist=False,
    )

    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_reservation_date_range"),
        CheckConstraint("party_size > 0", name="ck_reservation_party_size"),
        Index("ix_reservation_status_dates", "status", "check_in_date", "check_out_date"),
    )

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, guest_id={self.guest_id}, "
            f"{self.check_in_date}..{self.check_out_date}, status={self.status.value})>"
        )


class ReservationRoom(Base):
    """Assignment of one room (and some of the party) to a reservation"""

    __tablename__ = "reservation_rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.id"),
        nullable=False,
        index=True,
    )
    guests_in_room: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_night: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Room price captured at booking time",
    )

    reservation: Mapped["Reservation"] = relationship("Reservation", back_populates="rooms")
    room: Mapped["Room"] = relationship("Room", back_populates="reservation_links", lazy="joined")

    __table_args__ = (
        UniqueConstraint("reservation_id", "room_id", name="uq_reservation_room"),
        CheckConstraint("guests_in_room >= 0", name="ck_reservation_room_guests"),
    )

    def __repr__(self) -> str:
        return f"<ReservationRoom(reservation_id={self.reservation_id}, room_id={self.room_id})>"
