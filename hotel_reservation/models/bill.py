# hotel_reservation/models/bill.py
"""
Bill model, one per reservation, produced at check-out (or when a
discount is applied ahead of it).
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_reservation.models.base import Base, utcnow

if TYPE_CHECKING:
    from hotel_reservation.models.reservation import Reservation

__all__ = ["Bill"]


class Bill(Base):
    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id"),
        nullable=False,
        unique=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, comment="Room subtotal")
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    billing_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    reservation: Mapped["Reservation"] = relationship("Reservation", back_populates="bill")

    def __repr__(self) -> str:
        return f"<Bill(reservation_id={self.reservation_id}, total={self.total_amount})>"
