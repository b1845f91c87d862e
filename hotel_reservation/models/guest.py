# hotel_reservation/models/guest.py
"""
Guest and feedback models. Guests are never deleted.
"""

from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hotel_reservation.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from hotel_reservation.models.reservation import Reservation

__all__ = ["Guest", "Feedback"]


class Guest(TimestampMixin, Base):
    __tablename__ = "guests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    reservations: Mapped[List["Reservation"]] = relationship(
        "Reservation",
        back_populates="guest",
    )

    def __repr__(self) -> str:
        return f"<Guest(id={self.id}, name={self.name!r})>"


class Feedback(Base):
    """Rating left by a guest for a stay"""

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guest_id: Mapped[int] = mapped_column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_rating"),
    )
