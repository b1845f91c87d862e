"""
Guest and feedback schemas. Contact-format checks are left to the
front ends collecting the data.
"""

from datetime import datetime
from typing import Optional

from hotel_reservation.schemas.base import BaseSchema

__all__ = ["GuestCreate", "GuestRead", "FeedbackCreate", "FeedbackRead"]


class GuestCreate(BaseSchema):
    name: str
    phone_number: str
    email: str
    address: str = ""


class GuestRead(BaseSchema):
    id: int
    name: str
    phone_number: str
    email: str
    address: str
    feedback: Optional[str] = None


class FeedbackCreate(BaseSchema):
    guest_id: int
    reservation_id: int
    rating: int
    comments: Optional[str] = None


class FeedbackRead(FeedbackCreate):
    id: int
    submitted_at: datetime
