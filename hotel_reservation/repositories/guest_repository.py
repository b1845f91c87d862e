# hotel_reservation/repositories/guest_repository.py
"""
Guest and feedback repositories.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hotel_reservation.models.guest import Feedback, Guest
from hotel_reservation.repositories.base_repository import BaseRepository


class GuestRepository(BaseRepository[Guest]):
    def __init__(self, session: Session):
        super().__init__(Guest, session)

    def search_by_name(self, name: str) -> List[Guest]:
        """Case-insensitive partial match on the guest name"""
        pattern = f"%{name.strip()}%"
        query = select(Guest).where(Guest.name.ilike(pattern)).order_by(Guest.name, Guest.id)
        return list(self.session.execute(query).scalars().all())

    def search_by_phone(self, phone_number: str) -> List[Guest]:
        pattern = f"%{phone_number.strip()}%"
        query = select(Guest).where(Guest.phone_number.like(pattern)).order_by(Guest.id)
        return list(self.session.execute(query).scalars().all())

    def get_by_email(self, email: str) -> Optional[Guest]:
        query = (
            select(Guest)
            .where(func.lower(Guest.email) == email.strip().lower())
            .order_by(Guest.id)
            .limit(1)
        )
        return self.session.execute(query).scalar_one_or_none()


class FeedbackRepository(BaseRepository[Feedback]):
    def __init__(self, session: Session):
        super().__init__(Feedback, session)

    def find_recent(self, limit: int = 20) -> List[Feedback]:
        return self.find_by_criteria({}, order_by=["-submitted_at", "-id"], limit=limit)

    def average_rating(self) -> Optional[float]:
        value = self.session.execute(select(func.avg(Feedback.rating))).scalar_one()
        return float(value) if value is not None else None
