# hotel_reservation/repositories/bill_repository.py
"""
Bill and admin repositories.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from hotel_reservation.models.admin import Admin
from hotel_reservation.models.bill import Bill
from hotel_reservation.models.enums import ReservationStatus
from hotel_reservation.models.reservation import Reservation
from hotel_reservation.repositories.base_repository import BaseRepository


class BillRepository(BaseRepository[Bill]):
    def __init__(self, session: Session):
        super().__init__(Bill, session)

    def get_for_reservation(self, reservation_id: int) -> Optional[Bill]:
        return self.session.execute(
            select(Bill).where(Bill.reservation_id == reservation_id)
        ).scalar_one_or_none()

    def find_in_period(self, start: datetime, end: datetime) -> List[Bill]:
        """Bills with ``start <= billing_date < end``, cancelled stays excluded"""
        query = (
            select(Bill)
            .join(Reservation, Bill.reservation_id == Reservation.id)
            .where(
                Bill.billing_date >= start,
                Bill.billing_date < end,
                Reservation.status != ReservationStatus.CANCELLED,
            )
            .order_by(Bill.billing_date, Bill.id)
        )
        return list(self.session.execute(query).scalars().all())


class AdminRepository(BaseRepository[Admin]):
    def __init__(self, session: Session):
        super().__init__(Admin, session)

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self.session.execute(
            select(Admin).where(Admin.username == username)
        ).scalar_one_or_none()
