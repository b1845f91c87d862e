"""
Billing and admin account schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from hotel_reservation.models.enums import AdminRole, RoomType
from hotel_reservation.schemas.base import BaseSchema

__all__ = ["BillLineItem", "BillStatement", "BillRead", "AdminRead"]


class BillLineItem(BaseSchema):
    room_id: int
    room_number: str
    room_type: RoomType
    nights: int
    price_per_night: Decimal
    subtotal: Decimal


class BillStatement(BaseSchema):
    """Computed charges for a reservation, stored or not"""

    reservation_id: int
    nights: int
    items: List[BillLineItem]
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


class BillRead(BaseSchema):
    id: int
    reservation_id: int
    amount: Decimal
    tax: Decimal
    discount: Decimal
    total_amount: Decimal
    billing_date: datetime
    is_paid: bool


class AdminRead(BaseSchema):
    id: int
    username: str
    name: str
    role: AdminRole
    last_login: Optional[datetime] = None
