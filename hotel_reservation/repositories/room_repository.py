# hotel_reservation/repositories/room_repository.py
"""
Room repository.
"""

from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from hotel_reservation.models.enums import RoomType
from hotel_reservation.models.room import Room
from hotel_reservation.repositories.base_repository import BaseRepository


class RoomRepository(BaseRepository[Room]):
    """
    Repository for Room entity.

    Handles:
    - Room lookups by type
    - Locking candidate rows for allocation
    - Price and structural availability updates
    """

    def __init__(self, session: Session):
        super().__init__(Room, session)

    def find_by_type(self, room_type: RoomType, only_available: bool = False) -> List[Room]:
        """Rooms of one type in ascending id order"""
        query = select(Room).where(Room.room_type == room_type)
        if only_available:
            query = query.where(Room.is_available.is_(True))
        return list(self.session.execute(query.order_by(Room.id)).scalars().all())

    def lock_candidates(self, room_type: RoomType) -> List[Room]:
        """
        Structurally available rooms of a type, ascending id, locked
        FOR UPDATE on databases that support row locks.
        """
        query = (
            select(Room)
            .where(Room.room_type == room_type, Room.is_available.is_(True))
            .order_by(Room.id)
            .with_for_update()
        )
        return list(self.session.execute(query).scalars().all())

    def set_price(self, room: Room, price: Decimal) -> Room:
        return self.update(room, {"price": price})

    def set_available(self, room: Room, is_available: bool) -> Room:
        return self.update(room, {"is_available": is_available})
