"""
Room schemas.
"""

from decimal import Decimal

from pydantic import Field, computed_field

from hotel_reservation.models.enums import RoomType
from hotel_reservation.schemas.base import BaseSchema

__all__ = ["RoomRead", "RoomAvailability"]


class RoomRead(BaseSchema):
    id: int
    room_number: str
    room_type: RoomType
    price: Decimal
    floor: int
    is_available: bool = Field(..., description="Structural availability flag")

    @computed_field
    @property
    def max_occupancy(self) -> int:
        return self.room_type.max_occupancy


class RoomAvailability(BaseSchema):
    """Free rooms of one type for a date range"""

    room_type: RoomType
    total_rooms: int
    free_rooms: int
    free_room_ids: list[int] = Field(default_factory=list)

    @computed_field
    @property
    def is_available(self) -> bool:
        return self.free_rooms > 0
