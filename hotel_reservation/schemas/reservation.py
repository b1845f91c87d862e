"""
Reservation and allocation schemas.

Request schemas only enforce types. Business validation (date order,
positive party size, capacity) happens in the services so that callers
receive a VALIDATION_ERROR result rather than an exception.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field, computed_field

from hotel_reservation.models.enums import ReservationStatus, RoomType
from hotel_reservation.schemas.base import BaseSchema
from hotel_reservation.schemas.room import RoomRead

__all__ = [
    "ReservationCreate",
    "RoomRequest",
    "AllocationRequest",
    "AllocatedRoom",
    "AllocationResult",
    "ReservationRoomRead",
    "ReservationRead",
]


class ReservationCreate(BaseSchema):
    """Reservation details supplied by the kiosk or console"""

    guest_id: int
    check_in_date: date
    check_out_date: date
    party_size: int
    status: ReservationStatus = Field(
        ReservationStatus.CONFIRMED,
        description="Initial status, Pending or Confirmed",
    )


class RoomRequest(BaseSchema):
    room_type: RoomType
    quantity: int = 1


class AllocationRequest(BaseSchema):
    """Date range plus the room types and quantities to allocate"""

    guest_id: int
    check_in_date: date
    check_out_date: date
    party_size: int
    room_requests: List[RoomRequest]
    status: ReservationStatus = ReservationStatus.CONFIRMED

    @classmethod
    def for_room_types(
        cls,
        reservation: ReservationCreate,
        room_requests: Dict[RoomType, int],
    ) -> "AllocationRequest":
        return cls(
            guest_id=reservation.guest_id,
            check_in_date=reservation.check_in_date,
            check_out_date=reservation.check_out_date,
            party_size=reservation.party_size,
            status=reservation.status,
            room_requests=[
                RoomRequest(room_type=room_type, quantity=quantity)
                for room_type, quantity in room_requests.items()
            ],
        )

    def quantities_by_type(self) -> Dict[RoomType, int]:
        """Merge repeated room types, keeping first-seen order"""
        merged: Dict[RoomType, int] = {}
        for request in self.room_requests:
            merged[request.room_type] = merged.get(request.room_type, 0) + request.quantity
        return merged

    @computed_field
    @property
    def total_rooms(self) -> int:
        return sum(request.quantity for request in self.room_requests)

    @computed_field
    @property
    def total_capacity(self) -> int:
        return sum(r.room_type.max_occupancy * max(r.quantity, 0) for r in self.room_requests)


class AllocatedRoom(BaseSchema):
    room_id: int
    room_number: str
    room_type: RoomType
    guests_in_room: int
    price_per_night: Decimal


class AllocationResult(BaseSchema):
    reservation_id: int
    status: ReservationStatus
    check_in_date: date
    check_out_date: date
    party_size: int
    rooms: List[AllocatedRoom]

    @computed_field
    @property
    def room_ids(self) -> List[int]:
        return [room.room_id for room in self.rooms]


class ReservationRoomRead(BaseSchema):
    id: int
    reservation_id: int
    room_id: int
    guests_in_room: int
    price_per_night: Decimal
    room: Optional[RoomRead] = None


class ReservationRead(BaseSchema):
    id: int
    guest_id: int
    check_in_date: date
    check_out_date: date
    party_size: int
    status: ReservationStatus
    created_at: datetime
    rooms: List[ReservationRoomRead] = Field(default_factory=list)

    @computed_field
    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days
