"""
Room occupancy predicate.

A room is free for ``[check_in, check_out)`` when no Pending, Confirmed
or Checked In reservation holds a link to it over an intersecting range.
Callers that act on the answer must ask inside the unit of work that
performs the write, otherwise the answer can be stale by commit time.
"""

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from hotel_reservation.models.room import Room
from hotel_reservation.repositories.reservation_repository import ReservationRoomRepository
from hotel_reservation.utils.date_utils import ranges_overlap

__all__ = ["ranges_overlap", "is_room_free", "free_rooms"]


def is_room_free(
    session: Session,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[int] = None,
) -> bool:
    links = ReservationRoomRepository(session)
    return not links.is_room_booked(room_id, check_in, check_out, exclude_reservation_id)


def free_rooms(
    session: Session,
    rooms: Iterable[Room],
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[int] = None,
) -> List[Room]:
    """Filter ``rooms`` down to the free ones, keeping their order"""
    rooms = list(rooms)
    if not rooms:
        return []
    booked = ReservationRoomRepository(session).booked_room_ids(
        check_in,
        check_out,
        room_ids=[room.id for room in rooms],
        exclude_reservation_id=exclude_reservation_id,
    )
    return [room for room in rooms if room.id not in booked]
