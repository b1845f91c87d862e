# hotel_reservation/repositories/reservation_repository.py
"""
Reservation and reservation-room repositories.
"""

from datetime import date
from typing import List, Optional, Sequence, Set

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from hotel_reservation.models.enums import ACTIVE_STATUSES, ReservationStatus
from hotel_reservation.models.reservation import Reservation, ReservationRoom
from hotel_reservation.repositories.base_repository import BaseRepository


class ReservationRepository(BaseRepository[Reservation]):
    """
    Repository for Reservation entity.

    Handles:
    - Lookups by guest, status and date
    - Active reservation listing
    """

    def __init__(self, session: Session):
        super().__init__(Reservation, session)

    def find_by_guest(self, guest_id: int) -> List[Reservation]:
        return self.find_by_criteria({"guest_id": guest_id}, order_by=["check_in_date", "id"])

    def find_by_status(self, status: ReservationStatus) -> List[Reservation]:
        return self.find_by_criteria({"status": status}, order_by=["check_in_date", "id"])

    def find_by_statuses(self, statuses: Sequence[ReservationStatus]) -> List[Reservation]:
        return self.find_by_criteria({"status": list(statuses)}, order_by=["check_in_date", "id"])

    def find_checking_in_on(self, day: date) -> List[Reservation]:
        """Confirmed reservations whose stay starts on ``day``"""
        return self.find_by_criteria(
            {"check_in_date": day, "status": ReservationStatus.CONFIRMED}
        )

    def find_checking_out_on(self, day: date) -> List[Reservation]:
        """Checked-in reservations whose stay ends on ``day``"""
        return self.find_by_criteria(
            {"check_out_date": day, "status": ReservationStatus.CHECKED_IN}
        )

    def find_in_range(
        self,
        start: date,
        end: date,
        statuses: Optional[Sequence[ReservationStatus]] = None,
    ) -> List[Reservation]:
        """Reservations whose stay intersects ``[start, end)``"""
        query = select(Reservation).where(
            and_(
                Reservation.check_in_date < end,
                Reservation.check_out_date > start,
            )
        )
        if statuses:
            query = query.where(Reservation.status.in_(list(statuses)))
        query = query.order_by(Reservation.check_in_date, Reservation.id)
        return list(self.session.execute(query).scalars().all())


class ReservationRoomRepository(BaseRepository[ReservationRoom]):
    """
    Repository for room links.

    The overlap queries here are the only place the "is this room taken"
    rule is expressed in SQL: a link blocks its room when the owning
    reservation is active and its ``[check_in, check_out)`` range
    intersects the queried one.
    """

    def __init__(self, session: Session):
        super().__init__(ReservationRoom, session)

    def _overlapping(
        self,
        check_in: date,
        check_out: date,
        exclude_reservation_id: Optional[int] = None,
        statuses: Sequence[ReservationStatus] = ACTIVE_STATUSES,
    ):
        query = (
            select(ReservationRoom.room_id)
            .join(Reservation, Reservation.id == ReservationRoom.reservation_id)
            .where(
                and_(
                    Reservation.status.in_(list(statuses)),
                    Reservation.check_in_date < check_out,
                    Reservation.check_out_date > check_in,
                )
            )
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        return query

    def booked_room_ids(
        self,
        check_in: date,
        check_out: date,
        room_ids: Optional[Sequence[int]] = None,
        exclude_reservation_id: Optional[int] = None,
        statuses: Sequence[ReservationStatus] = ACTIVE_STATUSES,
    ) -> Set[int]:
        """Ids of rooms held by a reservation in ``statuses`` overlapping the range"""
        query = self._overlapping(check_in, check_out, exclude_reservation_id, statuses)
        if room_ids is not None:
            query = query.where(ReservationRoom.room_id.in_(list(room_ids)))
        return set(self.session.execute(query).scalars().all())

    def is_room_booked(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        query = self._overlapping(check_in, check_out, exclude_reservation_id).where(
            ReservationRoom.room_id == room_id
        )
        return self.session.execute(query.limit(1)).first() is not None

    def find_for_reservation(self, reservation_id: int) -> List[ReservationRoom]:
        return self.find_by_criteria({"reservation_id": reservation_id})

    def get_link(self, reservation_id: int, room_id: int) -> Optional[ReservationRoom]:
        links = self.find_by_criteria(
            {"reservation_id": reservation_id, "room_id": room_id}, limit=1
        )
        return links[0] if links else None

    def delete(self, link: ReservationRoom) -> None:
        self.session.delete(link)
        self.session.flush()
