"""
Reservation service: booking entry points, lifecycle transitions,
queries and room changes on existing reservations.
"""

from datetime import date
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy.orm import Session

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.exceptions import (
    ReservationNotFoundError,
    RoomNotFoundError,
    ValidationError,
)
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.models.enums import ReservationStatus, RoomType
from hotel_reservation.models.reservation import Reservation
from hotel_reservation.repositories.reservation_repository import (
    ReservationRepository,
    ReservationRoomRepository,
)
from hotel_reservation.repositories.room_repository import RoomRepository
from hotel_reservation.schemas.billing import BillRead
from hotel_reservation.schemas.reservation import (
    AllocationRequest,
    ReservationCreate,
    ReservationRead,
    ReservationRoomRead,
    RoomRequest,
)
from hotel_reservation.services.allocation.allocation_service import AllocationService
from hotel_reservation.services.allocation.overlap_checker import is_room_free
from hotel_reservation.services.base import BaseService, Clock, ServiceResult
from hotel_reservation.services.billing.billing_service import BillingService
from hotel_reservation.services.reservation.state_machine import (
    RELEASING_STATUSES,
    apply_transition,
)

RoomRequests = Union[Mapping[RoomType, int], Iterable[RoomRequest]]

MODIFIABLE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


class ReservationService(BaseService):
    """
    Reservation operations for the kiosk and the admin console.

    Every mutation runs in one unit of work: the status check, the write
    and any room release or bill creation commit together or not at all.
    """

    def __init__(
        self,
        store: InventoryStore,
        settings: Settings,
        allocation_service: AllocationService,
        billing_service: BillingService,
        clock: Optional[Clock] = None,
    ):
        super().__init__(store, settings, clock)
        self.allocation_service = allocation_service
        self.billing_service = billing_service

    # -------------------------------------------------------------------------
    # Booking entry points
    # -------------------------------------------------------------------------

    def create_reservation(
        self,
        reservation: ReservationCreate,
        room_type: RoomType,
    ) -> ServiceResult[int]:
        """Book a single room of ``room_type``; returns the reservation id"""
        return self.create_reservation_with_rooms(reservation, {room_type: 1})

    def create_reservation_with_rooms(
        self,
        reservation: ReservationCreate,
        room_requests: RoomRequests,
    ) -> ServiceResult[int]:
        """
        Book several rooms, possibly of several types, in one reservation.

        Args:
            reservation: Guest, dates, party size and initial status
            room_requests: Room type to quantity, or RoomRequest items

        Returns:
            ServiceResult with the new reservation id, or a failure with
            VALIDATION_ERROR / INSUFFICIENT_INVENTORY / NOT_FOUND /
            STORE_UNAVAILABLE
        """
        try:
            if isinstance(room_requests, Mapping):
                request = AllocationRequest.for_room_types(reservation, dict(room_requests))
            else:
                request = AllocationRequest(
                    **reservation.model_dump(),
                    room_requests=list(room_requests),
                )
        except Exception as e:
            return self._handle_exception(e, "build allocation request")

        result = self.allocation_service.allocate(request)
        if not result:
            return ServiceResult.failure(result.error)
        return ServiceResult.success(result.data.reservation_id, message=result.message)

    # -------------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------------

    def _transition(
        self,
        reservation_id: int,
        target: ReservationStatus,
        operation: str,
        after: Optional[Callable[[Session, Reservation], object]] = None,
    ):
        try:
            with self.store.unit_of_work(operation) as session:
                reservation = ReservationRepository(session).get_by_id(reservation_id, for_update=True)
                if reservation is None:
                    raise ReservationNotFoundError(reservation_id)

                if target in RELEASING_STATUSES:
                    previous = self.allocation_service.release(session, reservation, target)
                else:
                    previous = apply_transition(reservation, target, self.today())
                    session.flush()

                extra = after(session, reservation) if after else None
                view = ReservationRead.model_validate(reservation)

            self._log_operation(
                operation,
                reservation_id,
                {"from": previous.value, "to": target.value},
            )
            return ServiceResult.success(extra if extra is not None else view)
        except Exception as e:
            return self._handle_exception(e, operation, reservation_id)

    def confirm(self, reservation_id: int) -> ServiceResult[ReservationRead]:
        return self._transition(reservation_id, ReservationStatus.CONFIRMED, "confirm")

    def check_in(self, reservation_id: int) -> ServiceResult[ReservationRead]:
        """Confirmed -> Checked In, only once the check-in date has arrived"""
        return self._transition(reservation_id, ReservationStatus.CHECKED_IN, "check_in")

    def check_out(self, reservation_id: int) -> ServiceResult[BillRead]:
        """Checked In -> Checked Out; frees the rooms and stores the bill"""

        def bill(session: Session, reservation: Reservation) -> BillRead:
            created = self.billing_service.create_bill_for_checkout(session, reservation)
            return BillRead.model_validate(created)

        return self._transition(reservation_id, ReservationStatus.CHECKED_OUT, "check_out", bill)

    def cancel(self, reservation_id: int) -> ServiceResult[ReservationRead]:
        """Pending/Confirmed -> Cancelled; frees the rooms"""
        return self._transition(reservation_id, ReservationStatus.CANCELLED, "cancel")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _query(self, operation: str, fetch: Callable[[ReservationRepository], List[Reservation]]):
        try:
            with self.store.read_session() as session:
                reservations = fetch(ReservationRepository(session))
                return ServiceResult.success(
                    [ReservationRead.model_validate(r) for r in reservations]
                )
        except Exception as e:
            return self._handle_exception(e, operation)

    def get_reservation(self, reservation_id: int) -> ServiceResult[ReservationRead]:
        try:
            with self.store.read_session() as session:
                reservation = ReservationRepository(session).get_by_id(reservation_id)
                if reservation is None:
                    raise ReservationNotFoundError(reservation_id)
                return ServiceResult.success(ReservationRead.model_validate(reservation))
        except Exception as e:
            return self._handle_exception(e, "get reservation", reservation_id)

    def get_reservations_by_guest(self, guest_id: int) -> ServiceResult[List[ReservationRead]]:
        return self._query("list guest reservations", lambda repo: repo.find_by_guest(guest_id))

    def get_reservations_by_status(self, status: ReservationStatus) -> ServiceResult[List[ReservationRead]]:
        return self._query("list reservations by status", lambda repo: repo.find_by_status(status))

    def get_active_reservations(self) -> ServiceResult[List[ReservationRead]]:
        """Confirmed and Checked In reservations"""
        return self._query(
            "list active reservations",
            lambda repo: repo.find_by_statuses(
                [ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN]
            ),
        )

    def get_todays_check_ins(self) -> ServiceResult[List[ReservationRead]]:
        today = self.today()
        return self._query("list today's check-ins", lambda repo: repo.find_checking_in_on(today))

    def get_todays_check_outs(self) -> ServiceResult[List[ReservationRead]]:
        today = self.today()
        return self._query("list today's check-outs", lambda repo: repo.find_checking_out_on(today))

    def get_reservations_in_range(self, start: date, end: date) -> ServiceResult[List[ReservationRead]]:
        if end <= start:
            return ServiceResult.validation_failure("End date must be after start date", field="end")
        return self._query("list reservations in range", lambda repo: repo.find_in_range(start, end))

    def get_reservation_rooms(self, reservation_id: int) -> ServiceResult[List[ReservationRoomRead]]:
        try:
            with self.store.read_session() as session:
                if ReservationRepository(session).get_by_id(reservation_id) is None:
                    raise ReservationNotFoundError(reservation_id)
                links = ReservationRoomRepository(session).find_for_reservation(reservation_id)
                return ServiceResult.success([ReservationRoomRead.model_validate(l) for l in links])
        except Exception as e:
            return self._handle_exception(e, "list reservation rooms", reservation_id)

    # -------------------------------------------------------------------------
    # Room changes
    # -------------------------------------------------------------------------

    def _load_modifiable(self, session: Session, reservation_id: int, action: str) -> Reservation:
        reservation = ReservationRepository(session).get_by_id(reservation_id, for_update=True)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        if reservation.status not in MODIFIABLE_STATUSES:
            raise ValidationError(
                f"Cannot {action} reservation with status: {reservation.status.value}"
            )
        return reservation

    @staticmethod
    def _recount_guests(session: Session, reservation: Reservation) -> int:
        session.expire(reservation, ["rooms"])
        total = sum(link.guests_in_room for link in reservation.rooms)
        if total <= 0:
            raise ValidationError(
                "A reservation must keep at least one guest",
                field_errors={"guests_in_room": ["total must be greater than 0"]},
            )
        reservation.party_size = total
        session.flush()
        return total

    def add_room_to_reservation(
        self,
        reservation_id: int,
        room_id: int,
        guests_in_room: int,
    ) -> ServiceResult[ReservationRead]:
        """
        Attach ``room_id`` to a Pending or Confirmed reservation. The room
        must be structurally available and free for the reservation's
        dates; the party size becomes the sum of guests over all rooms.
        """
        try:
            if guests_in_room < 0:
                raise ValidationError(
                    "Guests in room cannot be negative",
                    field_errors={"guests_in_room": ["must be 0 or more"]},
                )

            with self.store.unit_of_work("add_room") as session:
                reservation = self._load_modifiable(session, reservation_id, "add room to")
                links = ReservationRoomRepository(session)

                if links.get_link(reservation_id, room_id) is not None:
                    raise ValidationError(f"Room #{room_id} is already assigned to this reservation")

                room = RoomRepository(session).get_by_id(room_id, for_update=True)
                if room is None:
                    raise RoomNotFoundError(room_id)
                if not room.is_available:
                    raise ValidationError(f"Room {room.room_number} is not available")
                if guests_in_room > room.max_occupancy:
                    raise ValidationError(
                        f"Room {room.room_number} cannot accommodate {guests_in_room} guests. "
                        f"Maximum capacity is {room.max_occupancy}",
                        field_errors={"guests_in_room": ["exceeds room capacity"]},
                    )
                if not is_room_free(
                    session,
                    room.id,
                    reservation.check_in_date,
                    reservation.check_out_date,
                    exclude_reservation_id=reservation.id,
                ):
                    raise ValidationError(
                        f"Room {room.room_number} is already booked for "
                        f"{reservation.check_in_date} to {reservation.check_out_date}"
                    )

                links.create(
                    {
                        "reservation_id": reservation.id,
                        "room_id": room.id,
                        "guests_in_room": guests_in_room,
                        "price_per_night": room.price,
                    }
                )
                party_size = self._recount_guests(session, reservation)
                view = ReservationRead.model_validate(reservation)

            self._log_operation("add room", reservation_id, {"room_id": room_id, "party_size": party_size})
            return ServiceResult.success(view)
        except Exception as e:
            return self._handle_exception(e, "add room to reservation", reservation_id)

    def remove_room_from_reservation(
        self,
        reservation_id: int,
        room_id: int,
    ) -> ServiceResult[ReservationRead]:
        """Detach a room; the last room of a reservation cannot be removed"""
        try:
            with self.store.unit_of_work("remove_room") as session:
                reservation = self._load_modifiable(session, reservation_id, "remove room from")
                links = ReservationRoomRepository(session)

                link = links.get_link(reservation_id, room_id)
                if link is None:
                    raise ValidationError(f"Room #{room_id} is not assigned to this reservation")
                if len(links.find_for_reservation(reservation_id)) == 1:
                    raise ValidationError("Cannot remove the only room from a reservation")

                links.delete(link)
                party_size = self._recount_guests(session, reservation)
                view = ReservationRead.model_validate(reservation)

            self._log_operation("remove room", reservation_id, {"room_id": room_id, "party_size": party_size})
            return ServiceResult.success(view)
        except Exception as e:
            return self._handle_exception(e, "remove room from reservation", reservation_id)


def summarize_rooms(reservation: ReservationRead) -> Dict[str, int]:
    """Room number to guests, for display"""
    return {
        (link.room.room_number if link.room else str(link.room_id)): link.guests_in_room
        for link in reservation.rooms
    }
