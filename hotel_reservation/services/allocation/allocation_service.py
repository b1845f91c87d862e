"""
Allocation engine.

Turns a date range plus room-type quantities into a reservation and its
room links, all-or-nothing. The whole read-check-write sequence runs in
one unit of work, so no two allocations can both see the same room free
for overlapping dates.
"""

from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from hotel_reservation.core.exceptions import (
    GuestNotFoundError,
    InsufficientInventoryError,
    InvalidDateRangeError,
    ReservationNotFoundError,
    ValidationError,
)
from hotel_reservation.models.enums import ReservationStatus, RoomType
from hotel_reservation.models.guest import Guest
from hotel_reservation.models.reservation import Reservation, ReservationRoom
from hotel_reservation.models.room import Room
from hotel_reservation.repositories.bill_repository import BillRepository
from hotel_reservation.repositories.reservation_repository import ReservationRepository
from hotel_reservation.repositories.room_repository import RoomRepository
from hotel_reservation.schemas.reservation import (
    AllocatedRoom,
    AllocationRequest,
    AllocationResult,
)
from hotel_reservation.services.allocation.overlap_checker import free_rooms
from hotel_reservation.services.base import BaseService, ServiceResult
from hotel_reservation.services.reservation.state_machine import (
    RELEASING_STATUSES,
    apply_transition,
)

INITIAL_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


def distribute_guests(party_size: int, capacities: Sequence[int]) -> List[int]:
    """
    Spread ``party_size`` guests over rooms with the given capacities.

    Every room first gets ``party_size // len(capacities)`` guests (capped
    at its capacity); the rest fill the remaining headroom in allocation
    order.

    Raises:
        ValidationError: if the rooms cannot hold the party
    """
    if not capacities:
        raise ValidationError("At least one room is required")
    if party_size > sum(capacities):
        raise ValidationError(
            f"Party of {party_size} exceeds total room capacity of {sum(capacities)}",
            field_errors={"party_size": ["exceeds total room capacity"]},
        )

    base = party_size // len(capacities)
    assigned = [min(base, capacity) for capacity in capacities]
    remaining = party_size - sum(assigned)

    for index, capacity in enumerate(capacities):
        if remaining == 0:
            break
        extra = min(capacity - assigned[index], remaining)
        assigned[index] += extra
        remaining -= extra

    return assigned


class AllocationService(BaseService):
    """Room selection, reservation creation and room release"""

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate_request(self, request: AllocationRequest) -> Dict[RoomType, int]:
        if request.check_out_date <= request.check_in_date:
            raise InvalidDateRangeError(request.check_in_date, request.check_out_date)
        if request.party_size <= 0:
            raise ValidationError(
                "Party size must be positive",
                field_errors={"party_size": ["must be greater than 0"]},
            )
        if request.status not in INITIAL_STATUSES:
            raise ValidationError(
                f"A new reservation cannot start as {request.status.value}",
                field_errors={"status": ["must be Pending or Confirmed"]},
            )
        if not request.room_requests:
            raise ValidationError(
                "At least one room must be requested",
                field_errors={"room_requests": ["must not be empty"]},
            )
        for room_request in request.room_requests:
            if room_request.quantity <= 0:
                raise ValidationError(
                    f"Quantity for {room_request.room_type.display_name} must be positive",
                    field_errors={"quantity": ["must be greater than 0"]},
                )

        if request.total_capacity < request.party_size:
            raise ValidationError(
                f"Party of {request.party_size} exceeds the capacity of the requested rooms "
                f"({request.total_capacity})",
                field_errors={"party_size": ["exceeds total room capacity"]},
            )

        return request.quantities_by_type()

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    def allocate(self, request: AllocationRequest) -> ServiceResult[AllocationResult]:
        """
        Reserve rooms for ``request`` atomically.

        Room types are served in request order and, within a type, the
        lowest free room ids win. If any type falls short the unit of work
        is rolled back and nothing is written.
        """
        try:
            quantities = self._validate_request(request)

            with self.store.unit_of_work("allocate") as session:
                if session.get(Guest, request.guest_id) is None:
                    raise GuestNotFoundError(request.guest_id)

                selected = self._select_rooms(session, request, quantities)
                guests = distribute_guests(
                    request.party_size, [room.max_occupancy for room in selected]
                )
                reservation = self._create_reservation(session, request, selected, guests)
                result = AllocationResult(
                    reservation_id=reservation.id,
                    status=reservation.status,
                    check_in_date=reservation.check_in_date,
                    check_out_date=reservation.check_out_date,
                    party_size=reservation.party_size,
                    rooms=[
                        AllocatedRoom(
                            room_id=room.id,
                            room_number=room.room_number,
                            room_type=room.room_type,
                            guests_in_room=count,
                            price_per_night=room.price,
                        )
                        for room, count in zip(selected, guests)
                    ],
                )

            self._log_operation(
                "allocate",
                result.reservation_id,
                {
                    "guest_id": request.guest_id,
                    "room_ids": result.room_ids,
                    "check_in": str(request.check_in_date),
                    "check_out": str(request.check_out_date),
                },
            )
            return ServiceResult.success(result, message="Reservation created")

        except Exception as e:
            return self._handle_exception(e, "allocate rooms", request.guest_id)

    def _select_rooms(
        self,
        session: Session,
        request: AllocationRequest,
        quantities: Dict[RoomType, int],
    ) -> List[Room]:
        rooms = RoomRepository(session)
        selected: List[Room] = []

        for room_type, quantity in quantities.items():
            candidates = free_rooms(
                session,
                rooms.lock_candidates(room_type),
                request.check_in_date,
                request.check_out_date,
            )
            if len(candidates) < quantity:
                raise InsufficientInventoryError(room_type, quantity, len(candidates))
            selected.extend(candidates[:quantity])

        return selected

    def _create_reservation(
        self,
        session: Session,
        request: AllocationRequest,
        rooms: Sequence[Room],
        guests: Sequence[int],
    ) -> Reservation:
        reservation = ReservationRepository(session).add(
            Reservation(
                guest_id=request.guest_id,
                check_in_date=request.check_in_date,
                check_out_date=request.check_out_date,
                party_size=request.party_size,
                status=request.status,
            )
        )
        for room, count in zip(rooms, guests):
            session.add(
                ReservationRoom(
                    reservation_id=reservation.id,
                    room_id=room.id,
                    guests_in_room=count,
                    price_per_night=room.price,
                )
            )
        session.flush()
        return reservation

    # -------------------------------------------------------------------------
    # Release
    # -------------------------------------------------------------------------

    def release(
        self,
        session: Session,
        reservation: Reservation,
        final_status: ReservationStatus = ReservationStatus.CANCELLED,
    ) -> ReservationStatus:
        """
        Move ``reservation`` to a releasing status inside the caller's unit
        of work. Links are kept for history; the status change alone makes
        their rooms free again.
        """
        if final_status not in RELEASING_STATUSES:
            raise ValidationError(
                f"{final_status.value} does not release rooms",
                field_errors={"final_status": ["must be Cancelled or Checked Out"]},
            )
        previous = apply_transition(reservation, final_status, self.today())
        if final_status == ReservationStatus.CANCELLED:
            self._discard_provisional_bill(session, reservation)
        session.flush()
        self._logger.info(
            "Rooms released",
            reservation_id=reservation.id,
            previous_status=previous.value,
            status=final_status.value,
            room_ids=[link.room_id for link in reservation.rooms],
        )
        return previous

    def _discard_provisional_bill(self, session: Session, reservation: Reservation) -> None:
        """An unpaid bill written ahead of check-out goes with the cancelled stay"""
        bills = BillRepository(session)
        bill = bills.get_for_reservation(reservation.id)
        if bill is None or bill.is_paid:
            return
        bills.delete(bill)
        session.expire(reservation, ["bill"])
        self._logger.info("Provisional bill discarded", reservation_id=reservation.id)

    def release_reservation(self, reservation_id: int) -> ServiceResult[ReservationStatus]:
        """
        Cancel ``reservation_id`` and free its rooms. Check-out is not a
        release a caller can request here: it goes through
        ReservationService.check_out, which also stores the bill.
        """
        try:
            with self.store.unit_of_work("release") as session:
                reservation = ReservationRepository(session).get_by_id(reservation_id, for_update=True)
                if reservation is None:
                    raise ReservationNotFoundError(reservation_id)
                self.release(session, reservation, ReservationStatus.CANCELLED)
            return ServiceResult.success(ReservationStatus.CANCELLED)
        except Exception as e:
            return self._handle_exception(e, "release reservation", reservation_id)
