"""
Room administration and availability queries.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from hotel_reservation.core.exceptions import InvalidDateRangeError, RoomNotFoundError, ValidationError
from hotel_reservation.models.enums import RoomType
from hotel_reservation.repositories.room_repository import RoomRepository
from hotel_reservation.schemas.room import RoomAvailability, RoomRead
from hotel_reservation.services.allocation.overlap_checker import free_rooms, is_room_free
from hotel_reservation.services.base import BaseService, ServiceResult


class RoomService(BaseService):
    """
    Room inventory operations.

    Price and structural availability changes go through the unit of
    work like any other mutation. Changing a price never touches the
    prices already captured on reservation links.
    """

    def list_rooms(self, room_type: Optional[RoomType] = None) -> ServiceResult[List[RoomRead]]:
        try:
            with self.store.read_session() as session:
                repo = RoomRepository(session)
                rooms = repo.find_by_type(room_type) if room_type else repo.get_all()
                return ServiceResult.success([RoomRead.model_validate(room) for room in rooms])
        except Exception as e:
            return self._handle_exception(e, "list rooms")

    def get_room(self, room_id: int) -> ServiceResult[RoomRead]:
        try:
            with self.store.read_session() as session:
                room = RoomRepository(session).get_by_id(room_id)
                if room is None:
                    raise RoomNotFoundError(room_id)
                return ServiceResult.success(RoomRead.model_validate(room))
        except Exception as e:
            return self._handle_exception(e, "get room", room_id)

    def update_room_price(self, room_id: int, price: Decimal) -> ServiceResult[RoomRead]:
        try:
            price = Decimal(str(price)).quantize(Decimal("0.01"))
            if price <= 0:
                raise ValidationError(
                    "Room price must be positive",
                    field_errors={"price": ["must be greater than 0"]},
                )
            with self.store.unit_of_work("update_room_price") as session:
                repo = RoomRepository(session)
                room = repo.get_by_id(room_id, for_update=True)
                if room is None:
                    raise RoomNotFoundError(room_id)
                old_price = room.price
                repo.set_price(room, price)
                result = RoomRead.model_validate(room)

            self._log_operation(
                "update room price",
                room_id,
                {"old_price": str(old_price), "new_price": str(price)},
            )
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "update room price", room_id)

    def set_room_structural_availability(self, room_id: int, is_available: bool) -> ServiceResult[RoomRead]:
        """
        Take a room out of (or back into) service. Existing reservations on
        the room are unaffected; only future allocations skip it.
        """
        try:
            with self.store.unit_of_work("set_room_availability") as session:
                repo = RoomRepository(session)
                room = repo.get_by_id(room_id, for_update=True)
                if room is None:
                    raise RoomNotFoundError(room_id)
                repo.set_available(room, is_available)
                result = RoomRead.model_validate(room)

            self._log_operation("set room availability", room_id, {"is_available": is_available})
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "set room availability", room_id)

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def check_room_type_availability(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
    ) -> ServiceResult[RoomAvailability]:
        """
        Free rooms of a type for a stay. The answer is advisory: booking
        re-checks inside its own unit of work.
        """
        try:
            if check_out <= check_in:
                raise InvalidDateRangeError(check_in, check_out)
            with self.store.read_session() as session:
                repo = RoomRepository(session)
                candidates = repo.find_by_type(room_type, only_available=True)
                free = free_rooms(session, candidates, check_in, check_out)
                total = len(repo.find_by_type(room_type))
            return ServiceResult.success(
                RoomAvailability(
                    room_type=room_type,
                    total_rooms=total,
                    free_rooms=len(free),
                    free_room_ids=[room.id for room in free],
                )
            )
        except Exception as e:
            return self._handle_exception(e, "check room availability", room_type.value)

    def count_available(self, room_type: RoomType, check_in: date, check_out: date) -> int:
        """Number of free rooms of a type, 0 when the lookup fails"""
        result = self.check_room_type_availability(room_type, check_in, check_out)
        return result.data.free_rooms if result else 0

    def is_room_free(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_reservation_id: Optional[int] = None,
    ) -> ServiceResult[bool]:
        try:
            if check_out <= check_in:
                raise InvalidDateRangeError(check_in, check_out)
            with self.store.read_session() as session:
                if RoomRepository(session).get_by_id(room_id) is None:
                    raise RoomNotFoundError(room_id)
                free = is_room_free(session, room_id, check_in, check_out, exclude_reservation_id)
            return ServiceResult.success(free)
        except Exception as e:
            return self._handle_exception(e, "check room", room_id)
