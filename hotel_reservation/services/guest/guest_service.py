"""
Guest registry and feedback.
"""

from typing import List

from hotel_reservation.core.exceptions import (
    GuestNotFoundError,
    ReservationNotFoundError,
    ValidationError,
)
from hotel_reservation.models.guest import Guest
from hotel_reservation.repositories.guest_repository import FeedbackRepository, GuestRepository
from hotel_reservation.repositories.reservation_repository import ReservationRepository
from hotel_reservation.schemas.guest import FeedbackCreate, FeedbackRead, GuestCreate, GuestRead
from hotel_reservation.services.base import BaseService, ServiceResult

MIN_RATING = 1
MAX_RATING = 5


class GuestService(BaseService):

    def register_guest(self, guest: GuestCreate) -> ServiceResult[GuestRead]:
        try:
            if not guest.name:
                raise ValidationError("Guest name is required", field_errors={"name": ["required"]})
            with self.store.unit_of_work("register_guest") as session:
                created = GuestRepository(session).add(Guest(**guest.model_dump()))
                result = GuestRead.model_validate(created)
            self._log_operation("register guest", result.id)
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "register guest", guest.name)

    def get_guest(self, guest_id: int) -> ServiceResult[GuestRead]:
        try:
            with self.store.read_session() as session:
                guest = GuestRepository(session).get_by_id(guest_id)
                if guest is None:
                    raise GuestNotFoundError(guest_id)
                return ServiceResult.success(GuestRead.model_validate(guest))
        except Exception as e:
            return self._handle_exception(e, "get guest", guest_id)

    def _search(self, operation: str, term: str, finder) -> ServiceResult[List[GuestRead]]:
        try:
            if not term or not term.strip():
                raise ValidationError("Search term is required", field_errors={"term": ["required"]})
            with self.store.read_session() as session:
                guests = finder(GuestRepository(session), term)
                return ServiceResult.success([GuestRead.model_validate(g) for g in guests])
        except Exception as e:
            return self._handle_exception(e, operation, term)

    def search_by_name(self, name: str) -> ServiceResult[List[GuestRead]]:
        return self._search("search guests by name", name, lambda repo, t: repo.search_by_name(t))

    def search_by_phone(self, phone_number: str) -> ServiceResult[List[GuestRead]]:
        return self._search("search guests by phone", phone_number, lambda repo, t: repo.search_by_phone(t))

    def search_by_email(self, email: str) -> ServiceResult[List[GuestRead]]:
        def finder(repo: GuestRepository, term: str):
            guest = repo.get_by_email(term)
            return [guest] if guest else []

        return self._search("search guests by email", email, finder)

    def record_feedback(self, feedback: FeedbackCreate) -> ServiceResult[FeedbackRead]:
        """Store a 1-5 rating for one of the guest's own reservations"""
        try:
            if not MIN_RATING <= feedback.rating <= MAX_RATING:
                raise ValidationError(
                    f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                    field_errors={"rating": ["out of range"]},
                )
            with self.store.unit_of_work("record_feedback") as session:
                guest = GuestRepository(session).get_by_id(feedback.guest_id)
                if guest is None:
                    raise GuestNotFoundError(feedback.guest_id)
                reservation = ReservationRepository(session).get_by_id(feedback.reservation_id)
                if reservation is None:
                    raise ReservationNotFoundError(feedback.reservation_id)
                if reservation.guest_id != guest.id:
                    raise ValidationError("Reservation does not belong to this guest")

                created = FeedbackRepository(session).create(feedback.model_dump())
                if feedback.comments:
                    guest.feedback = feedback.comments
                result = FeedbackRead.model_validate(created)

            self._log_operation("record feedback", feedback.reservation_id, {"rating": feedback.rating})
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "record feedback", feedback.reservation_id)
