"""
Plain-text reports for the admin console.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.exceptions import ValidationError
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.models.enums import ReservationStatus, RoomType
from hotel_reservation.repositories.guest_repository import FeedbackRepository
from hotel_reservation.repositories.reservation_repository import ReservationRoomRepository
from hotel_reservation.repositories.room_repository import RoomRepository
from hotel_reservation.services.base import BaseService, Clock, ServiceResult
from hotel_reservation.services.billing.billing_service import BillingService

ZERO = Decimal("0.00")

# Pending reservations hold rooms against new bookings but are not counted as occupancy
OCCUPYING_STATUSES = (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN)


class ReportService(BaseService):

    def __init__(
        self,
        store: InventoryStore,
        settings: Settings,
        billing_service: BillingService,
        clock: Optional[Clock] = None,
    ):
        super().__init__(store, settings, clock)
        self.billing_service = billing_service

    def _money(self, value: Decimal) -> str:
        return f"{self.settings.CURRENCY_SYMBOL}{value:,.2f}"

    def occupancy_report(self, day: Optional[date] = None) -> ServiceResult[List[str]]:
        """Rooms held by Confirmed or Checked In stays on ``day`` (default today)"""
        try:
            day = day or self.today()
            with self.store.read_session() as session:
                rooms = RoomRepository(session).get_all()
                occupied = ReservationRoomRepository(session).booked_room_ids(
                    day, day + timedelta(days=1), statuses=OCCUPYING_STATUSES
                )

            lines = [f"Occupancy Report for {day.isoformat()}", "-" * 40]
            for room_type in RoomType:
                of_type = [room for room in rooms if room.room_type == room_type]
                if not of_type:
                    continue
                busy = sum(1 for room in of_type if room.id in occupied)
                lines.append(f"{room_type.display_name:<12} {busy}/{len(of_type)} occupied")

            total = len(rooms)
            busy_total = sum(1 for room in rooms if room.id in occupied)
            rate = (busy_total / total * 100) if total else 0.0
            lines.append("-" * 40)
            lines.append(f"Total        {busy_total}/{total} occupied ({rate:.1f}%)")
            return ServiceResult.success(lines)
        except Exception as e:
            return self._handle_exception(e, "build occupancy report")

    def revenue_report(self, start: date, end: date) -> ServiceResult[List[str]]:
        """Bills dated from ``start`` through ``end``"""
        try:
            if end < start:
                raise ValidationError("End date must not be before start date")
            result = self.billing_service.get_bills_by_date_range(start, end)
            if not result:
                return result
            bills = result.data

            subtotal = sum((bill.amount for bill in bills), ZERO)
            tax = sum((bill.tax for bill in bills), ZERO)
            discount = sum((bill.discount for bill in bills), ZERO)
            total = sum((bill.total_amount for bill in bills), ZERO)
            paid = sum(1 for bill in bills if bill.is_paid)

            lines = [
                f"Revenue Report {start.isoformat()} to {end.isoformat()}",
                "-" * 40,
                f"Bills:        {len(bills)} ({paid} paid)",
                f"Room charges: {self._money(subtotal)}",
                f"Tax:          {self._money(tax)}",
                f"Discounts:    {self._money(discount)}",
                f"Total:        {self._money(total)}",
            ]
            return ServiceResult.success(lines)
        except Exception as e:
            return self._handle_exception(e, "build revenue report")

    def feedback_report(self, limit: int = 5) -> ServiceResult[List[str]]:
        try:
            with self.store.read_session() as session:
                repo = FeedbackRepository(session)
                count = repo.count()
                average = repo.average_rating()
                recent = [(f.rating, f.comments) for f in repo.find_recent(limit)]

            lines = ["Feedback Report", "-" * 40, f"Responses: {count}"]
            if average is None:
                lines.append("Average rating: n/a")
            else:
                lines.append(f"Average rating: {average:.2f} / 5")
            for rating, comments in recent:
                lines.append(f"  [{rating}/5] {comments or '(no comment)'}")
            return ServiceResult.success(lines)
        except Exception as e:
            return self._handle_exception(e, "build feedback report")
