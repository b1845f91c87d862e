"""
Billing service.

Charges are always derived from the prices captured on the reservation's
room links, never from the rooms' current prices.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from hotel_reservation.core.exceptions import (
    ReservationNotFoundError,
    ResourceNotFoundError,
    ValidationError,
)
from hotel_reservation.models.base import utcnow
from hotel_reservation.models.bill import Bill
from hotel_reservation.models.enums import ReservationStatus
from hotel_reservation.models.reservation import Reservation
from hotel_reservation.repositories.bill_repository import BillRepository
from hotel_reservation.repositories.reservation_repository import ReservationRepository
from hotel_reservation.schemas.billing import BillLineItem, BillRead, BillStatement
from hotel_reservation.services.base import BaseService, ServiceResult

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class BillingService(BaseService):

    @property
    def tax_rate(self) -> Decimal:
        return Decimal(str(self.settings.TAX_RATE))

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def build_statement(self, reservation: Reservation, discount: Decimal = ZERO) -> BillStatement:
        """
        subtotal = sum(price_per_night * nights), tax = subtotal * TAX_RATE,
        total = max(0, subtotal + tax - discount)
        """
        nights = reservation.nights
        items: List[BillLineItem] = []
        for link in reservation.rooms:
            items.append(
                BillLineItem(
                    room_id=link.room_id,
                    room_number=link.room.room_number,
                    room_type=link.room.room_type,
                    nights=nights,
                    price_per_night=_money(link.price_per_night),
                    subtotal=_money(link.price_per_night * nights),
                )
            )

        subtotal = _money(sum((item.subtotal for item in items), ZERO))
        tax = _money(subtotal * self.tax_rate)
        discount = _money(discount)
        total = max(ZERO, _money(subtotal + tax - discount))

        return BillStatement(
            reservation_id=reservation.id,
            nights=nights,
            items=items,
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=total,
        )

    def calculate_bill(self, reservation_id: int) -> ServiceResult[BillStatement]:
        """Current charges for a reservation, including any stored discount"""
        try:
            with self.store.read_session() as session:
                reservation = ReservationRepository(session).get_by_id(reservation_id)
                if reservation is None:
                    raise ReservationNotFoundError(reservation_id)
                bill = BillRepository(session).get_for_reservation(reservation_id)
                statement = self.build_statement(reservation, bill.discount if bill else ZERO)
            return ServiceResult.success(statement)
        except Exception as e:
            return self._handle_exception(e, "calculate bill", reservation_id)

    # -------------------------------------------------------------------------
    # Stored bills
    # -------------------------------------------------------------------------

    def _write_bill(
        self,
        session: Session,
        reservation: Reservation,
        discount: Optional[Decimal] = None,
    ) -> Bill:
        """Create or refresh the reservation's bill; keeps the stored discount when none is given"""
        bills = BillRepository(session)
        bill = bills.get_for_reservation(reservation.id)
        if discount is None:
            discount = bill.discount if bill else ZERO

        statement = self.build_statement(reservation, discount)
        values = {
            "amount": statement.subtotal,
            "tax": statement.tax,
            "discount": statement.discount,
            "total_amount": statement.total,
            "billing_date": utcnow(),
        }
        if bill is None:
            return bills.create({"reservation_id": reservation.id, "is_paid": False, **values})
        return bills.update(bill, values)

    def create_bill_for_checkout(self, session: Session, reservation: Reservation) -> Bill:
        """Store the final bill inside the check-out unit of work"""
        bill = self._write_bill(session, reservation)
        self._logger.info(
            "Bill generated",
            reservation_id=reservation.id,
            total=str(bill.total_amount),
        )
        return bill

    def get_bill(self, reservation_id: int) -> ServiceResult[BillRead]:
        try:
            with self.store.read_session() as session:
                bill = BillRepository(session).get_for_reservation(reservation_id)
                if bill is None:
                    raise ResourceNotFoundError("Bill", reservation_id)
                return ServiceResult.success(BillRead.model_validate(bill))
        except Exception as e:
            return self._handle_exception(e, "get bill", reservation_id)

    def apply_discount(self, reservation_id: int, amount: Decimal) -> ServiceResult[BillRead]:
        """
        Set the discount on a reservation's bill, creating the bill when the
        guest has not checked out yet. A new discount replaces the old one.
        """
        try:
            amount = _money(Decimal(str(amount)))
            if amount <= ZERO:
                raise ValidationError(
                    "Discount amount must be positive",
                    field_errors={"amount": ["must be greater than 0"]},
                )

            with self.store.unit_of_work("apply_discount") as session:
                reservation = ReservationRepository(session).get_by_id(reservation_id, for_update=True)
                if reservation is None:
                    raise ReservationNotFoundError(reservation_id)
                if reservation.status == ReservationStatus.CANCELLED:
                    raise ValidationError("Cannot apply a discount to a cancelled reservation")

                existing = BillRepository(session).get_for_reservation(reservation_id)
                if existing is not None and existing.is_paid:
                    raise ValidationError("Cannot apply a discount to a paid bill")

                bill = self._write_bill(session, reservation, amount)
                result = BillRead.model_validate(bill)

            self._log_operation("apply discount", reservation_id, {"discount": str(amount)})
            return ServiceResult.success(result, message="Discount applied")
        except Exception as e:
            return self._handle_exception(e, "apply discount", reservation_id)

    def mark_paid(self, reservation_id: int) -> ServiceResult[BillRead]:
        try:
            with self.store.unit_of_work("mark_paid") as session:
                bills = BillRepository(session)
                bill = bills.get_for_reservation(reservation_id)
                if bill is None:
                    raise ResourceNotFoundError("Bill", reservation_id)
                bills.update(bill, {"is_paid": True})
                result = BillRead.model_validate(bill)
            self._log_operation("mark bill paid", reservation_id)
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "mark bill paid", reservation_id)

    def get_bills_by_date_range(self, start: date, end: date) -> ServiceResult[List[BillRead]]:
        """Bills dated from ``start`` through ``end`` inclusive (UTC days)"""
        try:
            if end < start:
                raise ValidationError("End date must not be before start date")
            start_at = datetime.combine(start, time.min, tzinfo=timezone.utc)
            end_at = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
            with self.store.read_session() as session:
                bills = BillRepository(session).find_in_period(start_at, end_at)
                return ServiceResult.success([BillRead.model_validate(bill) for bill in bills])
        except Exception as e:
            return self._handle_exception(e, "list bills")
