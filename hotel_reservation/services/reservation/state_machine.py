"""
Reservation lifecycle rules.

    Pending -> Confirmed -> Checked In -> Checked Out
    Pending / Confirmed -> Cancelled

Checked Out and Cancelled are terminal. Leaving the active statuses is
what releases a reservation's rooms; rows are never deleted.
"""

from datetime import date
from typing import Dict, FrozenSet, Optional

from hotel_reservation.core.exceptions import InvalidTransitionError
from hotel_reservation.models.enums import ReservationStatus
from hotel_reservation.models.reservation import Reservation

S = ReservationStatus

ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.CHECKED_IN, S.CANCELLED}),
    S.CHECKED_IN: frozenset({S.CHECKED_OUT}),
    S.CHECKED_OUT: frozenset(),
    S.CANCELLED: frozenset(),
}

# Targets that take the reservation's rooms out of circulation
RELEASING_STATUSES = frozenset({S.CANCELLED, S.CHECKED_OUT})


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(
    reservation: Reservation,
    target: ReservationStatus,
    today: Optional[date] = None,
) -> None:
    """
    Raise InvalidTransitionError unless ``reservation`` may move to ``target``.

    Checking in additionally requires the stay to have started, so
    ``today`` must be given for that target.
    """
    current = reservation.status
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)

    if target == S.CHECKED_IN:
        if today is None:
            raise ValueError("today is required to validate a check-in")
        if reservation.check_in_date > today:
            raise InvalidTransitionError(
                current,
                target,
                reason=f"check-in date {reservation.check_in_date} is in the future",
            )


def apply_transition(
    reservation: Reservation,
    target: ReservationStatus,
    today: Optional[date] = None,
) -> ReservationStatus:
    """Validate and write the new status; returns the previous one"""
    validate_transition(reservation, target, today)
    previous = reservation.status
    reservation.status = target
    return previous
