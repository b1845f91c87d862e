"""
Admin console session.

One SessionHandler serves one connection:

    UNAUTHENTICATED --login--> AUTHENTICATED --logout--> UNAUTHENTICATED
                                     |
                                   exit / disconnect
                                     v
                                   CLOSED

The handler keeps no reservation or room data between commands. Every
action re-reads through the services, and every mutation is a single
service call running in its own unit of work.
"""

import enum
import socket
import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Optional, Tuple

from hotel_reservation.core.exceptions import ErrorCode
from hotel_reservation.core.logging import bind_admin, get_logger, session_log_context
from hotel_reservation.models.enums import ReservationStatus
from hotel_reservation.schemas.billing import AdminRead
from hotel_reservation.schemas.reservation import ReservationRead
from hotel_reservation.server.protocol import ConnectionClosed, LineChannel, format_peer
from hotel_reservation.services.base import ServiceResult
from hotel_reservation.services.reservation.reservation_service import summarize_rooms
from hotel_reservation.services.service_factory import ServiceFactory
from hotel_reservation.utils.date_utils import parse_date

logger = get_logger(__name__)

CHOICE_PROMPT = "Enter your choice: "
INVALID_CHOICE = "Invalid choice. Please try again."
INVALID_RESERVATION_ID = "Invalid reservation ID. Please enter a valid number."
TRY_AGAIN = "The reservation system is busy right now. Please try again."

CANCELLABLE = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

MAIN_MENU = [
    "",
    "MAIN MENU",
    "---------",
    "1. Search Guests",
    "2. View Reservations",
    "3. Check-In Guest",
    "4. Check-Out Guest",
    "5. Cancel Reservation",
    "6. Apply Discount",
    "7. Generate Reports",
    "8. Logout",
    "9. Exit",
    "",
]


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class SessionHandler:
    """Runs the login and menu loop for one admin connection"""

    def __init__(self, sock: socket.socket, services: ServiceFactory, address=None):
        self.channel = LineChannel(sock)
        self.services = services
        self.settings = services.settings
        self.peer = format_peer(address)
        self.session_id = uuid.uuid4().hex[:12]
        self.state = SessionState.UNAUTHENTICATED
        self.admin: Optional[AdminRead] = None

        self._menu: Dict[str, Callable[[], None]] = {
            "1": self.search_guests,
            "2": self.view_reservations,
            "3": self.check_in,
            "4": self.check_out,
            "5": self.cancel_reservation,
            "6": self.apply_discount,
            "7": self.generate_reports,
            "8": self.logout,
            "9": self.exit,
        }

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    def run(self) -> None:
        with session_log_context(self.session_id):
            logger.info("Admin session started", peer=self.peer)
            try:
                self.channel.send_lines(
                    [
                        f"=== {self.settings.APP_NAME} ===",
                        "Welcome to the admin console. Please login to continue.",
                    ]
                )
                while self.state is not SessionState.CLOSED:
                    if self.state is SessionState.UNAUTHENTICATED:
                        self.login()
                    else:
                        self.main_menu()
            except ConnectionClosed as e:
                logger.info("Admin disconnected", peer=self.peer, reason=str(e))
            except Exception:
                logger.exception("Admin session failed", peer=self.peer)
            finally:
                self.close()
                logger.info("Admin session ended", peer=self.peer)

    def close(self) -> None:
        self.state = SessionState.CLOSED
        self.admin = None
        bind_admin(None)
        try:
            self.channel.close()
        except OSError as e:
            logger.debug("Error closing session socket", error=str(e))

    def login(self) -> None:
        self.channel.send_lines(["", "LOGIN", "-----"])
        username = self.channel.prompt("Username: ")
        password = self.channel.prompt("Password: ")

        result = self.services.admins.authenticate(username, password)
        if result:
            self.admin = result.data
            self.state = SessionState.AUTHENTICATED
            bind_admin(self.admin.username)
            self.channel.send_lines(["", f"Login successful. Welcome, {self.admin.name}!"])
        elif result.error_code == ErrorCode.STORE_UNAVAILABLE:
            self.channel.send_lines(["", TRY_AGAIN])
        else:
            logger.info("Failed admin login", username=username, peer=self.peer)
            self.channel.send_lines(["", "Invalid username or password. Please try again."])

    def main_menu(self) -> None:
        self.channel.send_lines(MAIN_MENU)
        choice = self.channel.prompt(CHOICE_PROMPT)
        action = self._menu.get(choice)
        if action is None:
            self.channel.send_lines(["", INVALID_CHOICE])
            return
        action()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _submenu(self, title: str, options: List[str]) -> Optional[str]:
        """Show a 1-4 sub-menu; returns the choice, or None for back/invalid"""
        lines = ["", title, "-" * len(title)]
        lines += [f"{index}. {label}" for index, label in enumerate(options, start=1)]
        lines.append("")
        self.channel.send_lines(lines)
        choice = self.channel.prompt(CHOICE_PROMPT)
        if choice == str(len(options)):
            return None
        if choice not in {str(i) for i in range(1, len(options))}:
            self.channel.send_lines(["", INVALID_CHOICE])
            return None
        return choice

    def _failure(self, result: ServiceResult, not_found: str = "Reservation not found.") -> None:
        if result.error_code == ErrorCode.STORE_UNAVAILABLE:
            message = TRY_AGAIN
        elif result.error_code == ErrorCode.NOT_FOUND:
            message = not_found
        else:
            message = result.message or "The operation failed."
        self.channel.send_lines(["", message])

    def _read_reservation_id(self) -> Optional[int]:
        text = self.channel.prompt("Enter reservation ID: ")
        try:
            return int(text)
        except ValueError:
            self.channel.send_lines(["", INVALID_RESERVATION_ID])
            return None

    def _confirm(self, label: str) -> bool:
        answer = self.channel.prompt(f"\nConfirm {label} (y/n): ")
        return answer.lower() in ("y", "yes")

    def _money(self, value: Decimal) -> str:
        return f"{self.settings.CURRENCY_SYMBOL}{value:,.2f}"

    def _guest_label(self, guest_id: int, with_phone: bool = False) -> str:
        result = self.services.guests.get_guest(guest_id)
        if not result:
            return f"Guest #{guest_id}"
        guest = result.data
        return f"{guest.name} ({guest.phone_number})" if with_phone else guest.name

    def _show_reservations(self, reservations: List[ReservationRead], with_guest: bool = True) -> None:
        if not reservations:
            self.channel.send_lines(["", "No reservations found."])
            return
        lines = ["", "Reservations:", "-------------"]
        for reservation in reservations:
            lines.append(f"Reservation ID: {reservation.id}")
            if with_guest:
                lines.append(f"Guest: {self._guest_label(reservation.guest_id, with_phone=True)}")
            lines += [
                f"Check-in: {reservation.check_in_date}",
                f"Check-out: {reservation.check_out_date}",
                f"Status: {reservation.status.value}",
                "-------------",
            ]
        self.channel.send_lines(lines)

    def _load_for_action(
        self,
        reservation_id: int,
        allowed: Tuple[ReservationStatus, ...],
        action: str,
    ) -> Optional[ReservationRead]:
        result = self.services.reservations.get_reservation(reservation_id)
        if not result:
            self._failure(result)
            return None
        reservation = result.data
        if reservation.status not in allowed:
            self.channel.send_lines(
                ["", f"This reservation cannot be {action}. Current status: {reservation.status.value}"]
            )
            return None

        rooms = ", ".join(
            f"{number} ({guests} guests)" for number, guests in summarize_rooms(reservation).items()
        )
        self.channel.send_lines(
            [
                "",
                "Reservation Details:",
                f"Guest: {self._guest_label(reservation.guest_id)}",
                f"Check-in: {reservation.check_in_date}",
                f"Check-out: {reservation.check_out_date}",
                f"Rooms: {rooms}",
            ]
        )
        return reservation

    # -------------------------------------------------------------------------
    # 1. Search guests
    # -------------------------------------------------------------------------

    def search_guests(self) -> None:
        choice = self._submenu(
            "SEARCH GUESTS",
            ["Search by Name", "Search by Phone Number", "Search by Email", "Back to Main Menu"],
        )
        if choice is None:
            return

        term = self.channel.prompt("Enter search term: ")
        guests = self.services.guests
        search = {"1": guests.search_by_name, "2": guests.search_by_phone, "3": guests.search_by_email}[choice]
        result = search(term)
        if not result:
            self._failure(result)
            return
        if not result.data:
            self.channel.send_lines(["", "No guests found matching your search criteria."])
            return

        lines = ["", "Search Results:", "---------------"]
        for guest in result.data:
            lines += [
                f"ID: {guest.id}",
                f"Name: {guest.name}",
                f"Phone: {guest.phone_number}",
                f"Email: {guest.email}",
                "---------------",
            ]
        self.channel.send_lines(lines)

        text = self.channel.prompt("\nEnter guest ID to view reservations (or 0 to go back): ")
        try:
            guest_id = int(text)
        except ValueError:
            self.channel.send_lines(["", "Invalid guest ID. Please enter a valid number."])
            return
        if guest_id == 0:
            return

        guest = self.services.guests.get_guest(guest_id)
        if not guest:
            self._failure(guest, not_found="Guest not found.")
            return
        reservations = self.services.reservations.get_reservations_by_guest(guest_id)
        if not reservations:
            self._failure(reservations)
            return
        self.channel.send_lines(["", f"Reservations for {guest.data.name}:"])
        self._show_reservations(reservations.data, with_guest=False)

    # -------------------------------------------------------------------------
    # 2. View reservations
    # -------------------------------------------------------------------------

    def view_reservations(self) -> None:
        choice = self._submenu(
            "VIEW RESERVATIONS",
            ["View All Active Reservations", "View Today's Check-ins", "View Today's Check-outs", "Back to Main Menu"],
        )
        if choice is None:
            return
        reservations = self.services.reservations
        fetch = {
            "1": reservations.get_active_reservations,
            "2": reservations.get_todays_check_ins,
            "3": reservations.get_todays_check_outs,
        }[choice]
        result = fetch()
        if not result:
            self._failure(result)
            return
        self._show_reservations(result.data)

    # -------------------------------------------------------------------------
    # 3-5. Lifecycle transitions
    # -------------------------------------------------------------------------

    def check_in(self) -> None:
        self.channel.send_lines(["", "CHECK-IN GUEST", "-------------"])
        reservation_id = self._read_reservation_id()
        if reservation_id is None:
            return
        if self._load_for_action(reservation_id, (ReservationStatus.CONFIRMED,), "checked in") is None:
            return
        if not self._confirm("check-in"):
            self.channel.send_lines(["", "Check-in cancelled."])
            return

        result = self.services.reservations.check_in(reservation_id)
        if not result:
            self._failure(result)
            return
        self.channel.send_lines(["", "Check-in completed successfully!"])

    def check_out(self) -> None:
        self.channel.send_lines(["", "CHECK-OUT GUEST", "--------------"])
        reservation_id = self._read_reservation_id()
        if reservation_id is None:
            return
        if self._load_for_action(reservation_id, (ReservationStatus.CHECKED_IN,), "checked out") is None:
            return

        statement = self.services.billing.calculate_bill(reservation_id)
        if statement:
            bill = statement.data
            self.channel.send_lines(
                [
                    f"Nights: {bill.nights}",
                    f"Subtotal: {self._money(bill.subtotal)}",
                    f"Tax: {self._money(bill.tax)}",
                    f"Discount: {self._money(bill.discount)}",
                    f"Total: {self._money(bill.total)}",
                ]
            )
        self.channel.send_lines(["", "Please remind the guest to leave feedback at the kiosk."])
        if not self._confirm("check-out"):
            self.channel.send_lines(["", "Check-out cancelled."])
            return

        result = self.services.reservations.check_out(reservation_id)
        if not result:
            self._failure(result)
            return
        self.channel.send_lines(
            ["", "Check-out completed successfully!", f"Amount due: {self._money(result.data.total_amount)}"]
        )

    def cancel_reservation(self) -> None:
        self.channel.send_lines(["", "CANCEL RESERVATION", "-----------------"])
        reservation_id = self._read_reservation_id()
        if reservation_id is None:
            return
        if self._load_for_action(reservation_id, CANCELLABLE, "cancelled") is None:
            return
        if not self._confirm("cancellation"):
            self.channel.send_lines(["", "Cancellation aborted."])
            return

        result = self.services.reservations.cancel(reservation_id)
        if not result:
            self._failure(result)
            return
        self.channel.send_lines(["", "Reservation cancelled successfully!"])

    # -------------------------------------------------------------------------
    # 6. Discount
    # -------------------------------------------------------------------------

    def apply_discount(self) -> None:
        self.channel.send_lines(["", "APPLY DISCOUNT", "-------------"])
        reservation_id = self._read_reservation_id()
        if reservation_id is None:
            return

        text = self.channel.prompt("Enter discount amount: ")
        try:
            amount = Decimal(text.lstrip(self.settings.CURRENCY_SYMBOL))
        except InvalidOperation:
            self.channel.send_lines(["", "Invalid number entered. Please enter a valid number."])
            return
        if not amount.is_finite() or amount <= 0:
            self.channel.send_lines(["", "Discount amount must be greater than zero."])
            return

        result = self.services.billing.apply_discount(reservation_id, amount)
        if not result:
            self._failure(result)
            return
        self.channel.send_lines(
            [
                "",
                f"Discount of {self._money(result.data.discount)} applied successfully!",
                f"New total: {self._money(result.data.total_amount)}",
            ]
        )

    # -------------------------------------------------------------------------
    # 7. Reports
    # -------------------------------------------------------------------------

    def generate_reports(self) -> None:
        choice = self._submenu(
            "GENERATE REPORTS",
            ["Occupancy Report", "Revenue Report", "Guest Feedback Report", "Back to Main Menu"],
        )
        if choice is None:
            return

        reports = self.services.reports
        if choice == "1":
            result = reports.occupancy_report()
        elif choice == "2":
            period = self._read_period()
            if period is None:
                return
            result = reports.revenue_report(*period)
        else:
            result = reports.feedback_report()

        if not result:
            self._failure(result)
            return
        self.channel.send_lines([""] + result.data)

    def _read_period(self) -> Optional[Tuple[date, date]]:
        try:
            start = parse_date(self.channel.prompt("Start date (YYYY-MM-DD): "))
            end = parse_date(self.channel.prompt("End date (YYYY-MM-DD): "))
        except ValueError:
            self.channel.send_lines(["", "Invalid date. Please use the format YYYY-MM-DD."])
            return None
        if end < start:
            self.channel.send_lines(["", "End date must not be before start date."])
            return None
        return start, end

    # -------------------------------------------------------------------------
    # 8-9. Logout / exit
    # -------------------------------------------------------------------------

    def logout(self) -> None:
        logger.info("Admin logged out", peer=self.peer)
        self.admin = None
        bind_admin(None)
        self.state = SessionState.UNAUTHENTICATED
        self.channel.send_lines(["", "You have been logged out successfully."])

    def exit(self) -> None:
        self.channel.send_lines(["", f"Thank you for using the {self.settings.APP_NAME}. Goodbye!"])
        self.state = SessionState.CLOSED
