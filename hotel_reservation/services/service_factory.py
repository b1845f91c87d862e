"""
Wires the services together around one inventory store.

There are no module-level service singletons: the listener, the CLI and
the tests each build a ServiceFactory and hand its services to whoever
needs them.
"""

from typing import Optional

from hotel_reservation.config.settings import Settings
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.services.admin.admin_authentication_service import AdminAuthenticationService
from hotel_reservation.services.allocation.allocation_service import AllocationService
from hotel_reservation.services.base import Clock
from hotel_reservation.services.billing.billing_service import BillingService
from hotel_reservation.services.guest.guest_service import GuestService
from hotel_reservation.services.report.report_service import ReportService
from hotel_reservation.services.reservation.reservation_service import ReservationService
from hotel_reservation.services.room.room_service import RoomService


class ServiceFactory:
    def __init__(self, store: InventoryStore, settings: Settings, clock: Optional[Clock] = None):
        self.store = store
        self.settings = settings
        self.clock = clock

        self.allocation = AllocationService(store, settings, clock)
        self.billing = BillingService(store, settings, clock)
        self.reservations = ReservationService(
            store, settings, self.allocation, self.billing, clock
        )
        self.rooms = RoomService(store, settings, clock)
        self.guests = GuestService(store, settings, clock)
        self.admins = AdminAuthenticationService(store, settings, clock)
        self.reports = ReportService(store, settings, self.billing, clock)
