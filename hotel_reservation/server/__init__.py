"""Admin console server: listener, per-connection sessions and line protocol."""

from hotel_reservation.server.listener import ConnectionListener
from hotel_reservation.server.session_handler import SessionHandler, SessionState

__all__ = ["ConnectionListener", "SessionHandler", "SessionState"]
