"""
Admin console connection listener.

Accepted connections are handed to a ThreadPoolExecutor with
MAX_CLIENTS workers. Connections beyond that wait in the executor's
queue. When MAX_PENDING_CLIENTS is non-zero the queue is bounded and a
connection arriving while it is full is told the server is busy and
closed; with 0 the queue is unbounded and nothing is rejected.
"""

import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Set, Tuple

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.logging import get_logger
from hotel_reservation.server.protocol import format_peer
from hotel_reservation.server.session_handler import SessionHandler
from hotel_reservation.services.service_factory import ServiceFactory

logger = get_logger(__name__)

ACCEPT_POLL_INTERVAL = 0.5
BUSY_MESSAGE = "Server is busy. Please try again later.\n"


class ConnectionListener:
    """Accept loop plus the bounded worker pool running admin sessions"""

    def __init__(
        self,
        services: ServiceFactory,
        settings: Settings,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ):
        self.services = services
        self.settings = settings
        self.host = host if host is not None else settings.SERVER_HOST
        self.port = port if port is not None else settings.SERVER_PORT

        self._server_socket: Optional[socket.socket] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._accept_thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()
        self._stopped = threading.Event()

        # Sockets accepted and not yet finished, queued or running
        self._connections: Set[socket.socket] = set()
        self._connections_changed = threading.Condition()

        self._slots: Optional[threading.BoundedSemaphore] = None
        if settings.has_bounded_queue():
            self._slots = threading.BoundedSemaphore(settings.MAX_CLIENTS + settings.MAX_PENDING_CLIENTS)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def address(self) -> Tuple[str, int]:
        if self._server_socket is None:
            raise RuntimeError("Listener is not started")
        return self._server_socket.getsockname()[:2]

    @property
    def active_connections(self) -> int:
        with self._connections_changed:
            return len(self._connections)

    def start(self) -> Tuple[str, int]:
        """Bind, listen and start accepting in a background thread"""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind((self.host, self.port))
        server.listen()
        server.settimeout(ACCEPT_POLL_INTERVAL)
        self._server_socket = server

        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.MAX_CLIENTS,
            thread_name_prefix="admin-session",
        )
        self._accept_thread = threading.Thread(
            target=self._accept_loop,
            name="admin-listener",
            daemon=True,
        )
        self._accept_thread.start()

        logger.info(
            "Admin server listening",
            address=format_peer(self.address),
            max_clients=self.settings.MAX_CLIENTS,
            max_pending=self.settings.MAX_PENDING_CLIENTS,
        )
        return self.address

    def serve_forever(self) -> None:
        """Start (if needed) and block until stop() completes"""
        if self._server_socket is None:
            self.start()
        self._stopped.wait()

    def stop(self, grace_period: Optional[float] = None) -> None:
        """
        Stop accepting, give running sessions ``grace_period`` seconds
        (default SHUTDOWN_GRACE_PERIOD) to finish, then force-close the rest.
        """
        if self._stopping.is_set():
            self._stopped.wait()
            return
        self._stopping.set()
        grace = self.settings.SHUTDOWN_GRACE_PERIOD if grace_period is None else grace_period
        logger.info("Admin server shutting down", grace_period=grace)

        if self._server_socket is not None:
            self._server_socket.close()
        if self._accept_thread is not None:
            self._accept_thread.join()

        with self._connections_changed:
            finished = self._connections_changed.wait_for(lambda: not self._connections, timeout=grace)
            remaining = list(self._connections)

        if not finished:
            logger.warning("Force-closing admin sessions", count=len(remaining))
            for conn in remaining:
                self._force_close(conn)

        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)

        # Sessions cancelled before they started never ran their cleanup
        with self._connections_changed:
            leftovers = list(self._connections)
            self._connections.clear()
        for conn in leftovers:
            self._force_close(conn)

        self._stopped.set()
        logger.info("Admin server stopped")

    # -------------------------------------------------------------------------
    # Accepting
    # -------------------------------------------------------------------------

    def _accept_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                conn, address = self._server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._stopping.is_set():
                    break
                logger.error("Accept failed", error=str(e))
                continue

            conn.settimeout(None)
            if self._slots is not None and not self._slots.acquire(blocking=False):
                logger.warning("Rejecting admin connection, queue full", peer=format_peer(address))
                self._reject(conn)
                continue

            with self._connections_changed:
                self._connections.add(conn)
            logger.info("Admin connection accepted", peer=format_peer(address))
            self._executor.submit(self._run_session, conn, address)

    def _run_session(self, conn: socket.socket, address) -> None:
        try:
            SessionHandler(conn, self.services, address).run()
        finally:
            with self._connections_changed:
                self._connections.discard(conn)
                self._connections_changed.notify_all()
            if self._slots is not None:
                self._slots.release()

    @staticmethod
    def _reject(conn: socket.socket) -> None:
        try:
            conn.sendall(BUSY_MESSAGE.encode("utf-8"))
        except OSError:
            pass
        finally:
            conn.close()

    @staticmethod
    def _force_close(conn: socket.socket) -> None:
        try:
            conn.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer already gone
            pass
        conn.close()
