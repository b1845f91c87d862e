"""
Command line entry point.

    hotel-reservation init-db [--reset]
    hotel-reservation serve [--host HOST] [--port PORT]
"""

import argparse
import signal
import sys
import threading
from typing import List, Optional

from hotel_reservation.config.settings import Settings, get_settings
from hotel_reservation.core.logging import configure_logging, get_logger
from hotel_reservation.db.init_db import drop_db, init_db
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.server.listener import ConnectionListener
from hotel_reservation.services.service_factory import ServiceFactory

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotel-reservation",
        description="Hotel reservation engine and admin console server",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create tables and seed rooms and the default admin")
    init_parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables first (destroys existing data)",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the admin console server")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address (default: SERVER_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: SERVER_PORT)")

    return parser


def run_init_db(store: InventoryStore, settings: Settings, reset: bool) -> int:
    if reset:
        drop_db(store.engine)
    init_db(store.engine, settings)
    print(f"Database ready at {store.engine.url.render_as_string(hide_password=True)}")
    return 0


def run_server(store: InventoryStore, settings: Settings, host: Optional[str], port: Optional[int]) -> int:
    init_db(store.engine, settings)
    listener = ConnectionListener(ServiceFactory(store, settings), settings, host=host, port=port)

    def shutdown(signum, frame):
        logger.info("Shutdown signal received", signal=signal.Signals(signum).name)
        threading.Thread(target=listener.stop, name="admin-shutdown", daemon=True).start()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    host_addr, bound_port = listener.start()
    print(f"{settings.APP_NAME} admin server listening on {host_addr}:{bound_port}")
    listener.serve_forever()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting", command=args.command, settings=settings.redacted())

    store = InventoryStore.from_settings(settings)
    try:
        if args.command == "init-db":
            return run_init_db(store, settings, args.reset)
        return run_server(store, settings, args.host, args.port)
    finally:
        store.dispose()


if __name__ == "__main__":
    sys.exit(main())
