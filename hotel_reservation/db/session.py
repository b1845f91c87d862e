"""Database engine construction."""
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.logging import get_logger

logger = get_logger(__name__)

SLOW_QUERY_SECONDS = 0.5


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    conn.info.setdefault('query_start_time', []).append(time.time())


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    total_time = time.time() - conn.info['query_start_time'].pop()
    if total_time > SLOW_QUERY_SECONDS:
        logger.warning(
            "Slow query detected",
            duration_s=round(total_time, 4),
            statement=statement[:100],
        )


def create_engine_from_settings(settings: Settings) -> Engine:
    """
    Build the engine for the inventory store.

    Every connection gets a bounded wait: SQLite uses its busy timeout,
    PostgreSQL a connect timeout plus a per-statement timeout, so no store
    call can hang a session thread indefinitely.
    """
    connect_args = dict(settings.DB_CONNECT_ARGS)

    if settings.is_sqlite():
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", settings.DB_CONNECT_TIMEOUT)
        engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            connect_args=connect_args,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    else:
        connect_args.setdefault("connect_timeout", settings.DB_CONNECT_TIMEOUT)
        connect_args.setdefault(
            "options", f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
        )
        engine = create_engine(
            settings.DATABASE_URL,
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_OVERFLOW,
            pool_timeout=settings.DB_CONNECT_TIMEOUT,
            pool_recycle=3600,
            echo=settings.DB_ECHO,
            connect_args=connect_args,
        )

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)
    return engine
