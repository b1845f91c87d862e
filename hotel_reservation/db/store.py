"""
Inventory store: the single owner of durable state.

All reads go through ``read_session`` and all mutations through
``unit_of_work``. A unit of work holds the store-wide writer lock for its
whole read-check-write sequence, so two allocations (or an allocation and
a lifecycle transition) can never interleave and both observe the same
room as free.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.exceptions import StoreUnavailableError
from hotel_reservation.core.logging import get_logger
from hotel_reservation.db.session import create_engine_from_settings

logger = get_logger(__name__)

TRANSIENT_ERRORS = (OperationalError, PoolTimeoutError)


class InventoryStore:
    """Session factory plus the writer lock that serializes mutations"""

    def __init__(self, engine: Engine, lock_timeout: float = 5.0):
        self.engine = engine
        self.lock_timeout = lock_timeout
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self._writer_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "InventoryStore":
        return cls(create_engine_from_settings(settings), settings.STORE_LOCK_TIMEOUT)

    @contextmanager
    def read_session(self) -> Iterator[Session]:
        """Short-lived session for queries; never commits"""
        session = self._session_factory()
        try:
            yield session
        except TRANSIENT_ERRORS as e:
            session.rollback()
            logger.warning("Store read failed", error=str(e))
            raise StoreUnavailableError("Inventory store unavailable, please retry", "read") from e
        finally:
            session.close()

    @contextmanager
    def unit_of_work(self, operation: Optional[str] = None) -> Iterator[Session]:
        """
        Serialized read-check-write transaction.

        Commits when the block exits normally and rolls back on any
        exception, so a failed operation leaves no partial rows behind.

        Raises:
            StoreUnavailableError: the writer lock was not obtained within
                ``lock_timeout`` or the database reported a transient fault
        """
        if not self._writer_lock.acquire(timeout=self.lock_timeout):
            logger.warning("Timed out waiting for writer lock", operation=operation, timeout=self.lock_timeout)
            raise StoreUnavailableError(
                "Timed out waiting for the inventory store, please retry", operation
            )

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except TRANSIENT_ERRORS as e:
            session.rollback()
            logger.warning("Unit of work rolled back on store fault", operation=operation, error=str(e))
            raise StoreUnavailableError("Inventory store unavailable, please retry", operation) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            self._writer_lock.release()

    def dispose(self) -> None:
        self.engine.dispose()
