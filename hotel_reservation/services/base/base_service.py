"""
Base service class providing common functionality for all services.
"""

from datetime import date
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.exceptions import BaseAppException, ErrorCode, ValidationError
from hotel_reservation.core.logging import get_logger
from hotel_reservation.db.store import InventoryStore
from hotel_reservation.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

Clock = Callable[[], date]


def schema_validation_error(exc: SchemaValidationError) -> ValidationError:
    """Map a pydantic validation failure onto the application ValidationError"""
    field_errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or exc.title
        field_errors.setdefault(field, []).append(error["msg"])
    return ValidationError(f"Invalid {exc.title}", field_errors=field_errors)


class BaseService:
    """
    Base service with common behaviors:
    - Explicitly injected inventory store, settings and clock
    - Shared logger
    - Consistent error handling via ServiceResult
    """

    def __init__(
        self,
        store: InventoryStore,
        settings: Settings,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize base service.

        Args:
            store: Inventory store owning sessions and the writer lock
            settings: Application settings
            clock: Returns "today"; injectable so tests can pin the date
        """
        self.store = store
        self.settings = settings
        self.clock: Clock = clock or date.today
        self._logger = get_logger(self.__class__.__name__)

    def today(self) -> date:
        return self.clock()

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Application exceptions keep their code and typed details and are
        logged as warnings, as are request schemas pydantic rejected.
        Anything else is an internal error and is logged with its
        traceback.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, name, etc.)

        Returns:
            ServiceResult with failure status and error details
        """
        ref = str(entity_ref) if entity_ref is not None else None

        if isinstance(exception, SchemaValidationError):
            exception = schema_validation_error(exception)

        if isinstance(exception, BaseAppException):
            self._logger.warning(
                f"{operation} rejected",
                entity_ref=ref,
                error_code=exception.error_code.value,
                reason=exception.message,
            )
            return ServiceResult.from_app_exception(exception)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            entity_ref=ref,
            exception_type=type(exception).__name__,
        )
        code = ErrorCode.DATABASE_ERROR if isinstance(exception, SQLAlchemyError) else ErrorCode.INTERNAL_ERROR
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation}",
                details={"error": str(exception), "entity_ref": ref},
                severity=ErrorSeverity.CRITICAL,
            )
        )

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log service operation with standardized format.

        Args:
            operation: Description of the operation
            entity_ref: Reference to the entity involved
            extra: Additional context to log
        """
        context = {"entity_ref": str(entity_ref) if entity_ref is not None else None}
        if extra:
            context.update(extra)

        self._logger.info(f"Operation: {operation}", **context)
