"""
Custom Exceptions for the Hotel Reservation System

This module defines the exception classes raised inside the reservation
engine. Services catch them at their boundary and hand callers a
ServiceResult instead, so none of these escape to the admin console or
the kiosk entry points.
"""

from datetime import date
from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Reservation engine errors
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Infrastructure errors
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Authentication
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Input Validation
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when a request is malformed (bad dates, party size...)"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)
        self.field_errors = field_errors or {}


class InvalidDateRangeError(ValidationError):
    """Check-out must be strictly after check-in"""

    def __init__(self, check_in: date, check_out: date):
        super().__init__(
            f"Check-out date ({check_out}) must be after check-in date ({check_in})",
            field_errors={"check_out_date": ["must be after check_in_date"]},
        )
        self.check_in = check_in
        self.check_out = check_out


# ========================================
# Reservation Engine
# ========================================

class InsufficientInventoryError(BaseAppException):
    """Exception raised when a room type cannot supply the requested quantity"""

    def __init__(self, room_type: Any, requested: int, available: int):
        type_name = getattr(room_type, "display_name", str(room_type))
        message = (
            f"Not enough {type_name} rooms available: "
            f"requested {requested}, available {available}"
        )
        details = {
            "type": getattr(room_type, "value", str(room_type)),
            "requested": requested,
            "available": available,
        }
        super().__init__(message, ErrorCode.INSUFFICIENT_INVENTORY, details)
        self.room_type = room_type
        self.requested = requested
        self.available = available


class InvalidTransitionError(BaseAppException):
    """Exception raised when a reservation lifecycle transition is not allowed"""

    def __init__(self, from_status: Any, to_status: Any, reason: Optional[str] = None):
        from_name = getattr(from_status, "value", str(from_status))
        to_name = getattr(to_status, "value", str(to_status))
        message = f"Cannot change reservation from {from_name} to {to_name}"
        if reason:
            message += f": {reason}"
        details = {"from": from_name, "to": to_name}
        if reason:
            details["reason"] = reason
        super().__init__(message, ErrorCode.INVALID_TRANSITION, details)
        self.from_status = from_status
        self.to_status = to_status


# ========================================
# Resource Not Found Exceptions
# ========================================

class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message += f" (ID: {resource_id})"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, ErrorCode.NOT_FOUND, details)


class ReservationNotFoundError(ResourceNotFoundError):
    def __init__(self, reservation_id: Optional[int] = None):
        super().__init__("Reservation", reservation_id)


class RoomNotFoundError(ResourceNotFoundError):
    def __init__(self, room_id: Optional[int] = None):
        super().__init__("Room", room_id)


class GuestNotFoundError(ResourceNotFoundError):
    def __init__(self, guest_id: Optional[int] = None):
        super().__init__("Guest", guest_id)


# ========================================
# Infrastructure
# ========================================

class StoreUnavailableError(BaseAppException):
    """
    Transient failure of the inventory store (lock or statement timeout,
    lost connection). The failed operation never partially commits, so the
    whole operation is safe to retry.
    """

    retryable = True

    def __init__(self, message: str = "Inventory store unavailable", operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message, ErrorCode.STORE_UNAVAILABLE, details)


class RepositoryError(BaseAppException):
    """Non-transient database failure inside a repository"""

    def __init__(self, message: str = "Repository operation failed"):
        super().__init__(message, ErrorCode.DATABASE_ERROR)


# ========================================
# Authentication
# ========================================

class AuthenticationError(BaseAppException):
    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED)
