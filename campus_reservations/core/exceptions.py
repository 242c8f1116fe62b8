"""
Custom Exceptions for the Campus Reservation Service

This module defines the exception classes raised by the reservation
workflow. Each carries an error code and the HTTP status the API layer
renders it with.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Reservation creation
    SLOT_CONFLICT = "SLOT_CONFLICT"
    NO_WORKFLOW = "NO_WORKFLOW"

    # Approval steps
    NOT_FOUND_OR_NOT_PENDING = "NOT_FOUND_OR_NOT_PENDING"
    PRIOR_STEPS_INCOMPLETE = "PRIOR_STEPS_INCOMPLETE"
    RESERVATION_EXPIRED = "RESERVATION_EXPIRED"
    RESERVATION_ALREADY_TERMINAL = "RESERVATION_ALREADY_TERMINAL"

    # Cancellation
    NOT_OWNER = "NOT_OWNER"
    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    ALREADY_STARTED = "ALREADY_STARTED"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised for malformed input"""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.field = field
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 400)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a referenced entity does not exist"""

    def __init__(self, resource_type: str, resource_id: Any = None):
        message = f"{resource_type} not found"
        super().__init__(
            message,
            ErrorCode.NOT_FOUND,
            {"resource_type": resource_type, "resource_id": resource_id},
            404,
        )


class UnauthorizedError(BaseAppException):
    """Exception raised when a maintenance operation is called without a valid token"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, ErrorCode.UNAUTHORIZED, None, 401)


# ========================================
# Reservation Creation Exceptions
# ========================================

class SlotConflictError(BaseAppException):
    """Exception raised when requested slots overlap an active reservation"""

    def __init__(self, conflicts: List[Dict[str, Any]], message: Optional[str] = None):
        self.conflicts = conflicts
        super().__init__(
            message or "Time slot conflict detected",
            ErrorCode.SLOT_CONFLICT,
            {"conflicts": conflicts},
            409,
        )


class NoWorkflowError(BaseAppException):
    """Exception raised when the resource has no approval chain configured"""

    def __init__(self, resource_id: Any):
        super().__init__(
            "No approval workflow is configured for this facility",
            ErrorCode.NO_WORKFLOW,
            {"resource_id": resource_id},
            400,
        )


# ========================================
# Approval Step Exceptions
# ========================================

class NotFoundOrNotPendingError(BaseAppException):
    """Step missing, assigned to another approver, or already acted on"""

    def __init__(self, approval_id: Any = None):
        super().__init__(
            "Approval not found or not pending",
            ErrorCode.NOT_FOUND_OR_NOT_PENDING,
            {"approval_id": approval_id},
            404,
        )


class ReservationAlreadyTerminalError(BaseAppException):
    """The step is still pending but its reservation has already been closed"""

    def __init__(self, reservation_id: Any, status: str):
        super().__init__(
            f"Reservation is already {status}",
            ErrorCode.RESERVATION_ALREADY_TERMINAL,
            {"reservation_id": reservation_id, "status": status},
            409,
        )


class PriorStepsIncompleteError(BaseAppException):
    """Exception raised when an earlier workflow step is not yet approved"""

    def __init__(self, step_order: int, pending_steps: Optional[List[int]] = None):
        super().__init__(
            "Previous approval steps are not yet completed",
            ErrorCode.PRIOR_STEPS_INCOMPLETE,
            {"step_order": step_order, "incomplete_steps": pending_steps or []},
            403,
        )


class ReservationExpiredError(BaseAppException):
    """The reservation start has passed; it was cancelled while answering the request"""

    def __init__(self, reservation_id: Any):
        super().__init__(
            "Reservation start date has already passed and it was automatically cancelled",
            ErrorCode.RESERVATION_EXPIRED,
            {"reservation_id": reservation_id, "auto_cancelled": True},
            400,
        )


# ========================================
# Cancellation Exceptions
# ========================================

class NotOwnerError(BaseAppException):
    """Exception raised when someone other than the requester cancels"""

    def __init__(self, reservation_id: Any):
        super().__init__(
            "You can only cancel your own reservations",
            ErrorCode.NOT_OWNER,
            {"reservation_id": reservation_id},
            403,
        )


class AlreadyTerminalError(BaseAppException):
    """Exception raised when cancelling a rejected or cancelled reservation"""

    def __init__(self, reservation_id: Any, status: str):
        super().__init__(
            f"Reservation is already {status}",
            ErrorCode.ALREADY_TERMINAL,
            {"reservation_id": reservation_id, "status": status},
            409,
        )


class AlreadyStartedError(BaseAppException):
    """Exception raised when cancelling a reservation whose first slot has begun"""

    def __init__(self, reservation_id: Any):
        super().__init__(
            "Cannot cancel a reservation that has already started",
            ErrorCode.ALREADY_STARTED,
            {"reservation_id": reservation_id},
            400,
        )


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "ResourceNotFoundError",
    "UnauthorizedError",
    "SlotConflictError",
    "NoWorkflowError",
    "NotFoundOrNotPendingError",
    "ReservationAlreadyTerminalError",
    "PriorStepsIncompleteError",
    "ReservationExpiredError",
    "NotOwnerError",
    "AlreadyTerminalError",
    "AlreadyStartedError",
]
