"""
Enumerations shared by models, schemas and services.
"""

from enum import Enum


class ReservationStatus(str, Enum):
    """Reservation lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @classmethod
    def active(cls) -> tuple:
        """States that hold their time slots."""
        return (cls.PENDING, cls.APPROVED)

    @classmethod
    def terminal(cls) -> tuple:
        return (cls.APPROVED, cls.REJECTED, cls.CANCELLED)

    @property
    def is_terminal(self) -> bool:
        return self in self.terminal()


class ApprovalStatus(str, Enum):
    """Per-step approval states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class ApprovalAction(str, Enum):
    """Decisions an approver may record on a step."""

    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityAction(str, Enum):
    """Action types recorded in the reservation activity log."""

    CREATED = "created"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    AUTO_CANCELLED = "auto_cancelled"
    FULLY_APPROVED = "fully_approved"


class NotificationType(str, Enum):
    """Payload types pushed to connected users."""

    NEW_RESERVATION = "NEW_RESERVATION"
    RESERVATION_READY_FOR_APPROVAL = "RESERVATION_READY_FOR_APPROVAL"
