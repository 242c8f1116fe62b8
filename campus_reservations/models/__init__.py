"""
Database models package.

Importing this package registers every table on ``Base.metadata``.
"""

from campus_reservations.models.base import Base, BaseModel, TimestampMixin
from campus_reservations.models.user import User
from campus_reservations.models.resource import FacilityApprovalWorkflow, UniversityResource
from campus_reservations.models.reservation import (
    Reservation,
    ReservationActivityLog,
    ReservationApproval,
    ReservationDailySlot,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "User",
    "UniversityResource",
    "FacilityApprovalWorkflow",
    "Reservation",
    "ReservationDailySlot",
    "ReservationApproval",
    "ReservationActivityLog",
]
