"""Data-access layer."""

from campus_reservations.repositories.activity import ActivityLogRepository
from campus_reservations.repositories.base import BaseRepository
from campus_reservations.repositories.reservation import (
    ApprovalRepository,
    DailySlotRepository,
    ReservationRepository,
)
from campus_reservations.repositories.resource import ResourceRepository
from campus_reservations.repositories.user import UserRepository
from campus_reservations.repositories.workflow import WorkflowRepository

__all__ = [
    "ActivityLogRepository",
    "ApprovalRepository",
    "BaseRepository",
    "DailySlotRepository",
    "ReservationRepository",
    "ResourceRepository",
    "UserRepository",
    "WorkflowRepository",
]
