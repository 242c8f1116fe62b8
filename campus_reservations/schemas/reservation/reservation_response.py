"""
Outbound reservation payloads.
"""

from datetime import date as Date, datetime, time as Time
from typing import Any, Dict, List, Optional

from pydantic import Field

from campus_reservations.schemas.common.base import BaseResponseSchema
from campus_reservations.schemas.common.enums import (
    ActivityAction,
    ApprovalStatus,
    ReservationStatus,
)

__all__ = [
    "ReservationCreated",
    "CancellationResult",
    "ConflictItem",
    "SlotConflict",
    "AvailabilityResult",
    "DailySlotView",
    "ApprovalStepView",
    "ReservationSummary",
    "ReservationDetail",
    "CalendarEntry",
    "ActivityLogView",
    "ReservationHistory",
    "SweepResult",
]


class ReservationCreated(BaseResponseSchema):
    reservation_id: int
    workflow_steps: int
    daily_slots_count: int


class CancellationResult(BaseResponseSchema):
    reservation_id: int
    status: ReservationStatus
    previous_status: ReservationStatus


class ConflictItem(BaseResponseSchema):
    """An existing active reservation that overlaps a requested slot."""

    reservation_id: int
    purpose: str
    status: ReservationStatus
    reserved_by_id: str
    reserved_by: Optional[str] = None
    conflict_date: Date
    conflict_start: Time
    conflict_end: Time


class SlotConflict(BaseResponseSchema):
    """All overlaps found for one requested slot."""

    date: Date
    requested_start: Time
    requested_end: Time
    conflicts: List[ConflictItem] = Field(default_factory=list)


class AvailabilityResult(BaseResponseSchema):
    available: bool
    conflicts: List[SlotConflict] = Field(default_factory=list)
    message: str


class DailySlotView(BaseResponseSchema):
    slot_date: Date
    start_time: Time
    end_time: Time


class ApprovalStepView(BaseResponseSchema):
    id: int
    step_order: int
    approver_id: str
    approver_name: Optional[str] = None
    status: ApprovalStatus
    acted_at: Optional[datetime] = None
    comment: Optional[str] = None


class ReservationSummary(BaseResponseSchema):
    id: int
    resource_id: int
    resource_name: Optional[str] = None
    purpose: str
    date_from: Date
    date_to: Date
    status: ReservationStatus
    requested_at: datetime
    daily_slots: List[DailySlotView] = Field(default_factory=list)


class ReservationDetail(ReservationSummary):
    resource_category: Optional[str] = None
    requester_id: str
    requester_name: Optional[str] = None
    approvals: List[ApprovalStepView] = Field(default_factory=list)


class CalendarEntry(BaseResponseSchema):
    reservation_id: int
    resource_id: int
    resource_name: Optional[str] = None
    resource_category: Optional[str] = None
    purpose: str
    date_from: Date
    date_to: Date
    status: ReservationStatus
    reserved_by: Optional[str] = None
    daily_slots: List[DailySlotView] = Field(default_factory=list)


class ActivityLogView(BaseResponseSchema):
    id: int
    action_type: ActivityAction
    description: str
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    step_order: Optional[int] = None
    comment: Optional[str] = None
    action_by_id: str
    action_by_name: Optional[str] = None
    action_at: datetime
    metadata: Optional[Dict[str, Any]] = None


class ReservationHistory(BaseResponseSchema):
    reservation: ReservationDetail
    activities: List[ActivityLogView] = Field(default_factory=list)


class SweepResult(BaseResponseSchema):
    cancelled_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    started_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.failed_count == 0
