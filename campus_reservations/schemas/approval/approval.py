"""
Approval step action and approver view schemas.
"""

from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import Field

from campus_reservations.schemas.common.base import BaseCreateSchema, BaseResponseSchema
from campus_reservations.schemas.common.enums import ApprovalAction, ApprovalStatus, ReservationStatus
from campus_reservations.schemas.reservation.reservation_response import DailySlotView

__all__ = [
    "StepActionRequest",
    "StepActionResult",
    "PendingApprovalItem",
    "ApprovalLogItem",
    "ApprovalLogSummary",
    "ApprovalLogResponse",
    "DailyApprovalStat",
    "ApprovalStats",
]


class StepActionRequest(BaseCreateSchema):
    """An approver's decision on one workflow step."""

    approver_id: str
    action: ApprovalAction
    comment: Optional[str] = Field(None, max_length=1000)


class StepActionResult(BaseResponseSchema):
    reservation_id: int
    step_order: int
    fully_approved: bool


class PendingApprovalItem(BaseResponseSchema):
    """A step waiting on this approver, with the reservation it belongs to."""

    approval_id: int
    step_order: int
    total_steps: int
    can_act: bool = Field(..., description="All earlier steps are approved")
    reservation_id: int
    resource_id: int
    resource_name: Optional[str] = None
    purpose: str
    requester_id: str
    requester_name: Optional[str] = None
    date_from: Date
    date_to: Date
    reservation_status: ReservationStatus
    requested_at: datetime
    daily_slots: List[DailySlotView] = Field(default_factory=list)


class ApprovalLogItem(BaseResponseSchema):
    approval_id: int
    reservation_id: int
    step_order: int
    status: ApprovalStatus
    comment: Optional[str] = None
    acted_at: Optional[datetime] = None
    resource_name: Optional[str] = None
    purpose: str
    requester_name: Optional[str] = None
    reservation_status: ReservationStatus
    daily_slots: List[DailySlotView] = Field(default_factory=list)


class ApprovalLogSummary(BaseResponseSchema):
    total: int = 0
    approved: int = 0
    rejected: int = 0


class ApprovalLogResponse(BaseResponseSchema):
    logs: List[ApprovalLogItem] = Field(default_factory=list)
    summary: ApprovalLogSummary


class DailyApprovalStat(BaseResponseSchema):
    date: Date
    total: int = 0
    approved: int = 0
    rejected: int = 0


class ApprovalStats(BaseResponseSchema):
    period_days: int
    daily_stats: List[DailyApprovalStat] = Field(default_factory=list)
    totals: ApprovalLogSummary
