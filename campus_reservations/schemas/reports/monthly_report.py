"""
Monthly analytics report schemas.
"""

from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import Field

from campus_reservations.schemas.common.base import BaseResponseSchema

__all__ = [
    "ReportPeriod",
    "ReportSummary",
    "ResourceUtilization",
    "CategoryBreakdown",
    "DepartmentBreakdown",
    "RequesterActivity",
    "WorkflowPerformance",
    "DailyTrend",
    "MonthlyReport",
]


class ReportPeriod(BaseResponseSchema):
    year: int
    month: int
    month_name: str
    display: str
    start_date: Date
    end_date: Date


class ReportSummary(BaseResponseSchema):
    total_reservations: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    cancelled: int = 0
    approval_rate_percentage: float = 0.0
    avg_approval_time_hours: float = 0.0
    avg_approval_time_days: float = 0.0


class ResourceUtilization(BaseResponseSchema):
    resource_id: int
    resource_name: str
    category: Optional[str] = None
    booking_count: int = 0
    approved_bookings: int = 0
    total_days_booked: int = 0
    total_hours_booked: float = 0.0
    utilization_percentage: float = 0.0


class CategoryBreakdown(BaseResponseSchema):
    category: Optional[str] = None
    booking_count: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class DepartmentBreakdown(BaseResponseSchema):
    department: Optional[str] = None
    booking_count: int = 0
    approved: int = 0
    rejected: int = 0


class RequesterActivity(BaseResponseSchema):
    id: str
    name: Optional[str] = None
    department: Optional[str] = None
    total_requests: int = 0
    approved: int = 0
    rejected: int = 0


class WorkflowPerformance(BaseResponseSchema):
    step_order: int
    approver_id: str
    approver_name: Optional[str] = None
    total_approvals: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    avg_response_hours: float = 0.0
    avg_response_days: float = 0.0


class DailyTrend(BaseResponseSchema):
    date: Date
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class MonthlyReport(BaseResponseSchema):
    period: ReportPeriod
    summary: ReportSummary
    resource_utilization: List[ResourceUtilization] = Field(default_factory=list)
    category_breakdown: List[CategoryBreakdown] = Field(default_factory=list)
    department_breakdown: List[DepartmentBreakdown] = Field(default_factory=list)
    top_requesters: List[RequesterActivity] = Field(default_factory=list)
    workflow_performance: List[WorkflowPerformance] = Field(default_factory=list)
    daily_trends: List[DailyTrend] = Field(default_factory=list)
    generated_at: datetime
