from campus_reservations.schemas.approval.approval import (
    ApprovalLogItem,
    ApprovalLogResponse,
    ApprovalLogSummary,
    ApprovalStats,
    DailyApprovalStat,
    PendingApprovalItem,
    StepActionRequest,
    StepActionResult,
)

__all__ = [
    "ApprovalLogItem",
    "ApprovalLogResponse",
    "ApprovalLogSummary",
    "ApprovalStats",
    "DailyApprovalStat",
    "PendingApprovalItem",
    "StepActionRequest",
    "StepActionResult",
]
