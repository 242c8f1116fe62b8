from campus_reservations.schemas.reports.monthly_report import (
    CategoryBreakdown,
    DailyTrend,
    DepartmentBreakdown,
    MonthlyReport,
    ReportPeriod,
    ReportSummary,
    RequesterActivity,
    ResourceUtilization,
    WorkflowPerformance,
)

__all__ = [
    "CategoryBreakdown",
    "DailyTrend",
    "DepartmentBreakdown",
    "MonthlyReport",
    "ReportPeriod",
    "ReportSummary",
    "RequesterActivity",
    "ResourceUtilization",
    "WorkflowPerformance",
]
