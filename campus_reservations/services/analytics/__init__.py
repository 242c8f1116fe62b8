from campus_reservations.services.analytics.monthly_report_service import MonthlyReportService

__all__ = ["MonthlyReportService"]
