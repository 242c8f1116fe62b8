"""
Monthly analytics endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from campus_reservations.api import deps
from campus_reservations.api.responses import result_response
from campus_reservations.schemas.reports import MonthlyReport
from campus_reservations.services.analytics import MonthlyReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/monthly", response_model=MonthlyReport)
def monthly_report(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    service: MonthlyReportService = Depends(deps.get_report_service),
):
    today = service.clock.today()
    return result_response(
        service.monthly_report(year or today.year, month or today.month)
    )
