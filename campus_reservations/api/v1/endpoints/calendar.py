"""
Month calendar of active reservations.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from campus_reservations.api import deps
from campus_reservations.api.responses import result_response
from campus_reservations.core.exceptions import ValidationError
from campus_reservations.schemas.reservation import CalendarEntry
from campus_reservations.services.reservation import ReservationQueryService
from campus_reservations.utils.datetime_utils import DateTimeHelper

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get("", response_model=List[CalendarEntry])
def get_calendar(
    month: Optional[str] = Query(None, description="YYYY-MM; defaults to the current month"),
    resource_id: Optional[int] = Query(None),
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    if month:
        try:
            year, month_number = DateTimeHelper.parse_month(month)
        except ValueError as e:
            raise ValidationError(str(e), field="month")
    else:
        today = service.clock.today()
        year, month_number = today.year, today.month

    return result_response(service.calendar(year, month_number, resource_id))
