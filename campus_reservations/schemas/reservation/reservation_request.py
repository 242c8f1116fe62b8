"""
Inbound reservation payloads.

Field types are enforced here; business validation (non-empty purpose,
interval ordering, dates in the past) is done by the reservation service so
that direct callers get the same errors as HTTP callers.
"""

from datetime import date as Date, time as Time
from typing import List, Optional

from pydantic import Field

from campus_reservations.schemas.common.base import BaseCreateSchema

__all__ = [
    "DailySlotInput",
    "ReservationCreateRequest",
    "AvailabilityCheckRequest",
    "CancelReservationRequest",
]


class DailySlotInput(BaseCreateSchema):
    """One requested (date, start, end) interval."""

    date: Date = Field(..., description="Slot date in the campus calendar")
    start_time: Time = Field(..., description="Inclusive start")
    end_time: Time = Field(..., description="Exclusive end")

    @property
    def key(self) -> tuple:
        return (self.date, self.start_time, self.end_time)


class ReservationCreateRequest(BaseCreateSchema):
    """Request to book a resource."""

    resource_id: int = Field(..., description="Resource to reserve")
    requester_id: str = Field(..., description="User making the request")
    purpose: str = Field("", max_length=2000)
    slots: List[DailySlotInput] = Field(default_factory=list)


class AvailabilityCheckRequest(BaseCreateSchema):
    """Ask whether slots are free without creating anything."""

    resource_id: int
    slots: List[DailySlotInput] = Field(default_factory=list)


class CancelReservationRequest(BaseCreateSchema):
    """Requester-initiated cancellation."""

    requester_id: str
    comment: Optional[str] = Field(None, max_length=1000)
