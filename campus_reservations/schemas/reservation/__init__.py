from campus_reservations.schemas.reservation.reservation_request import (
    AvailabilityCheckRequest,
    CancelReservationRequest,
    DailySlotInput,
    ReservationCreateRequest,
)
from campus_reservations.schemas.reservation.reservation_response import (
    ActivityLogView,
    ApprovalStepView,
    AvailabilityResult,
    CalendarEntry,
    CancellationResult,
    ConflictItem,
    DailySlotView,
    ReservationCreated,
    ReservationDetail,
    ReservationHistory,
    ReservationSummary,
    SlotConflict,
    SweepResult,
)

__all__ = [
    "AvailabilityCheckRequest",
    "CancelReservationRequest",
    "DailySlotInput",
    "ReservationCreateRequest",
    "ActivityLogView",
    "ApprovalStepView",
    "AvailabilityResult",
    "CalendarEntry",
    "CancellationResult",
    "ConflictItem",
    "DailySlotView",
    "ReservationCreated",
    "ReservationDetail",
    "ReservationHistory",
    "ReservationSummary",
    "SlotConflict",
    "SweepResult",
]
