from campus_reservations.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
)
from campus_reservations.schemas.common.enums import (
    ActivityAction,
    ApprovalAction,
    ApprovalStatus,
    NotificationType,
    ReservationStatus,
)

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "ActivityAction",
    "ApprovalAction",
    "ApprovalStatus",
    "NotificationType",
    "ReservationStatus",
]
