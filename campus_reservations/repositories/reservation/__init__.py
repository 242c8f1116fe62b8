from campus_reservations.repositories.reservation.approval_repository import ApprovalRepository
from campus_reservations.repositories.reservation.reservation_repository import (
    DailySlotRepository,
    ReservationRepository,
)

__all__ = ["ApprovalRepository", "DailySlotRepository", "ReservationRepository"]
