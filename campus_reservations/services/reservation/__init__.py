"""
Reservation services: conflict detection, lifecycle operations and read views.
"""

from campus_reservations.services.reservation.conflict_detector import (
    ConflictDetector,
    SlotSpec,
    normalize_slots,
)
from campus_reservations.services.reservation.reservation_query_service import ReservationQueryService
from campus_reservations.services.reservation.reservation_service import ReservationService

__all__ = [
    "ConflictDetector",
    "ReservationQueryService",
    "ReservationService",
    "SlotSpec",
    "normalize_slots",
]
