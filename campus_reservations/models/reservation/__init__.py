from campus_reservations.models.reservation.activity_log import ReservationActivityLog
from campus_reservations.models.reservation.reservation import Reservation, ReservationDailySlot
from campus_reservations.models.reservation.reservation_approval import ReservationApproval

__all__ = [
    "Reservation",
    "ReservationActivityLog",
    "ReservationApproval",
    "ReservationDailySlot",
]
