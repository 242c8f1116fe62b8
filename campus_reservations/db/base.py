"""
Import all models here so Base.metadata knows every table before
create_all runs.
"""

from campus_reservations.models.base import Base  # noqa: F401
from campus_reservations.models import (  # noqa: F401
    FacilityApprovalWorkflow,
    Reservation,
    ReservationActivityLog,
    ReservationApproval,
    ReservationDailySlot,
    UniversityResource,
    User,
)
