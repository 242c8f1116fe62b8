"""
FastAPI dependencies.

Services are built per request from the request's session, a clock in the
campus reference timezone and the process-wide notification sink. Tests
override ``get_db``, ``get_clock`` and ``get_notifier``.

Example usage in a router:
    @router.get("/reservations/{reservation_id}")
    def read(service: ReservationQueryService = Depends(deps.get_query_service)):
        ...
"""

import secrets
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from campus_reservations.config.settings import settings
from campus_reservations.core.exceptions import UnauthorizedError
from campus_reservations.db.session import get_db
from campus_reservations.services.analytics import MonthlyReportService
from campus_reservations.services.approval import ApprovalService
from campus_reservations.services.background import ExpirySweeper
from campus_reservations.services.notification import (
    NotificationSink,
    WebSocketNotifier,
    connection_registry,
)
from campus_reservations.services.reservation import ReservationQueryService, ReservationService
from campus_reservations.services.workflow import WorkflowService
from campus_reservations.utils.datetime_utils import Clock

_notifier = WebSocketNotifier(connection_registry)


# --- Infrastructure ------------------------------------------------------------

def get_clock() -> Clock:
    return Clock(settings.TIMEZONE)


def get_notifier() -> NotificationSink:
    return _notifier


# --- Services ------------------------------------------------------------------

def get_reservation_service(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> ReservationService:
    return ReservationService(db, notifier, clock)


def get_approval_service(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> ApprovalService:
    return ApprovalService(db, notifier, clock)


def get_query_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReservationQueryService:
    return ReservationQueryService(db, clock)


def get_workflow_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> WorkflowService:
    return WorkflowService(db, clock)


def get_report_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> MonthlyReportService:
    return MonthlyReportService(db, clock)


def get_expiry_sweeper(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ExpirySweeper:
    return ExpirySweeper(db, clock)


# --- Maintenance ---------------------------------------------------------------

def require_maintenance_token(
    x_maintenance_token: Optional[str] = Header(None, alias="X-Maintenance-Token"),
) -> None:
    """Reject the call unless the header matches the configured token."""
    expected = settings.MAINTENANCE_TOKEN
    if not expected or not x_maintenance_token:
        raise UnauthorizedError("Maintenance token required")
    if not secrets.compare_digest(x_maintenance_token, expected):
        raise UnauthorizedError("Invalid maintenance token")
