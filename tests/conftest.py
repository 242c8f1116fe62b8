"""
Shared fixtures: a throwaway SQLite database per test, a pinned clock,
a recording notification sink and seeded users, resources and workflows.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Tuple

import pytest
from sqlalchemy.orm import sessionmaker

from campus_reservations.db.init_db import init_db
from campus_reservations.db.session import build_engine
from campus_reservations.models import FacilityApprovalWorkflow, UniversityResource, User
from campus_reservations.repositories import ApprovalRepository
from campus_reservations.schemas.reservation import ReservationCreateRequest
from campus_reservations.services.analytics import MonthlyReportService
from campus_reservations.services.approval import ApprovalService
from campus_reservations.services.background import ExpirySweeper
from campus_reservations.services.reservation import ReservationQueryService, ReservationService
from campus_reservations.services.workflow import WorkflowService
from campus_reservations.utils.datetime_utils import Clock

# Tuesday morning, campus local time
NOW = datetime(2026, 3, 10, 9, 0)
TOMORROW = date(2026, 3, 11)
NEXT_WEEK = date(2026, 3, 17)

AUDITORIUM = 1  # two-step workflow: ADM-001 then ADM-002
PROJECTOR = 2   # single step: ADM-003
LAB = 3         # no workflow


class FixedClock(Clock):
    """Clock pinned to a naive local time that tests can move."""

    def __init__(self, local_now: datetime, timezone: str = "Asia/Manila"):
        super().__init__(timezone)
        self.current = local_now

    def now(self) -> datetime:
        return self.tz.localize(self.current)

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    """Notification sink that keeps every message it is given."""

    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.sent: List[Tuple[str, Dict[str, Any]]] = []

    def send_to_user(self, user_id: str, payload: Dict[str, Any]) -> bool:
        self.sent.append((user_id, payload))
        return self.deliver

    def recipients(self) -> List[str]:
        return [user_id for user_id, _ in self.sent]


@pytest.fixture
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'reservations.db'}")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory, seed):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(session_factory):
    session = session_factory()
    session.add_all([
        User(id="ADM-001", name="Dean Santos", department="Facilities", role="approver"),
        User(id="ADM-002", name="Director Cruz", department="Admin", role="approver"),
        User(id="ADM-003", name="Tech Lead Reyes", department="IT", role="approver"),
        User(id="STU-001", name="Ana Lim", department="Engineering", role="requester"),
        User(id="STU-002", name="Ben Tan", department="Business", role="requester"),
    ])
    session.add_all([
        UniversityResource(id=AUDITORIUM, name="Main Auditorium", category="Venue"),
        UniversityResource(id=PROJECTOR, name="Projector A", category="Equipment"),
        UniversityResource(id=LAB, name="Lab 101", category="Laboratory"),
    ])
    session.flush()
    session.add_all([
        FacilityApprovalWorkflow(resource_id=AUDITORIUM, approver_id="ADM-001", step_order=1),
        FacilityApprovalWorkflow(resource_id=AUDITORIUM, approver_id="ADM-002", step_order=2),
        FacilityApprovalWorkflow(resource_id=PROJECTOR, approver_id="ADM-003", step_order=1),
    ])
    session.commit()
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def reservation_service(db, notifier, clock):
    return ReservationService(db, notifier, clock)


@pytest.fixture
def approval_service(db, notifier, clock):
    return ApprovalService(db, notifier, clock)


@pytest.fixture
def query_service(db, clock):
    return ReservationQueryService(db, clock)


@pytest.fixture
def workflow_service(db, clock):
    return WorkflowService(db, clock)


@pytest.fixture
def sweeper(db, clock):
    return ExpirySweeper(db, clock)


@pytest.fixture
def report_service(db, clock):
    return MonthlyReportService(db, clock)


def slot(day: date, start: str, end: str) -> Dict[str, Any]:
    return {
        "date": day.isoformat(),
        "start_time": start,
        "end_time": end,
    }


def reservation_request(resource_id=AUDITORIUM, requester_id="STU-001", slots=None, purpose="Org meeting"):
    return ReservationCreateRequest(
        resource_id=resource_id,
        requester_id=requester_id,
        purpose=purpose,
        slots=slots if slots is not None else [slot(TOMORROW, "10:00", "12:00")],
    )


@pytest.fixture
def make_reservation(reservation_service):
    """Create a reservation and return its id; fails the test on error."""

    def _make(**kwargs) -> int:
        result = reservation_service.create_reservation(reservation_request(**kwargs))
        assert result.is_success, result.error
        return result.data.reservation_id

    return _make


@pytest.fixture
def step_ids(db):
    """Approval step ids of a reservation keyed by step order."""
    def _steps(reservation_id: int) -> Dict[int, int]:
        return {
            step.step_order: step.id
            for step in ApprovalRepository(db).list_for_reservation(reservation_id)
        }

    return _steps

