import threading
import time
from datetime import datetime

from sqlalchemy import func, select

from campus_reservations.core.exceptions import ErrorCode
from campus_reservations.models import (
    Reservation,
    ReservationActivityLog,
    ReservationApproval,
    ReservationDailySlot,
)
from campus_reservations.schemas.common.enums import ActivityAction, ApprovalStatus, ReservationStatus
from campus_reservations.services.reservation import ReservationService

from conftest import (
    AUDITORIUM,
    LAB,
    NEXT_WEEK,
    NOW,
    PROJECTOR,
    TOMORROW,
    RecordingNotifier,
    reservation_request,
    slot,
)


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def test_creates_pending_reservation_with_slots_and_steps(reservation_service, session_factory):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(NEXT_WEEK, "13:00", "15:00"), slot(TOMORROW, "10:00", "12:00")])
    )

    assert result.is_success
    assert result.data.workflow_steps == 2
    assert result.data.daily_slots_count == 2

    with session_factory() as check:
        reservation = check.get(Reservation, result.data.reservation_id)
        assert reservation.status == ReservationStatus.PENDING
        assert reservation.date_from == TOMORROW
        assert reservation.date_to == NEXT_WEEK
        assert reservation.starts_at == datetime(2026, 3, 11, 10, 0)
        assert reservation.ends_at == datetime(2026, 3, 17, 15, 0)
        assert reservation.requested_at == NOW
        assert [s.slot_date for s in reservation.daily_slots] == [TOMORROW, NEXT_WEEK]
        assert [(a.step_order, a.approver_id, a.status) for a in reservation.approvals] == [
            (1, "ADM-001", ApprovalStatus.PENDING),
            (2, "ADM-002", ApprovalStatus.PENDING),
        ]

        log = check.scalars(select(ReservationActivityLog)).all()
        assert len(log) == 1
        assert log[0].action_type == ActivityAction.CREATED
        assert log[0].user_id == "STU-001"
        assert log[0].details["workflow_steps"] == 2
        assert log[0].details["resource_name"] == "Main Auditorium"
        assert len(log[0].details["daily_slots"]) == 2


def test_only_first_approver_is_notified(reservation_service, notifier):
    result = reservation_service.create_reservation(reservation_request())

    assert notifier.recipients() == ["ADM-001"]
    payload = notifier.sent[0][1]
    assert payload["type"] == "NEW_RESERVATION"
    assert payload["reservation_id"] == result.data.reservation_id
    assert payload["resource_name"] == "Main Auditorium"
    assert payload["requester_name"] == "Ana Lim"
    assert payload["step_order"] == 1
    assert payload["total_steps"] == 2


def test_blank_purpose_rejected(reservation_service, session_factory, notifier):
    result = reservation_service.create_reservation(reservation_request(purpose="   "))

    assert not result.is_success
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.status_code == 400
    assert notifier.sent == []
    with session_factory() as check:
        assert _count(check, Reservation) == 0


def test_no_slots_rejected(reservation_service):
    result = reservation_service.create_reservation(reservation_request(slots=[]))
    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_past_date_rejected(reservation_service):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(NOW.date().replace(day=9), "10:00", "11:00")])
    )
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert "past" in result.error.message


def test_elapsed_slot_today_rejected(reservation_service):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(NOW.date(), "07:00", "08:00"), slot(TOMORROW, "10:00", "11:00")])
    )
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert "already passed" in result.error.message


def test_one_ended_slot_today_rejects_the_rest(reservation_service, session_factory):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(NOW.date(), "07:00", "08:00"), slot(NOW.date(), "13:00", "14:00")])
    )

    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.details["end_time"] == "08:00:00"
    with session_factory() as check:
        assert _count(check, Reservation) == 0


def test_later_slot_today_accepted(reservation_service):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(NOW.date(), "13:00", "14:00")])
    )
    assert result.is_success


def test_self_overlapping_request_rejected(reservation_service):
    result = reservation_service.create_reservation(
        reservation_request(slots=[slot(TOMORROW, "09:00", "11:00"), slot(TOMORROW, "10:00", "12:00")])
    )
    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_unknown_resource_not_found(reservation_service):
    result = reservation_service.create_reservation(reservation_request(resource_id=999))
    assert result.error.code == ErrorCode.NOT_FOUND
    assert result.error.status_code == 404


def test_conflict_rejects_whole_request(reservation_service, make_reservation, session_factory, notifier):
    existing = make_reservation()

    result = reservation_service.create_reservation(
        reservation_request(
            requester_id="STU-002",
            slots=[slot(NEXT_WEEK, "10:00", "11:00"), slot(TOMORROW, "11:30", "13:00")],
        )
    )

    assert result.error.code == ErrorCode.SLOT_CONFLICT
    assert result.error.status_code == 409
    conflicts = result.error.details["conflicts"]
    assert len(conflicts) == 1
    assert conflicts[0]["date"] == TOMORROW.isoformat()
    assert conflicts[0]["conflicts"][0]["reservation_id"] == existing
    assert conflicts[0]["conflicts"][0]["reserved_by"] == "Ana Lim"

    assert notifier.recipients() == ["ADM-001"]
    with session_factory() as check:
        assert _count(check, Reservation) == 1
        assert _count(check, ReservationDailySlot) == 1


def test_approved_reservation_still_blocks(reservation_service, approval_service, make_reservation, step_ids):
    reservation_id = make_reservation(resource_id=PROJECTOR)
    assert approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-003", "approved").is_success

    result = reservation_service.create_reservation(
        reservation_request(resource_id=PROJECTOR, requester_id="STU-002")
    )
    assert result.error.code == ErrorCode.SLOT_CONFLICT


def test_resource_without_workflow_rejected(reservation_service, session_factory):
    result = reservation_service.create_reservation(reservation_request(resource_id=LAB))

    assert result.error.code == ErrorCode.NO_WORKFLOW
    assert result.error.status_code == 400
    with session_factory() as check:
        assert _count(check, Reservation) == 0


def test_storage_failure_rolls_back_everything(reservation_service, session_factory, notifier, monkeypatch):
    def broken_append(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(reservation_service.activity_repo, "append", broken_append)

    result = reservation_service.create_reservation(reservation_request())

    assert result.error.code == ErrorCode.INTERNAL_ERROR
    assert result.error.message == "Failed to create reservation"
    assert "disk full" not in str(result.error.to_dict())
    assert notifier.sent == []
    with session_factory() as check:
        assert _count(check, Reservation) == 0
        assert _count(check, ReservationApproval) == 0
        assert _count(check, ReservationDailySlot) == 0


def test_notification_failure_does_not_fail_creation(db, clock, session_factory):
    class ExplodingSink:
        def send_to_user(self, user_id, payload):
            raise ConnectionError("socket closed")

    result = ReservationService(db, ExplodingSink(), clock).create_reservation(reservation_request())

    assert result.is_success
    with session_factory() as check:
        assert _count(check, Reservation) == 1


def test_offline_approver_does_not_fail_creation(db, clock):
    offline = RecordingNotifier(deliver=False)
    result = ReservationService(db, offline, clock).create_reservation(
        reservation_request(resource_id=AUDITORIUM)
    )

    assert result.is_success
    assert offline.recipients() == ["ADM-001"]


class TestConcurrentCreation:

    def test_overlapping_requests_have_one_winner(self, seed, session_factory, clock):
        first_checked = threading.Event()
        second_started = threading.Event()
        results = {}

        first_session = session_factory()
        second_session = session_factory()
        first = ReservationService(first_session, RecordingNotifier(), clock)
        second = ReservationService(second_session, RecordingNotifier(), clock)

        find_conflicts = first.conflicts.find_conflicts

        def check_then_stall(resource_id, slots):
            found = find_conflicts(resource_id, slots)
            first_checked.set()
            # Let the second request run while the first has not written yet
            second_started.wait(timeout=5)
            time.sleep(0.2)
            return found

        first.conflicts.find_conflicts = check_then_stall

        find_for_update = second.resource_repo.find_for_update

        def announce_then_lock(resource_id):
            second_started.set()
            return find_for_update(resource_id)

        second.resource_repo.find_for_update = announce_then_lock

        def submit(name, service, requester_id):
            results[name] = service.create_reservation(
                reservation_request(requester_id=requester_id, slots=[slot(TOMORROW, "10:00", "12:00")])
            )

        first_thread = threading.Thread(target=submit, args=("first", first, "STU-001"))
        second_thread = threading.Thread(target=submit, args=("second", second, "STU-002"))
        try:
            first_thread.start()
            assert first_checked.wait(timeout=5)
            second_thread.start()
            first_thread.join(timeout=30)
            second_thread.join(timeout=30)
        finally:
            first_session.close()
            second_session.close()

        assert results["first"].is_success
        assert results["second"].error.code == ErrorCode.SLOT_CONFLICT
        with session_factory() as check:
            assert _count(check, Reservation) == 1
            assert _count(check, ReservationDailySlot) == 1
