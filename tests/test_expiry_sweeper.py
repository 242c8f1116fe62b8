from datetime import datetime

from sqlalchemy import select

from campus_reservations.models import Reservation, ReservationActivityLog
from campus_reservations.schemas.common.enums import ActivityAction, ApprovalStatus, ReservationStatus
from campus_reservations.services.background.expiry_sweeper import (
    STEP_EXPIRED_COMMENT,
    SWEEP_LOG_COMMENT,
)

from conftest import NEXT_WEEK, PROJECTOR, slot


def _status(session_factory, reservation_id):
    with session_factory() as check:
        return check.get(Reservation, reservation_id).status


def test_nothing_to_sweep(sweeper):
    result = sweeper.sweep_expired()
    assert (result.cancelled_count, result.skipped_count, result.failed_count) == (0, 0, 0)
    assert result.success
    assert result.completed_at is not None


def test_cancels_only_started_pending_reservations(sweeper, approval_service, make_reservation, step_ids, clock, session_factory):
    stale = make_reservation()
    upcoming = make_reservation(slots=[slot(NEXT_WEEK, "10:00", "12:00")])
    approved = make_reservation(resource_id=PROJECTOR)
    approval_service.act_on_step(step_ids(approved)[1], "ADM-003", "approved")

    clock.advance(days=1, hours=2)
    result = sweeper.sweep_expired()

    assert result.cancelled_count == 1
    assert result.failed_count == 0
    assert _status(session_factory, stale) == ReservationStatus.CANCELLED
    assert _status(session_factory, upcoming) == ReservationStatus.PENDING
    assert _status(session_factory, approved) == ReservationStatus.APPROVED

    with session_factory() as check:
        reservation = check.get(Reservation, stale)
        assert {(a.status, a.comment) for a in reservation.approvals} == {
            (ApprovalStatus.CANCELLED, STEP_EXPIRED_COMMENT)
        }
        entry = check.scalars(
            select(ReservationActivityLog).where(
                ReservationActivityLog.reservation_id == stale,
                ReservationActivityLog.action_type == ActivityAction.AUTO_CANCELLED,
            )
        ).one()
        assert entry.user_id == "SYSTEM"
        assert entry.comment == SWEEP_LOG_COMMENT


def test_explicit_cut_off(sweeper, make_reservation, session_factory):
    reservation_id = make_reservation(slots=[slot(NEXT_WEEK, "10:00", "12:00")])

    assert sweeper.sweep_expired(now=datetime(2026, 3, 17, 10, 0)).cancelled_count == 0
    assert sweeper.sweep_expired(now=datetime(2026, 3, 17, 10, 1)).cancelled_count == 1
    assert _status(session_factory, reservation_id) == ReservationStatus.CANCELLED


def test_second_sweep_is_a_no_op(sweeper, make_reservation, clock):
    make_reservation()
    clock.advance(days=2)

    assert sweeper.sweep_expired().cancelled_count == 1
    assert sweeper.sweep_expired().cancelled_count == 0


def test_one_failure_does_not_stop_the_run(sweeper, make_reservation, clock, session_factory, monkeypatch):
    first = make_reservation()
    second = make_reservation(slots=[slot(NEXT_WEEK, "10:00", "12:00")])
    clock.advance(days=8)

    original_append = sweeper.activity_repo.append
    calls = []

    def flaky_append(*args, **kwargs):
        calls.append(kwargs["reservation_id"])
        if len(calls) == 1:
            raise RuntimeError("log table locked")
        return original_append(*args, **kwargs)

    monkeypatch.setattr(sweeper.activity_repo, "append", flaky_append)

    result = sweeper.sweep_expired()

    assert result.cancelled_count == 1
    assert result.failed_count == 1
    assert not result.success
    # The failed reservation's transaction was rolled back as a whole
    assert _status(session_factory, first) == ReservationStatus.PENDING
    assert _status(session_factory, second) == ReservationStatus.CANCELLED


def test_reservation_closed_meanwhile_is_skipped(sweeper, reservation_service, make_reservation, clock, monkeypatch):
    reservation_id = make_reservation()
    reservation_service.cancel_reservation(reservation_id, "STU-001")
    clock.advance(days=2)

    monkeypatch.setattr(sweeper.reservation_repo, "find_expired_pending_ids", lambda now: [reservation_id])

    result = sweeper.sweep_expired()

    assert result.skipped_count == 1
    assert result.cancelled_count == 0
