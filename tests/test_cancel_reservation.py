from sqlalchemy import select

from campus_reservations.core.exceptions import ErrorCode
from campus_reservations.models import Reservation, ReservationActivityLog
from campus_reservations.schemas.common.enums import ActivityAction, ApprovalStatus, ReservationStatus

from conftest import NOW, PROJECTOR, reservation_request


def test_requester_cancels_pending_reservation(reservation_service, make_reservation, session_factory):
    reservation_id = make_reservation()

    result = reservation_service.cancel_reservation(reservation_id, "STU-001", "Event moved")

    assert result.is_success
    assert result.data.status == ReservationStatus.CANCELLED
    assert result.data.previous_status == ReservationStatus.PENDING

    with session_factory() as check:
        reservation = check.get(Reservation, reservation_id)
        assert reservation.status == ReservationStatus.CANCELLED
        assert {(a.status, a.acted_at) for a in reservation.approvals} == {(ApprovalStatus.CANCELLED, NOW)}

        entry = check.scalars(
            select(ReservationActivityLog).where(
                ReservationActivityLog.action_type == ActivityAction.CANCELLED
            )
        ).one()
        assert entry.user_id == "STU-001"
        assert entry.comment == "Event moved"
        assert entry.old_status == "pending"
        assert entry.details == {
            "cancelled_by": "STU-001",
            "cancelled_by_name": "Ana Lim",
            "cancelled_at": NOW.isoformat(),
            "previous_status": "pending",
        }


def test_approved_reservation_can_be_cancelled_before_start(reservation_service, approval_service, make_reservation, step_ids):
    reservation_id = make_reservation(resource_id=PROJECTOR)
    approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-003", "approved")

    result = reservation_service.cancel_reservation(reservation_id, "STU-001")

    assert result.is_success
    assert result.data.previous_status == ReservationStatus.APPROVED


def test_only_requester_may_cancel(reservation_service, make_reservation):
    reservation_id = make_reservation()
    result = reservation_service.cancel_reservation(reservation_id, "STU-002")
    assert result.error.code == ErrorCode.NOT_OWNER
    assert result.error.status_code == 403


def test_missing_reservation(reservation_service):
    result = reservation_service.cancel_reservation(404, "STU-001")
    assert result.error.code == ErrorCode.NOT_FOUND


def test_cancelled_reservation_cannot_be_cancelled_again(reservation_service, make_reservation):
    reservation_id = make_reservation()
    reservation_service.cancel_reservation(reservation_id, "STU-001")

    result = reservation_service.cancel_reservation(reservation_id, "STU-001")

    assert result.error.code == ErrorCode.ALREADY_TERMINAL
    assert result.error.status_code == 409


def test_rejected_reservation_cannot_be_cancelled(reservation_service, approval_service, make_reservation, step_ids):
    reservation_id = make_reservation()
    approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-001", "rejected")

    result = reservation_service.cancel_reservation(reservation_id, "STU-001")

    assert result.error.code == ErrorCode.ALREADY_TERMINAL


def test_started_reservation_cannot_be_cancelled(reservation_service, make_reservation, clock, session_factory):
    reservation_id = make_reservation()
    clock.advance(days=1, hours=2)

    result = reservation_service.cancel_reservation(reservation_id, "STU-001")

    assert result.error.code == ErrorCode.ALREADY_STARTED
    assert result.error.status_code == 400
    with session_factory() as check:
        assert check.get(Reservation, reservation_id).status == ReservationStatus.PENDING


def test_cancelling_frees_the_slot(reservation_service, make_reservation):
    reservation_id = make_reservation()
    reservation_service.cancel_reservation(reservation_id, "STU-001")

    result = reservation_service.create_reservation(reservation_request(requester_id="STU-002"))

    assert result.is_success
