from datetime import date

from campus_reservations.core.exceptions import ErrorCode
from campus_reservations.schemas.common.enums import ActivityAction, ApprovalStatus

from conftest import AUDITORIUM, NEXT_WEEK, PROJECTOR, TOMORROW, slot


def test_detail_lists_steps_in_order(query_service, make_reservation):
    reservation_id = make_reservation(slots=[slot(NEXT_WEEK, "08:00", "09:00"), slot(TOMORROW, "10:00", "12:00")])

    detail = query_service.get_reservation_detail(reservation_id).data

    assert detail.resource_name == "Main Auditorium"
    assert detail.requester_name == "Ana Lim"
    assert [s.slot_date for s in detail.daily_slots] == [TOMORROW, NEXT_WEEK]
    assert [(a.step_order, a.approver_name, a.status) for a in detail.approvals] == [
        (1, "Dean Santos", ApprovalStatus.PENDING),
        (2, "Director Cruz", ApprovalStatus.PENDING),
    ]


def test_unknown_reservation(query_service):
    assert query_service.get_reservation_detail(404).error.code == ErrorCode.NOT_FOUND
    assert query_service.daily_slots(404).error.code == ErrorCode.NOT_FOUND
    assert query_service.history(404).error.code == ErrorCode.NOT_FOUND


def test_requester_listing_only_shows_own_reservations(query_service, make_reservation):
    mine = make_reservation()
    make_reservation(requester_id="STU-002", resource_id=PROJECTOR)

    assert [r.id for r in query_service.list_for_requester("STU-001").data] == [mine]
    assert query_service.list_for_requester("nobody").data == []


def test_history_names_actors_and_system(query_service, approval_service, make_reservation, step_ids, clock):
    reservation_id = make_reservation()
    approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-001", "approved")
    clock.advance(days=2)
    approval_service.act_on_step(step_ids(reservation_id)[2], "ADM-002", "approved")

    history = query_service.history(reservation_id).data

    assert [(a.action_type, a.action_by_name) for a in history.activities] == [
        (ActivityAction.CREATED, "Ana Lim"),
        (ActivityAction.APPROVED, "Dean Santos"),
        (ActivityAction.AUTO_CANCELLED, "SYSTEM"),
    ]
    assert history.activities[1].step_order == 1


class TestApproverViews:

    def test_pending_queue_marks_blocked_steps(self, query_service, approval_service, make_reservation, step_ids):
        reservation_id = make_reservation()

        blocked = query_service.pending_for_approver("ADM-002").data
        assert [(item.reservation_id, item.step_order, item.total_steps, item.can_act) for item in blocked] == [
            (reservation_id, 2, 2, False)
        ]

        approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-001", "approved")

        assert query_service.pending_for_approver("ADM-002").data[0].can_act is True
        assert query_service.pending_for_approver("ADM-001").data == []

    def test_closed_reservations_leave_the_queue(self, query_service, approval_service, make_reservation, step_ids):
        reservation_id = make_reservation()
        approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-001", "rejected")

        assert query_service.pending_for_approver("ADM-002").data == []

    def test_logs_and_summary(self, query_service, approval_service, make_reservation, step_ids):
        approved = make_reservation(resource_id=PROJECTOR)
        rejected = make_reservation(resource_id=PROJECTOR, slots=[slot(NEXT_WEEK, "10:00", "11:00")])
        approval_service.act_on_step(step_ids(approved)[1], "ADM-003", "approved")
        approval_service.act_on_step(step_ids(rejected)[1], "ADM-003", "rejected", "Under repair")

        response = query_service.approval_logs("ADM-003").data

        assert (response.summary.total, response.summary.approved, response.summary.rejected) == (2, 1, 1)
        assert {(log.reservation_id, log.status) for log in response.logs} == {
            (approved, ApprovalStatus.APPROVED),
            (rejected, ApprovalStatus.REJECTED),
        }

    def test_stats_cover_period_oldest_first(self, query_service, approval_service, make_reservation, step_ids, clock):
        reservation_id = make_reservation(resource_id=PROJECTOR, slots=[slot(NEXT_WEEK, "10:00", "11:00")])
        approval_service.act_on_step(step_ids(reservation_id)[1], "ADM-003", "approved")

        stats = query_service.approval_stats("ADM-003", period_days=7).data

        assert len(stats.daily_stats) == 7
        assert stats.daily_stats[0].date == date(2026, 3, 4)
        assert stats.daily_stats[-1].date == date(2026, 3, 10)
        assert (stats.daily_stats[-1].total, stats.daily_stats[-1].approved) == (1, 1)
        assert stats.totals.total == 1

    def test_stats_reject_empty_period(self, query_service):
        assert query_service.approval_stats("ADM-003", period_days=0).error.code == ErrorCode.VALIDATION_ERROR


class TestCalendar:

    def test_active_reservations_touching_the_month(self, query_service, reservation_service, make_reservation):
        kept = make_reservation()
        projector = make_reservation(resource_id=PROJECTOR)
        cancelled = make_reservation(slots=[slot(NEXT_WEEK, "10:00", "11:00")])
        reservation_service.cancel_reservation(cancelled, "STU-001")

        entries = query_service.calendar(2026, 3).data

        assert {e.reservation_id for e in entries} == {kept, projector}
        assert [e.reservation_id for e in query_service.calendar(2026, 3, AUDITORIUM).data] == [kept]

    def test_spanning_reservation_appears_in_both_months(self, query_service, make_reservation):
        reservation_id = make_reservation(slots=[slot(date(2026, 3, 30), "10:00", "11:00"), slot(date(2026, 4, 2), "10:00", "11:00")])

        assert [e.reservation_id for e in query_service.calendar(2026, 4).data] == [reservation_id]

    def test_invalid_month(self, query_service):
        assert query_service.calendar(2026, 13).error.code == ErrorCode.VALIDATION_ERROR
