from campus_reservations.core.exceptions import ErrorCode
from campus_reservations.models import Reservation
from campus_reservations.schemas.workflow import WorkflowStepInput

from conftest import AUDITORIUM, LAB, reservation_request


class TestGetWorkflow:

    def test_steps_in_order_with_approver_details(self, workflow_service):
        result = workflow_service.get_workflow(AUDITORIUM)

        assert result.is_success
        assert [(s.step_order, s.approver_id, s.approver_name) for s in result.data] == [
            (1, "ADM-001", "Dean Santos"),
            (2, "ADM-002", "Director Cruz"),
        ]

    def test_resource_without_workflow(self, workflow_service):
        assert workflow_service.get_workflow(LAB).data == []


class TestSetWorkflow:

    def test_replaces_existing_chain(self, workflow_service):
        result = workflow_service.set_workflow(
            AUDITORIUM,
            [WorkflowStepInput(approver_id="ADM-003", step_order=1)],
        )

        assert result.is_success
        assert [(s.step_order, s.approver_id) for s in workflow_service.get_workflow(AUDITORIUM).data] == [
            (1, "ADM-003"),
        ]

    def test_accepts_plain_dicts_and_skips_incomplete_entries(self, workflow_service):
        result = workflow_service.set_workflow(
            LAB,
            [
                {"approver_id": "ADM-002", "step_order": 2},
                {"approver_id": "", "step_order": 3},
                {"approver_id": "ADM-001", "step_order": 1},
            ],
        )

        assert [(s.step_order, s.approver_id) for s in result.data] == [(1, "ADM-001"), (2, "ADM-002")]

    def test_gaps_in_step_numbers_are_kept(self, workflow_service, reservation_service, approval_service, step_ids, notifier):
        workflow_service.set_workflow(LAB, [("ADM-003", 1), ("ADM-002", 3)])

        reservation_id = reservation_service.create_reservation(
            reservation_request(resource_id=LAB)
        ).data.reservation_id
        steps = step_ids(reservation_id)
        assert sorted(steps) == [1, 3]

        blocked = approval_service.act_on_step(steps[3], "ADM-002", "approved")
        assert blocked.error.code == ErrorCode.PRIOR_STEPS_INCOMPLETE

        assert approval_service.act_on_step(steps[1], "ADM-003", "approved").is_success
        user_id, payload = notifier.sent[-1]
        assert user_id == "ADM-002"
        assert payload["step_order"] == 3

    def test_duplicate_step_order_leaves_workflow_unchanged(self, workflow_service):
        result = workflow_service.set_workflow(AUDITORIUM, [("ADM-003", 1), ("ADM-002", 1)])

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.details["duplicate_step_orders"] == [1]
        assert [s.approver_id for s in workflow_service.get_workflow(AUDITORIUM).data] == [
            "ADM-001",
            "ADM-002",
        ]

    def test_unknown_approver(self, workflow_service):
        result = workflow_service.set_workflow(LAB, [("ADM-404", 1)])

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.details["unknown_approvers"] == ["ADM-404"]
        assert workflow_service.get_workflow(LAB).data == []

    def test_unknown_resource(self, workflow_service):
        result = workflow_service.set_workflow(999, [("ADM-001", 1)])
        assert result.error.code == ErrorCode.NOT_FOUND
        assert result.error.status_code == 404

    def test_existing_reservations_keep_their_steps(self, workflow_service, make_reservation, session_factory):
        reservation_id = make_reservation()

        workflow_service.set_workflow(AUDITORIUM, [("ADM-003", 1)])

        with session_factory() as check:
            reservation = check.get(Reservation, reservation_id)
            assert [a.approver_id for a in reservation.approvals] == ["ADM-001", "ADM-002"]


class TestDeleteWorkflow:

    def test_deleted_workflow_blocks_new_reservations(self, workflow_service, reservation_service):
        result = workflow_service.delete_workflow(AUDITORIUM)

        assert result.is_success
        assert result.data == 2
        assert workflow_service.get_workflow(AUDITORIUM).data == []
        assert reservation_service.create_reservation(reservation_request()).error.code == ErrorCode.NO_WORKFLOW

    def test_resource_without_workflow_deletes_nothing(self, workflow_service):
        assert workflow_service.delete_workflow(LAB).data == 0

    def test_unknown_resource(self, workflow_service):
        assert workflow_service.delete_workflow(999).error.code == ErrorCode.NOT_FOUND
