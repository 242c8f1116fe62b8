"""
Facility approval workflow definitions.
"""

from typing import Any, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_reservations.core.exceptions import (
    BaseAppException,
    ResourceNotFoundError,
    ValidationError,
)
from campus_reservations.models.resource import FacilityApprovalWorkflow
from campus_reservations.repositories import ResourceRepository, UserRepository, WorkflowRepository
from campus_reservations.schemas.workflow import WorkflowStepInput, WorkflowStepView
from campus_reservations.services.base import BaseService, ServiceResult
from campus_reservations.utils.datetime_utils import Clock


class WorkflowService(BaseService):
    """
    Read and replace the ordered approver chain of a resource.

    Step orders are stored exactly as supplied; gaps are kept and the
    approval gating compares raw step numbers.
    """

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        super().__init__(db_session, clock)
        self.workflow_repo = WorkflowRepository(db_session)
        self.resource_repo = ResourceRepository(db_session)
        self.user_repo = UserRepository(db_session)

    @staticmethod
    def _to_view(step: FacilityApprovalWorkflow) -> WorkflowStepView:
        approver = step.approver
        return WorkflowStepView(
            id=step.id,
            resource_id=step.resource_id,
            approver_id=step.approver_id,
            step_order=step.step_order,
            approver_name=approver.name if approver else None,
            department=approver.department if approver else None,
            role=approver.role if approver else None,
        )

    def _validate_steps(self, steps: List[WorkflowStepInput]) -> None:
        orders = [step.step_order for step in steps]
        duplicates = sorted({order for order in orders if orders.count(order) > 1})
        if duplicates:
            raise ValidationError(
                "Each workflow step must have a distinct step_order",
                field="steps",
                details={"duplicate_step_orders": duplicates},
            )

        approver_ids = {step.approver_id for step in steps}
        known = self.user_repo.find_by_ids(approver_ids)
        missing = sorted(approver_ids - set(known))
        if missing:
            raise ValidationError(
                "Unknown approver(s) in workflow",
                field="steps",
                details={"unknown_approvers": missing},
            )

    @staticmethod
    def _coerce_steps(steps: Iterable[Any]) -> List[WorkflowStepInput]:
        result = []
        for step in steps or []:
            if isinstance(step, WorkflowStepInput):
                result.append(step)
            elif isinstance(step, dict):
                # Entries without an approver or step order are ignored
                if not step.get("approver_id") or not step.get("step_order"):
                    continue
                result.append(WorkflowStepInput(**step))
            else:
                approver_id, step_order = step
                result.append(WorkflowStepInput(approver_id=approver_id, step_order=step_order))
        return result

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def get_workflow(self, resource_id: int) -> ServiceResult[List[WorkflowStepView]]:
        """Ordered steps for the resource; an empty list when none is configured."""
        try:
            steps = self.workflow_repo.get_steps(resource_id)
            return ServiceResult.success([self._to_view(step) for step in steps])
        except Exception as e:
            return self._handle_exception(e, "get workflow", resource_id)

    def set_workflow(self, resource_id: int, steps: Iterable[Any]) -> ServiceResult[List[WorkflowStepView]]:
        """
        Replace the resource's workflow atomically (delete all, then insert).
        """
        try:
            step_inputs = self._coerce_steps(steps)
            with self.transactions.start():
                if not self.resource_repo.exists(resource_id):
                    raise ResourceNotFoundError("Resource", resource_id)
                self._validate_steps(step_inputs)
                rows = self.workflow_repo.replace_steps(
                    resource_id,
                    [(step.approver_id, step.step_order) for step in step_inputs],
                )

            self._logger.info(
                f"Workflow for resource {resource_id} replaced with {len(rows)} step(s)",
                extra={"resource_id": resource_id, "steps": len(rows)},
            )
            return ServiceResult.success(
                [self._to_view(step) for step in self.workflow_repo.get_steps(resource_id)],
                message="Workflow saved successfully",
            )
        except BaseAppException as e:
            return self._app_failure(e, "set workflow")
        except IntegrityError:
            self._logger.warning(
                f"Workflow for resource {resource_id} violated a constraint",
                extra={"resource_id": resource_id},
            )
            return ServiceResult.validation_failure(
                "Workflow steps violate a uniqueness or reference constraint",
                field="steps",
            )
        except Exception as e:
            return self._handle_exception(e, "set workflow", resource_id)

    def delete_workflow(self, resource_id: int) -> ServiceResult[int]:
        try:
            with self.transactions.start():
                if not self.resource_repo.exists(resource_id):
                    raise ResourceNotFoundError("Resource", resource_id)
                removed = self.workflow_repo.delete_for_resource(resource_id)

            self._logger.info(
                f"Workflow for resource {resource_id} deleted ({removed} step(s))",
                extra={"resource_id": resource_id},
            )
            return ServiceResult.success(removed, message="Workflow deleted successfully")
        except BaseAppException as e:
            return self._app_failure(e, "delete workflow")
        except Exception as e:
            return self._handle_exception(e, "delete workflow", resource_id)
