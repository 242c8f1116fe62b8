"""
Facility approval workflow repository.
"""

from typing import Iterable, List, Tuple

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from campus_reservations.models.resource import FacilityApprovalWorkflow
from campus_reservations.repositories.base.base_repository import BaseRepository


class WorkflowRepository(BaseRepository[FacilityApprovalWorkflow]):
    """Per-resource ordered approver chains."""

    def __init__(self, db: Session):
        super().__init__(FacilityApprovalWorkflow, db)

    def get_steps(self, resource_id: int) -> List[FacilityApprovalWorkflow]:
        stmt = (
            select(FacilityApprovalWorkflow)
            .where(FacilityApprovalWorkflow.resource_id == resource_id)
            .order_by(FacilityApprovalWorkflow.step_order)
        )
        return list(self.db.scalars(stmt).unique().all())

    def delete_for_resource(self, resource_id: int) -> int:
        result = self.db.execute(
            delete(FacilityApprovalWorkflow)
            .where(FacilityApprovalWorkflow.resource_id == resource_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    def replace_steps(
        self,
        resource_id: int,
        steps: Iterable[Tuple[str, int]],
    ) -> List[FacilityApprovalWorkflow]:
        """
        Delete every step of the resource, then insert ``(approver_id, step_order)`` pairs.

        Step orders are stored as given.
        """
        self.delete_for_resource(resource_id)
        rows = [
            FacilityApprovalWorkflow(
                resource_id=resource_id,
                approver_id=approver_id,
                step_order=step_order,
            )
            for approver_id, step_order in steps
        ]
        if rows:
            self.create_many(rows)
        return rows
