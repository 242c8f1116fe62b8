"""
Facility approval workflow schemas.
"""

from typing import List, Optional

from pydantic import Field

from campus_reservations.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = ["WorkflowStepInput", "WorkflowUpdateRequest", "WorkflowStepView"]


class WorkflowStepInput(BaseCreateSchema):
    approver_id: str
    step_order: int = Field(..., ge=1)


class WorkflowUpdateRequest(BaseCreateSchema):
    steps: List[WorkflowStepInput] = Field(default_factory=list)


class WorkflowStepView(BaseResponseSchema):
    id: int
    resource_id: int
    approver_id: str
    step_order: int
    approver_name: Optional[str] = None
    department: Optional[str] = None
    role: Optional[str] = None
