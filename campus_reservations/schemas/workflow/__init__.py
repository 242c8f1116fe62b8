from campus_reservations.schemas.workflow.workflow import (
    WorkflowStepInput,
    WorkflowStepView,
    WorkflowUpdateRequest,
)

__all__ = ["WorkflowStepInput", "WorkflowStepView", "WorkflowUpdateRequest"]
