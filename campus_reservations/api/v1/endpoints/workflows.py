"""
Per-resource approval workflow endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from campus_reservations.api import deps
from campus_reservations.api.responses import result_response
from campus_reservations.schemas.workflow import WorkflowStepView, WorkflowUpdateRequest
from campus_reservations.services.workflow import WorkflowService

router = APIRouter(prefix="/workflows", tags=["Workflows"])


@router.get("/{resource_id}", response_model=List[WorkflowStepView])
def get_workflow(resource_id: int, service: WorkflowService = Depends(deps.get_workflow_service)):
    return result_response(service.get_workflow(resource_id))


@router.put("/{resource_id}", response_model=List[WorkflowStepView])
def set_workflow(
    resource_id: int,
    payload: WorkflowUpdateRequest,
    service: WorkflowService = Depends(deps.get_workflow_service),
):
    return result_response(service.set_workflow(resource_id, payload.steps))


@router.delete("/{resource_id}")
def delete_workflow(resource_id: int, service: WorkflowService = Depends(deps.get_workflow_service)):
    result = service.delete_workflow(resource_id)
    if result.is_success:
        result.data = {"resource_id": resource_id, "deleted_steps": result.data}
    return result_response(result)
