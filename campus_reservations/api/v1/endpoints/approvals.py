"""
Approver endpoints: act on a step, pending queue, decision logs and stats.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from campus_reservations.api import deps
from campus_reservations.api.responses import result_response
from campus_reservations.schemas.approval import (
    ApprovalLogResponse,
    ApprovalStats,
    PendingApprovalItem,
    StepActionRequest,
    StepActionResult,
)
from campus_reservations.services.approval import ApprovalService
from campus_reservations.services.reservation import ReservationQueryService

router = APIRouter(prefix="/approvals", tags=["Approvals"])


@router.post("/{step_id}/action", response_model=StepActionResult)
def act_on_step(
    step_id: int,
    payload: StepActionRequest,
    service: ApprovalService = Depends(deps.get_approval_service),
):
    return result_response(
        service.act_on_step(step_id, payload.approver_id, payload.action, payload.comment)
    )


@router.get("/pending/{approver_id}", response_model=List[PendingApprovalItem])
def pending_for_approver(
    approver_id: str,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.pending_for_approver(approver_id))


@router.get("/logs/{approver_id}", response_model=ApprovalLogResponse)
def approval_logs(
    approver_id: str,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.approval_logs(approver_id))


@router.get("/stats/{approver_id}", response_model=ApprovalStats)
def approval_stats(
    approver_id: str,
    period_days: int = Query(30, ge=1, le=366),
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.approval_stats(approver_id, period_days))
