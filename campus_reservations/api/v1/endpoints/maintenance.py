"""
Maintenance operations guarded by the shared maintenance token.
"""

from fastapi import APIRouter, Depends

from campus_reservations.api import deps
from campus_reservations.schemas.reservation import SweepResult
from campus_reservations.services.background import ExpirySweeper

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post(
    "/sweep",
    response_model=SweepResult,
    dependencies=[Depends(deps.require_maintenance_token)],
)
def sweep_expired(sweeper: ExpirySweeper = Depends(deps.get_expiry_sweeper)):
    return sweeper.sweep_expired()
