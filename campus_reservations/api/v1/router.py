"""
API v1 router: aggregates every v1 endpoint module.
"""

from fastapi import APIRouter

from campus_reservations.api.v1.endpoints import (
    approvals,
    calendar,
    maintenance,
    notifications,
    reports,
    reservations,
    workflows,
)

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(reservations.router)
router.include_router(approvals.router)
router.include_router(workflows.router)
router.include_router(calendar.router)
router.include_router(reports.router)
router.include_router(maintenance.router)
router.include_router(notifications.router)
