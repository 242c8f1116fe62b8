"""
Reservation endpoints: create, availability, cancel and read views.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from campus_reservations.api import deps
from campus_reservations.api.responses import result_response
from campus_reservations.schemas.reservation import (
    AvailabilityCheckRequest,
    AvailabilityResult,
    CancellationResult,
    CancelReservationRequest,
    DailySlotView,
    ReservationCreateRequest,
    ReservationCreated,
    ReservationDetail,
    ReservationHistory,
    ReservationSummary,
)
from campus_reservations.services.reservation import ReservationQueryService, ReservationService

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("", response_model=ReservationCreated, status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: ReservationCreateRequest,
    service: ReservationService = Depends(deps.get_reservation_service),
):
    return result_response(service.create_reservation(payload), status.HTTP_201_CREATED)


@router.post("/check-availability", response_model=AvailabilityResult)
def check_availability(
    payload: AvailabilityCheckRequest,
    service: ReservationService = Depends(deps.get_reservation_service),
):
    return result_response(service.check_availability(payload.resource_id, payload.slots))


@router.patch("/{reservation_id}/cancel", response_model=CancellationResult)
def cancel_reservation(
    reservation_id: int,
    payload: CancelReservationRequest,
    service: ReservationService = Depends(deps.get_reservation_service),
):
    return result_response(
        service.cancel_reservation(reservation_id, payload.requester_id, payload.comment)
    )


@router.get("/requester/{requester_id}", response_model=List[ReservationSummary])
def list_requester_reservations(
    requester_id: str,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.list_for_requester(requester_id))


@router.get("/{reservation_id}", response_model=ReservationDetail)
def get_reservation(
    reservation_id: int,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.get_reservation_detail(reservation_id))


@router.get("/{reservation_id}/daily-slots", response_model=List[DailySlotView])
def get_daily_slots(
    reservation_id: int,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.daily_slots(reservation_id))


@router.get("/{reservation_id}/history", response_model=ReservationHistory)
def get_reservation_history(
    reservation_id: int,
    service: ReservationQueryService = Depends(deps.get_query_service),
):
    return result_response(service.history(reservation_id))
