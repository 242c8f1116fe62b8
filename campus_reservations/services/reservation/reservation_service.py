"""
Reservation service: creation, availability checks and requester cancellation.
"""

from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from campus_reservations.core.exceptions import (
    AlreadyStartedError,
    AlreadyTerminalError,
    BaseAppException,
    NoWorkflowError,
    NotOwnerError,
    ResourceNotFoundError,
    SlotConflictError,
    ValidationError,
)
from campus_reservations.repositories import (
    ActivityLogRepository,
    ApprovalRepository,
    DailySlotRepository,
    ReservationRepository,
    ResourceRepository,
    UserRepository,
    WorkflowRepository,
)
from campus_reservations.models.reservation import Reservation
from campus_reservations.schemas.common.enums import ActivityAction, ReservationStatus
from campus_reservations.schemas.reservation import (
    AvailabilityResult,
    CancellationResult,
    ReservationCreateRequest,
    ReservationCreated,
)
from campus_reservations.services.base import BaseService, ServiceResult
from campus_reservations.services.notification import NotificationDispatcher, NotificationSink
from campus_reservations.services.reservation.conflict_detector import (
    ConflictDetector,
    SlotSpec,
    normalize_slots,
)
from campus_reservations.utils.datetime_utils import Clock, DateTimeHelper


class ReservationService(BaseService):
    """
    Reservation lifecycle operations initiated by requesters.

    Approver decisions live in :class:`ApprovalService`; both share the
    same repositories and transition rules.
    """

    def __init__(
        self,
        db_session: Session,
        notifier: NotificationSink,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db_session, clock)
        self.reservation_repo = ReservationRepository(db_session)
        self.slot_repo = DailySlotRepository(db_session)
        self.approval_repo = ApprovalRepository(db_session)
        self.activity_repo = ActivityLogRepository(db_session)
        self.resource_repo = ResourceRepository(db_session)
        self.workflow_repo = WorkflowRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.conflicts = ConflictDetector(db_session)
        self.dispatcher = NotificationDispatcher(notifier)

    # -------------------------------------------------------------------------
    # Validation helpers
    # -------------------------------------------------------------------------

    def _validate_request(self, request: ReservationCreateRequest) -> List[SlotSpec]:
        if not (request.purpose or "").strip():
            raise ValidationError("Purpose is required", field="purpose")
        if not request.slots:
            raise ValidationError("At least one time slot is required", field="slots")

        slots = normalize_slots(request.slots)
        self._ensure_not_in_past(slots)
        return slots

    def _ensure_not_in_past(self, slots: List[SlotSpec]) -> None:
        """
        Reject requests that start on a past date or include an ended slot.

        A slot today counts as ended once its end time has passed. One ended
        slot rejects the whole request, even if the other slots today are
        still ahead.
        """
        now = self.clock.local_now()
        today = now.date()

        earliest = slots[0].date
        if earliest < today:
            raise ValidationError(
                "Cannot make reservations for past dates",
                field="slots",
                details={"date": earliest.isoformat(), "today": today.isoformat()},
            )

        for slot in slots:
            if slot.date == today and slot.end_time <= now.time():
                raise ValidationError(
                    f"Time slot {slot.start_time.strftime('%H:%M')}-"
                    f"{slot.end_time.strftime('%H:%M')} today has already passed",
                    field="slots",
                    details={
                        "date": slot.date.isoformat(),
                        "end_time": slot.end_time.isoformat(),
                        "now": now.time().replace(microsecond=0).isoformat(),
                    },
                )

    @staticmethod
    def _slot_metadata(slots: Iterable[SlotSpec]) -> List[dict]:
        return [
            {
                "date": slot.date.isoformat(),
                "start_time": slot.start_time.strftime("%H:%M"),
                "end_time": slot.end_time.strftime("%H:%M"),
            }
            for slot in slots
        ]

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_reservation(self, request: ReservationCreateRequest) -> ServiceResult[ReservationCreated]:
        """
        Create a pending reservation with its slots and approval steps.

        Nothing is persisted unless every check passes. The first approver is
        notified once the transaction has committed.
        """
        try:
            slots = self._validate_request(request)
            now = self.clock.local_now()

            with self.transactions.start() as ctx:
                resource = self.resource_repo.find_for_update(request.resource_id)
                if resource is None:
                    raise ResourceNotFoundError("Resource", request.resource_id)

                found = self.conflicts.find_conflicts(resource.id, slots)
                if found:
                    raise SlotConflictError([c.model_dump(mode="json") for c in found])

                steps = self.workflow_repo.get_steps(resource.id)
                if not steps:
                    raise NoWorkflowError(resource.id)

                reservation = self.reservation_repo.create(
                    Reservation(
                        resource_id=resource.id,
                        requester_id=request.requester_id,
                        purpose=request.purpose.strip(),
                        date_from=min(slot.date for slot in slots),
                        date_to=max(slot.date for slot in slots),
                        starts_at=min(DateTimeHelper.combine(s.date, s.start_time) for s in slots),
                        ends_at=max(DateTimeHelper.combine(s.date, s.end_time) for s in slots),
                        status=ReservationStatus.PENDING,
                        requested_at=now,
                    )
                )
                self.slot_repo.add_for_reservation(reservation.id, slots)
                self.approval_repo.add_steps(
                    reservation.id,
                    [(step.approver_id, step.step_order) for step in steps],
                )

                self.activity_repo.append(
                    reservation_id=reservation.id,
                    actor_id=request.requester_id,
                    action_type=ActivityAction.CREATED,
                    description="Reservation created",
                    action_at=now,
                    new_status=ReservationStatus.PENDING.value,
                    metadata={
                        "resource_id": resource.id,
                        "resource_name": resource.name,
                        "date_from": reservation.date_from.isoformat(),
                        "date_to": reservation.date_to.isoformat(),
                        "daily_slots": self._slot_metadata(slots),
                        "workflow_steps": len(steps),
                    },
                )

                first = steps[0]
                payload = self.dispatcher.new_reservation_payload(
                    reservation,
                    resource_name=resource.name,
                    requester_name=self.user_repo.display_name(request.requester_id),
                    step_order=first.step_order,
                    total_steps=len(steps),
                    timestamp=now,
                )
                self.dispatcher.notify_after_commit(ctx, first.approver_id, payload)

                created = ReservationCreated(
                    reservation_id=reservation.id,
                    workflow_steps=len(steps),
                    daily_slots_count=len(slots),
                )

            self._logger.info(
                f"Reservation {created.reservation_id} created for resource {request.resource_id}",
                extra={
                    "reservation_id": created.reservation_id,
                    "resource_id": request.resource_id,
                    "user_id": request.requester_id,
                    "slots": len(slots),
                },
            )
            return ServiceResult.success(created, message="Reservation created successfully")

        except BaseAppException as e:
            return self._app_failure(e, "create reservation")
        except Exception as e:
            return self._handle_exception(e, "create reservation", request.resource_id)

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def check_availability(self, resource_id: int, slots: Iterable[Any]) -> ServiceResult[AvailabilityResult]:
        """Report overlaps for the given slots without reserving anything."""
        try:
            if not self.resource_repo.exists(resource_id):
                raise ResourceNotFoundError("Resource", resource_id)
            if not slots:
                raise ValidationError("At least one time slot is required", field="slots")

            found = self.conflicts.find_conflicts(resource_id, slots)
            if found:
                result = AvailabilityResult(
                    available=False,
                    conflicts=found,
                    message=f"{len(found)} requested slot(s) conflict with existing reservations",
                )
            else:
                result = AvailabilityResult(
                    available=True,
                    conflicts=[],
                    message="All requested slots are available",
                )
            return ServiceResult.success(result)

        except BaseAppException as e:
            return self._app_failure(e, "check availability")
        except Exception as e:
            return self._handle_exception(e, "check availability", resource_id)

    # -------------------------------------------------------------------------
    # Cancel
    # -------------------------------------------------------------------------

    def cancel_reservation(
        self,
        reservation_id: int,
        requester_id: str,
        comment: Optional[str] = None,
    ) -> ServiceResult[CancellationResult]:
        """
        Cancel a pending or approved reservation on behalf of its requester.

        Only allowed before the reservation's first slot starts.
        """
        try:
            now = self.clock.local_now()

            with self.transactions.start():
                reservation = self.reservation_repo.find_by_id(reservation_id)
                if reservation is None:
                    raise ResourceNotFoundError("Reservation", reservation_id)
                if reservation.requester_id != requester_id:
                    raise NotOwnerError(reservation_id)

                previous = reservation.status
                if previous not in ReservationStatus.active():
                    raise AlreadyTerminalError(reservation_id, previous.value)
                if reservation.starts_at <= now:
                    raise AlreadyStartedError(reservation_id)

                if not self.reservation_repo.transition_status(
                    reservation_id, [previous], ReservationStatus.CANCELLED
                ):
                    self.db.refresh(reservation)
                    raise AlreadyTerminalError(reservation_id, reservation.status.value)

                self.approval_repo.cancel_pending_for_reservation(reservation_id, acted_at=now)

                self.activity_repo.append(
                    reservation_id=reservation_id,
                    actor_id=requester_id,
                    action_type=ActivityAction.CANCELLED,
                    description="Reservation cancelled by requester",
                    action_at=now,
                    old_status=previous.value,
                    new_status=ReservationStatus.CANCELLED.value,
                    comment=comment,
                    metadata={
                        "cancelled_by": requester_id,
                        "cancelled_by_name": self.user_repo.display_name(requester_id),
                        "cancelled_at": now.isoformat(),
                        "previous_status": previous.value,
                    },
                )

            self._logger.info(
                f"Reservation {reservation_id} cancelled by {requester_id}",
                extra={"reservation_id": reservation_id, "user_id": requester_id},
            )
            return ServiceResult.success(
                CancellationResult(
                    reservation_id=reservation_id,
                    status=ReservationStatus.CANCELLED,
                    previous_status=previous,
                ),
                message="Reservation cancelled successfully",
            )

        except BaseAppException as e:
            return self._app_failure(e, "cancel reservation")
        except Exception as e:
            return self._handle_exception(e, "cancel reservation", reservation_id)
