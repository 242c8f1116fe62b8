"""
Approval service: approver decisions on reservation workflow steps.

A reservation moves through its steps in ascending ``step_order``. Each
decision is recorded with a conditional update on the step's pending
status, so when two requests act on the same step only one of them wins.
"""

from typing import Optional, Union

from sqlalchemy.orm import Session

from campus_reservations.config.settings import settings
from campus_reservations.core.exceptions import (
    BaseAppException,
    NotFoundOrNotPendingError,
    PriorStepsIncompleteError,
    ReservationAlreadyTerminalError,
    ReservationExpiredError,
    ResourceNotFoundError,
    ValidationError,
)
from campus_reservations.models.reservation import Reservation, ReservationApproval
from campus_reservations.repositories import (
    ActivityLogRepository,
    ApprovalRepository,
    ReservationRepository,
    UserRepository,
)
from campus_reservations.schemas.approval import StepActionResult
from campus_reservations.schemas.common.enums import (
    ActivityAction,
    ApprovalAction,
    ApprovalStatus,
    ReservationStatus,
)
from campus_reservations.services.base import BaseService, ServiceResult, TransactionContext
from campus_reservations.services.notification import NotificationDispatcher, NotificationSink
from campus_reservations.utils.datetime_utils import Clock

EXPIRED_ON_ACTION_COMMENT = "System: Start date has already passed"


class ApprovalService(BaseService):

    def __init__(
        self,
        db_session: Session,
        notifier: NotificationSink,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db_session, clock)
        self.reservation_repo = ReservationRepository(db_session)
        self.approval_repo = ApprovalRepository(db_session)
        self.activity_repo = ActivityLogRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.dispatcher = NotificationDispatcher(notifier)

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def act_on_step(
        self,
        approval_id: int,
        approver_id: str,
        action: Union[ApprovalAction, str],
        comment: Optional[str] = None,
    ) -> ServiceResult[StepActionResult]:
        """
        Approve or reject one workflow step.

        Checks run in this order: the step belongs to the approver, the
        reservation is not terminal, the step is still pending, the
        reservation has not started, and every earlier step is approved.

        A reservation whose start has passed is cancelled and that change is
        committed before the ``RESERVATION_EXPIRED`` failure is returned.
        """
        try:
            try:
                action = ApprovalAction(action)
            except ValueError:
                raise ValidationError(
                    "Action must be 'approved' or 'rejected'",
                    field="action",
                    details={"action": str(action)},
                )

            now = self.clock.local_now()
            expired_reservation_id = None

            with self.transactions.start() as ctx:
                step = self.approval_repo.find_for_approver(approval_id, approver_id)
                if step is None:
                    raise NotFoundOrNotPendingError(approval_id)

                reservation = self.reservation_repo.find_by_id(step.reservation_id)
                if reservation is None:
                    raise ResourceNotFoundError("Reservation", step.reservation_id)
                if reservation.is_terminal:
                    raise ReservationAlreadyTerminalError(reservation.id, reservation.status.value)
                if step.status != ApprovalStatus.PENDING:
                    raise NotFoundOrNotPendingError(approval_id)

                if reservation.starts_at <= now:
                    self._cancel_expired(reservation, step, now)
                    expired_reservation_id = reservation.id
                else:
                    result = self._apply_decision(ctx, step, reservation, action, comment, now)

            if expired_reservation_id is not None:
                self._logger.warning(
                    f"Reservation {expired_reservation_id} expired before step {approval_id} was acted on",
                    extra={"reservation_id": expired_reservation_id, "approval_id": approval_id},
                )
                return self._app_failure(
                    ReservationExpiredError(expired_reservation_id), "act on approval step"
                )

            self._logger.info(
                f"Step {result.step_order} of reservation {result.reservation_id} {action.value} by {approver_id}",
                extra={
                    "reservation_id": result.reservation_id,
                    "approval_id": approval_id,
                    "user_id": approver_id,
                    "fully_approved": result.fully_approved,
                },
            )
            return ServiceResult.success(result, message=f"Reservation {action.value} successfully")

        except BaseAppException as e:
            return self._app_failure(e, "act on approval step")
        except Exception as e:
            return self._handle_exception(e, "act on approval step", approval_id)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _cancel_expired(
        self,
        reservation: Reservation,
        step: ReservationApproval,
        now,
    ) -> None:
        if not self.reservation_repo.transition_status(
            reservation.id, [ReservationStatus.PENDING], ReservationStatus.CANCELLED
        ):
            self.db.refresh(reservation)
            raise ReservationAlreadyTerminalError(reservation.id, reservation.status.value)

        self.approval_repo.cancel_pending_for_reservation(
            reservation.id, acted_at=now, comment=EXPIRED_ON_ACTION_COMMENT
        )
        self.activity_repo.append(
            reservation_id=reservation.id,
            actor_id=settings.SYSTEM_ACTOR_ID,
            action_type=ActivityAction.AUTO_CANCELLED,
            description="Reservation automatically cancelled - start date has already passed",
            action_at=now,
            old_status=ReservationStatus.PENDING.value,
            new_status=ReservationStatus.CANCELLED.value,
            step_order=step.step_order,
            comment=EXPIRED_ON_ACTION_COMMENT,
            metadata={
                "starts_at": reservation.starts_at.isoformat(),
                "detected_at": now.isoformat(),
                "triggered_by": step.approver_id,
            },
        )

    def _apply_decision(
        self,
        ctx: TransactionContext,
        step: ReservationApproval,
        reservation: Reservation,
        action: ApprovalAction,
        comment: Optional[str],
        now,
    ) -> StepActionResult:
        incomplete = self.approval_repo.find_incomplete_before(reservation.id, step.step_order)
        if incomplete:
            raise PriorStepsIncompleteError(step.step_order, [s.step_order for s in incomplete])

        new_step_status = ApprovalStatus(action.value)
        if not self.approval_repo.transition_pending_step(
            step.id, step.approver_id, new_step_status, now, comment
        ):
            raise NotFoundOrNotPendingError(step.id)

        if action == ApprovalAction.REJECTED:
            self._reject(reservation, step, comment, now)
            return StepActionResult(
                reservation_id=reservation.id,
                step_order=step.step_order,
                fully_approved=False,
            )

        self.activity_repo.append(
            reservation_id=reservation.id,
            actor_id=step.approver_id,
            action_type=ActivityAction.APPROVED,
            description=f"Approved step {step.step_order} of reservation workflow",
            action_at=now,
            old_status=ApprovalStatus.PENDING.value,
            new_status=ApprovalStatus.APPROVED.value,
            step_order=step.step_order,
            comment=comment,
        )

        if self.approval_repo.count_pending(reservation.id) == 0:
            self._complete(reservation, step, now)
            return StepActionResult(
                reservation_id=reservation.id,
                step_order=step.step_order,
                fully_approved=True,
            )

        self._notify_next_approver(ctx, reservation, step, now)
        return StepActionResult(
            reservation_id=reservation.id,
            step_order=step.step_order,
            fully_approved=False,
        )

    def _reject(self, reservation: Reservation, step: ReservationApproval, comment: Optional[str], now) -> None:
        # Later steps stay pending; the terminal reservation makes them unreachable
        if not self.reservation_repo.transition_status(
            reservation.id, [ReservationStatus.PENDING], ReservationStatus.REJECTED
        ):
            self.db.refresh(reservation)
            raise ReservationAlreadyTerminalError(reservation.id, reservation.status.value)

        self.activity_repo.append(
            reservation_id=reservation.id,
            actor_id=step.approver_id,
            action_type=ActivityAction.REJECTED,
            description=f"Reservation rejected at step {step.step_order}",
            action_at=now,
            old_status=ReservationStatus.PENDING.value,
            new_status=ReservationStatus.REJECTED.value,
            step_order=step.step_order,
            comment=comment,
        )

    def _complete(self, reservation: Reservation, step: ReservationApproval, now) -> None:
        if not self.reservation_repo.transition_status(
            reservation.id, [ReservationStatus.PENDING], ReservationStatus.APPROVED
        ):
            self.db.refresh(reservation)
            raise ReservationAlreadyTerminalError(reservation.id, reservation.status.value)

        self.activity_repo.append(
            reservation_id=reservation.id,
            actor_id=step.approver_id,
            action_type=ActivityAction.FULLY_APPROVED,
            description="Reservation fully approved - all workflow steps completed",
            action_at=now,
            old_status=ReservationStatus.PENDING.value,
            new_status=ReservationStatus.APPROVED.value,
            step_order=step.step_order,
            metadata={"total_steps": self.approval_repo.count_for_reservation(reservation.id)},
        )

    def _notify_next_approver(
        self,
        ctx: TransactionContext,
        reservation: Reservation,
        step: ReservationApproval,
        now,
    ) -> None:
        following = [
            s for s in self.approval_repo.list_for_reservation(reservation.id)
            if s.step_order > step.step_order and s.status == ApprovalStatus.PENDING
        ]
        if not following:
            return

        next_step = following[0]
        payload = self.dispatcher.ready_for_approval_payload(
            reservation,
            resource_name=reservation.resource.name if reservation.resource else None,
            requester_name=reservation.requester.name if reservation.requester else reservation.requester_id,
            step_order=next_step.step_order,
            total_steps=self.approval_repo.count_for_reservation(reservation.id),
            previous_approver=self.user_repo.display_name(step.approver_id),
            timestamp=now,
        )
        self.dispatcher.notify_after_commit(ctx, next_step.approver_id, payload)
