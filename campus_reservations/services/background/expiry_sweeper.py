"""
Expiry sweeper.

Cancels pending reservations whose first slot has already started. It is
run daily by Celery beat, once at application start and on demand from
the maintenance endpoint.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from campus_reservations.config.settings import settings
from campus_reservations.repositories import (
    ActivityLogRepository,
    ApprovalRepository,
    ReservationRepository,
)
from campus_reservations.schemas.common.enums import ActivityAction, ReservationStatus
from campus_reservations.schemas.reservation import SweepResult
from campus_reservations.services.base import BaseService
from campus_reservations.utils.datetime_utils import Clock

STEP_EXPIRED_COMMENT = "Auto-cancelled: reservation expired"
SWEEP_LOG_COMMENT = "Auto-cancelled by system cleanup job"


class ExpirySweeper(BaseService):
    """
    Each reservation is cancelled in its own transaction so one failure
    does not undo the others.
    """

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        super().__init__(db_session, clock)
        self.reservation_repo = ReservationRepository(db_session)
        self.approval_repo = ApprovalRepository(db_session)
        self.activity_repo = ActivityLogRepository(db_session)

    def sweep_expired(self, now: Optional[datetime] = None) -> SweepResult:
        """
        Cancel every pending reservation with ``starts_at < now``.

        Args:
            now: Naive local cut-off; defaults to the clock's current time
        """
        now = now or self.clock.local_now()
        result = SweepResult(started_at=now)

        expired_ids = self.reservation_repo.find_expired_pending_ids(now)
        # Release the read snapshot before the per-reservation transactions
        self.db.rollback()

        if not expired_ids:
            self._logger.info("No expired pending reservations found")
            result.completed_at = self.clock.local_now()
            return result

        self._logger.info(
            f"Found {len(expired_ids)} expired pending reservation(s)",
            extra={"count": len(expired_ids)},
        )

        for reservation_id in expired_ids:
            try:
                if self._cancel_one(reservation_id, now):
                    result.cancelled_count += 1
                else:
                    result.skipped_count += 1
            except Exception as e:
                result.failed_count += 1
                self._logger.error(
                    f"Failed to auto-cancel reservation {reservation_id}: {e}",
                    exc_info=True,
                    extra={"reservation_id": reservation_id},
                )

        result.completed_at = self.clock.local_now()
        self._logger.info(
            f"Expiry sweep finished: {result.cancelled_count} cancelled, "
            f"{result.skipped_count} skipped, {result.failed_count} failed",
            extra={
                "cancelled": result.cancelled_count,
                "skipped": result.skipped_count,
                "failed": result.failed_count,
            },
        )
        return result

    def _cancel_one(self, reservation_id: int, now: datetime) -> bool:
        """Returns False when the reservation is no longer pending."""
        with self.transactions.start():
            if not self.reservation_repo.transition_status(
                reservation_id, [ReservationStatus.PENDING], ReservationStatus.CANCELLED
            ):
                return False

            self.approval_repo.cancel_pending_for_reservation(
                reservation_id, acted_at=now, comment=STEP_EXPIRED_COMMENT
            )
            self.activity_repo.append(
                reservation_id=reservation_id,
                actor_id=settings.SYSTEM_ACTOR_ID,
                action_type=ActivityAction.AUTO_CANCELLED,
                description="Reservation automatically cancelled - start date passed while pending",
                action_at=now,
                old_status=ReservationStatus.PENDING.value,
                new_status=ReservationStatus.CANCELLED.value,
                comment=SWEEP_LOG_COMMENT,
                metadata={"cancelled_by": "cleanup_job", "swept_at": now.isoformat()},
            )
        return True
