"""
Reservation approval step repository.

Every step transition is a conditional UPDATE on ``status = 'pending'``;
the affected row count decides which concurrent writer wins.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from campus_reservations.models.reservation import Reservation, ReservationApproval
from campus_reservations.repositories.base.base_repository import BaseRepository
from campus_reservations.schemas.common.enums import ApprovalStatus, ReservationStatus


class ApprovalRepository(BaseRepository[ReservationApproval]):

    def __init__(self, db: Session):
        super().__init__(ReservationApproval, db)

    # ==================== Lookups ====================

    def find_for_approver(self, approval_id: int, approver_id: str) -> Optional[ReservationApproval]:
        stmt = select(ReservationApproval).where(
            ReservationApproval.id == approval_id,
            ReservationApproval.approver_id == approver_id,
        )
        return self.db.scalars(stmt).unique().first()

    def list_for_reservation(self, reservation_id: int) -> List[ReservationApproval]:
        stmt = (
            select(ReservationApproval)
            .where(ReservationApproval.reservation_id == reservation_id)
            .order_by(ReservationApproval.step_order)
        )
        return list(self.db.scalars(stmt).unique().all())

    def find_incomplete_before(self, reservation_id: int, step_order: int) -> List[ReservationApproval]:
        """Earlier steps that are not yet approved."""
        stmt = (
            select(ReservationApproval)
            .where(
                ReservationApproval.reservation_id == reservation_id,
                ReservationApproval.step_order < step_order,
                ReservationApproval.status != ApprovalStatus.APPROVED,
            )
            .order_by(ReservationApproval.step_order)
        )
        return list(self.db.scalars(stmt).unique().all())

    def count_pending(self, reservation_id: int) -> int:
        stmt = select(func.count(ReservationApproval.id)).where(
            ReservationApproval.reservation_id == reservation_id,
            ReservationApproval.status == ApprovalStatus.PENDING,
        )
        return self.db.scalar(stmt) or 0

    def count_for_reservation(self, reservation_id: int) -> int:
        stmt = select(func.count(ReservationApproval.id)).where(
            ReservationApproval.reservation_id == reservation_id,
        )
        return self.db.scalar(stmt) or 0

    def list_pending_for_approver(self, approver_id: str) -> List[Tuple[ReservationApproval, Reservation]]:
        """Pending steps of this approver whose reservation is still pending."""
        stmt = (
            select(ReservationApproval, Reservation)
            .join(Reservation, Reservation.id == ReservationApproval.reservation_id)
            .where(
                ReservationApproval.approver_id == approver_id,
                ReservationApproval.status == ApprovalStatus.PENDING,
                Reservation.status == ReservationStatus.PENDING,
            )
            .order_by(Reservation.starts_at, ReservationApproval.step_order)
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt).unique().all()]

    def list_decided_for_approver(
        self,
        approver_id: str,
        since: Optional[datetime] = None,
    ) -> List[Tuple[ReservationApproval, Reservation]]:
        """Approved or rejected steps of this approver, newest first."""
        conditions = [
            ReservationApproval.approver_id == approver_id,
            ReservationApproval.status.in_([ApprovalStatus.APPROVED, ApprovalStatus.REJECTED]),
        ]
        if since is not None:
            conditions.append(ReservationApproval.acted_at >= since)

        stmt = (
            select(ReservationApproval, Reservation)
            .join(Reservation, Reservation.id == ReservationApproval.reservation_id)
            .where(*conditions)
            .order_by(ReservationApproval.acted_at.desc(), ReservationApproval.id.desc())
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt).unique().all()]

    # ==================== Writes ====================

    def add_steps(
        self,
        reservation_id: int,
        steps: Iterable[Tuple[str, int]],
    ) -> List[ReservationApproval]:
        """Create one pending step per ``(approver_id, step_order)``."""
        rows = [
            ReservationApproval(
                reservation_id=reservation_id,
                approver_id=approver_id,
                step_order=step_order,
                status=ApprovalStatus.PENDING,
            )
            for approver_id, step_order in steps
        ]
        return self.create_many(rows)

    def transition_pending_step(
        self,
        approval_id: int,
        approver_id: str,
        status: ApprovalStatus,
        acted_at: datetime,
        comment: Optional[str] = None,
    ) -> bool:
        """
        Record a decision on a step that is still pending.

        Returns False when the step is no longer pending (or not assigned to
        ``approver_id``), i.e. another request already acted on it.
        """
        result = self.db.execute(
            update(ReservationApproval)
            .where(
                ReservationApproval.id == approval_id,
                ReservationApproval.approver_id == approver_id,
                ReservationApproval.status == ApprovalStatus.PENDING,
            )
            .values(status=status, acted_at=acted_at, comment=comment)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def cancel_pending_for_reservation(
        self,
        reservation_id: int,
        acted_at: datetime,
        comment: Optional[str] = None,
    ) -> int:
        """Cancel every still-pending step of a reservation."""
        values = {"status": ApprovalStatus.CANCELLED, "acted_at": acted_at}
        if comment is not None:
            values["comment"] = comment

        result = self.db.execute(
            update(ReservationApproval)
            .where(
                ReservationApproval.reservation_id == reservation_id,
                ReservationApproval.status == ApprovalStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
