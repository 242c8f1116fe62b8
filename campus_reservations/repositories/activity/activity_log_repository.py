"""
Reservation activity log repository.

The log is append-only: there is no update or delete path.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_reservations.models.reservation import ReservationActivityLog
from campus_reservations.repositories.base.base_repository import BaseRepository
from campus_reservations.schemas.common.enums import ActivityAction


class ActivityLogRepository(BaseRepository[ReservationActivityLog]):

    def __init__(self, db: Session):
        super().__init__(ReservationActivityLog, db)

    def append(
        self,
        reservation_id: int,
        actor_id: str,
        action_type: ActivityAction,
        description: str,
        action_at: datetime,
        old_status: Optional[str] = None,
        new_status: Optional[str] = None,
        step_order: Optional[int] = None,
        comment: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ReservationActivityLog:
        entry = ReservationActivityLog(
            reservation_id=reservation_id,
            user_id=actor_id,
            action_type=action_type,
            action_description=description,
            old_status=old_status,
            new_status=new_status,
            step_order=step_order,
            comment=comment,
            details=metadata,
            action_at=action_at,
        )
        return self.create(entry)

    def list_for_reservation(self, reservation_id: int) -> List[ReservationActivityLog]:
        stmt = (
            select(ReservationActivityLog)
            .where(ReservationActivityLog.reservation_id == reservation_id)
            .order_by(ReservationActivityLog.action_at, ReservationActivityLog.id)
        )
        return list(self.db.scalars(stmt).all())

    # Entries are never modified once written.
    def delete(self, entity: ReservationActivityLog) -> None:
        raise NotImplementedError("Activity log entries cannot be deleted")
