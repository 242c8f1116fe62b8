"""
Reservation and daily slot repositories.
"""

from datetime import date, datetime, time
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_, select, update
from sqlalchemy.orm import Session, selectinload

from campus_reservations.models.reservation import Reservation, ReservationDailySlot
from campus_reservations.repositories.base.base_repository import BaseRepository
from campus_reservations.schemas.common.enums import ReservationStatus


class ReservationRepository(BaseRepository[Reservation]):
    """Reservation rows and their status transitions."""

    def __init__(self, db: Session):
        super().__init__(Reservation, db)

    def find_with_details(self, reservation_id: int) -> Optional[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .options(
                selectinload(Reservation.daily_slots),
                selectinload(Reservation.approvals),
            )
        )
        return self.db.scalars(stmt).unique().first()

    def transition_status(
        self,
        reservation_id: int,
        from_statuses: Sequence[ReservationStatus],
        to_status: ReservationStatus,
    ) -> bool:
        """
        Move a reservation to ``to_status`` only if it is currently in one of
        ``from_statuses``.

        Returns True when the row was updated. A concurrent writer that got
        there first leaves zero affected rows.
        """
        result = self.db.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.status.in_(list(from_statuses)),
            )
            .values(status=to_status)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def find_expired_pending_ids(self, now: datetime) -> List[int]:
        """Pending reservations whose earliest slot started before ``now``."""
        stmt = (
            select(Reservation.id)
            .where(
                Reservation.status == ReservationStatus.PENDING,
                Reservation.starts_at < now,
            )
            .order_by(Reservation.starts_at)
        )
        return list(self.db.scalars(stmt).all())

    def list_for_requester(self, requester_id: str) -> List[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.requester_id == requester_id)
            .options(selectinload(Reservation.daily_slots))
            .order_by(Reservation.requested_at.desc(), Reservation.id.desc())
        )
        return list(self.db.scalars(stmt).unique().all())

    def list_active_in_range(
        self,
        first_day: date,
        last_day: date,
        resource_id: Optional[int] = None,
    ) -> List[Reservation]:
        """Active reservations whose date envelope intersects ``[first_day, last_day]``."""
        conditions = [
            Reservation.date_from <= last_day,
            Reservation.date_to >= first_day,
            Reservation.status.in_(list(ReservationStatus.active())),
        ]
        if resource_id is not None:
            conditions.append(Reservation.resource_id == resource_id)

        stmt = (
            select(Reservation)
            .where(and_(*conditions))
            .options(selectinload(Reservation.daily_slots))
            .order_by(Reservation.date_from, Reservation.resource_id)
        )
        return list(self.db.scalars(stmt).unique().all())

    def list_requested_between(self, start: datetime, end: datetime) -> List[Reservation]:
        """Reservations submitted in ``[start, end)``, with slots and approvals loaded."""
        stmt = (
            select(Reservation)
            .where(Reservation.requested_at >= start, Reservation.requested_at < end)
            .options(
                selectinload(Reservation.daily_slots),
                selectinload(Reservation.approvals),
            )
            .order_by(Reservation.requested_at)
        )
        return list(self.db.scalars(stmt).unique().all())


class DailySlotRepository(BaseRepository[ReservationDailySlot]):
    """Slot rows, including the overlap query used for conflict detection."""

    def __init__(self, db: Session):
        super().__init__(ReservationDailySlot, db)

    def find_overlapping(
        self,
        resource_id: int,
        slot_date: date,
        start_time: time,
        end_time: time,
    ) -> List[Tuple[ReservationDailySlot, Reservation]]:
        """
        Slots of active reservations on ``resource_id`` that intersect the
        half-open interval ``[start_time, end_time)`` on ``slot_date``.
        """
        stmt = (
            select(ReservationDailySlot, Reservation)
            .join(Reservation, Reservation.id == ReservationDailySlot.reservation_id)
            .where(
                Reservation.resource_id == resource_id,
                Reservation.status.in_(list(ReservationStatus.active())),
                ReservationDailySlot.slot_date == slot_date,
                ReservationDailySlot.start_time < end_time,
                ReservationDailySlot.end_time > start_time,
            )
            .order_by(ReservationDailySlot.start_time, Reservation.id)
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt).unique().all()]

    def list_for_reservation(self, reservation_id: int) -> List[ReservationDailySlot]:
        stmt = (
            select(ReservationDailySlot)
            .where(ReservationDailySlot.reservation_id == reservation_id)
            .order_by(ReservationDailySlot.slot_date, ReservationDailySlot.start_time)
        )
        return list(self.db.scalars(stmt).all())

    def add_for_reservation(
        self,
        reservation_id: int,
        slots: Iterable[Tuple[date, time, time]],
    ) -> List[ReservationDailySlot]:
        rows = [
            ReservationDailySlot(
                reservation_id=reservation_id,
                slot_date=slot_date,
                start_time=start_time,
                end_time=end_time,
            )
            for slot_date, start_time, end_time in slots
        ]
        return self.create_many(rows)
