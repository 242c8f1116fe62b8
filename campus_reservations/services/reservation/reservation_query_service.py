"""
Read views over reservations: details, requester and approver queues,
approval logs and statistics, calendar and history.
"""

from collections import OrderedDict
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from campus_reservations.core.exceptions import BaseAppException, ResourceNotFoundError, ValidationError
from campus_reservations.models.reservation import Reservation
from campus_reservations.repositories import (
    ActivityLogRepository,
    ApprovalRepository,
    DailySlotRepository,
    ReservationRepository,
    UserRepository,
)
from campus_reservations.schemas.approval import (
    ApprovalLogItem,
    ApprovalLogResponse,
    ApprovalLogSummary,
    ApprovalStats,
    DailyApprovalStat,
    PendingApprovalItem,
)
from campus_reservations.schemas.common.enums import ApprovalStatus
from campus_reservations.schemas.reservation import (
    ActivityLogView,
    ApprovalStepView,
    CalendarEntry,
    DailySlotView,
    ReservationDetail,
    ReservationHistory,
    ReservationSummary,
)
from campus_reservations.services.base import BaseService, ServiceResult
from campus_reservations.utils.datetime_utils import Clock, DateTimeHelper


class ReservationQueryService(BaseService):
    """Read-only; never opens a write transaction."""

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        super().__init__(db_session, clock)
        self.reservation_repo = ReservationRepository(db_session)
        self.slot_repo = DailySlotRepository(db_session)
        self.approval_repo = ApprovalRepository(db_session)
        self.activity_repo = ActivityLogRepository(db_session)
        self.user_repo = UserRepository(db_session)

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _slot_views(reservation: Reservation) -> List[DailySlotView]:
        return [DailySlotView.model_validate(slot) for slot in reservation.daily_slots]

    def _detail(self, reservation: Reservation) -> ReservationDetail:
        resource = reservation.resource
        requester = reservation.requester
        approvals = [
            ApprovalStepView(
                id=step.id,
                step_order=step.step_order,
                approver_id=step.approver_id,
                approver_name=step.approver.name if step.approver else None,
                status=step.status,
                acted_at=step.acted_at,
                comment=step.comment,
            )
            for step in reservation.approvals
        ]
        return ReservationDetail(
            id=reservation.id,
            resource_id=reservation.resource_id,
            resource_name=resource.name if resource else None,
            resource_category=resource.category if resource else None,
            purpose=reservation.purpose,
            date_from=reservation.date_from,
            date_to=reservation.date_to,
            status=reservation.status,
            requested_at=reservation.requested_at,
            requester_id=reservation.requester_id,
            requester_name=requester.name if requester else None,
            daily_slots=self._slot_views(reservation),
            approvals=approvals,
        )

    def _load(self, reservation_id: int) -> Reservation:
        reservation = self.reservation_repo.find_with_details(reservation_id)
        if reservation is None:
            raise ResourceNotFoundError("Reservation", reservation_id)
        return reservation

    # -------------------------------------------------------------------------
    # Reservation views
    # -------------------------------------------------------------------------

    def get_reservation_detail(self, reservation_id: int) -> ServiceResult[ReservationDetail]:
        try:
            return ServiceResult.success(self._detail(self._load(reservation_id)))
        except BaseAppException as e:
            return self._app_failure(e, "get reservation")
        except Exception as e:
            return self._handle_exception(e, "get reservation", reservation_id)

    def list_for_requester(self, requester_id: str) -> ServiceResult[List[ReservationSummary]]:
        """Requester's reservations, newest first."""
        try:
            items = [
                ReservationSummary(
                    id=r.id,
                    resource_id=r.resource_id,
                    resource_name=r.resource.name if r.resource else None,
                    purpose=r.purpose,
                    date_from=r.date_from,
                    date_to=r.date_to,
                    status=r.status,
                    requested_at=r.requested_at,
                    daily_slots=self._slot_views(r),
                )
                for r in self.reservation_repo.list_for_requester(requester_id)
            ]
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, "list reservations", requester_id)

    def daily_slots(self, reservation_id: int) -> ServiceResult[List[DailySlotView]]:
        try:
            if not self.reservation_repo.exists(reservation_id):
                raise ResourceNotFoundError("Reservation", reservation_id)
            slots = self.slot_repo.list_for_reservation(reservation_id)
            return ServiceResult.success([DailySlotView.model_validate(s) for s in slots])
        except BaseAppException as e:
            return self._app_failure(e, "get daily slots")
        except Exception as e:
            return self._handle_exception(e, "get daily slots", reservation_id)

    def history(self, reservation_id: int) -> ServiceResult[ReservationHistory]:
        """Reservation detail followed by its activity log in order."""
        try:
            reservation = self._load(reservation_id)
            entries = self.activity_repo.list_for_reservation(reservation_id)
            actors = self.user_repo.find_by_ids(entry.user_id for entry in entries)

            activities = []
            for entry in entries:
                actor = actors.get(entry.user_id)
                activities.append(
                    ActivityLogView(
                        id=entry.id,
                        action_type=entry.action_type,
                        description=entry.action_description,
                        old_status=entry.old_status,
                        new_status=entry.new_status,
                        step_order=entry.step_order,
                        comment=entry.comment,
                        action_by_id=entry.user_id,
                        action_by_name=actor.name if actor else entry.user_id,
                        action_at=entry.action_at,
                        metadata=entry.details,
                    )
                )

            return ServiceResult.success(
                ReservationHistory(reservation=self._detail(reservation), activities=activities)
            )
        except BaseAppException as e:
            return self._app_failure(e, "get reservation history")
        except Exception as e:
            return self._handle_exception(e, "get reservation history", reservation_id)

    def calendar(
        self,
        year: int,
        month: int,
        resource_id: Optional[int] = None,
    ) -> ServiceResult[List[CalendarEntry]]:
        """Active reservations whose date envelope touches the month."""
        try:
            if not 1 <= month <= 12:
                raise ValidationError("Month must be between 1 and 12", field="month")

            first_day, last_day = DateTimeHelper.month_bounds(year, month)
            entries = [
                CalendarEntry(
                    reservation_id=r.id,
                    resource_id=r.resource_id,
                    resource_name=r.resource.name if r.resource else None,
                    resource_category=r.resource.category if r.resource else None,
                    purpose=r.purpose,
                    date_from=r.date_from,
                    date_to=r.date_to,
                    status=r.status,
                    reserved_by=r.requester.name if r.requester else r.requester_id,
                    daily_slots=self._slot_views(r),
                )
                for r in self.reservation_repo.list_active_in_range(first_day, last_day, resource_id)
            ]
            return ServiceResult.success(
                entries,
                metadata={"month": f"{year:04d}-{month:02d}", "count": len(entries)},
            )
        except BaseAppException as e:
            return self._app_failure(e, "get calendar")
        except Exception as e:
            return self._handle_exception(e, "get calendar", f"{year}-{month}")

    # -------------------------------------------------------------------------
    # Approver views
    # -------------------------------------------------------------------------

    def pending_for_approver(self, approver_id: str) -> ServiceResult[List[PendingApprovalItem]]:
        """
        Steps waiting on this approver. ``can_act`` is False while an earlier
        step of the same reservation is not yet approved.
        """
        try:
            items = []
            for step, reservation in self.approval_repo.list_pending_for_approver(approver_id):
                steps = self.approval_repo.list_for_reservation(reservation.id)
                can_act = all(
                    s.status == ApprovalStatus.APPROVED
                    for s in steps
                    if s.step_order < step.step_order
                )
                items.append(
                    PendingApprovalItem(
                        approval_id=step.id,
                        step_order=step.step_order,
                        total_steps=len(steps),
                        can_act=can_act,
                        reservation_id=reservation.id,
                        resource_id=reservation.resource_id,
                        resource_name=reservation.resource.name if reservation.resource else None,
                        purpose=reservation.purpose,
                        requester_id=reservation.requester_id,
                        requester_name=reservation.requester.name if reservation.requester else None,
                        date_from=reservation.date_from,
                        date_to=reservation.date_to,
                        reservation_status=reservation.status,
                        requested_at=reservation.requested_at,
                        daily_slots=self._slot_views(reservation),
                    )
                )
            return ServiceResult.success(items, metadata={"count": len(items)})
        except Exception as e:
            return self._handle_exception(e, "list pending approvals", approver_id)

    def approval_logs(self, approver_id: str) -> ServiceResult[ApprovalLogResponse]:
        """Steps this approver has approved or rejected, newest first."""
        try:
            logs = []
            summary = ApprovalLogSummary()
            for step, reservation in self.approval_repo.list_decided_for_approver(approver_id):
                logs.append(
                    ApprovalLogItem(
                        approval_id=step.id,
                        reservation_id=reservation.id,
                        step_order=step.step_order,
                        status=step.status,
                        comment=step.comment,
                        acted_at=step.acted_at,
                        resource_name=reservation.resource.name if reservation.resource else None,
                        purpose=reservation.purpose,
                        requester_name=reservation.requester.name if reservation.requester else None,
                        reservation_status=reservation.status,
                        daily_slots=self._slot_views(reservation),
                    )
                )
                summary.total += 1
                if step.status == ApprovalStatus.APPROVED:
                    summary.approved += 1
                else:
                    summary.rejected += 1

            return ServiceResult.success(ApprovalLogResponse(logs=logs, summary=summary))
        except Exception as e:
            return self._handle_exception(e, "get approval logs", approver_id)

    def approval_stats(self, approver_id: str, period_days: int = 30) -> ServiceResult[ApprovalStats]:
        """Per-day decision counts over the last ``period_days`` days, oldest first."""
        try:
            if period_days < 1:
                raise ValidationError("Period must be at least one day", field="period_days")

            today = self.clock.today()
            first_day = today - timedelta(days=period_days - 1)
            since = DateTimeHelper.combine(first_day, DateTimeHelper.parse_time("00:00"))

            per_day = OrderedDict(
                (first_day + timedelta(days=offset), DailyApprovalStat(date=first_day + timedelta(days=offset)))
                for offset in range(period_days)
            )
            totals = ApprovalLogSummary()

            for step, _ in self.approval_repo.list_decided_for_approver(approver_id, since=since):
                if step.acted_at is None:
                    continue
                stat = per_day.get(step.acted_at.date())
                if stat is None:
                    continue
                stat.total += 1
                totals.total += 1
                if step.status == ApprovalStatus.APPROVED:
                    stat.approved += 1
                    totals.approved += 1
                else:
                    stat.rejected += 1
                    totals.rejected += 1

            return ServiceResult.success(
                ApprovalStats(period_days=period_days, daily_stats=list(per_day.values()), totals=totals)
            )
        except BaseAppException as e:
            return self._app_failure(e, "get approval stats")
        except Exception as e:
            return self._handle_exception(e, "get approval stats", approver_id)
