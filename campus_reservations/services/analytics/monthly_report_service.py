"""
Monthly reservation analytics.

All sections cover reservations submitted during the calendar month.
Aggregation is done in Python over one query so the report behaves the
same on every supported database.
"""

import calendar
from collections import OrderedDict, defaultdict
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from campus_reservations.core.exceptions import BaseAppException, ValidationError
from campus_reservations.models.reservation import Reservation
from campus_reservations.repositories import ReservationRepository, ResourceRepository, UserRepository
from campus_reservations.schemas.common.enums import ApprovalStatus, ReservationStatus
from campus_reservations.schemas.reports import (
    CategoryBreakdown,
    DailyTrend,
    DepartmentBreakdown,
    MonthlyReport,
    ReportPeriod,
    ReportSummary,
    RequesterActivity,
    ResourceUtilization,
    WorkflowPerformance,
)
from campus_reservations.services.base import BaseService, ServiceResult
from campus_reservations.utils.datetime_utils import Clock, DateTimeHelper

# Bookable hours per resource per day used as the utilization baseline
BOOKABLE_HOURS_PER_DAY = 8
TOP_REQUESTERS_LIMIT = 10


def _percentage(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


class MonthlyReportService(BaseService):

    def __init__(self, db_session: Session, clock: Optional[Clock] = None):
        super().__init__(db_session, clock)
        self.reservation_repo = ReservationRepository(db_session)
        self.resource_repo = ResourceRepository(db_session)
        self.user_repo = UserRepository(db_session)

    def monthly_report(self, year: int, month: int) -> ServiceResult[MonthlyReport]:
        try:
            if not 1 <= month <= 12:
                raise ValidationError("Month must be between 1 and 12", field="month")
            if year < 1:
                raise ValidationError("Invalid year", field="year")

            first_day, last_day = DateTimeHelper.month_bounds(year, month)
            start = DateTimeHelper.combine(first_day, DateTimeHelper.parse_time("00:00"))
            end = start + timedelta(days=DateTimeHelper.days_in_month(year, month))
            reservations = self.reservation_repo.list_requested_between(start, end)

            month_name = calendar.month_name[month]
            report = MonthlyReport(
                period=ReportPeriod(
                    year=year,
                    month=month,
                    month_name=month_name,
                    display=f"{month_name} {year}",
                    start_date=first_day,
                    end_date=last_day,
                ),
                summary=self._summary(reservations),
                resource_utilization=self._resource_utilization(reservations, year, month),
                category_breakdown=self._category_breakdown(reservations),
                department_breakdown=self._department_breakdown(reservations),
                top_requesters=self._top_requesters(reservations),
                workflow_performance=self._workflow_performance(reservations),
                daily_trends=self._daily_trends(reservations),
                generated_at=self.clock.local_now(),
            )

            self._logger.info(
                f"Generated monthly report for {year}-{month:02d}",
                extra={"year": year, "month": month, "reservations": len(reservations)},
            )
            return ServiceResult.success(report)

        except BaseAppException as e:
            return self._app_failure(e, "generate monthly report")
        except Exception as e:
            return self._handle_exception(e, "generate monthly report", f"{year}-{month}")

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    @staticmethod
    def _count_status(reservations: List[Reservation], status: ReservationStatus) -> int:
        return sum(1 for r in reservations if r.status == status)

    def _summary(self, reservations: List[Reservation]) -> ReportSummary:
        approved = self._count_status(reservations, ReservationStatus.APPROVED)
        rejected = self._count_status(reservations, ReservationStatus.REJECTED)

        # Time from submission to each approved step decision
        approval_hours = [
            DateTimeHelper.hours_between(r.requested_at, step.acted_at)
            for r in reservations
            for step in r.approvals
            if step.status == ApprovalStatus.APPROVED and step.acted_at is not None
        ]
        avg_hours = sum(approval_hours) / len(approval_hours) if approval_hours else 0.0

        return ReportSummary(
            total_reservations=len(reservations),
            approved=approved,
            rejected=rejected,
            pending=self._count_status(reservations, ReservationStatus.PENDING),
            cancelled=self._count_status(reservations, ReservationStatus.CANCELLED),
            approval_rate_percentage=_percentage(approved, approved + rejected),
            avg_approval_time_hours=round(avg_hours, 1),
            avg_approval_time_days=round(avg_hours / 24, 1),
        )

    def _resource_utilization(
        self,
        reservations: List[Reservation],
        year: int,
        month: int,
    ) -> List[ResourceUtilization]:
        max_hours = DateTimeHelper.days_in_month(year, month) * BOOKABLE_HOURS_PER_DAY

        rows: Dict[int, ResourceUtilization] = OrderedDict()
        booked_days: Dict[int, set] = defaultdict(set)
        for resource in self.resource_repo.list_all():
            rows[resource.id] = ResourceUtilization(
                resource_id=resource.id,
                resource_name=resource.name,
                category=resource.category,
            )

        for r in reservations:
            row = rows.get(r.resource_id)
            if row is None:
                continue
            row.booking_count += 1
            if r.status == ReservationStatus.APPROVED:
                row.approved_bookings += 1
            for slot in r.daily_slots:
                booked_days[r.resource_id].add(slot.slot_date)
                row.total_hours_booked += DateTimeHelper.hours_between(slot.starts_at, slot.ends_at)

        for resource_id, row in rows.items():
            row.total_days_booked = len(booked_days[resource_id])
            row.total_hours_booked = round(row.total_hours_booked, 1)
            row.utilization_percentage = _percentage(row.total_hours_booked, max_hours)

        return sorted(rows.values(), key=lambda row: row.booking_count, reverse=True)

    def _category_breakdown(self, reservations: List[Reservation]) -> List[CategoryBreakdown]:
        rows: Dict[Optional[str], CategoryBreakdown] = {}
        for r in reservations:
            category = r.resource.category if r.resource else None
            row = rows.setdefault(category, CategoryBreakdown(category=category))
            row.booking_count += 1
            if r.status == ReservationStatus.APPROVED:
                row.approved += 1
            elif r.status == ReservationStatus.REJECTED:
                row.rejected += 1
            elif r.status == ReservationStatus.PENDING:
                row.pending += 1
        return sorted(rows.values(), key=lambda row: row.booking_count, reverse=True)

    def _department_breakdown(self, reservations: List[Reservation]) -> List[DepartmentBreakdown]:
        rows: Dict[Optional[str], DepartmentBreakdown] = {}
        for r in reservations:
            department = r.requester.department if r.requester else None
            row = rows.setdefault(department, DepartmentBreakdown(department=department))
            row.booking_count += 1
            if r.status == ReservationStatus.APPROVED:
                row.approved += 1
            elif r.status == ReservationStatus.REJECTED:
                row.rejected += 1
        return sorted(rows.values(), key=lambda row: row.booking_count, reverse=True)

    def _top_requesters(self, reservations: List[Reservation]) -> List[RequesterActivity]:
        rows: Dict[str, RequesterActivity] = {}
        for r in reservations:
            row = rows.get(r.requester_id)
            if row is None:
                requester = r.requester
                row = rows[r.requester_id] = RequesterActivity(
                    id=r.requester_id,
                    name=requester.name if requester else None,
                    department=requester.department if requester else None,
                )
            row.total_requests += 1
            if r.status == ReservationStatus.APPROVED:
                row.approved += 1
            elif r.status == ReservationStatus.REJECTED:
                row.rejected += 1
        ranked = sorted(rows.values(), key=lambda row: row.total_requests, reverse=True)
        return ranked[:TOP_REQUESTERS_LIMIT]

    def _workflow_performance(self, reservations: List[Reservation]) -> List[WorkflowPerformance]:
        rows: Dict[Tuple[int, str], WorkflowPerformance] = {}
        response_hours: Dict[Tuple[int, str], List[float]] = defaultdict(list)

        for r in reservations:
            for step in r.approvals:
                if step.acted_at is None:
                    continue
                key = (step.step_order, step.approver_id)
                row = rows.get(key)
                if row is None:
                    row = rows[key] = WorkflowPerformance(
                        step_order=step.step_order,
                        approver_id=step.approver_id,
                        approver_name=step.approver.name if step.approver else None,
                    )
                row.total_approvals += 1
                if step.status == ApprovalStatus.APPROVED:
                    row.approved_count += 1
                elif step.status == ApprovalStatus.REJECTED:
                    row.rejected_count += 1
                response_hours[key].append(DateTimeHelper.hours_between(r.requested_at, step.acted_at))

        for key, row in rows.items():
            hours = response_hours[key]
            avg = sum(hours) / len(hours) if hours else 0.0
            row.avg_response_hours = round(avg, 1)
            row.avg_response_days = round(avg / 24, 1)

        return sorted(rows.values(), key=lambda row: (row.step_order, -row.total_approvals))

    def _daily_trends(self, reservations: List[Reservation]) -> List[DailyTrend]:
        rows: Dict = OrderedDict()
        for r in reservations:
            day = r.requested_at.date()
            row = rows.setdefault(day, DailyTrend(date=day))
            row.total += 1
            if r.status == ReservationStatus.APPROVED:
                row.approved += 1
            elif r.status == ReservationStatus.REJECTED:
                row.rejected += 1
            elif r.status == ReservationStatus.PENDING:
                row.pending += 1
        return [rows[day] for day in sorted(rows)]
