"""
Reservation and daily slot models.

A reservation occupies one or more (date, start, end) slots on a single
resource. ``date_from``/``date_to`` and ``starts_at``/``ends_at`` are
derived from the slots at creation time and stored so that expiry and
calendar queries do not need to aggregate the slot table.
"""

from datetime import date, datetime, time
from typing import List

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_reservations.models.base.base_model import BaseModel
from campus_reservations.models.base.mixins import TimestampMixin
from campus_reservations.schemas.common.enums import ReservationStatus


class Reservation(BaseModel, TimestampMixin):
    """
    A booking request and its lifecycle status.

    ``status`` only moves forward: pending -> approved | rejected | cancelled.
    """

    __tablename__ = "reservations"

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("university_resources.id"),
        nullable=False,
        index=True,
    )
    requester_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    purpose: Mapped[str] = mapped_column(Text, nullable=False)

    date_from: Mapped[date] = mapped_column(Date, nullable=False, comment="Earliest slot date")
    date_to: Mapped[date] = mapped_column(Date, nullable=False, comment="Latest slot date")
    starts_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
        comment="Earliest slot start, campus local time"
    )
    ends_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Latest slot end, campus local time"
    )

    status: Mapped[ReservationStatus] = mapped_column(
        SQLEnum(
            ReservationStatus,
            name="reservation_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            native_enum=False,
            length=20,
        ),
        nullable=False,
        default=ReservationStatus.PENDING,
        index=True,
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Submission time, campus local time"
    )

    resource = relationship("UniversityResource", lazy="joined")
    requester = relationship("User", lazy="joined")
    daily_slots: Mapped[List["ReservationDailySlot"]] = relationship(
        "ReservationDailySlot",
        back_populates="reservation",
        order_by=lambda: [ReservationDailySlot.slot_date, ReservationDailySlot.start_time],
        cascade="all, delete-orphan",
    )
    approvals: Mapped[List["ReservationApproval"]] = relationship(
        "ReservationApproval",
        back_populates="reservation",
        order_by="ReservationApproval.step_order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("date_from <= date_to", name="ck_reservation_date_envelope"),
        Index("ix_reservation_resource_status", "resource_id", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def __repr__(self) -> str:
        return f"<Reservation(id={self.id}, resource={self.resource_id}, status={self.status.value})>"


class ReservationDailySlot(BaseModel):
    """One contiguous [start_time, end_time) interval on one date."""

    __tablename__ = "reservation_daily_slots"

    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slot_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    reservation: Mapped["Reservation"] = relationship("Reservation", back_populates="daily_slots")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_daily_slot_interval"),
    )

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.slot_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.slot_date, self.end_time)

    def __repr__(self) -> str:
        return (
            f"<ReservationDailySlot(reservation={self.reservation_id}, "
            f"{self.slot_date} {self.start_time}-{self.end_time})>"
        )
