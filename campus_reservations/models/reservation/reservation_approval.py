"""
Per-reservation approval steps.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_reservations.models.base.base_model import BaseModel
from campus_reservations.models.base.mixins import TimestampMixin
from campus_reservations.schemas.common.enums import ApprovalStatus


class ReservationApproval(BaseModel, TimestampMixin):
    """
    One approver's step within a reservation's workflow instance.

    Rows are copied from the resource workflow when the reservation is
    created and are never deleted. A step leaves ``pending`` exactly once.
    """

    __tablename__ = "reservation_approvals"

    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[ApprovalStatus] = mapped_column(
        SQLEnum(
            ApprovalStatus,
            name="approval_status_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            native_enum=False,
            length=20,
        ),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    acted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        comment="When the step left pending, campus local time"
    )
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    reservation = relationship("Reservation", back_populates="approvals")
    approver = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("reservation_id", "step_order", name="uq_approval_reservation_step"),
        Index("ix_approval_approver_status", "approver_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReservationApproval(id={self.id}, reservation={self.reservation_id}, "
            f"step={self.step_order}, status={self.status.value})>"
        )
