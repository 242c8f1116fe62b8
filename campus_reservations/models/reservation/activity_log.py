"""
Reservation activity log model.

Append-only record of every reservation state transition.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_reservations.models.base.base_model import BaseModel
from campus_reservations.schemas.common.enums import ActivityAction


class ReservationActivityLog(BaseModel):
    """
    One audit entry for a reservation.

    ``user_id`` is not a foreign key: automated transitions are recorded
    under the system actor id, which has no user row.
    """

    __tablename__ = "reservation_activity_logs"

    reservation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Actor id, or the system actor for automated transitions"
    )
    action_type: Mapped[ActivityAction] = mapped_column(
        SQLEnum(
            ActivityAction,
            name="activity_action_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            native_enum=False,
            length=30,
        ),
        nullable=False,
    )
    action_description: Mapped[str] = mapped_column(Text, nullable=False)
    old_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    new_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    step_order: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
        comment="Structured context for the action"
    )
    action_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Campus local time of the action"
    )

    __table_args__ = (
        Index("ix_activity_reservation_time", "reservation_id", "action_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReservationActivityLog(reservation={self.reservation_id}, "
            f"action={self.action_type.value}, by={self.user_id})>"
        )
