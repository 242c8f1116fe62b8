"""
User model.

Users are maintained by account administration; the reservation workflow
only reads them to resolve requester and approver names.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from campus_reservations.models.base.base_model import Base
from campus_reservations.models.base.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Campus user (requester or approver)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(50),
        primary_key=True,
        comment="Campus user id, e.g. ADM-002"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Role code (requester, approver, superadmin)"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"
