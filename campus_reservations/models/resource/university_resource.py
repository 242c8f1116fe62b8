"""
Bookable university resources and their approval workflows.
"""

from typing import List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_reservations.models.base.base_model import BaseModel
from campus_reservations.models.base.mixins import TimestampMixin


class UniversityResource(BaseModel, TimestampMixin):
    """A room, hall or piece of equipment that can be reserved."""

    __tablename__ = "university_resources"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    workflow_steps: Mapped[List["FacilityApprovalWorkflow"]] = relationship(
        "FacilityApprovalWorkflow",
        back_populates="resource",
        order_by="FacilityApprovalWorkflow.step_order",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<UniversityResource(id={self.id}, name={self.name})>"


class FacilityApprovalWorkflow(BaseModel, TimestampMixin):
    """
    One step of a resource's approval chain.

    Steps are replaced wholesale; ``step_order`` values are stored exactly
    as configured and are unique per resource.
    """

    __tablename__ = "facility_approval_workflows"

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("university_resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    approver_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("users.id"),
        nullable=False,
        comment="User who approves this step"
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)

    resource: Mapped["UniversityResource"] = relationship(
        "UniversityResource",
        back_populates="workflow_steps",
    )
    approver = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("resource_id", "step_order", name="uq_workflow_resource_step"),
        CheckConstraint("step_order >= 1", name="ck_workflow_step_order_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<FacilityApprovalWorkflow(resource_id={self.resource_id}, "
            f"step={self.step_order}, approver={self.approver_id})>"
        )
