"""PlanStatusHistory model — audit trail of plan status changes."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class PlanStatusHistory(Base):
    """One status change of a plan (creation included, with no previous status).

    Attributes:
        id: Primary key.
        plan_id: FK to Plan.
        previous_status: Status before the change; ``None`` for creation.
        new_status: Status after the change.
        reviewed_by: Who triggered the change.
        description: Human-readable summary.
        created_at: When the change happened.
    """

    __tablename__ = "plan_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("plan.id", ondelete="CASCADE"), nullable=False, index=True)
    previous_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=False)
    reviewed_by = Column(String(255), nullable=True)
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    plan = relationship("Plan", back_populates="status_history", lazy="select")
