"""Plan and PlanActivity models — a facility budget plan and its line items."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Plan(Base):
    """Budget plan for one facility, program and fiscal year.

    The business key (facility_name, facility_type, program, fiscal_year) is
    enforced by ``uq_plan_facility_program_fy``; a violation on insert is the
    authoritative duplicate-plan signal.

    Attributes:
        id: Primary key.
        plan_code: Human-readable code, e.g. ``"plan-2024-007"``.
        facility_name: Hospital or health-center name.
        facility_type: ``"Hospital"`` or ``"Health Center"``.
        facility_district: District of the facility.
        province: Province of the facility.
        program: ``"HIV"``, ``"MALARIA"`` or ``"TB"``.
        fiscal_year: Fiscal-year token, e.g. ``"FY 2024"``.
        status: ``"draft"``, ``"submitted"`` or a review-workflow value.
        general_total_budget: Sum of the activities' annual budgets.
        created_by / created_by_email: Author, as supplied by the caller.
        submitted_by / submitted_at: Set on ``draft → submitted``.
    """

    __tablename__ = "plan"
    __table_args__ = (
        UniqueConstraint(
            "facility_name", "facility_type", "program", "fiscal_year",
            name="uq_plan_facility_program_fy",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_code = Column(String(30), unique=True, nullable=True)
    facility_name = Column(String(255), nullable=False)
    facility_type = Column(String(50), nullable=False)
    facility_district = Column(String(255), nullable=False, default="")
    province = Column(String(255), nullable=False, default="")
    program = Column(String(50), nullable=False)
    fiscal_year = Column(String(20), nullable=False)
    status = Column(String(50), nullable=False, default="draft")
    general_total_budget = Column(Numeric(15, 2), nullable=False, default=0)
    created_by = Column(String(255), nullable=False, default="")
    created_by_email = Column(String(255), nullable=False, default="")
    submitted_by = Column(String(255), nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    activities = relationship(
        "PlanActivity",
        back_populates="plan",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="PlanActivity.sort_order",
    )
    status_history = relationship(
        "PlanStatusHistory",
        back_populates="plan",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="PlanStatusHistory.id",
    )


class PlanActivity(Base):
    """Costed line item of a plan; quarter amounts are derived on every edit.

    Attributes:
        sort_order: Position in the catalog template (display order).
        quantity / frequency / unit_cost: User-edited costing inputs.
        amount_q1..amount_q4: quantity × frequency × unit_cost per quarter.
        annual_budget: Sum of the four quarter amounts.
    """

    __tablename__ = "plan_activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("plan.id", ondelete="CASCADE"), nullable=False, index=True)
    sort_order = Column(Integer, nullable=False, default=0)
    category = Column(String(255), nullable=False, default="")
    activity = Column(String(500), nullable=False)
    activity_description = Column(Text, nullable=False, default="")
    quantity = Column(Numeric(15, 2), nullable=False, default=0)
    frequency = Column(Numeric(15, 2), nullable=False, default=0)
    unit_cost = Column(Numeric(15, 2), nullable=False, default=0)
    amount_q1 = Column(Numeric(15, 2), nullable=False, default=0)
    amount_q2 = Column(Numeric(15, 2), nullable=False, default=0)
    amount_q3 = Column(Numeric(15, 2), nullable=False, default=0)
    amount_q4 = Column(Numeric(15, 2), nullable=False, default=0)
    annual_budget = Column(Numeric(15, 2), nullable=False, default=0)
    comment = Column(Text, nullable=False, default="")

    # Relationships
    plan = relationship("Plan", back_populates="activities", lazy="select")
