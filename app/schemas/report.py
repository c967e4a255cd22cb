"""
Pydantic v2 schemas for the read-only plan financial report.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.common import Money


class ReportRow(BaseModel):
    category: str
    activity: str
    activity_description: str
    quantity: Money
    frequency: Money
    unit_cost: Money
    amount_q1: Money
    amount_q2: Money
    amount_q3: Money
    amount_q4: Money
    annual_budget: Money
    comment: str = ""


class CategorySubtotal(BaseModel):
    category: str
    amount_q1: Money
    amount_q2: Money
    amount_q3: Money
    amount_q4: Money
    total: Money


class PlanReport(BaseModel):
    """Printable view of a plan: header, rows, subtotals and totals."""

    plan_id: int
    plan_code: str | None = None
    title: str
    facility_name: str
    facility_type: str
    facility_district: str
    province: str
    program: str
    fiscal_year: str
    status: str
    rows: list[ReportRow] = Field(default_factory=list)
    subtotals: list[CategorySubtotal] = Field(default_factory=list)
    quarter_totals: dict[str, Money] = Field(default_factory=dict)
    general_total: Money
