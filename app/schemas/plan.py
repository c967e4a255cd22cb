"""
Pydantic v2 schemas for plans and their activities.

``ActivityData`` and ``PlanData`` are the value objects the budget engine
and the lifecycle model operate on; they are built either in memory
(``instantiate_plan``) or straight from the ORM rows (``from_attributes``).
The remaining models are request/response bodies of ``/api/plans``.

Numeric costing fields are deliberately unconstrained here: range rules are
enforced by ``app.services.plan_validation`` so that failures come back as
one field-keyed error map instead of a pydantic error list.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Money
from app.utils.constants import PLAN_STATUS_DRAFT

_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class ActivityData(BaseModel):
    """A costed line item of a plan.

    Attributes:
        id: Database id, ``None`` until persisted.
        category: Catalog category the activity belongs to.
        activity: Activity name copied from the catalog.
        activity_description: Description copied from the catalog.
        quantity: Units per quarter.
        frequency: Times per quarter.
        unit_cost: Cost of one unit.
        amount_q1..amount_q4: Derived quarter amounts (never authoritative).
        annual_budget: Derived sum of the four quarters.
        comment: Free-text note.
    """

    id: int | None = None
    category: str = ""
    activity: str
    activity_description: str = ""
    quantity: Money = _ZERO
    frequency: Money = _ZERO
    unit_cost: Money = _ZERO
    amount_q1: Money = _ZERO
    amount_q2: Money = _ZERO
    amount_q3: Money = _ZERO
    amount_q4: Money = _ZERO
    annual_budget: Money | None = _ZERO
    comment: str = ""

    model_config = ConfigDict(from_attributes=True)


class PlanMetadata(BaseModel):
    """Facility scope and audit fields supplied by the caller."""

    facility_name: str
    facility_type: str
    facility_district: str = ""
    province: str = ""
    fiscal_year: str
    created_by: str = ""
    created_by_email: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlanData(BaseModel):
    """A facility/program/fiscal-year budget document and its activities."""

    id: int | None = None
    plan_code: str | None = None
    facility_name: str
    facility_type: str
    facility_district: str = ""
    province: str = ""
    program: str
    fiscal_year: str
    status: str = PLAN_STATUS_DRAFT
    activities: list[ActivityData] = Field(default_factory=list)
    general_total_budget: Money = _ZERO
    created_by: str = ""
    created_by_email: str = ""
    submitted_by: str | None = None
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class PlanFilterParams(BaseModel):
    """Optional filters of ``GET /api/plans``; ``None`` means no restriction."""

    facility_name: str | None = None
    facility_type: str | None = None
    district: str | None = None
    province: str | None = None
    program: str | None = None
    fiscal_year: str | None = None
    status: str | None = None


class PlanCheckRequest(BaseModel):
    """Body of ``POST /api/plans/check-existing``."""

    facility_name: str
    facility_type: str
    program: str
    fiscal_year: str


class PlanCheckResponse(BaseModel):
    exists: bool
    message: str
    plan_id: int | None = None


class PlanCreateRequest(BaseModel):
    """Body of ``POST /api/plans``.

    ``facility_district`` and ``province`` default to the authenticated
    user's onboarding location when omitted.
    """

    facility_name: str
    facility_type: str
    program: str
    fiscal_year: str
    facility_district: str | None = None
    province: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "facility_name": "BUTARO HOSPITAL",
                "facility_type": "Hospital",
                "program": "HIV",
                "fiscal_year": "FY 2024",
            }
        }
    )


class ActivityUpdate(BaseModel):
    """Editable fields of one activity; omitted fields keep their value."""

    quantity: Decimal | None = None
    frequency: Decimal | None = None
    unit_cost: Decimal | None = None
    comment: str | None = None


class ActivityBulkItem(ActivityUpdate):
    id: int


class ActivitiesBulkUpdate(BaseModel):
    """Body of ``PUT /api/plans/{id}/activities``."""

    activities: list[ActivityBulkItem]


class PlanStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=50)
    reviewed_by: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PlanSummary(BaseModel):
    """One row of a plan listing (activities omitted)."""

    id: int
    plan_code: str | None = None
    facility_name: str
    facility_type: str
    facility_district: str
    province: str
    program: str
    fiscal_year: str
    status: str
    general_total_budget: Money
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanListResponse(BaseModel):
    rows: list[PlanSummary]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)


class StatusHistoryItem(BaseModel):
    previous_status: str | None
    new_status: str
    reviewed_by: str | None = None
    description: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PlanStatusInfo(BaseModel):
    plan_id: int
    plan_code: str | None = None
    current_status: str
    allowed_transitions: list[str]
    submitted_at: datetime | None = None
    submitted_by: str | None = None
    history: list[StatusHistoryItem] = Field(default_factory=list)
