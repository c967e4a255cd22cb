"""
Application-wide constants for the RIWA planning backend.

Defines domain enumerations, business rule thresholds, and lookup lists
used across routers, services, and models.
"""

from decimal import Decimal
from typing import Final

# ---------------------------------------------------------------------------
# Health programs
# ---------------------------------------------------------------------------

PROGRAMS: Final[list[str]] = [
    "HIV",
    "MALARIA",
    "TB",
]

# TB is managed at hospital level only; it never has sub-facilities.
HOSPITAL_ONLY_PROGRAMS: Final[frozenset[str]] = frozenset({"TB"})

# ---------------------------------------------------------------------------
# Facility types
# ---------------------------------------------------------------------------

FACILITY_TYPE_HOSPITAL: Final[str] = "Hospital"
FACILITY_TYPE_HEALTH_CENTER: Final[str] = "Health Center"

FACILITY_TYPES: Final[list[str]] = [
    FACILITY_TYPE_HOSPITAL,
    FACILITY_TYPE_HEALTH_CENTER,
]

# ---------------------------------------------------------------------------
# Plan lifecycle
# ---------------------------------------------------------------------------

PLAN_STATUS_DRAFT: Final[str] = "draft"
PLAN_STATUS_SUBMITTED: Final[str] = "submitted"

# Only this edge is interpreted here; approval workflows set other values.
PLAN_STATUS_TRANSITIONS: Final[dict[str, frozenset[str]]] = {
    PLAN_STATUS_DRAFT: frozenset({PLAN_STATUS_SUBMITTED}),
    PLAN_STATUS_SUBMITTED: frozenset(),
}

EDITABLE_PLAN_STATUSES: Final[frozenset[str]] = frozenset({
    PLAN_STATUS_DRAFT,
    PLAN_STATUS_SUBMITTED,
})

PLAN_STATUS_DESCRIPTIONS: Final[dict[str, str]] = {
    f"{PLAN_STATUS_DRAFT}->{PLAN_STATUS_SUBMITTED}": "Plan submitted for review",
}

# ---------------------------------------------------------------------------
# Costing rules (exclusive minimums: values must be strictly greater)
# ---------------------------------------------------------------------------

MIN_FREQUENCY: Final[Decimal] = Decimal("0")
MIN_UNIT_COST: Final[Decimal] = Decimal("0")

# Scale of the Numeric(15, 2) costing and amount columns
MONEY_DECIMAL_PLACES: Final[int] = 2

QUARTERS: Final[tuple[str, ...]] = ("Q1", "Q2", "Q3", "Q4")

# Fiscal-year token, e.g. "FY 2024"
FISCAL_YEAR_PATTERN: Final[str] = r"^FY \d{4}$"

# ---------------------------------------------------------------------------
# Activity catalog facility scopes
# ---------------------------------------------------------------------------

CATALOG_SCOPE_ALL: Final[str] = "all"
