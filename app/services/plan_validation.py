"""
Caller-facing validation for plan metadata and activity edits.

The budget engine and the lifecycle model trust their inputs; this module
is the gate in front of them.  Each validator returns a field-keyed error
map (empty when the input is valid) instead of raising, so routers can
return every problem of a submission at once.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from fastapi import HTTPException, status

from app.schemas.common import ValidationErrorResponse
from app.services.location_registry import LocationRegistry
from app.utils.constants import (
    FACILITY_TYPE_HEALTH_CENTER,
    FACILITY_TYPE_HOSPITAL,
    FACILITY_TYPES,
    FISCAL_YEAR_PATTERN,
    MIN_FREQUENCY,
    MIN_UNIT_COST,
    MONEY_DECIMAL_PLACES,
    PROGRAMS,
)

ErrorMap = dict[str, list[str]]

_FISCAL_YEAR_RE = re.compile(FISCAL_YEAR_PATTERN)


def _add(errors: ErrorMap, field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _as_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _decimal_places(number: Decimal) -> int:
    return max(0, -number.normalize().as_tuple().exponent)


def ensure_valid(errors: ErrorMap) -> None:
    """Raise HTTP 422 carrying *errors* when the map is not empty."""
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=ValidationErrorResponse(errors=errors).model_dump(),
        )


def validate_activity(data: Mapping[str, Any], *, require_name: bool = True) -> ErrorMap:
    """Validate the costing fields of one activity.

    A row whose quantity, frequency and unit cost are all zero has simply not
    been filled in yet and is accepted.  Otherwise quantity must be a finite
    number ≥ 0 and frequency / unit cost finite numbers strictly greater than
    their configured minimum.

    Inputs and the resulting quarter amount must fit the two-decimal money
    columns.
    """
    errors: ErrorMap = {}

    if require_name and not str(data.get("activity") or "").strip():
        _add(errors, "activity", "Activity name is required")

    comment = data.get("comment")
    if comment is not None and not isinstance(comment, str):
        _add(errors, "comment", "Comment must be text")

    values: dict[str, Decimal | None] = {}
    for field in ("quantity", "frequency", "unit_cost"):
        raw = data.get(field, 0)
        values[field] = _as_decimal(raw)
        if values[field] is None:
            _add(errors, field, f"{field.replace('_', ' ').capitalize()} must be a number")
        elif _decimal_places(values[field]) > MONEY_DECIMAL_PLACES:
            _add(
                errors, field,
                f"{field.replace('_', ' ').capitalize()} cannot have more than "
                f"{MONEY_DECIMAL_PLACES} decimal places",
            )

    if errors.keys() & values.keys():
        return errors

    if all(value == 0 for value in values.values()):
        return errors

    if values["quantity"] < 0:
        _add(errors, "quantity", "Quantity cannot be negative")
    if values["frequency"] <= MIN_FREQUENCY:
        _add(errors, "frequency", "Frequency is required")
    if values["unit_cost"] <= MIN_UNIT_COST:
        _add(errors, "unit_cost", "Unit cost is required")

    if not errors.keys() & values.keys():
        amount = values["quantity"] * values["frequency"] * values["unit_cost"]
        if _decimal_places(amount) > MONEY_DECIMAL_PLACES:
            _add(
                errors, "unit_cost",
                f"Quarter amount {amount} cannot have more than {MONEY_DECIMAL_PLACES} decimal places",
            )

    return errors


def validate_plan_metadata(data: Mapping[str, Any]) -> ErrorMap:
    """Validate the facility/program/fiscal-year scope of a new plan."""
    errors: ErrorMap = {}

    if not str(data.get("facility_name") or "").strip():
        _add(errors, "facility_name", "Facility name is required")

    facility_type = data.get("facility_type")
    if not facility_type:
        _add(errors, "facility_type", "Facility type is required")
    elif facility_type not in FACILITY_TYPES:
        _add(errors, "facility_type", f"Facility type must be one of {FACILITY_TYPES}")

    program = str(data.get("program") or "").upper()
    if not program:
        _add(errors, "program", "Program is required")
    elif program not in PROGRAMS:
        _add(errors, "program", f"Program must be one of {PROGRAMS}")

    fiscal_year = str(data.get("fiscal_year") or "")
    if not fiscal_year:
        _add(errors, "fiscal_year", "Fiscal year is required")
    elif not _FISCAL_YEAR_RE.match(fiscal_year):
        _add(errors, "fiscal_year", "Fiscal year must look like 'FY 2024'")

    return errors


def validate_location(
    registry: LocationRegistry,
    province: str,
    district: str,
    hospital: str,
) -> ErrorMap:
    """Check that *district* is in *province* and *hospital* is in *district*."""
    errors: ErrorMap = {}

    if not province:
        _add(errors, "province", "Province is required")
    elif province not in registry.list_provinces():
        _add(errors, "province", f"Unknown province '{province}'")

    if not district:
        _add(errors, "district", "District is required")
    elif "province" not in errors and district not in registry.list_districts(province):
        _add(errors, "district", f"District '{district}' is not in province '{province}'")

    if not hospital:
        _add(errors, "hospital", "Hospital is required")
    elif registry.district_of(hospital) is None:
        _add(errors, "hospital", f"Unknown hospital '{hospital}'")
    elif district and registry.district_of(hospital) != district:
        _add(errors, "hospital", f"Hospital '{hospital}' is not in district '{district}'")

    return errors


def match_plan_facility(
    registry: LocationRegistry,
    facility_name: str,
    facility_type: str,
    program: str,
    hospital: str,
) -> str | None:
    """Return the registry spelling of the facility a plan is made for.

    A ``Hospital`` plan must name a registry hospital.  A ``Health Center``
    plan must name a facility running *program* under *hospital*, so
    hospital-only programs never match.  Names compare case-insensitively.
    """
    if facility_type == FACILITY_TYPE_HOSPITAL:
        candidates = registry.list_hospitals()
    elif facility_type == FACILITY_TYPE_HEALTH_CENTER:
        candidates = registry.facilities_for(program, hospital)
    else:
        return None
    wanted = facility_name.strip().lower()
    return next((name for name in candidates if name.lower() == wanted), None)


def validate_plan_facility(
    registry: LocationRegistry,
    facility_name: str,
    facility_type: str,
    program: str,
    hospital: str,
) -> ErrorMap:
    """Check the plan's facility against the registry (see :func:`match_plan_facility`)."""
    errors: ErrorMap = {}
    if match_plan_facility(registry, facility_name, facility_type, program, hospital) is not None:
        return errors

    if facility_type == FACILITY_TYPE_HOSPITAL:
        _add(errors, "facility_name", f"Unknown hospital '{facility_name}'")
    elif not registry.facilities_for(program, hospital):
        _add(errors, "facility_type", f"Program {program.upper()} has no health centers under '{hospital}'")
    else:
        _add(
            errors, "facility_name",
            f"'{facility_name}' is not a {program.upper()} health center of '{hospital}'",
        )
    return errors
