import pytest
from fastapi import HTTPException

from app.services.location_registry import get_location_registry
from app.services.plan_validation import (
    ensure_valid,
    match_plan_facility,
    validate_activity,
    validate_location,
    validate_plan_facility,
    validate_plan_metadata,
)


def _row(**values):
    return {"activity": "Salaries", "quantity": 0, "frequency": 0, "unit_cost": 0, "comment": "", **values}


def test_unfilled_row_is_valid():
    assert validate_activity(_row()) == {}


def test_complete_row_is_valid():
    assert validate_activity(_row(quantity=10, frequency=1, unit_cost=450000)) == {}


def test_zero_quantity_with_costs_is_valid():
    assert validate_activity(_row(quantity=0, frequency=2, unit_cost=10)) == {}


def test_missing_frequency_and_unit_cost():
    errors = validate_activity(_row(quantity=5))
    assert errors == {
        "frequency": ["Frequency is required"],
        "unit_cost": ["Unit cost is required"],
    }


def test_negative_quantity():
    errors = validate_activity(_row(quantity=-1, frequency=1, unit_cost=1))
    assert errors == {"quantity": ["Quantity cannot be negative"]}


@pytest.mark.parametrize("value", ["abc", "nan", "inf", None, True])
def test_non_numeric_values(value):
    errors = validate_activity(_row(unit_cost=value))
    assert list(errors) == ["unit_cost"]


def test_costing_values_are_limited_to_two_decimals():
    errors = validate_activity(_row(quantity=1000, frequency=1, unit_cost="0.004"))
    assert errors == {"unit_cost": ["Unit cost cannot have more than 2 decimal places"]}

    assert validate_activity(_row(quantity="2.50", frequency="1.000", unit_cost="0.40")) == {}


def test_quarter_amount_must_fit_two_decimals():
    errors = validate_activity(_row(quantity="0.5", frequency="0.5", unit_cost="0.01"))
    assert list(errors) == ["unit_cost"]
    assert "decimal places" in errors["unit_cost"][0]


def test_activity_name_required():
    assert "activity" in validate_activity(_row(activity="  "))
    assert "activity" not in validate_activity(_row(activity=""), require_name=False)


def test_comment_must_be_text():
    assert validate_activity(_row(comment=5)) == {"comment": ["Comment must be text"]}


def test_plan_metadata_valid():
    assert validate_plan_metadata(
        {"facility_name": "BUTARO HOSPITAL", "facility_type": "Hospital", "program": "hiv", "fiscal_year": "FY 2024"}
    ) == {}


def test_plan_metadata_collects_every_error():
    errors = validate_plan_metadata(
        {"facility_name": "", "facility_type": "Clinic", "program": "POLIO", "fiscal_year": "2024"}
    )
    assert set(errors) == {"facility_name", "facility_type", "program", "fiscal_year"}


def test_location_valid():
    assert validate_location(get_location_registry(), "Northern", "Burera", "BUTARO HOSPITAL") == {}


def test_location_hospital_in_other_district():
    errors = validate_location(get_location_registry(), "Northern", "Musanze", "BUTARO HOSPITAL")
    assert list(errors) == ["hospital"]


def test_location_district_in_other_province():
    errors = validate_location(get_location_registry(), "Kigali", "Burera", "BUTARO HOSPITAL")
    assert list(errors) == ["district"]


def test_location_unknown_values():
    errors = validate_location(get_location_registry(), "Atlantis", "", "Nowhere")
    assert set(errors) == {"province", "district", "hospital"}


def test_ensure_valid_raises_422_with_error_map():
    ensure_valid({})
    with pytest.raises(HTTPException) as exc_info:
        ensure_valid({"quantity": ["Quantity cannot be negative"]})

    assert exc_info.value.status_code == 422
    assert exc_info.value.detail == {
        "message": "Validation failed",
        "errors": {"quantity": ["Quantity cannot be negative"]},
    }


def test_hospital_plan_facility():
    registry = get_location_registry()
    assert validate_plan_facility(registry, "BUTARO HOSPITAL", "Hospital", "HIV", "BUTARO HOSPITAL") == {}
    assert match_plan_facility(registry, "kigeme hospital", "Hospital", "TB", "BUTARO HOSPITAL") == "KIGEME Hospital"

    errors = validate_plan_facility(registry, "Nowhere Hospital", "Hospital", "HIV", "BUTARO HOSPITAL")
    assert errors == {"facility_name": ["Unknown hospital 'Nowhere Hospital'"]}


def test_health_center_plan_facility():
    registry = get_location_registry()
    assert validate_plan_facility(registry, "Kivuye", "Health Center", "HIV", "BUTARO HOSPITAL") == {}

    # Health center of another hospital
    errors = validate_plan_facility(registry, "Criza", "Health Center", "HIV", "BUTARO HOSPITAL")
    assert list(errors) == ["facility_name"]


def test_tb_health_center_plan_is_rejected():
    errors = validate_plan_facility(get_location_registry(), "Kivuye", "Health Center", "TB", "BUTARO HOSPITAL")
    assert errors == {"facility_type": ["Program TB has no health centers under 'BUTARO HOSPITAL'"]}
