from decimal import Decimal

import pytest

from app.schemas.plan import PlanMetadata
from app.services import plan_lifecycle
from app.services.plan_lifecycle import InvalidStatusTransition, PlanLockedError


def _metadata(**overrides):
    values = {
        "facility_name": "BUTARO HOSPITAL",
        "facility_type": "Hospital",
        "facility_district": "Burera",
        "province": "Northern",
        "fiscal_year": "FY 2024",
        "created_by": "Jeanne Uwase",
        "created_by_email": "jeanne@butaro.rw",
    }
    values.update(overrides)
    return PlanMetadata(**values)


@pytest.fixture
def draft_plan():
    return plan_lifecycle.instantiate_plan(_metadata(), "HIV", is_hospital=True)


def test_new_plan_is_seeded_from_catalog(draft_plan):
    assert draft_plan.status == "draft"
    assert draft_plan.program == "HIV"
    assert len(draft_plan.activities) == 10
    assert draft_plan.general_total_budget == Decimal("0")
    for activity in draft_plan.activities:
        assert activity.quantity == activity.frequency == activity.unit_cost == Decimal("0")
        assert activity.annual_budget == Decimal("0")
        assert activity.comment == ""
    assert draft_plan.created_at is not None
    assert draft_plan.created_by == "Jeanne Uwase"


def test_program_is_upper_cased():
    plan = plan_lifecycle.instantiate_plan(_metadata(), "malaria", is_hospital=True)
    assert plan.program == "MALARIA"
    assert len(plan.activities) == 6


def test_default_activities_for_unknown_program_are_empty():
    assert plan_lifecycle.generate_default_activities("POLIO", True) == []


def test_edit_recomputes_activity_and_total(draft_plan):
    edited = plan_lifecycle.apply_activity_edit(
        draft_plan, 0, {"quantity": 10, "frequency": 1, "unit_cost": 450000}
    )

    assert edited is not draft_plan
    assert edited.activities[0].amount_q1 == Decimal("4500000")
    assert edited.activities[0].annual_budget == Decimal("18000000")
    assert edited.general_total_budget == Decimal("18000000")
    # The original value object is left untouched
    assert draft_plan.activities[0].quantity == Decimal("0")


def test_edit_ignores_derived_fields(draft_plan):
    edited = plan_lifecycle.apply_activity_edit(
        draft_plan, 1, {"quantity": 1, "frequency": 1, "unit_cost": 5, "annual_budget": 999, "comment": "ok"}
    )
    assert edited.activities[1].annual_budget == Decimal("20")
    assert edited.activities[1].comment == "ok"


def test_edit_out_of_range_raises(draft_plan):
    with pytest.raises(IndexError):
        plan_lifecycle.apply_activity_edit(draft_plan, 42, {"quantity": 1})


def test_edit_negative_index_raises(draft_plan):
    with pytest.raises(IndexError):
        plan_lifecycle.apply_activity_edit(draft_plan, -1, {"quantity": 1})
    assert draft_plan.activities[-1].quantity == Decimal("0")


def test_submit_sets_audit_fields(draft_plan):
    submitted = plan_lifecycle.transition_status(draft_plan, "submitted", submitted_by="Reviewer")

    assert submitted.status == "submitted"
    assert submitted.submitted_by == "Reviewer"
    assert submitted.submitted_at is not None
    assert draft_plan.status == "draft"


def test_submit_defaults_submitter_to_author(draft_plan):
    submitted = plan_lifecycle.transition_status(draft_plan, "submitted")
    assert submitted.submitted_by == "Jeanne Uwase"


def test_same_status_is_noop(draft_plan):
    assert plan_lifecycle.transition_status(draft_plan, "draft") is draft_plan


@pytest.mark.parametrize("target", ["approved", "rejected", "archived"])
def test_undefined_transitions_are_rejected(draft_plan, target):
    with pytest.raises(InvalidStatusTransition) as exc_info:
        plan_lifecycle.transition_status(draft_plan, target)
    assert exc_info.value.current == "draft"
    assert exc_info.value.requested == target


def test_submitted_plan_cannot_go_back_to_draft(draft_plan):
    submitted = plan_lifecycle.transition_status(draft_plan, "submitted")
    with pytest.raises(InvalidStatusTransition):
        plan_lifecycle.transition_status(submitted, "draft")


def test_submitted_plan_stays_editable(draft_plan):
    submitted = plan_lifecycle.transition_status(draft_plan, "submitted")

    assert plan_lifecycle.is_editable(submitted)
    assert not plan_lifecycle.can_insert_catalog_activities(submitted)
    edited = plan_lifecycle.apply_activity_edit(submitted, 0, {"quantity": 1, "frequency": 1, "unit_cost": 1})
    assert edited.general_total_budget == Decimal("4")


def test_reviewed_plan_is_locked(draft_plan):
    approved = draft_plan.model_copy(update={"status": "approved"})

    assert not plan_lifecycle.is_editable(approved)
    with pytest.raises(PlanLockedError):
        plan_lifecycle.apply_activity_edit(approved, 0, {"quantity": 1})


def test_allowed_transitions():
    assert plan_lifecycle.allowed_transitions("draft") == ["submitted"]
    assert plan_lifecycle.allowed_transitions("submitted") == []
    assert plan_lifecycle.allowed_transitions("approved") == []
