"""
Plan Lifecycle Model — building draft plans and moving them through status.

A plan is born in ``draft`` with one zeroed activity per catalog entry of
its program.  Users then edit quantities and costs; every edit goes through
:func:`apply_activity_edit`, which recomputes the touched activity and the
plan total before returning.  The only status change interpreted here is
``draft → submitted``; approval states are opaque strings owned by the
review workflow.

Nothing in this module checks for an existing plan with the same
(facility_name, facility_type, program, fiscal_year).  Callers must run the
existence query first (``plan_service.find_plan``); the database unique
constraint is the last line of defence.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from app.schemas.plan import ActivityData, PlanData, PlanMetadata
from app.services import budget_engine
from app.services.activity_catalog import ActivityCatalog, ActivityEntry, get_activity_catalog
from app.utils.constants import (
    EDITABLE_PLAN_STATUSES,
    PLAN_STATUS_DRAFT,
    PLAN_STATUS_SUBMITTED,
    PLAN_STATUS_TRANSITIONS,
)

logger = logging.getLogger(__name__)

EDITABLE_ACTIVITY_FIELDS = frozenset({"quantity", "frequency", "unit_cost", "comment"})


class InvalidStatusTransition(ValueError):
    """Raised when a status change is not defined for the current status."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Invalid status transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class PlanLockedError(ValueError):
    """Raised when editing a plan whose status no longer allows edits."""


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def create_empty_activity(entry: ActivityEntry) -> ActivityData:
    return ActivityData(
        category=entry.category,
        activity=entry.activity,
        activity_description=entry.description,
        comment="",
    )


def generate_default_activities(
    program: str,
    is_hospital: bool,
    catalog: ActivityCatalog | None = None,
) -> list[ActivityData]:
    """One zeroed activity per catalog entry of *program*, in catalog order."""
    catalog = catalog or get_activity_catalog()
    return [create_empty_activity(entry) for entry in catalog.template_for(program, is_hospital)]


def instantiate_plan(
    metadata: PlanMetadata,
    program: str,
    is_hospital: bool,
    catalog: ActivityCatalog | None = None,
) -> PlanData:
    """Build a new ``draft`` plan seeded from the activity catalog.

    Audit fields are copied from *metadata* verbatim; ``created_at`` and
    ``updated_at`` fall back to the current UTC time when not supplied.
    """
    now = datetime.now(timezone.utc)
    plan = PlanData(
        facility_name=metadata.facility_name,
        facility_type=metadata.facility_type,
        facility_district=metadata.facility_district,
        province=metadata.province,
        program=program.upper(),
        fiscal_year=metadata.fiscal_year,
        status=PLAN_STATUS_DRAFT,
        activities=generate_default_activities(program, is_hospital, catalog),
        created_by=metadata.created_by,
        created_by_email=metadata.created_by_email,
        created_at=metadata.created_at or now,
        updated_at=metadata.updated_at or now,
    )
    logger.debug(
        "instantiate_plan %s/%s/%s: %d activities",
        plan.facility_name, plan.program, plan.fiscal_year, len(plan.activities),
    )
    return plan


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def allowed_transitions(status: str) -> list[str]:
    return sorted(PLAN_STATUS_TRANSITIONS.get(status, frozenset()))


def check_transition(current: str, requested: str) -> None:
    if requested not in PLAN_STATUS_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransition(current, requested)


def transition_status(plan: PlanData, new_status: str, submitted_by: str | None = None) -> PlanData:
    """Return a copy of *plan* moved to *new_status*.

    Requesting the current status is a no-op.

    Raises:
        InvalidStatusTransition: For anything but ``draft → submitted``.
    """
    if plan.status == new_status:
        return plan
    check_transition(plan.status, new_status)

    now = datetime.now(timezone.utc)
    update: dict[str, Any] = {"status": new_status, "updated_at": now}
    if new_status == PLAN_STATUS_SUBMITTED:
        update["submitted_at"] = now
        update["submitted_by"] = submitted_by or plan.created_by
    return plan.model_copy(update=update)


def is_editable(plan: PlanData) -> bool:
    return plan.status in EDITABLE_PLAN_STATUSES


def can_insert_catalog_activities(plan: PlanData) -> bool:
    return plan.status == PLAN_STATUS_DRAFT


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def apply_activity_edit(plan: PlanData, index: int, changes: Mapping[str, Any]) -> PlanData:
    """Apply *changes* to the activity at *index* and recompute totals.

    Only quantity, frequency, unit_cost and comment are editable; derived
    amounts are recomputed, never taken from *changes*.

    Raises:
        PlanLockedError: If the plan status does not allow edits.
        IndexError: If *index* is out of range.
    """
    if not is_editable(plan):
        raise PlanLockedError(f"Plan in status '{plan.status}' cannot be edited")

    if not 0 <= index < len(plan.activities):
        raise IndexError(f"Activity index {index} out of range")

    activities = list(plan.activities)
    update = {
        key: value
        for key, value in changes.items()
        if key in EDITABLE_ACTIVITY_FIELDS and value is not None
    }
    activities[index] = budget_engine.recompute_activity(activities[index].model_copy(update=update))

    edited = plan.model_copy(
        update={"activities": activities, "updated_at": datetime.now(timezone.utc)}
    )
    edited.general_total_budget = budget_engine.plan_total(edited)
    return edited
