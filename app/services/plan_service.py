"""
Plan persistence service.

All database access for the ``/api/plans`` endpoints lives here.  The
functions wrap the pure lifecycle model and budget engine with SQLAlchemy
reads and writes, and raise ``HTTPException`` for not-found, conflict and
validation failures so routers stay thin.

Design notes
------------
- Duplicate plans are detected twice: ``find_plan`` answers the explicit
  existence check, and the ``uq_plan_facility_program_fy`` constraint turns
  a lost race into an ``IntegrityError`` which is reported as HTTP 409.
- Edits are applied through ``plan_lifecycle.apply_activity_edit`` on a
  ``PlanData`` snapshot; only the recomputed values are written back.
- ``plan_code`` is derived from the primary key after the first flush so
  it can never collide, unlike a count-based sequence.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.plan import Plan, PlanActivity
from app.models.plan_status_history import PlanStatusHistory
from app.models.user import User
from app.schemas.common import PaginationParams
from app.schemas.plan import (
    ActivityBulkItem,
    ActivityUpdate,
    PlanCreateRequest,
    PlanData,
    PlanFilterParams,
    PlanListResponse,
    PlanMetadata,
    PlanStatusInfo,
    PlanSummary,
    StatusHistoryItem,
)
from app.services import budget_engine, plan_lifecycle
from app.services.location_registry import LocationRegistry
from app.services.plan_validation import (
    ensure_valid,
    match_plan_facility,
    validate_activity,
    validate_plan_facility,
    validate_plan_metadata,
)
from app.utils.constants import (
    FACILITY_TYPE_HOSPITAL,
    PLAN_STATUS_DESCRIPTIONS,
    PLAN_STATUS_DRAFT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _duplicate_conflict(facility_name: str, program: str, fiscal_year: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"A plan already exists for {program} program at {facility_name} for {fiscal_year}",
    )


def _plan_code(plan: Plan) -> str:
    year = (plan.created_at or datetime.now(timezone.utc)).year
    return f"plan-{year}-{plan.id:03d}"


def _history_description(previous: str | None, new: str) -> str:
    if previous is None:
        return "Plan created"
    return PLAN_STATUS_DESCRIPTIONS.get(
        f"{previous}->{new}", f"Status changed from {previous} to {new}"
    )


def _write_back(row: PlanActivity, activity) -> None:
    for field in (
        "quantity", "frequency", "unit_cost",
        "amount_q1", "amount_q2", "amount_q3", "amount_q4",
        "annual_budget", "comment",
    ):
        setattr(row, field, getattr(activity, field))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def find_plan(
    db: Session,
    facility_name: str,
    facility_type: str,
    program: str,
    fiscal_year: str,
) -> Plan | None:
    """Return the plan with this business key, if any.

    Facility name and type are compared case-insensitively; program is
    stored upper-cased.
    """
    return (
        db.query(Plan)
        .filter(
            func.lower(Plan.facility_name) == facility_name.strip().lower(),
            func.lower(Plan.facility_type) == facility_type.strip().lower(),
            Plan.program == program.upper(),
            Plan.fiscal_year == fiscal_year,
        )
        .first()
    )


def get_plan(db: Session, plan_id: int) -> Plan:
    """Load a plan with its activities.

    Raises:
        HTTPException 404: If no plan has ``plan_id``.
    """
    plan: Plan | None = db.get(Plan, plan_id)
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Plan with id={plan_id} not found.",
        )
    return plan


def list_plans_for_facility(
    db: Session,
    facility_name: str,
    facility_type: str,
    district: str,
    province: str,
) -> list[Plan]:
    plans = (
        db.query(Plan)
        .filter(
            Plan.facility_name == facility_name,
            Plan.facility_type == facility_type,
            Plan.facility_district == district,
            Plan.province == province,
        )
        .order_by(Plan.fiscal_year.desc(), Plan.program)
        .all()
    )
    logger.debug("list_plans_for_facility %s/%s: %d plans", facility_name, facility_type, len(plans))
    return plans


def list_plans(
    db: Session, filters: PlanFilterParams, pagination: PaginationParams
) -> PlanListResponse:
    q = db.query(Plan)
    if filters.facility_name is not None:
        q = q.filter(Plan.facility_name == filters.facility_name)
    if filters.facility_type is not None:
        q = q.filter(Plan.facility_type == filters.facility_type)
    if filters.district is not None:
        q = q.filter(Plan.facility_district == filters.district)
    if filters.province is not None:
        q = q.filter(Plan.province == filters.province)
    if filters.program is not None:
        q = q.filter(Plan.program == filters.program.upper())
    if filters.fiscal_year is not None:
        q = q.filter(Plan.fiscal_year == filters.fiscal_year)
    if filters.status is not None:
        q = q.filter(Plan.status == filters.status)

    total: int = q.count()
    offset = (pagination.page - 1) * pagination.page_size
    plans = (
        q.order_by(Plan.created_at.desc(), Plan.id.desc())
        .offset(offset)
        .limit(pagination.page_size)
        .all()
    )

    logger.debug(
        "list_plans: page=%d size=%d total=%d returned=%d",
        pagination.page, pagination.page_size, total, len(plans),
    )
    return PlanListResponse(
        rows=[PlanSummary.model_validate(plan) for plan in plans],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def save_plan(db: Session, plan_data: PlanData) -> Plan:
    """Persist a new plan, its activities and its creation history entry.

    Derived amounts are recomputed before writing so a stale value object
    can never store inconsistent totals.

    Raises:
        HTTPException 409: If the business key is already taken.
    """
    plan_data = budget_engine.recompute_plan(plan_data)
    now = datetime.now(timezone.utc)
    plan = Plan(
        facility_name=plan_data.facility_name,
        facility_type=plan_data.facility_type,
        facility_district=plan_data.facility_district,
        province=plan_data.province,
        program=plan_data.program,
        fiscal_year=plan_data.fiscal_year,
        status=plan_data.status,
        general_total_budget=plan_data.general_total_budget,
        created_by=plan_data.created_by,
        created_by_email=plan_data.created_by_email,
        created_at=plan_data.created_at or now,
        updated_at=plan_data.updated_at or now,
    )
    plan.activities = [
        PlanActivity(
            sort_order=index,
            category=activity.category,
            activity=activity.activity,
            activity_description=activity.activity_description,
            quantity=activity.quantity,
            frequency=activity.frequency,
            unit_cost=activity.unit_cost,
            amount_q1=activity.amount_q1,
            amount_q2=activity.amount_q2,
            amount_q3=activity.amount_q3,
            amount_q4=activity.amount_q4,
            annual_budget=activity.annual_budget,
            comment=activity.comment,
        )
        for index, activity in enumerate(plan_data.activities)
    ]
    plan.status_history = [
        PlanStatusHistory(
            previous_status=None,
            new_status=plan_data.status,
            reviewed_by=plan_data.created_by or None,
            description=_history_description(None, plan_data.status),
        )
    ]

    db.add(plan)
    try:
        db.flush()
        plan.plan_code = _plan_code(plan)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "Duplicate plan rejected by constraint: %s/%s/%s/%s",
            plan_data.facility_name, plan_data.facility_type,
            plan_data.program, plan_data.fiscal_year,
        )
        raise _duplicate_conflict(plan_data.facility_name, plan_data.program, plan_data.fiscal_year)
    db.refresh(plan)

    logger.info(
        "Plan created: id=%d code=%s facility='%s' program=%s fy=%s activities=%d",
        plan.id, plan.plan_code, plan.facility_name, plan.program,
        plan.fiscal_year, len(plan.activities),
    )
    return plan


def create_plan(
    db: Session, request: PlanCreateRequest, user: User, registry: LocationRegistry
) -> Plan:
    """Validate, check for an existing plan, instantiate from the catalog, save.

    The facility must be a registry hospital, or a health center running the
    program under the user's hospital; it is stored with its registry
    spelling.  District and province default to the user's onboarding
    location.

    Raises:
        HTTPException 422: If the metadata is invalid or the facility is not
            in the registry.
        HTTPException 409: If a plan with the same business key exists.
    """
    ensure_valid(validate_plan_metadata(request.model_dump()))
    ensure_valid(
        validate_plan_facility(
            registry, request.facility_name, request.facility_type, request.program, user.hospital
        )
    )
    facility_name = match_plan_facility(
        registry, request.facility_name, request.facility_type, request.program, user.hospital
    )

    if find_plan(db, facility_name, request.facility_type, request.program, request.fiscal_year):
        raise _duplicate_conflict(facility_name, request.program, request.fiscal_year)

    metadata = PlanMetadata(
        facility_name=facility_name,
        facility_type=request.facility_type,
        facility_district=request.facility_district or user.district,
        province=request.province or user.province,
        fiscal_year=request.fiscal_year,
        created_by=user.name,
        created_by_email=user.email,
    )
    plan_data = plan_lifecycle.instantiate_plan(
        metadata,
        request.program,
        is_hospital=request.facility_type == FACILITY_TYPE_HOSPITAL,
    )
    return save_plan(db, plan_data)


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def _edit_activity(
    plan: Plan,
    snapshot: PlanData,
    activity_id: int,
    changes: ActivityUpdate,
    errors_prefix: str = "",
) -> tuple[PlanData, dict[str, list[str]]]:
    index = next(
        (i for i, activity in enumerate(snapshot.activities) if activity.id == activity_id),
        None,
    )
    if index is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Activity with id={activity_id} not found in plan id={plan.id}.",
        )

    update = changes.model_dump(exclude_none=True, exclude={"id"})
    merged = snapshot.activities[index].model_dump() | update
    errors = {
        f"{errors_prefix}{field}": messages
        for field, messages in validate_activity(merged).items()
    }
    if errors:
        return snapshot, errors

    try:
        edited = plan_lifecycle.apply_activity_edit(snapshot, index, update)
    except plan_lifecycle.PlanLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return edited, {}


def _commit_edits(db: Session, plan: Plan, edited: PlanData) -> Plan:
    rows_by_id = {row.id: row for row in plan.activities}
    for activity in edited.activities:
        _write_back(rows_by_id[activity.id], activity)
    plan.general_total_budget = edited.general_total_budget
    db.commit()
    db.refresh(plan)
    return plan


def update_activity(db: Session, plan_id: int, activity_id: int, changes: ActivityUpdate) -> Plan:
    """Edit one activity and recompute its amounts and the plan total.

    Raises:
        HTTPException 404: Unknown plan or activity.
        HTTPException 409: Plan status does not allow edits.
        HTTPException 422: Invalid costing values.
    """
    plan = get_plan(db, plan_id)
    edited, errors = _edit_activity(plan, PlanData.model_validate(plan), activity_id, changes)
    ensure_valid(errors)

    plan = _commit_edits(db, plan, edited)
    logger.info(
        "Activity %d of plan %d updated; plan total=%s",
        activity_id, plan_id, plan.general_total_budget,
    )
    return plan


def update_activities(db: Session, plan_id: int, items: Sequence[ActivityBulkItem]) -> Plan:
    """Apply several activity edits atomically: all are valid or none is saved."""
    plan = get_plan(db, plan_id)
    snapshot = PlanData.model_validate(plan)
    errors: dict[str, list[str]] = {}

    for position, item in enumerate(items):
        snapshot, item_errors = _edit_activity(
            plan, snapshot, item.id, item, errors_prefix=f"activities.{position}."
        )
        errors.update(item_errors)
    ensure_valid(errors)

    plan = _commit_edits(db, plan, snapshot)
    logger.info("Plan %d: %d activities updated; total=%s", plan_id, len(items), plan.general_total_budget)
    return plan


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


def change_status(db: Session, plan_id: int, new_status: str, reviewed_by: str | None) -> Plan:
    """Move a plan to *new_status* and record the change.

    Raises:
        HTTPException 404: Unknown plan.
        HTTPException 400: Transition not allowed from the current status.
    """
    plan = get_plan(db, plan_id)
    snapshot = PlanData.model_validate(plan)
    previous = plan.status

    try:
        updated = plan_lifecycle.transition_status(snapshot, new_status, submitted_by=reviewed_by)
    except plan_lifecycle.InvalidStatusTransition as exc:
        logger.warning("Plan %d: %s", plan_id, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if updated is snapshot:
        return plan

    plan.status = updated.status
    plan.submitted_at = updated.submitted_at
    plan.submitted_by = updated.submitted_by
    plan.status_history.append(
        PlanStatusHistory(
            previous_status=previous,
            new_status=updated.status,
            reviewed_by=reviewed_by or plan.created_by or None,
            description=_history_description(previous, updated.status),
        )
    )
    db.commit()
    db.refresh(plan)

    logger.info("Plan %d status changed %s -> %s", plan_id, previous, plan.status)
    return plan


def get_status_info(db: Session, plan_id: int) -> PlanStatusInfo:
    plan = get_plan(db, plan_id)
    history = sorted(plan.status_history, key=lambda entry: entry.id, reverse=True)
    return PlanStatusInfo(
        plan_id=plan.id,
        plan_code=plan.plan_code,
        current_status=plan.status,
        allowed_transitions=plan_lifecycle.allowed_transitions(plan.status),
        submitted_at=plan.submitted_at,
        submitted_by=plan.submitted_by,
        history=[StatusHistoryItem.model_validate(entry) for entry in history],
    )


def delete_plan(db: Session, plan_id: int) -> None:
    """Delete a draft plan.

    Raises:
        HTTPException 404: Unknown plan.
        HTTPException 409: Plan is no longer a draft.
    """
    plan = get_plan(db, plan_id)
    if plan.status != PLAN_STATUS_DRAFT:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Only draft plans can be deleted (plan is '{plan.status}').",
        )
    db.delete(plan)
    db.commit()
    logger.info("Plan %d deleted", plan_id)
