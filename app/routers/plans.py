"""
Plans router — create, list, edit and submit facility budget plans.

Mounts under ``/api/plans`` (prefix set in ``main.py``).

All endpoints require a valid JWT token (``get_current_user`` dependency).

Endpoints
---------
POST   /check-existing                — Is there a plan for this facility/program/year?
POST   /                              — Create a plan pre-filled from the catalog.
GET    /                              — Paginated, filterable plan listing.
GET    /facility                      — All plans of one facility.
GET    /mine                          — All plans of the caller's hospital.
GET    /{plan_id}                     — Plan with its activities.
PUT    /{plan_id}/activities/{id}     — Edit one activity.
PUT    /{plan_id}/activities          — Edit several activities atomically.
PATCH  /{plan_id}/status              — Change the plan status.
GET    /{plan_id}/status              — Status, allowed transitions and history.
DELETE /{plan_id}                     — Delete a draft plan.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse, PaginationParams
from app.schemas.plan import (
    ActivitiesBulkUpdate,
    ActivityUpdate,
    PlanCheckRequest,
    PlanCheckResponse,
    PlanCreateRequest,
    PlanData,
    PlanFilterParams,
    PlanListResponse,
    PlanStatusInfo,
    PlanStatusUpdate,
    PlanSummary,
)
from app.services import plan_service
from app.services.auth_service import get_current_user
from app.services.location_registry import LocationRegistry, get_location_registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Plans"])

CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[Session, Depends(get_db)]


# ---------------------------------------------------------------------------
# Shared dependencies: build filter/pagination models from Query parameters
# ---------------------------------------------------------------------------


def _filter_params(
    facility_name: Annotated[str | None, Query(max_length=255)] = None,
    facility_type: Annotated[str | None, Query(max_length=50)] = None,
    district: Annotated[str | None, Query(max_length=255)] = None,
    province: Annotated[str | None, Query(max_length=255)] = None,
    program: Annotated[str | None, Query(max_length=50, description="e.g. 'HIV'.")] = None,
    fiscal_year: Annotated[str | None, Query(max_length=20, description="e.g. 'FY 2024'.")] = None,
    plan_status: Annotated[str | None, Query(alias="status", max_length=50)] = None,
) -> PlanFilterParams:
    return PlanFilterParams(
        facility_name=facility_name,
        facility_type=facility_type,
        district=district,
        province=province,
        program=program,
        fiscal_year=fiscal_year,
        status=plan_status,
    )


def _pagination_params(
    page: Annotated[int, Query(description="1-based page.", ge=1)] = 1,
    page_size: Annotated[int, Query(description="Rows per page (max 200).", ge=1, le=200)] = 20,
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


# ---------------------------------------------------------------------------
# Existence check and creation
# ---------------------------------------------------------------------------


@router.post("/check-existing", response_model=PlanCheckResponse, summary="Check for an existing plan")
def check_existing(body: PlanCheckRequest, db: DbSession, _current_user: CurrentUser) -> PlanCheckResponse:
    """Tell whether a plan already exists for the facility, program and year."""
    plan = plan_service.find_plan(db, body.facility_name, body.facility_type, body.program, body.fiscal_year)
    if plan is None:
        return PlanCheckResponse(exists=False, message="No plan exists yet; a new one can be created.")
    return PlanCheckResponse(
        exists=True,
        message=(
            f"A {plan.program} plan for {plan.facility_name} ({plan.fiscal_year}) "
            "already exists. Open it instead of creating a new one."
        ),
        plan_id=plan.id,
    )


@router.post(
    "",
    response_model=PlanData,
    status_code=status.HTTP_201_CREATED,
    summary="Create a plan",
    responses={
        201: {"description": "Plan created with the catalog activities."},
        409: {"description": "A plan already exists for this facility, program and year."},
        422: {"description": "Invalid facility, program or fiscal year, or facility not in the registry."},
    },
)
def create_plan(
    body: PlanCreateRequest,
    db: DbSession,
    registry: Annotated[LocationRegistry, Depends(get_location_registry)],
    current_user: CurrentUser,
) -> PlanData:
    plan = plan_service.create_plan(db, body, current_user, registry)
    return PlanData.model_validate(plan)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.get("", response_model=PlanListResponse, summary="List plans")
def list_plans(
    filters: Annotated[PlanFilterParams, Depends(_filter_params)],
    pagination: Annotated[PaginationParams, Depends(_pagination_params)],
    db: DbSession,
    _current_user: CurrentUser,
) -> PlanListResponse:
    return plan_service.list_plans(db, filters, pagination)


@router.get("/facility", response_model=list[PlanSummary], summary="Plans of a facility")
def list_facility_plans(
    facility_name: Annotated[str, Query(min_length=1)],
    facility_type: Annotated[str, Query(min_length=1)],
    district: Annotated[str, Query(min_length=1)],
    province: Annotated[str, Query(min_length=1)],
    db: DbSession,
    _current_user: CurrentUser,
) -> list[PlanSummary]:
    plans = plan_service.list_plans_for_facility(db, facility_name, facility_type, district, province)
    return [PlanSummary.model_validate(plan) for plan in plans]


@router.get("/mine", response_model=list[PlanSummary], summary="Plans of the caller's hospital")
def list_my_plans(db: DbSession, current_user: CurrentUser) -> list[PlanSummary]:
    filters = PlanFilterParams(facility_name=current_user.hospital, province=current_user.province)
    listing = plan_service.list_plans(db, filters, PaginationParams(page=1, page_size=200))
    return listing.rows


# ---------------------------------------------------------------------------
# Single plan
# ---------------------------------------------------------------------------


@router.get("/{plan_id}", response_model=PlanData, summary="Get a plan")
def get_plan(plan_id: int, db: DbSession, _current_user: CurrentUser) -> PlanData:
    return PlanData.model_validate(plan_service.get_plan(db, plan_id))


@router.put(
    "/{plan_id}/activities/{activity_id}",
    response_model=PlanData,
    summary="Edit one activity",
    responses={
        404: {"description": "Unknown plan or activity."},
        409: {"description": "The plan status does not allow edits."},
        422: {"description": "Invalid quantity, frequency or unit cost."},
    },
)
def update_activity(
    plan_id: int,
    activity_id: int,
    body: ActivityUpdate,
    db: DbSession,
    _current_user: CurrentUser,
) -> PlanData:
    plan = plan_service.update_activity(db, plan_id, activity_id, body)
    return PlanData.model_validate(plan)


@router.put("/{plan_id}/activities", response_model=PlanData, summary="Edit several activities")
def update_activities(
    plan_id: int,
    body: ActivitiesBulkUpdate,
    db: DbSession,
    _current_user: CurrentUser,
) -> PlanData:
    """All edits are applied, or none is when any of them is invalid."""
    plan = plan_service.update_activities(db, plan_id, body.activities)
    return PlanData.model_validate(plan)


@router.patch(
    "/{plan_id}/status",
    response_model=PlanData,
    summary="Change plan status",
    responses={400: {"description": "Transition not allowed from the current status."}},
)
def change_status(
    plan_id: int,
    body: PlanStatusUpdate,
    db: DbSession,
    current_user: CurrentUser,
) -> PlanData:
    plan = plan_service.change_status(db, plan_id, body.status, body.reviewed_by or current_user.name)
    return PlanData.model_validate(plan)


@router.get("/{plan_id}/status", response_model=PlanStatusInfo, summary="Plan status and history")
def get_status(plan_id: int, db: DbSession, _current_user: CurrentUser) -> PlanStatusInfo:
    return plan_service.get_status_info(db, plan_id)


@router.delete(
    "/{plan_id}",
    response_model=MessageResponse,
    summary="Delete a draft plan",
    responses={409: {"description": "Only draft plans can be deleted."}},
)
def delete_plan(plan_id: int, db: DbSession, current_user: CurrentUser) -> MessageResponse:
    plan_service.delete_plan(db, plan_id)
    logger.info("Plan %d deleted by user id=%d", plan_id, current_user.id)
    return MessageResponse(message="Plan deleted")
