"""
Onboarding router.

Mounts under ``/api/onboarding`` (prefix set in ``main.py``).

Endpoints
---------
GET /          — The user's saved province/district/hospital.
PUT /          — Replace the saved location (checked against the registry).
GET /facility  — Facility context: district, programs and health centers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.location import FacilityContext, OnboardingData, OnboardingUpdate
from app.services import onboarding_service
from app.services.auth_service import get_current_user
from app.services.location_registry import LocationRegistry, get_location_registry

router = APIRouter(tags=["Onboarding"])


@router.get("", response_model=OnboardingData, summary="Saved onboarding location")
def get_onboarding(
    current_user: Annotated[User, Depends(get_current_user)],
) -> OnboardingData:
    return onboarding_service.get_onboarding(current_user)


@router.put(
    "",
    response_model=OnboardingData,
    summary="Update onboarding location",
    responses={422: {"description": "Province, district and hospital do not match."}},
)
def update_onboarding(
    payload: OnboardingUpdate,
    db: Annotated[Session, Depends(get_db)],
    registry: Annotated[LocationRegistry, Depends(get_location_registry)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> OnboardingData:
    return onboarding_service.update_onboarding(db, current_user, payload, registry)


@router.get("/facility", response_model=FacilityContext, summary="Facility context of the user")
def get_facility_context(
    registry: Annotated[LocationRegistry, Depends(get_location_registry)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> FacilityContext:
    """Programs and health centers available at the user's hospital."""
    return onboarding_service.facility_context(current_user, registry)
