"""
Onboarding service — the user's saved location as explicit application state.

The browser app kept the selected province/district/hospital in persisted
client-side stores.  Here that state is the ``User`` row itself: it is read
through :func:`get_onboarding`, changed through :func:`update_onboarding`,
and turned into a :class:`FacilityContext` for components that need to know
which facility and programs the user plans for.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.location import FacilityContext, OnboardingData, OnboardingUpdate
from app.services.location_registry import LocationRegistry
from app.services.plan_validation import ensure_valid, validate_location
from app.utils.constants import FACILITY_TYPE_HOSPITAL

logger = logging.getLogger(__name__)


def get_onboarding(user: User) -> OnboardingData:
    return OnboardingData(
        name=user.name,
        email=user.email,
        province=user.province,
        district=user.district,
        hospital=user.hospital,
    )


def update_onboarding(
    db: Session, user: User, payload: OnboardingUpdate, registry: LocationRegistry
) -> OnboardingData:
    """Replace the user's location after checking it against the registry.

    Raises:
        HTTPException 422: If the triple is inconsistent.
    """
    ensure_valid(validate_location(registry, payload.province, payload.district, payload.hospital))

    user.province = payload.province
    user.district = payload.district
    user.hospital = payload.hospital
    db.commit()
    db.refresh(user)

    logger.info("Onboarding updated for user id=%d: %s/%s/%s", user.id, user.province, user.district, user.hospital)
    return get_onboarding(user)


def facility_context(user: User, registry: LocationRegistry) -> FacilityContext:
    """Describe the user's hospital: district, programs and health centers.

    The district comes from the registry when the hospital is known, and
    falls back to the district saved at onboarding otherwise.
    """
    programs = registry.programs_for(user.hospital)
    return FacilityContext(
        facility_name=user.hospital,
        facility_type=FACILITY_TYPE_HOSPITAL,
        district=registry.district_of(user.hospital) or user.district,
        province=user.province,
        programs=programs,
        health_centers={
            program: registry.facilities_for(program, user.hospital)
            for program in programs
        },
    )
