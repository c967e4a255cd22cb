"""
Pydantic v2 schemas for location lookups and onboarding.

Option lists are returned as ``{value, label}`` pairs so that dropdowns can
show a capitalised label while submitting the exact registry value.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class OptionItem(BaseModel):
    value: str
    label: str


class HospitalDistrictResponse(BaseModel):
    hospital: str
    district: str | None = Field(
        default=None, description="None when the hospital is not in the registry."
    )


class CatalogEntryResponse(BaseModel):
    category: str
    activity: str
    activity_description: str


class OnboardingData(BaseModel):
    """The user's saved location, i.e. the onboarding state."""

    name: str
    email: str
    province: str
    district: str
    hospital: str


class OnboardingUpdate(BaseModel):
    province: str = Field(..., min_length=1, max_length=255)
    district: str = Field(..., min_length=1, max_length=255)
    hospital: str = Field(..., min_length=1, max_length=255)


class FacilityContext(BaseModel):
    """Facility scope derived from the user's onboarding location.

    Attributes:
        facility_name: The user's hospital.
        facility_type: Always ``"Hospital"`` for the onboarding facility.
        district: District resolved from the hospital.
        province: Province the user selected.
        programs: Programs offered at the hospital.
        health_centers: Program → facilities under the hospital.
    """

    facility_name: str
    facility_type: str
    district: str
    province: str
    programs: list[str] = Field(default_factory=list)
    health_centers: dict[str, list[str]] = Field(default_factory=dict)
