"""
Location and catalog lookup router.

Mounts under ``/api/locations`` (prefix set in ``main.py``).

These endpoints feed the registration and onboarding dropdowns, so they do
not require authentication.

Endpoints
---------
GET /provinces                          — Province options.
GET /districts?province=                — Districts of a province.
GET /hospitals[?province=&district=]    — Hospitals, optionally by district.
GET /hospitals?program=                 — Hospitals running a program.
GET /hospitals/{hospital}/district      — District of a hospital.
GET /facilities?program=&hospital=      — Health centers of a program/hospital.
GET /programs                           — Programs that have an activity catalog.
GET /catalog/{program}/activities       — Catalog entries of a program.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.schemas.location import CatalogEntryResponse, HospitalDistrictResponse, OptionItem
from app.services.activity_catalog import ActivityCatalog, get_activity_catalog
from app.services.location_registry import LocationRegistry, display_label, get_location_registry
from app.utils.constants import FACILITY_TYPE_HOSPITAL

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Locations"])

Registry = Annotated[LocationRegistry, Depends(get_location_registry)]


def _options(values: list[str]) -> list[OptionItem]:
    return [OptionItem(value=value, label=display_label(value)) for value in values]


@router.get("/provinces", response_model=list[OptionItem], summary="Provinces")
def list_provinces(registry: Registry) -> list[OptionItem]:
    return _options(registry.list_provinces())


@router.get("/districts", response_model=list[OptionItem], summary="Districts of a province")
def list_districts(
    province: Annotated[str, Query(min_length=1, description="Province name, e.g. 'Northern'.")],
    registry: Registry,
) -> list[OptionItem]:
    """Unknown provinces return an empty list rather than 404."""
    return _options(registry.list_districts(province))


@router.get("/hospitals", response_model=list[OptionItem], summary="Hospitals")
def list_hospitals(
    registry: Registry,
    province: Annotated[str | None, Query()] = None,
    district: Annotated[str | None, Query()] = None,
    program: Annotated[str | None, Query(description="e.g. 'HIV'.")] = None,
) -> list[OptionItem]:
    """All hospitals, those running *program*, or those of *district* when
    both location filters are given.  Unknown values return an empty list.
    """
    if program:
        return _options(registry.hospitals_for_program(program))
    if province and district:
        return _options(registry.hospitals_in(province, district))
    return _options(registry.list_hospitals())


@router.get(
    "/hospitals/{hospital}/district",
    response_model=HospitalDistrictResponse,
    summary="District of a hospital",
)
def get_hospital_district(hospital: str, registry: Registry) -> HospitalDistrictResponse:
    return HospitalDistrictResponse(hospital=hospital, district=registry.district_of(hospital))


@router.get("/facilities", response_model=list[str], summary="Health centers of a program")
def list_facilities(
    program: Annotated[str, Query(min_length=1)],
    hospital: Annotated[str, Query(min_length=1)],
    registry: Registry,
) -> list[str]:
    return registry.facilities_for(program, hospital)


@router.get("/programs", response_model=list[str], summary="Programs")
def list_programs(
    catalog: Annotated[ActivityCatalog, Depends(get_activity_catalog)],
) -> list[str]:
    return catalog.programs()


@router.get(
    "/catalog/{program}/activities",
    response_model=list[CatalogEntryResponse],
    summary="Activity catalog of a program",
)
def list_catalog_activities(
    program: str,
    catalog: Annotated[ActivityCatalog, Depends(get_activity_catalog)],
    facility_type: Annotated[str, Query()] = FACILITY_TYPE_HOSPITAL,
) -> list[CatalogEntryResponse]:
    entries = catalog.template_for(program, is_hospital=facility_type == FACILITY_TYPE_HOSPITAL)
    logger.debug("Catalog %s/%s: %d entries", program, facility_type, len(entries))
    return [
        CatalogEntryResponse(
            category=entry.category,
            activity=entry.activity,
            activity_description=entry.description,
        )
        for entry in entries
    ]
