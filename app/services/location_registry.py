"""
Location Registry — province → district → hospital → facility lookups.

The registry is built once from three flat CSV tables shipped under
``Settings.REFERENCE_DATA_DIR``:

- ``districts_provinces.csv`` (``province``, ``district``) — may contain
  duplicate rows and inconsistent capitalisation; both are normalised.
- ``hospitals.csv`` (``hospital``, ``district``).
- ``facility_programs.csv`` (``program``, ``hospital``, ``facility``) — a row
  with an empty ``facility`` marks a program that is offered at the hospital
  but has no sub-facilities.

Every query answers with a fresh ``list`` built from immutable internal
tuples, so callers can never mutate the registry.  Unknown provinces,
hospitals, or programs yield empty results (or ``None`` for single-value
lookups) instead of raising: forms treat an empty option list as "nothing
selectable yet".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from app.config import get_settings
from app.utils.constants import HOSPITAL_ONLY_PROGRAMS

logger = logging.getLogger(__name__)

DISTRICTS_FILE = "districts_provinces.csv"
HOSPITALS_FILE = "hospitals.csv"
FACILITIES_FILE = "facility_programs.csv"


def display_label(value: str) -> str:
    """Return *value* trimmed with its first character upper-cased."""
    value = value.strip()
    return value[:1].upper() + value[1:]


def _clean(value: object) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def _read_table(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str, skipinitialspace=True)


def _freeze(table: Mapping[str, list[str]]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in table.items()})


class LocationRegistry:
    """Immutable in-memory view over the location reference tables.

    Use :meth:`from_frames` (tests, ad-hoc data) or :meth:`from_directory`
    (application startup) rather than the constructor.
    """

    def __init__(
        self,
        districts_by_province: Mapping[str, tuple[str, ...]],
        district_by_hospital: Mapping[str, str],
        facilities_by_program: Mapping[str, Mapping[str, tuple[str, ...]]],
    ) -> None:
        self._districts_by_province = districts_by_province
        self._district_by_hospital = district_by_hospital
        self._facilities_by_program = facilities_by_program

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_frames(
        cls,
        districts: pd.DataFrame,
        hospitals: pd.DataFrame,
        facilities: pd.DataFrame,
    ) -> LocationRegistry:
        districts_by_province: dict[str, list[str]] = {}
        for row in districts.itertuples(index=False):
            province = _clean(row.province)
            district = _clean(row.district)
            if not province or not district:
                continue
            label = display_label(district)
            bucket = districts_by_province.setdefault(province, [])
            if label not in bucket:
                bucket.append(label)
        for bucket in districts_by_province.values():
            bucket.sort()

        district_by_hospital: dict[str, str] = {}
        for row in hospitals.itertuples(index=False):
            hospital = _clean(row.hospital)
            district = _clean(row.district)
            if hospital and district:
                district_by_hospital.setdefault(hospital, display_label(district))

        facilities_by_program: dict[str, dict[str, list[str]]] = {}
        for row in facilities.itertuples(index=False):
            program = _clean(row.program).upper()
            hospital = _clean(row.hospital)
            if not program or not hospital:
                continue
            bucket = facilities_by_program.setdefault(program, {}).setdefault(hospital, [])
            facility = _clean(row.facility)
            if facility and facility not in bucket:
                bucket.append(facility)

        registry = cls(
            districts_by_province=MappingProxyType(
                {p: tuple(d) for p, d in districts_by_province.items()}
            ),
            district_by_hospital=MappingProxyType(district_by_hospital),
            facilities_by_program=MappingProxyType(
                {p: _freeze(h) for p, h in facilities_by_program.items()}
            ),
        )
        logger.debug(
            "LocationRegistry built: %d provinces, %d hospitals, %d programs",
            len(districts_by_province), len(district_by_hospital), len(facilities_by_program),
        )
        return registry

    @classmethod
    def from_directory(cls, data_dir: Path) -> LocationRegistry:
        """Load the three CSV tables from *data_dir*.

        Raises:
            FileNotFoundError: If one of the tables is missing.  A registry
                without reference data is a deployment error, not a lookup
                miss, so it is not silenced.
        """
        return cls.from_frames(
            _read_table(data_dir / DISTRICTS_FILE),
            _read_table(data_dir / HOSPITALS_FILE),
            _read_table(data_dir / FACILITIES_FILE),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_provinces(self) -> list[str]:
        return sorted(self._districts_by_province)

    def list_districts(self, province: str) -> list[str]:
        return list(self._districts_by_province.get(province, ()))

    def province_of_district(self, district: str) -> str | None:
        label = display_label(district)
        for province, districts in self._districts_by_province.items():
            if label in districts:
                return province
        return None

    def list_hospitals(self) -> list[str]:
        return sorted(self._district_by_hospital)

    def district_of(self, hospital: str) -> str | None:
        return self._district_by_hospital.get(hospital)

    def hospitals_in(self, province: str, district: str) -> list[str]:
        """Hospitals located in *district*, provided it belongs to *province*."""
        label = display_label(district)
        if label not in self._districts_by_province.get(province, ()):
            return []
        return sorted(
            hospital
            for hospital, hosp_district in self._district_by_hospital.items()
            if hosp_district == label
        )

    def hospitals_for_program(self, program: str) -> list[str]:
        return sorted(self._facilities_by_program.get(program.upper(), {}))

    def programs_for(self, hospital: str) -> list[str]:
        return sorted(
            program
            for program, hospitals in self._facilities_by_program.items()
            if hospital in hospitals
        )

    def facilities_for(self, program: str, hospital: str) -> list[str]:
        """Facilities running *program* under *hospital*, in table order.

        Hospital-only programs (TB) never have sub-facilities, whatever the
        table says.
        """
        program = program.upper()
        if program in HOSPITAL_ONLY_PROGRAMS:
            return []
        return list(self._facilities_by_program.get(program, {}).get(hospital, ()))


@lru_cache
def get_location_registry() -> LocationRegistry:
    data_dir = get_settings().REFERENCE_DATA_DIR
    registry = LocationRegistry.from_directory(data_dir)
    logger.info("Location registry loaded from %s", data_dir)
    return registry
