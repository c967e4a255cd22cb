"""
Activity Catalog — per-program activity templates used to seed new plans.

The catalog is read from ``activity_catalog.csv`` (``program``,
``facility_type``, ``category``, ``activity``, ``description``).  Row order
in the file is the display order of the plan grid, and activity positions
are the only way to correlate edits before a plan is persisted, so the
order returned by :meth:`ActivityCatalog.template_for` never changes between
calls.

``facility_type`` is ``all`` for every row today: hospitals and health
centers share one catalog per program.  A row scoped to ``Hospital`` or
``Health Center`` would only be offered to that facility type.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from app.config import get_settings
from app.utils.constants import (
    CATALOG_SCOPE_ALL,
    FACILITY_TYPE_HEALTH_CENTER,
    FACILITY_TYPE_HOSPITAL,
)

logger = logging.getLogger(__name__)

CATALOG_FILE = "activity_catalog.csv"


@dataclass(frozen=True)
class ActivityEntry:
    """One template line of a program's catalog."""

    category: str
    activity: str
    description: str


@dataclass(frozen=True)
class _ScopedEntry:
    scope: str
    entry: ActivityEntry


class ActivityCatalog:
    def __init__(self, entries_by_program: Mapping[str, tuple[_ScopedEntry, ...]]) -> None:
        self._entries_by_program = entries_by_program

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> ActivityCatalog:
        frame = frame.fillna("")
        entries: dict[str, list[_ScopedEntry]] = {}
        for row in frame.itertuples(index=False):
            program = str(row.program).strip().upper()
            activity = str(row.activity).strip()
            if not program or not activity:
                continue
            scope = str(row.facility_type).strip() or CATALOG_SCOPE_ALL
            entries.setdefault(program, []).append(
                _ScopedEntry(
                    scope=scope,
                    entry=ActivityEntry(
                        category=str(row.category).strip(),
                        activity=activity,
                        description=str(row.description).strip(),
                    ),
                )
            )
        logger.debug(
            "ActivityCatalog built: %s",
            {program: len(items) for program, items in entries.items()},
        )
        return cls(MappingProxyType({p: tuple(items) for p, items in entries.items()}))

    @classmethod
    def from_file(cls, path: Path) -> ActivityCatalog:
        return cls.from_frame(pd.read_csv(path, dtype=str))

    def programs(self) -> list[str]:
        return sorted(self._entries_by_program)

    def template_for(self, program: str, is_hospital: bool = True) -> tuple[ActivityEntry, ...]:
        """Return the ordered activity templates of *program*.

        Unknown programs yield an empty tuple.
        """
        facility_type = FACILITY_TYPE_HOSPITAL if is_hospital else FACILITY_TYPE_HEALTH_CENTER
        return tuple(
            item.entry
            for item in self._entries_by_program.get(program.upper(), ())
            if item.scope in (CATALOG_SCOPE_ALL, facility_type)
        )

    def categories_for(self, program: str) -> list[str]:
        categories: list[str] = []
        for item in self._entries_by_program.get(program.upper(), ()):
            if item.entry.category and item.entry.category not in categories:
                categories.append(item.entry.category)
        return categories


@lru_cache
def get_activity_catalog() -> ActivityCatalog:
    path = get_settings().REFERENCE_DATA_DIR / CATALOG_FILE
    catalog = ActivityCatalog.from_file(path)
    logger.info("Activity catalog loaded from %s", path)
    return catalog
