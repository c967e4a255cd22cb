"""
Reports router — read-only financial report of a plan.

Mounts under ``/api/reports`` (prefix set in ``main.py``).

Endpoints
---------
GET /plans/{plan_id}        — Report as JSON (rows, subtotals, totals).
GET /plans/{plan_id}/excel  — Same report as an ``.xlsx`` download.
"""

from __future__ import annotations

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.report import PlanReport
from app.services import report_service
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reports"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/plans/{plan_id}", response_model=PlanReport, summary="Plan financial report")
def get_plan_report(
    plan_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> PlanReport:
    return report_service.get_plan_report(db, plan_id)


@router.get(
    "/plans/{plan_id}/excel",
    response_class=StreamingResponse,
    summary="Export plan report to Excel",
    responses={
        200: {"description": "Excel file.", "content": {_XLSX_MEDIA_TYPE: {}}},
        404: {"description": "Unknown plan."},
    },
)
def export_plan_excel(
    plan_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[User, Depends(get_current_user)],
) -> StreamingResponse:
    filename, file_bytes = report_service.export_plan_excel(db, plan_id)
    logger.info("GET /reports/plans/%d/excel -> %s", plan_id, filename)
    return StreamingResponse(
        io.BytesIO(file_bytes),
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
