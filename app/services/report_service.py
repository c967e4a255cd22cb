"""
Report service — read-only financial report of a plan.

Builds the printable view (rows, category subtotals, quarter totals and
general total) from the budget engine rather than from stored amounts, so a
report is always consistent with the current costing inputs.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from app.exporters.excel_exporter import ExcelExporter
from app.schemas.plan import PlanData
from app.schemas.report import CategorySubtotal, PlanReport, ReportRow
from app.services import budget_engine, plan_service
from app.utils.constants import QUARTERS

logger = logging.getLogger(__name__)

_EXCEL_HEADERS: list[str] = [
    "Category",
    "Activity",
    "Description",
    "Quantity",
    "Frequency",
    "Unit cost",
    "Amount Q1",
    "Amount Q2",
    "Amount Q3",
    "Amount Q4",
    "Annual budget",
    "Comment",
]
# Zero-based indices of the money/number columns above
_EXCEL_NUMERIC_COLS: set[int] = set(range(3, 11))


def build_report(plan: PlanData) -> PlanReport:
    plan = budget_engine.recompute_plan(plan)

    rows: list[ReportRow] = []
    subtotals: dict[str, list[Decimal]] = {}
    for activity in plan.activities:
        rows.append(ReportRow(**activity.model_dump(exclude={"id"})))
        bucket = subtotals.setdefault(activity.category, [Decimal(0)] * len(QUARTERS))
        for i, amount in enumerate(budget_engine.quarter_amounts(activity)):
            bucket[i] += amount

    return PlanReport(
        plan_id=plan.id,
        plan_code=plan.plan_code,
        title=f"{plan.program} plan - {plan.facility_name} - {plan.fiscal_year}",
        facility_name=plan.facility_name,
        facility_type=plan.facility_type,
        facility_district=plan.facility_district,
        province=plan.province,
        program=plan.program,
        fiscal_year=plan.fiscal_year,
        status=plan.status,
        rows=rows,
        subtotals=[
            CategorySubtotal(
                category=category,
                amount_q1=amounts[0],
                amount_q2=amounts[1],
                amount_q3=amounts[2],
                amount_q4=amounts[3],
                total=sum(amounts, Decimal(0)),
            )
            for category, amounts in subtotals.items()
        ],
        quarter_totals=budget_engine.plan_quarter_totals(plan),
        general_total=plan.general_total_budget,
    )


def get_plan_report(db: Session, plan_id: int) -> PlanReport:
    plan = plan_service.get_plan(db, plan_id)
    report = build_report(PlanData.model_validate(plan))
    logger.debug("get_plan_report id=%d: %d rows, total=%s", plan_id, len(report.rows), report.general_total)
    return report


def export_plan_excel(db: Session, plan_id: int) -> tuple[str, bytes]:
    """Render the plan report as ``.xlsx``.

    Returns:
        ``(filename, file_bytes)``.
    """
    report = get_plan_report(db, plan_id)

    data_rows: list[list[Any]] = [
        [
            row.category,
            row.activity,
            row.activity_description,
            float(row.quantity),
            float(row.frequency),
            float(row.unit_cost),
            float(row.amount_q1),
            float(row.amount_q2),
            float(row.amount_q3),
            float(row.amount_q4),
            float(row.annual_budget),
            row.comment,
        ]
        for row in report.rows
    ]

    kpis: dict[str, Any] = {
        f"Total {quarter}": float(amount) for quarter, amount in report.quarter_totals.items()
    }
    kpis["General total"] = float(report.general_total)

    exporter = ExcelExporter(
        title=report.title,
        filters={
            "Facility": f"{report.facility_name} ({report.facility_type})",
            "District": report.facility_district,
            "Province": report.province,
            "Status": report.status,
        },
        sheet_name=report.program,
    )
    exporter.add_header(num_cols=len(_EXCEL_HEADERS)).add_kpi_row(kpis)
    exporter.add_data_table(_EXCEL_HEADERS, data_rows, numeric_cols=_EXCEL_NUMERIC_COLS)
    exporter.add_total_row(
        "General total",
        {6 + i: float(amount) for i, amount in enumerate(report.quarter_totals.values())}
        | {10: float(report.general_total)},
    )
    exporter.skip_rows()
    exporter.add_data_table(
        ["Category", "Q1", "Q2", "Q3", "Q4", "Total"],
        [
            [s.category, float(s.amount_q1), float(s.amount_q2), float(s.amount_q3), float(s.amount_q4), float(s.total)]
            for s in report.subtotals
        ],
        numeric_cols={1, 2, 3, 4, 5},
    )
    file_bytes = exporter.finalize()

    safe_facility = report.facility_name.replace(" ", "_").lower()
    safe_fy = report.fiscal_year.replace(" ", "").lower()
    filename = f"plan_{report.program.lower()}_{safe_facility}_{safe_fy}.xlsx"
    logger.info("Exported plan %d to Excel (%d bytes)", plan_id, len(file_bytes))
    return filename, file_bytes
