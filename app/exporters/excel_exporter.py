"""
Excel export helper wrapping xlsxwriter.

Provides ``ExcelExporter`` — a stateful builder that lays out a RIWA plan
report workbook in memory and returns its bytes for streaming via FastAPI's
``StreamingResponse``.

Usage example::

    exporter = ExcelExporter(title="HIV plan - BUTARO HOSPITAL - FY 2024",
                             filters={"District": "Burera"})
    exporter.add_header()
    exporter.add_kpi_row({"General total": 18_000_000.0})
    exporter.add_data_table(headers, rows, numeric_cols={3, 4, 5})
    exporter.add_total_row("Total", {10: 18_000_000.0})
    file_bytes = exporter.finalize()

Design notes
------------
- ``xlsxwriter`` in-memory mode (``BytesIO``); nothing touches the disk.
- Column widths follow the longest value in each column, capped at 60.
- Costing columns use ``#,##0.00``; the currency is implied (RWF).
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any, Sequence

import xlsxwriter
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

_COLOR_PRIMARY = "#0F766E"
_COLOR_DARK = "#134E4A"
_COLOR_WHITE = "#FFFFFF"
_COLOR_ROW_ALT = "#F0FDFA"
_COLOR_BORDER = "#D1D5DB"

_MONEY_FORMAT = "#,##0.00"
_MAX_COL_WIDTH = 60
_MIN_COL_WIDTH = 8
_MIN_HEADER_COLS = 6


class ExcelExporter:
    """Single-sheet workbook builder for plan reports.

    Args:
        title: Report title shown in the merged banner row.
        filters: Ordered ``{label: value}`` pairs describing the report
                 scope (facility, district, status, ...).
        sheet_name: Worksheet tab name, truncated to Excel's 31 chars.
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        sheet_name: str = "Plan",
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._buffer = io.BytesIO()
        self._workbook: Workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._worksheet: Worksheet = self._workbook.add_worksheet(sheet_name[:31])

        self._current_row: int = 0
        self._num_cols: int = _MIN_HEADER_COLS
        self._col_widths: dict[int, int] = {}
        self._formats: dict[str, Any] = self._build_formats()

    # -----------------------------------------------------------------------
    # Format factory
    # -----------------------------------------------------------------------

    def _build_formats(self) -> dict[str, Any]:
        wb = self._workbook
        cell = {"font_size": 9, "valign": "vcenter", "border": 1, "border_color": _COLOR_BORDER}

        return {
            "title": wb.add_format({
                "bold": True,
                "font_size": 14,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY,
                "align": "center",
                "valign": "vcenter",
            }),
            "subtitle": wb.add_format({
                "font_size": 9,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_DARK,
                "align": "center",
                "valign": "vcenter",
            }),
            "filter_key": wb.add_format({**cell, "bold": True, "align": "right", "bg_color": "#E5E7EB"}),
            "filter_value": wb.add_format({**cell, "align": "left"}),
            "kpi_label": wb.add_format({**cell, "bold": True, "align": "center", "bg_color": _COLOR_ROW_ALT}),
            "kpi_value": wb.add_format({
                **cell,
                "bold": True,
                "font_size": 11,
                "font_color": _COLOR_PRIMARY,
                "align": "center",
                "num_format": _MONEY_FORMAT,
            }),
            "col_header": wb.add_format({
                **cell,
                "bold": True,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_DARK,
                "align": "center",
                "text_wrap": True,
            }),
            "text": wb.add_format({**cell, "align": "left"}),
            "text_alt": wb.add_format({**cell, "align": "left", "bg_color": _COLOR_ROW_ALT}),
            "number": wb.add_format({**cell, "align": "right", "num_format": _MONEY_FORMAT}),
            "number_alt": wb.add_format({
                **cell, "align": "right", "num_format": _MONEY_FORMAT, "bg_color": _COLOR_ROW_ALT,
            }),
            "total_label": wb.add_format({**cell, "bold": True, "align": "left", "top": 2}),
            "total_number": wb.add_format({
                **cell, "bold": True, "align": "right", "num_format": _MONEY_FORMAT, "top": 2,
            }),
        }

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_header(self, num_cols: int | None = None) -> "ExcelExporter":
        """Write the banner, the generation timestamp and one row per filter.

        Args:
            num_cols: Width of the merged rows; defaults to six columns.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._worksheet
        width = max(num_cols or self._num_cols, 2)

        ws.set_row(self._current_row, 28)
        ws.merge_range(self._current_row, 0, self._current_row, width - 1, self._title, self._formats["title"])
        self._current_row += 1

        generated = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(
            self._current_row, 0, self._current_row, width - 1,
            f"Generated: {generated}", self._formats["subtitle"],
        )
        self._current_row += 1

        for key, value in self._filters.items():
            ws.write(self._current_row, 0, key, self._formats["filter_key"])
            ws.merge_range(
                self._current_row, 1, self._current_row, width - 1,
                value or "", self._formats["filter_value"],
            )
            self._current_row += 1

        self._current_row += 1
        return self

    def add_kpi_row(self, kpis: dict[str, Any]) -> "ExcelExporter":
        """Write labels above their values, one KPI per column.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._worksheet
        for col, (label, value) in enumerate(kpis.items()):
            ws.write(self._current_row, col, label, self._formats["kpi_label"])
            ws.write(self._current_row + 1, col, value, self._formats["kpi_value"])

        self._current_row += 3  # labels + values + blank separator
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        numeric_cols: set[int] | None = None,
    ) -> "ExcelExporter":
        """Write column headers and shaded data rows.

        Args:
            headers: Column header strings.
            rows: Data rows, each as long as ``headers``.
            numeric_cols: Zero-based indices written with the money format.
                          When ``None``, columns whose first value is an
                          ``int`` or ``float`` are treated as numeric.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._worksheet
        self._num_cols = len(headers)

        if numeric_cols is None:
            numeric_cols = {
                ci for ci, val in enumerate(rows[0] if rows else ())
                if isinstance(val, (int, float))
            }

        col_widths: list[int] = [len(str(h)) for h in headers]

        ws.set_row(self._current_row, 20)
        for ci, header in enumerate(headers):
            ws.write(self._current_row, ci, header, self._formats["col_header"])
        self._current_row += 1

        for ri, data_row in enumerate(rows):
            suffix = "_alt" if ri % 2 == 1 else ""
            for ci, value in enumerate(data_row):
                kind = "number" if ci in numeric_cols else "text"
                ws.write(self._current_row, ci, value, self._formats[kind + suffix])
                col_widths[ci] = min(_MAX_COL_WIDTH, max(col_widths[ci], len(str(value or ""))))
            self._current_row += 1

        # Columns shared by several tables keep the widest width seen
        for ci, width in enumerate(col_widths):
            width = max(width + 2, _MIN_COL_WIDTH, self._col_widths.get(ci, 0))
            self._col_widths[ci] = width
            ws.set_column(ci, ci, width)

        return self

    def add_total_row(self, label: str, values: dict[int, Any]) -> "ExcelExporter":
        """Write a bold totals row directly below the data table.

        Args:
            label: Text of the first cell, e.g. ``"General total"``.
            values: ``{column_index: value}`` for the columns to fill.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._worksheet
        ws.write(self._current_row, 0, label, self._formats["total_label"])
        for ci in range(1, self._num_cols):
            if ci in values:
                ws.write(self._current_row, ci, values[ci], self._formats["total_number"])
            else:
                ws.write_blank(self._current_row, ci, None, self._formats["total_label"])
        self._current_row += 1
        return self

    def skip_rows(self, count: int = 1) -> "ExcelExporter":
        self._current_row += count
        return self

    def finalize(self) -> bytes:
        """Close the workbook and return the ``.xlsx`` bytes.

        The exporter must not be reused afterwards.
        """
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
