"""
Spreadsheet export of a ProjectionResult.

One sheet per view: Assumptions, Revenue, COGS, OPEX, CAPEX, Depreciation,
Income Statement, Cash Flow, Balance Sheet, Annual Summary. Styling is done
here only; the numbers are written unformatted apart from a cell number format.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from statements.result import ProjectionResult
from statements.summary import annual_summary

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True)
LABEL_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="E6E6FA", end_color="E6E6FA", fill_type="solid")
CENTER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)
LEFT_ALIGN = Alignment(horizontal="left", vertical="center", wrap_text=True)
THIN_SIDE = Side(style="thin", color="DDDDDD")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)
AMOUNT_FORMAT = "#,##0"
PERCENT_FORMAT = "0.00%"

SHEET_NAMES = (
    "Assumptions",
    "Revenue",
    "COGS",
    "OPEX",
    "CAPEX",
    "Depreciation",
    "Income Statement",
    "Cash Flow",
    "Balance Sheet",
    "Annual Summary",
)

_STATEMENT_HEADERS = {
    "month": "Month",
    "period": "Period",
    "revenue": "Revenue",
    "cogs": "COGS",
    "gross_profit": "Gross Profit",
    "total_opex": "Total OPEX",
    "ebitda": "EBITDA",
    "depreciation": "Depreciation",
    "ebit": "EBIT",
    "taxes": "Taxes",
    "net_income": "Net Income",
    "working_capital_change": "Working Capital Change",
    "capex": "CAPEX",
    "net_cash_flow": "Net Cash Flow",
    "ending_cash": "Ending Cash",
    "year": "Year",
    "first_month": "First Month",
    "last_month": "Last Month",
    "cash": "Cash",
    "total_assets": "Total Assets",
    "total_liabilities": "Total Liabilities",
    "total_equity": "Total Equity",
    "gross_margin": "Gross Margin",
}


def _style_header_row(ws, n_cols: int) -> None:
    for c in range(1, n_cols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER_ALIGN
        cell.border = THIN_BORDER


def _fit_columns(ws, rows: Sequence[Sequence[Any]]) -> None:
    """Column width = longest rendered value + 4."""
    if not rows:
        return
    n_cols = max(len(r) for r in rows)
    for c in range(n_cols):
        longest = max(len("" if c >= len(r) or r[c] is None else str(r[c])) for r in rows)
        ws.column_dimensions[get_column_letter(c + 1)].width = longest + 4


def _write_rows(ws, rows: List[List[Any]], *, header: bool = True) -> None:
    for r, values in enumerate(rows, start=1):
        for c, value in enumerate(values, start=1):
            cell = ws.cell(row=r, column=c, value=value)
            cell.alignment = CENTER_ALIGN
            cell.border = THIN_BORDER
            if isinstance(value, float):
                cell.number_format = AMOUNT_FORMAT
    if header:
        _style_header_row(ws, len(rows[0]) if rows else 0)
    _fit_columns(ws, rows)


def _cell_value(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item"):  # numpy scalar
        return value.item()
    return value


def _frame_rows(df: pd.DataFrame, headers: Optional[dict] = None) -> List[List[Any]]:
    headers = headers or {}
    rows: List[List[Any]] = [[headers.get(c, c) for c in df.columns]]
    for record in df.itertuples(index=False):
        rows.append([_cell_value(v) for v in record])
    return rows


def _write_frame(wb: Workbook, title: str, df: pd.DataFrame, headers: Optional[dict] = None):
    ws = wb.create_sheet(title=title)
    _write_rows(ws, _frame_rows(df, headers))
    return ws


def _percent_columns(ws, header_names: Sequence[str]) -> None:
    headers = [c.value for c in ws[1]]
    for name in header_names:
        if name not in headers:
            continue
        col = headers.index(name) + 1
        for r in range(2, ws.max_row + 1):
            ws.cell(row=r, column=col).number_format = PERCENT_FORMAT


def _assumption_rows(result: ProjectionResult) -> List[List[Any]]:
    a = result.assumptions
    sb = a.starting_balance
    rows: List[List[Any]] = [
        ["General Assumptions", ""],
        ["Projection Period", f"{a.horizon_months} Months"],
        ["Monthly Revenue Growth", f"{a.revenue_growth * 100:.2f}%"],
        ["Baseline COGS", f"{a.cogs_percentage * 100:.2f}% of Revenue"],
        ["Yearly COGS Inflation", f"{a.cogs_inflation * 100:.2f}%"],
        ["", ""],
        ["Historical Baseline", ""],
        ["Baseline Monthly Revenue", float(result.baseline.baseline_monthly_revenue)],
        ["Historical Average Monthly Expense", float(result.baseline.avg_monthly_expense)],
        ["", ""],
        ["Starting Balance Sheet", ""],
        ["Cash", float(sb.cash)],
        ["Inventory", float(sb.inventory)],
        ["Fixed Assets", float(sb.fixed_assets)],
        ["Accounts Payable", float(sb.accounts_payable)],
    ]
    if a.opex:
        rows += [["", ""], ["Operating Expenses (monthly)", ""]]
        rows += [[line.category, float(line.amount)] for line in a.opex]
    if a.capex:
        rows += [["", ""], ["Capital Expenditure", ""]]
        rows += [
            [
                f"{line.asset_name} (month {line.purchase_month}, {line.useful_life_years:g} years)",
                float(line.cost),
            ]
            for line in a.capex
        ]
    return rows


def build_workbook(result: ProjectionResult) -> Workbook:
    wb = Workbook()
    wb.remove(wb.active)

    ws = wb.create_sheet(title="Assumptions")
    rows = _assumption_rows(result)
    _write_rows(ws, rows)
    for r in range(1, ws.max_row + 1):
        cell = ws.cell(row=r, column=1)
        cell.font = LABEL_FONT
        cell.alignment = LEFT_ALIGN
    ws.column_dimensions["A"].width = 30
    ws.column_dimensions["B"].width = 20

    details = result.details
    _write_frame(wb, "Revenue", details["revenue"])
    cogs_ws = _write_frame(wb, "COGS", details["cogs"])
    _percent_columns(cogs_ws, ["COGS %"])
    _write_frame(wb, "OPEX", details["opex"])
    _write_frame(wb, "CAPEX", details["capex"])
    _write_frame(wb, "Depreciation", details["depreciation"])

    _write_frame(wb, "Income Statement", result.income_statement, _STATEMENT_HEADERS)
    _write_frame(wb, "Cash Flow", result.cash_flow_statement, _STATEMENT_HEADERS)

    bs_ws = _write_frame(wb, "Balance Sheet", result.balance_sheet_table())
    for r in range(1, bs_ws.max_row + 1):
        bs_ws.cell(row=r, column=1).alignment = LEFT_ALIGN
    bs_ws.column_dimensions["A"].width = 30

    summary_ws = _write_frame(wb, "Annual Summary", annual_summary(result), _STATEMENT_HEADERS)
    _percent_columns(summary_ws, ["Gross Margin"])

    return wb


def export_projection_to_excel(
    result: ProjectionResult,
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Render the projection as an .xlsx workbook.
    Returns the file bytes; also writes them to `path` when given.
    """
    wb = build_workbook(result)
    buf = io.BytesIO()
    wb.save(buf)
    data = buf.getvalue()
    if path is not None:
        Path(path).write_bytes(data)
        logger.info("Wrote %d-month projection workbook to %s", result.horizon, path)
    return data


def export_projection_to_base64(result: ProjectionResult) -> str:
    """Workbook bytes base64-encoded, for transports that only carry text."""
    return base64.b64encode(export_projection_to_excel(result)).decode("ascii")
