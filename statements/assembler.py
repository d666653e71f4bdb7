"""
Reshape the stepper's PeriodRecords into the three statements plus the export
detail views. No numeric policy lives here: every figure comes straight from a
PeriodRecord (or the amortization schedule that produced it).
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Optional, Sequence

import pandas as pd

from core.assumptions import ProjectionAssumptions
from core.config import ProjectionConfig
from core.schema import BALANCE_SHEET_COLUMNS, CASH_FLOW_COLUMNS, INCOME_STATEMENT_COLUMNS
from core.utils import month_starts, unique_label
from data_prep.baseline import Baseline
from engine.amortization import AmortizationSchedule
from engine.stepper import PeriodRecord

from .result import ProjectionResult


def records_to_frame(records: Sequence[PeriodRecord]) -> pd.DataFrame:
    """All PeriodRecord fields, one row per month, sorted by month."""
    df = pd.DataFrame([asdict(r) for r in records])
    if df.empty:
        return pd.DataFrame(columns=list(PeriodRecord.__dataclass_fields__))
    return df.sort_values("month").reset_index(drop=True)


def _statement(frame: pd.DataFrame, columns, periods: Optional[pd.DatetimeIndex]) -> pd.DataFrame:
    out = frame.loc[:, list(columns)].copy()
    if periods is not None:
        out.insert(1, "period", periods[: len(out)])
    return out


def build_balance_sheet(frame: pd.DataFrame) -> pd.DataFrame:
    bs = frame.rename(columns={"ending_cash": "cash"})
    return bs.loc[:, list(BALANCE_SHEET_COLUMNS)].copy()


def build_details(
    frame: pd.DataFrame,
    *,
    assumptions: ProjectionAssumptions,
    schedule: AmortizationSchedule,
) -> Dict[str, pd.DataFrame]:
    """Per-category breakdowns keyed revenue / cogs / opex / capex / depreciation."""
    months = frame["month"].astype(int)
    horizon = len(frame)

    revenue = pd.DataFrame({"Month": months, "Revenue": frame["revenue"]})
    cogs = pd.DataFrame({"Month": months, "COGS %": frame["cogs_ratio"], "COGS": frame["cogs"]})

    # duplicated categories are summed, first occurrence keeps its position
    categories: Dict[str, float] = {}
    for line in assumptions.opex:
        categories[line.category] = categories.get(line.category, 0.0) + float(line.amount)
    opex = pd.DataFrame({"Month": months, "Historical Average": frame["opex_historical"]})
    taken = set(opex.columns) | {"Total"}
    for category, amount in categories.items():
        col = unique_label(category, taken, default="Expense")
        taken.add(col)
        opex[col] = amount
    opex["Total"] = frame["total_opex"]

    capex = pd.DataFrame({"Month": months, "CAPEX": frame["capex"]})
    purchases = schedule.purchases(horizon, reserved=capex.columns)
    for col in purchases.columns.drop("month"):
        capex[col] = purchases[col].to_numpy()

    depreciation = pd.DataFrame({"Month": months, "Depreciation": frame["depreciation"]})
    per_asset = schedule.schedule(horizon, reserved=depreciation.columns)
    for col in per_asset.columns.drop("month"):
        depreciation[col] = per_asset[col].to_numpy()

    return {
        "revenue": revenue,
        "cogs": cogs,
        "opex": opex,
        "capex": capex,
        "depreciation": depreciation,
    }


def assemble_statements(
    records: Sequence[PeriodRecord],
    *,
    assumptions: ProjectionAssumptions,
    baseline: Baseline,
    schedule: AmortizationSchedule,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """
    Build the income statement, cash-flow statement, balance sheet and details.

    Returns
    -------
    ProjectionResult whose three statements share the same ascending `month`
    column (and an optional `period` column when config.start_date is set).
    """
    cfg = config or ProjectionConfig()
    frame = records_to_frame(records)

    periods = month_starts(cfg.start_date, len(frame)) if cfg.start_date is not None else None

    income = _statement(frame, INCOME_STATEMENT_COLUMNS, periods)
    cash_flow = _statement(frame, CASH_FLOW_COLUMNS, periods)
    balance_sheet = _statement(build_balance_sheet(frame), BALANCE_SHEET_COLUMNS, periods)

    return ProjectionResult(
        assumptions=assumptions,
        baseline=baseline,
        income_statement=income,
        cash_flow_statement=cash_flow,
        balance_sheet=balance_sheet,
        details=build_details(frame, assumptions=assumptions, schedule=schedule),
    )


def statement_months(result: ProjectionResult) -> List[List[int]]:
    """Month columns of the three statements (used by the ordering check)."""
    return [
        result.income_statement["month"].astype(int).tolist(),
        result.cash_flow_statement["month"].astype(int).tolist(),
        result.balance_sheet["month"].astype(int).tolist(),
    ]
