from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import pandas as pd

from core.assumptions import ProjectionAssumptions
from core.schema import BALANCE_SHEET_LINE_ITEMS
from data_prep.baseline import Baseline


@dataclass
class ProjectionResult:
    """
    Output of one projection run.

    income_statement, cash_flow_statement and balance_sheet hold one row per
    month, ordered by the `month` column (1..horizon, no gaps), so row i is
    month i + 1 in all three. `details` holds the export-ready breakdowns
    (revenue, cogs, opex, capex, depreciation) derived from the same rows.
    """
    assumptions: ProjectionAssumptions
    baseline: Baseline
    income_statement: pd.DataFrame
    cash_flow_statement: pd.DataFrame
    balance_sheet: pd.DataFrame
    details: Dict[str, pd.DataFrame] = field(default_factory=dict)

    @property
    def horizon(self) -> int:
        return len(self.income_statement)

    @property
    def months(self) -> list:
        return self.income_statement["month"].astype(int).tolist()

    def row(self, statement: str, month: int) -> pd.Series:
        """Direct row access by month number for 'income_statement', 'cash_flow_statement' or 'balance_sheet'."""
        frame: pd.DataFrame = getattr(self, statement)
        if not 1 <= month <= len(frame):
            raise IndexError(f"Month {month} outside projection horizon 1..{len(frame)}")
        return frame.iloc[month - 1]

    def balance_sheet_table(self) -> pd.DataFrame:
        """Line items as rows, one 'Month N' column per month (section headings left blank)."""
        bs = self.balance_sheet
        rows = []
        for label, col in BALANCE_SHEET_LINE_ITEMS:
            row = {"Item": label}
            for i, m in enumerate(bs["month"].astype(int)):
                row[f"Month {m}"] = "" if col is None else float(bs[col].iloc[i])
            rows.append(row)
        return pd.DataFrame(rows)
