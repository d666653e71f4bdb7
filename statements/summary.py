"""
Annual roll-up of a monthly projection.

Flows (revenue, profit, cash movements) are summed per projection year;
stocks (cash, assets, equity) are taken at the year's last month. A partial
final year is summarised over the months it has.
"""

from __future__ import annotations

import pandas as pd

from core.utils import projection_year

from .result import ProjectionResult

_FLOW_COLUMNS = [
    "revenue",
    "cogs",
    "gross_profit",
    "total_opex",
    "ebitda",
    "depreciation",
    "net_income",
]
_CASH_FLOW_COLUMNS = ["capex", "net_cash_flow"]
_STOCK_COLUMNS = ["cash", "total_assets", "total_liabilities", "total_equity"]


def annual_summary(result: ProjectionResult) -> pd.DataFrame:
    """One row per projection year with summed flows and year-end balances."""
    inc = result.income_statement.loc[:, ["month"] + _FLOW_COLUMNS]
    cf = result.cash_flow_statement.loc[:, ["month"] + _CASH_FLOW_COLUMNS]
    bs = result.balance_sheet.loc[:, ["month"] + _STOCK_COLUMNS]

    merged = inc.merge(cf, on="month").merge(bs, on="month")
    merged["year"] = merged["month"].map(projection_year)

    grouped = merged.groupby("year", sort=True)
    flows = grouped[_FLOW_COLUMNS + _CASH_FLOW_COLUMNS].sum()
    stocks = grouped[_STOCK_COLUMNS].last()
    months = grouped["month"].agg(["min", "max"]).rename(
        columns={"min": "first_month", "max": "last_month"}
    )

    out = months.join(flows).join(stocks).reset_index()
    out["gross_margin"] = (out["gross_profit"] / out["revenue"]).where(out["revenue"] != 0, 0.0)
    return out
