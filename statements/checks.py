"""
Structural checks run on every projection before it is returned.

A failure here means the engine produced inconsistent statements; it is raised
as InvariantViolation instead of being returned to the caller.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from core.errors import InvariantViolation
from core.utils import identity_holds, require_columns


def check_accounting_identity(balance_sheet: pd.DataFrame, *, rel_tol: float = 1e-6) -> None:
    """Assets == Liabilities + Equity for every month (relative tolerance, 1e-6 absolute floor)."""
    require_columns(balance_sheet, ["month", "total_assets", "total_liabilities", "total_equity"])
    assets = balance_sheet["total_assets"].to_numpy(dtype=float)
    rhs = (
        balance_sheet["total_liabilities"].to_numpy(dtype=float)
        + balance_sheet["total_equity"].to_numpy(dtype=float)
    )
    bad = np.flatnonzero(~np.isclose(assets, rhs, rtol=rel_tol, atol=1e-6))
    if bad.size:
        i = int(bad[0])
        month = int(balance_sheet["month"].iloc[i])
        raise InvariantViolation(
            f"Balance sheet does not balance in month {month}: "
            f"assets={assets[i]:,.6f} vs liabilities+equity={rhs[i]:,.6f}",
            month=month,
            total_assets=float(assets[i]),
            total_liabilities_and_equity=float(rhs[i]),
        )


def check_cash_roll_forward(
    cash_flow: pd.DataFrame,
    *,
    opening_cash: float,
    rel_tol: float = 1e-6,
) -> None:
    """ending_cash(m) - ending_cash(m-1) == net_cash_flow(m), with month 0 = opening cash."""
    require_columns(cash_flow, ["month", "net_cash_flow", "ending_cash"])
    prev = float(opening_cash)
    for month, flow, ending in zip(
        cash_flow["month"], cash_flow["net_cash_flow"], cash_flow["ending_cash"]
    ):
        if not identity_holds(prev + float(flow), ending, rel_tol):
            raise InvariantViolation(
                f"Cash does not roll forward in month {int(month)}: "
                f"{prev:,.6f} + {float(flow):,.6f} != {float(ending):,.6f}",
                month=int(month),
            )
        prev = float(ending)


def check_month_sequence(month_columns: Sequence[Sequence[int]], horizon: int) -> None:
    """Every statement covers months 1..horizon exactly once, ascending."""
    expected = list(range(1, horizon + 1))
    for months in month_columns:
        if [int(m) for m in months] != expected:
            raise InvariantViolation(
                f"Statement months {list(months)[:5]}... are not 1..{horizon} in order"
            )
