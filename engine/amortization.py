"""
Straight-line amortization of capital purchases.

Rules:
  1. Monthly charge = cost / (useful_life_years * 12); no salvage value.
  2. Depreciation starts in the purchase month itself (no partial-month proration).
  3. Cash goes out once, in the purchase month.
  4. With cap=True an asset stops depreciating after ceil(life * 12) months and
     its final month only takes what is left, so cumulative depreciation == cost.
     With cap=False the charge continues for every month after purchase.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import pandas as pd

from core.assumptions import CapitalExpenditureLine
from core.utils import MONTHS_PER_YEAR, unique_label


def monthly_charge(line: CapitalExpenditureLine) -> float:
    return float(line.cost) / (float(line.useful_life_years) * MONTHS_PER_YEAR)


def depreciation_months(line: CapitalExpenditureLine) -> int:
    """Number of months over which the asset is fully written off."""
    return int(math.ceil(float(line.useful_life_years) * MONTHS_PER_YEAR - 1e-9))


def line_depreciation(line: CapitalExpenditureLine, month: int, *, cap: bool = True) -> float:
    """Depreciation charged for one capex line in a 1-indexed month."""
    if month < line.purchase_month:
        return 0.0
    charge = monthly_charge(line)
    if not cap:
        return charge

    age = month - line.purchase_month + 1  # 1 in the purchase month
    if age > depreciation_months(line):
        return 0.0
    remaining = float(line.cost) - (age - 1) * charge
    return max(min(charge, remaining), 0.0)


@dataclass(frozen=True)
class AmortizationSchedule:
    """Depreciation and capex cash effects for a fixed set of capex lines."""

    capex: Tuple[CapitalExpenditureLine, ...] = ()
    cap: bool = True

    def capex_outflow(self, month: int) -> float:
        """Sum of costs of lines purchased exactly in this month."""
        return float(sum(line.cost for line in self.capex if line.purchase_month == month))

    def monthly_depreciation(self, month: int) -> float:
        return float(sum(line_depreciation(line, month, cap=self.cap) for line in self.capex))

    def cumulative_depreciation(self, month: int) -> float:
        """Depreciation recognised from month 1 through `month` inclusive."""
        return float(sum(self.monthly_depreciation(m) for m in range(1, month + 1)))

    def book_value(
        self,
        month: int,
        cumulative_depreciation: float | None = None,
        *,
        opening: float = 0.0,
    ) -> float:
        """
        Net fixed assets at the end of `month`: opening + purchases to date - depreciation to date.
        Not clamped at zero; a negative value means the inputs are inconsistent.
        """
        if cumulative_depreciation is None:
            cumulative_depreciation = self.cumulative_depreciation(month)
        purchased = sum(line.cost for line in self.capex if line.purchase_month <= month)
        return float(opening) + float(purchased) - float(cumulative_depreciation)

    def asset_labels(self, reserved: Iterable[str] = ()) -> List[str]:
        """One column label per capex line, distinct from each other and from reserved."""
        taken = set(reserved)
        labels = []
        for line in self.capex:
            label = unique_label(line.asset_name, taken, default="Asset")
            taken.add(label)
            labels.append(label)
        return labels

    def schedule(self, horizon: int, reserved: Iterable[str] = ()) -> pd.DataFrame:
        """Per-asset monthly depreciation, one row per month 1..horizon, one column per asset."""
        months = range(1, horizon + 1)
        data = {"month": list(months)}
        for label, line in zip(self.asset_labels(["month", *reserved]), self.capex):
            data[label] = [line_depreciation(line, m, cap=self.cap) for m in months]
        return pd.DataFrame(data)

    def purchases(self, horizon: int, reserved: Iterable[str] = ()) -> pd.DataFrame:
        """Per-asset purchase cost by month, one row per month 1..horizon."""
        months = range(1, horizon + 1)
        data = {"month": list(months)}
        for label, line in zip(self.asset_labels(["month", *reserved]), self.capex):
            data[label] = [float(line.cost) if line.purchase_month == m else 0.0 for m in months]
        return pd.DataFrame(data)
