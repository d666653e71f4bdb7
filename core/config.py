"""
Projection configuration.
Engine policy knobs that are not part of the user's assumptions.
Taxes are a fixed zero and intentionally have no knob here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class ProjectionConfig:
    # baseline estimation
    fallback_monthly_revenue: float = 75_000_000.0  # used when there are no orders in the lookback window
    revenue_lookback_years: int = 1

    # balance-sheet proxies: half a month of COGS on each side
    inventory_cogs_fraction: float = 0.5
    payables_cogs_fraction: float = 0.5

    # stop depreciating once an asset is fully amortised
    cap_depreciation: bool = True

    # Assets == Liabilities + Equity check
    identity_rel_tol: float = 1e-6

    # history store reads
    store_timeout_seconds: float = 30.0

    # optional calendar labels for month 1..N (month-starts after this date)
    start_date: Optional[pd.Timestamp] = None
