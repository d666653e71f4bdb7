"""
Baseline estimation: reduce order / expense history to the two scalars that
seed the projection.

  baseline_monthly_revenue : mean gross revenue per populated calendar month over
                             the trailing lookback window (default one year);
                             falls back to a fixed default when there are no orders.
  avg_monthly_expense      : total expenses / (complete months between the
                             earliest and latest expense + 1); 0 with no expenses.

estimate_baseline() is a pure reduction. load_baseline() performs the store
reads (concurrently) and is the only place a DataUnavailable can come from.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from core.config import ProjectionConfig
from core.errors import DataUnavailable
from core.utils import months_between, to_naive_utc, years_before

from .history import HistoryInput, prepare_expenses, prepare_orders
from .store import HistoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Baseline:
    """Seed values for month 1 and the historical opex floor."""
    baseline_monthly_revenue: float
    avg_monthly_expense: float
    revenue_months: int = 0  # distinct populated months behind the revenue figure
    used_fallback: bool = False


def baseline_revenue(
    orders: pd.DataFrame,
    *,
    as_of: pd.Timestamp,
    config: ProjectionConfig,
) -> Tuple[float, int, bool]:
    """(baseline revenue, populated months, used_fallback) from a canonical order frame."""
    window_start = years_before(as_of, config.revenue_lookback_years)
    recent = orders[orders["timestamp"] >= window_start]
    if recent.empty:
        return float(config.fallback_monthly_revenue), 0, True

    monthly = recent.groupby(recent["timestamp"].dt.to_period("M"))["gross_revenue"].sum()
    n_months = int(len(monthly))
    return float(monthly.sum()) / max(n_months, 1), n_months, False


def average_monthly_expense(expenses: pd.DataFrame) -> float:
    """Total expense spread over the covered span of months (at least one)."""
    if expenses.empty:
        return 0.0
    dated = expenses["expense_date"].dropna()
    if dated.empty:
        return 0.0

    total = float(expenses["amount"].sum())
    months = months_between(dated.min(), dated.max()) + 1
    return total / max(months, 1)


def estimate_baseline(
    orders: HistoryInput,
    expenses: HistoryInput,
    *,
    as_of: Optional[pd.Timestamp] = None,
    config: Optional[ProjectionConfig] = None,
) -> Baseline:
    """
    Reduce history records to a Baseline.

    Parameters
    ----------
    orders : DataFrame or iterable of mappings
        At least {timestamp, gross_revenue} (camelCase aliases accepted).
    expenses : DataFrame or iterable of mappings
        At least {expense_date, amount}.
    as_of : Timestamp, optional
        "Now" for the trailing revenue window. Defaults to the current time.
    config : ProjectionConfig, optional
        Fallback revenue and lookback length.
    """
    cfg = config or ProjectionConfig()
    now = _utc_now() if as_of is None else to_naive_utc(as_of)

    order_frame = prepare_orders(orders)
    expense_frame = prepare_expenses(expenses)

    revenue, n_months, used_fallback = baseline_revenue(order_frame, as_of=now, config=cfg)
    if used_fallback:
        logger.warning(
            "No orders since %s; using fallback baseline revenue %.2f",
            years_before(now, cfg.revenue_lookback_years).date(),
            revenue,
        )

    return Baseline(
        baseline_monthly_revenue=revenue,
        avg_monthly_expense=average_monthly_expense(expense_frame),
        revenue_months=n_months,
        used_fallback=used_fallback,
    )


async def load_baseline(
    store: HistoryStore,
    *,
    as_of: Optional[pd.Timestamp] = None,
    config: Optional[ProjectionConfig] = None,
) -> Baseline:
    """
    Read orders (trailing window) and expenses (all) from the store concurrently
    and reduce them. Any read failure or timeout raises DataUnavailable; an empty
    history is not a failure.
    """
    cfg = config or ProjectionConfig()
    now = _utc_now() if as_of is None else to_naive_utc(as_of)
    since = years_before(now, cfg.revenue_lookback_years)

    try:
        orders, expenses = await asyncio.wait_for(
            asyncio.gather(store.fetch_orders(since), store.fetch_expenses()),
            timeout=cfg.store_timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        logger.error("History store read timed out after %ss", cfg.store_timeout_seconds)
        raise DataUnavailable(
            f"History store did not answer within {cfg.store_timeout_seconds}s"
        ) from exc
    except Exception as exc:
        logger.exception("History store read failed")
        raise DataUnavailable(f"Could not read history: {exc}") from exc

    return estimate_baseline(orders, expenses, as_of=now, config=cfg)


def _utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC").tz_localize(None)
