from __future__ import annotations

import math
from typing import Iterable

import pandas as pd
from dateutil.relativedelta import relativedelta

MONTHS_PER_YEAR = 12


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def is_finite_number(x) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(x, bool):
        return False
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False


def month_starts(as_of_date: pd.Timestamp, n_months: int) -> pd.DatetimeIndex:
    """
    Generate month-start dates for projection periods after as_of_date.
    If as_of_date is mid-month, we still project starting next month-start.
    """
    as_of = pd.Timestamp(as_of_date)
    first = (as_of.to_period("M") + 1).to_timestamp(how="start")
    return pd.date_range(first, periods=n_months, freq="MS")


def months_between(start: pd.Timestamp, end: pd.Timestamp) -> int:
    """Complete months from start to end (spreadsheet DATEDIF(start, end, "m") rule)."""
    s = pd.Timestamp(start)
    e = pd.Timestamp(end)
    months = (e.year - s.year) * 12 + (e.month - s.month)
    if e.day < s.day:
        months -= 1
    return int(months)


def years_before(as_of: pd.Timestamp, years: int) -> pd.Timestamp:
    """Same calendar moment `years` years earlier (Feb 29 rolls back to Feb 28)."""
    return pd.Timestamp(as_of) - relativedelta(years=years)


def projection_year(month: int) -> int:
    """1-indexed projection year of a 1-indexed month (months 1..12 -> year 1)."""
    return (int(month) - 1) // MONTHS_PER_YEAR + 1


def identity_holds(lhs: float, rhs: float, rel_tol: float, abs_tol: float = 1e-6) -> bool:
    return math.isclose(float(lhs), float(rhs), rel_tol=rel_tol, abs_tol=abs_tol)


def to_naive_utc(ts) -> pd.Timestamp:
    """Timestamp without tz; aware values are converted to UTC first."""
    t = pd.Timestamp(ts)
    if t.tzinfo is not None:
        t = t.tz_convert("UTC").tz_localize(None)
    return t


def unique_label(name: str, taken: Iterable[str], default: str = "Column") -> str:
    """First of name, "name (2)", "name (3)", ... not already in taken."""
    taken = set(taken)
    base = name or default
    label = base
    n = 2
    while label in taken:
        label = f"{base} ({n})"
        n += 1
    return label
