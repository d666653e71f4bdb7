"""
Normalise raw order / expense history into canonical frames.

The store hands back whatever the source produced (Firestore-style camelCase
documents, CSV exports with title-case headers, ...). Everything downstream
works on ORDER_COLUMNS / EXPENSE_COLUMNS only.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from core.schema import EXPENSE_COLUMNS, ORDER_COLUMNS
from core.utils import require_columns, to_naive_utc

HistoryInput = Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]

_COLUMN_ALIASES: Dict[str, str] = {
    # orders
    "grossRevenue": "gross_revenue",
    "Gross Revenue": "gross_revenue",
    "gross revenue": "gross_revenue",
    "revenue": "gross_revenue",
    "Timestamp": "timestamp",
    "createdAt": "timestamp",
    "created_at": "timestamp",
    "order_date": "timestamp",
    # expenses
    "expenseDate": "expense_date",
    "Expense Date": "expense_date",
    "date": "expense_date",
    "Amount": "amount",
}


def to_frame(records: HistoryInput) -> pd.DataFrame:
    """Accept a DataFrame, an iterable of mappings, or None."""
    if records is None:
        return pd.DataFrame()
    if isinstance(records, pd.DataFrame):
        return records.copy()
    return pd.DataFrame(list(records))


def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with common column name aliases normalized and duplicates coalesced."""
    if df.empty:
        return df.copy()

    ren = {c: _COLUMN_ALIASES.get(c, c) for c in df.columns}
    out = df.rename(columns=ren).copy()

    # Renaming can collide (e.g. both "timestamp" and "createdAt"); keep first non-null.
    if out.columns.duplicated().any():
        new_cols: List[str] = []
        parts: List[pd.Series] = []
        seen: set[str] = set()
        cols = list(out.columns)
        for name in cols:
            if name in seen:
                continue
            idxs = [i for i, c in enumerate(cols) if c == name]
            s = out.iloc[:, idxs[0]]
            for j in idxs[1:]:
                s = s.combine_first(out.iloc[:, j])
            new_cols.append(name)
            parts.append(s)
            seen.add(name)
        out = pd.concat(parts, axis=1)
        out.columns = new_cols

    return out


def _to_naive_timestamps(values: pd.Series) -> pd.Series:
    ts = pd.to_datetime(values, errors="coerce", utc=True)
    return ts.dt.tz_localize(None)


def prepare_orders(records: HistoryInput, *, since: Optional[pd.Timestamp] = None) -> pd.DataFrame:
    """
    Canonical order frame: timestamp (naive UTC), gross_revenue (float, missing -> 0).
    Rows whose timestamp cannot be parsed are dropped. `since` is inclusive.
    """
    df = canonicalize_columns(to_frame(records))
    if df.empty:
        return _empty_frame(ORDER_COLUMNS, date_col="timestamp")
    require_columns(df, ["timestamp"])
    if "gross_revenue" not in df.columns:
        df["gross_revenue"] = 0.0

    out = pd.DataFrame({
        "timestamp": _to_naive_timestamps(df["timestamp"]),
        "gross_revenue": pd.to_numeric(df["gross_revenue"], errors="coerce").fillna(0.0).astype(float),
    })
    out = out.dropna(subset=["timestamp"])
    if since is not None:
        out = out[out["timestamp"] >= to_naive_utc(since)]
    return out.sort_values("timestamp").reset_index(drop=True)


def prepare_expenses(records: HistoryInput) -> pd.DataFrame:
    """Canonical expense frame: expense_date (naive UTC), amount (float, missing -> 0). Undated rows are dropped."""
    df = canonicalize_columns(to_frame(records))
    if df.empty:
        return _empty_frame(EXPENSE_COLUMNS, date_col="expense_date")
    require_columns(df, ["amount"])
    if "expense_date" not in df.columns:
        df["expense_date"] = pd.NaT

    out = pd.DataFrame({
        "expense_date": _to_naive_timestamps(df["expense_date"]),
        "amount": pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype(float),
    })
    out = out.dropna(subset=["expense_date"])
    return out.reset_index(drop=True)


def _empty_frame(columns, *, date_col: str) -> pd.DataFrame:
    return pd.DataFrame({
        c: pd.Series(dtype="datetime64[ns]" if c == date_col else "float64") for c in columns
    })
