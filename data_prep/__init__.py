"""
Data preparation: loading history, the history store, baseline estimation,
and assumption validation.
"""

from .loader import load_orders_csv, load_expenses_csv
from .history import canonicalize_columns, prepare_orders, prepare_expenses
from .store import HistoryStore, FrameHistoryStore, CsvHistoryStore
from .baseline import Baseline, estimate_baseline, load_baseline
from .validators import ValidationResult, validate_assumptions

__all__ = [
    "load_orders_csv",
    "load_expenses_csv",
    "canonicalize_columns",
    "prepare_orders",
    "prepare_expenses",
    "HistoryStore",
    "FrameHistoryStore",
    "CsvHistoryStore",
    "Baseline",
    "estimate_baseline",
    "load_baseline",
    "ValidationResult",
    "validate_assumptions",
]
