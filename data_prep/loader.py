from __future__ import annotations

import pandas as pd


def load_orders_csv(path: str, *, low_memory: bool = False) -> pd.DataFrame:
    """
    Load an order export (one row per order, at least a timestamp and gross revenue).
    Timestamps stay raw here; history.prepare_orders parses them.
    """
    return pd.read_csv(path, low_memory=low_memory)


def load_expenses_csv(path: str, *, low_memory: bool = False) -> pd.DataFrame:
    """Load an expense export (one row per expense: date and amount)."""
    return pd.read_csv(path, low_memory=low_memory)
