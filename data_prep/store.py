"""
History store: read-only access to historical orders and expenses.

The projection reads history exactly once per run, before the monthly loop.
Implementations are coroutine-based so the two reads (orders, expenses) can
be awaited jointly by data_prep.baseline.load_baseline.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .history import HistoryInput, prepare_expenses, prepare_orders, to_frame
from .loader import load_expenses_csv, load_orders_csv

logger = logging.getLogger(__name__)


class HistoryStore:
    """Interface for the external data store (Firestore, SQL, files, ...)."""

    async def fetch_orders(self, since: Optional[pd.Timestamp] = None) -> pd.DataFrame:
        """Orders with timestamp >= since (all orders when since is None)."""
        raise NotImplementedError

    async def fetch_expenses(self) -> pd.DataFrame:
        """All recorded expenses (open-ended window)."""
        raise NotImplementedError


class FrameHistoryStore(HistoryStore):
    """In-memory store over already-loaded records."""

    def __init__(self, orders: HistoryInput = None, expenses: HistoryInput = None):
        self._orders = to_frame(orders)
        self._expenses = to_frame(expenses)

    async def fetch_orders(self, since: Optional[pd.Timestamp] = None) -> pd.DataFrame:
        return prepare_orders(self._orders, since=since)

    async def fetch_expenses(self) -> pd.DataFrame:
        return prepare_expenses(self._expenses)


class CsvHistoryStore(HistoryStore):
    """
    Store backed by two CSV exports in one directory.
    A missing file is treated as an empty history; an unreadable one raises.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        *,
        orders_file: str = "orders.csv",
        expenses_file: str = "expenses.csv",
    ):
        self.directory = Path(directory)
        self.orders_path = self.directory / orders_file
        self.expenses_path = self.directory / expenses_file

    async def fetch_orders(self, since: Optional[pd.Timestamp] = None) -> pd.DataFrame:
        if not self.orders_path.exists():
            logger.info("No order history at %s", self.orders_path)
            return prepare_orders(None)
        raw = await asyncio.to_thread(load_orders_csv, str(self.orders_path))
        return prepare_orders(raw, since=since)

    async def fetch_expenses(self) -> pd.DataFrame:
        if not self.expenses_path.exists():
            logger.info("No expense history at %s", self.expenses_path)
            return prepare_expenses(None)
        raw = await asyncio.to_thread(load_expenses_csv, str(self.expenses_path))
        return prepare_expenses(raw)
