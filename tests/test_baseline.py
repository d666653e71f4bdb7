import asyncio

import pandas as pd
import pytest

from core.config import ProjectionConfig
from core.errors import DataUnavailable
from data_prep.baseline import average_monthly_expense, estimate_baseline, load_baseline
from data_prep.history import prepare_expenses
from data_prep.store import CsvHistoryStore, FrameHistoryStore, HistoryStore


def test_zero_history_falls_back(as_of):
    b = estimate_baseline([], [], as_of=as_of)
    assert b.baseline_monthly_revenue == 75_000_000
    assert b.avg_monthly_expense == 0
    assert b.used_fallback
    assert b.revenue_months == 0


def test_fallback_is_configurable(as_of):
    b = estimate_baseline(None, None, as_of=as_of, config=ProjectionConfig(fallback_monthly_revenue=1.0))
    assert b.baseline_monthly_revenue == 1.0


def test_revenue_is_mean_of_populated_months_in_window(as_of):
    orders = [
        {"timestamp": "2025-01-10", "gross_revenue": 100},
        {"timestamp": "2025-01-20", "gross_revenue": 200},
        {"timestamp": "2025-03-05", "gross_revenue": 300},
        {"timestamp": "2024-05-01", "gross_revenue": 1_000},  # before the one-year window
    ]
    b = estimate_baseline(orders, [], as_of=as_of)
    assert b.baseline_monthly_revenue == pytest.approx(300.0)
    assert b.revenue_months == 2
    assert not b.used_fallback


def test_window_start_is_inclusive(as_of):
    orders = [{"timestamp": "2024-06-15", "gross_revenue": 50}]
    b = estimate_baseline(orders, [], as_of=as_of)
    assert b.baseline_monthly_revenue == 50
    assert not b.used_fallback


def test_only_old_orders_fall_back(as_of):
    orders = [{"timestamp": "2023-01-01", "gross_revenue": 999}]
    assert estimate_baseline(orders, [], as_of=as_of).used_fallback


def test_camel_case_and_missing_revenue(as_of):
    orders = pd.DataFrame({
        "timestamp": ["2025-02-01T08:00:00+00:00", "2025-02-02T09:30:00+07:00"],
        "grossRevenue": [1_000, None],
    })
    b = estimate_baseline(orders, [], as_of=as_of)
    assert b.baseline_monthly_revenue == 1_000


def test_expense_average_uses_complete_month_span():
    expenses = [
        {"expenseDate": "2025-01-15", "amount": 300},
        {"expenseDate": "2025-03-20", "amount": 300},
    ]
    assert average_monthly_expense(prepare_expenses(expenses)) == pytest.approx(200.0)

    expenses[1]["expenseDate"] = "2025-03-10"  # not a full 2 months after Jan 15
    assert average_monthly_expense(prepare_expenses(expenses)) == pytest.approx(300.0)


def test_undated_expenses_are_dropped(as_of):
    expenses = [
        {"expense_date": "2025-01-01", "amount": 100},
        {"expense_date": None, "amount": 900},
        {"expense_date": "not a date", "amount": 50},
    ]
    assert len(prepare_expenses(expenses)) == 1
    assert estimate_baseline([], expenses, as_of=as_of).avg_monthly_expense == 100


def test_single_expense_is_a_one_month_span(as_of):
    b = estimate_baseline([], [{"expense_date": "2024-01-01", "amount": 450}], as_of=as_of)
    assert b.avg_monthly_expense == 450


class _FailingStore(HistoryStore):
    async def fetch_orders(self, since=None):
        raise ConnectionError("store offline")

    async def fetch_expenses(self):
        return pd.DataFrame()


class _SlowStore(HistoryStore):
    async def fetch_orders(self, since=None):
        await asyncio.sleep(5)
        return pd.DataFrame()

    async def fetch_expenses(self):
        return pd.DataFrame()


class _RendezvousStore(HistoryStore):
    """Each read waits for the other to start; only concurrent reads complete."""

    def __init__(self):
        self.orders_started = None
        self.expenses_started = None
        self.since = None

    async def fetch_orders(self, since=None):
        self.since = since
        self.orders_started.set()
        await self.expenses_started.wait()
        return pd.DataFrame({"timestamp": ["2025-05-01"], "gross_revenue": [10.0]})

    async def fetch_expenses(self):
        self.expenses_started.set()
        await self.orders_started.wait()
        return pd.DataFrame({"expense_date": ["2025-05-01"], "amount": [4.0]})


def test_load_baseline_wraps_read_failures(as_of):
    with pytest.raises(DataUnavailable) as info:
        asyncio.run(load_baseline(_FailingStore(), as_of=as_of))
    assert isinstance(info.value.__cause__, ConnectionError)


def test_load_baseline_times_out(as_of):
    cfg = ProjectionConfig(store_timeout_seconds=0.05)
    with pytest.raises(DataUnavailable):
        asyncio.run(load_baseline(_SlowStore(), as_of=as_of, config=cfg))


def test_load_baseline_reads_concurrently(as_of):
    store = _RendezvousStore()

    async def run():
        store.orders_started = asyncio.Event()
        store.expenses_started = asyncio.Event()
        return await load_baseline(store, as_of=as_of, config=ProjectionConfig(store_timeout_seconds=2.0))

    b = asyncio.run(run())
    assert b.baseline_monthly_revenue == 10.0
    assert b.avg_monthly_expense == 4.0
    assert store.since == pd.Timestamp("2024-06-15")


def test_frame_store_empty_history_still_falls_back(as_of):
    b = asyncio.run(load_baseline(FrameHistoryStore(), as_of=as_of))
    assert b.baseline_monthly_revenue == 75_000_000
    assert b.avg_monthly_expense == 0


def test_csv_store(tmp_path, as_of):
    pd.DataFrame({
        "Timestamp": ["2025-04-03", "2025-05-09"],
        "Gross Revenue": [2_000, 4_000],
    }).to_csv(tmp_path / "orders.csv", index=False)
    pd.DataFrame({
        "Expense Date": ["2025-04-01"],
        "Amount": [700],
    }).to_csv(tmp_path / "expenses.csv", index=False)

    b = asyncio.run(load_baseline(CsvHistoryStore(tmp_path), as_of=as_of))
    assert b.baseline_monthly_revenue == pytest.approx(3_000.0)
    assert b.avg_monthly_expense == pytest.approx(700.0)


def test_csv_store_missing_files_is_empty_history(tmp_path, as_of):
    b = asyncio.run(load_baseline(CsvHistoryStore(tmp_path), as_of=as_of))
    assert b.used_fallback
