import asyncio
import math

import pandas as pd
import pytest

from core.assumptions import (
    CapitalExpenditureLine,
    ProjectionAssumptions,
    StartingBalance,
    default_assumptions,
)
from core.config import ProjectionConfig
from core.errors import InvalidAssumptions
from data_prep.baseline import Baseline
from data_prep.store import FrameHistoryStore, HistoryStore
from engine.runner import generate_projection, project_from_history, run_projection


def test_end_to_end_scenario(scenario_assumptions, scenario_baseline):
    result = run_projection(scenario_assumptions, scenario_baseline)
    m1 = result.row("income_statement", 1)
    assert m1["revenue"] == pytest.approx(10_500_000)
    assert m1["cogs"] == pytest.approx(3_150_000)
    assert m1["gross_profit"] == pytest.approx(7_350_000)
    assert m1["ebitda"] == pytest.approx(6_350_000)
    assert m1["net_income"] == pytest.approx(6_350_000)
    assert result.row("cash_flow_statement", 1)["ending_cash"] == pytest.approx(106_350_000)
    assert result.row("income_statement", 3)["revenue"] == pytest.approx(10_000_000 * 1.05 ** 3)


def test_statements_are_month_ordered_without_gaps(scenario_assumptions, scenario_baseline):
    a = scenario_assumptions.model_copy(update={"horizon_months": 30})
    result = run_projection(a, scenario_baseline)
    expected = list(range(1, 31))
    assert result.income_statement["month"].tolist() == expected
    assert result.cash_flow_statement["month"].tolist() == expected
    assert result.balance_sheet["month"].tolist() == expected
    for view in result.details.values():
        assert view["Month"].tolist() == expected


def test_accounting_identity_with_uneven_opening_balances():
    a = default_assumptions().model_copy(update={"horizon_months": 36})
    result = run_projection(a, Baseline(baseline_monthly_revenue=75_000_000, avg_monthly_expense=12_000_000))
    bs = result.balance_sheet
    for assets, liabilities, equity in zip(bs["total_assets"], bs["total_liabilities"], bs["total_equity"]):
        assert math.isclose(assets, liabilities + equity, rel_tol=1e-6)


def test_cogs_ratio_steps_once_a_year(scenario_baseline):
    a = ProjectionAssumptions(horizon_months=24, revenue_growth=0.01, cogs_percentage=0.30, cogs_inflation=0.10)
    result = run_projection(a, scenario_baseline)
    ratios = result.details["cogs"]["COGS %"].tolist()
    assert ratios[:12] == [0.30] * 12
    assert ratios[12:] == [0.30 * (1 + 0.10)] * 12
    inc = result.income_statement
    assert inc["cogs"].iloc[12] == pytest.approx(inc["revenue"].iloc[12] * 0.33)


def test_depreciation_never_exceeds_cost_past_useful_life(scenario_baseline):
    a = ProjectionAssumptions(
        horizon_months=36,
        revenue_growth=0.0,
        cogs_percentage=0.3,
        capex=(CapitalExpenditureLine(asset_name="Oven", cost=12_000, purchase_month=2, useful_life_years=1),),
    )
    result = run_projection(a, scenario_baseline)
    dep = result.income_statement["depreciation"]
    assert dep.sum() == pytest.approx(12_000)
    assert (dep.iloc[13:] == 0).all()
    assert result.balance_sheet["fixed_assets"].iloc[-1] == pytest.approx(0.0)


def test_uncapped_depreciation_still_balances(scenario_baseline):
    a = ProjectionAssumptions(
        horizon_months=36,
        revenue_growth=0.0,
        cogs_percentage=0.3,
        capex=(CapitalExpenditureLine(asset_name="Oven", cost=12_000, purchase_month=1, useful_life_years=1),),
    )
    result = run_projection(a, scenario_baseline, config=ProjectionConfig(cap_depreciation=False))
    assert result.income_statement["depreciation"].sum() == pytest.approx(36_000)
    assert result.balance_sheet["fixed_assets"].iloc[-1] == pytest.approx(-24_000)


def test_runs_are_bit_identical(scenario_baseline):
    a = default_assumptions().model_copy(update={"horizon_months": 24})
    first = run_projection(a, scenario_baseline)
    second = run_projection(a, scenario_baseline)
    pd.testing.assert_frame_equal(first.income_statement, second.income_statement, check_exact=True)
    pd.testing.assert_frame_equal(first.cash_flow_statement, second.cash_flow_statement, check_exact=True)
    pd.testing.assert_frame_equal(first.balance_sheet, second.balance_sheet, check_exact=True)


@pytest.mark.parametrize(
    "changes",
    [
        {"horizon_months": 0},
        {"capex": (CapitalExpenditureLine(asset_name="X", cost=1, purchase_month=1, useful_life_years=-2),)},
        {"revenue_growth": float("inf")},
    ],
)
def test_invalid_assumptions_are_rejected(scenario_assumptions, scenario_baseline, changes):
    with pytest.raises(InvalidAssumptions):
        run_projection(scenario_assumptions.model_copy(update=changes), scenario_baseline)


def test_non_finite_baseline_is_rejected(scenario_assumptions):
    with pytest.raises(InvalidAssumptions):
        run_projection(scenario_assumptions, Baseline(baseline_monthly_revenue=float("nan"), avg_monthly_expense=0))


def test_historical_opex_is_added_to_manual_lines(scenario_assumptions):
    result = run_projection(scenario_assumptions, Baseline(10_000_000, 500_000))
    assert (result.income_statement["total_opex"] == 1_500_000).all()
    opex = result.details["opex"]
    assert list(opex.columns) == ["Month", "Historical Average", "Rent", "Total"]
    assert opex["Historical Average"].iloc[0] == 500_000


def test_start_date_adds_calendar_periods(scenario_assumptions, scenario_baseline):
    cfg = ProjectionConfig(start_date=pd.Timestamp("2025-06-15"))
    result = run_projection(scenario_assumptions, scenario_baseline, config=cfg)
    assert result.balance_sheet["period"].tolist() == [
        pd.Timestamp("2025-07-01"),
        pd.Timestamp("2025-08-01"),
        pd.Timestamp("2025-09-01"),
    ]


def test_project_from_history(scenario_assumptions, as_of):
    orders = [{"timestamp": "2025-05-02", "gross_revenue": 10_000_000}]
    result = project_from_history(scenario_assumptions, orders, [], as_of=as_of)
    assert result.baseline.baseline_monthly_revenue == 10_000_000
    assert result.row("cash_flow_statement", 1)["ending_cash"] == pytest.approx(106_350_000)


def test_generate_projection_reads_store(scenario_assumptions, as_of):
    store = FrameHistoryStore(
        orders=[{"timestamp": "2025-05-02", "grossRevenue": 10_000_000}],
        expenses=[],
    )
    result = asyncio.run(generate_projection(scenario_assumptions, store, as_of=as_of))
    assert result.horizon == 3
    assert result.row("income_statement", 1)["revenue"] == pytest.approx(10_500_000)


class _UntouchableStore(HistoryStore):
    async def fetch_orders(self, since=None):
        raise AssertionError("store must not be read")

    async def fetch_expenses(self):
        raise AssertionError("store must not be read")


def test_generate_projection_validates_before_reading(scenario_assumptions):
    bad = scenario_assumptions.model_copy(update={"horizon_months": -1})
    with pytest.raises(InvalidAssumptions):
        asyncio.run(generate_projection(bad, _UntouchableStore()))


def test_negative_opening_cash_is_allowed(scenario_baseline):
    a = ProjectionAssumptions(
        horizon_months=2,
        revenue_growth=0.0,
        cogs_percentage=0.3,
        starting_balance=StartingBalance(cash=-50_000_000),
    )
    result = run_projection(a, scenario_baseline)
    assert result.row("balance_sheet", 1)["cash"] == pytest.approx(-50_000_000 + 7_000_000)
