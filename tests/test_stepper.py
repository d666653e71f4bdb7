import pytest

from core.assumptions import CapitalExpenditureLine, ProjectionAssumptions, StartingBalance
from core.config import ProjectionConfig
from engine.amortization import AmortizationSchedule
from engine.stepper import SimulationState, is_cogs_step_month, step_period


def test_seed_state_mirrors_opening_position(scenario_assumptions):
    state = SimulationState.seed(scenario_assumptions, 10_000_000)
    assert state.last_month_revenue == 10_000_000
    assert state.current_cogs_ratio == 0.30
    assert state.last_cash == 100_000_000
    assert state.last_retained_earnings == 100_000_000


def test_first_month_of_scenario(scenario_assumptions):
    state = SimulationState.seed(scenario_assumptions, 10_000_000)
    record, nxt = step_period(
        state,
        1,
        assumptions=scenario_assumptions,
        schedule=AmortizationSchedule(),
        historical_opex=0.0,
        config=ProjectionConfig(),
    )
    assert record.revenue == pytest.approx(10_500_000)
    assert record.cogs == pytest.approx(3_150_000)
    assert record.gross_profit == pytest.approx(7_350_000)
    assert record.total_opex == pytest.approx(1_000_000)
    assert record.ebitda == pytest.approx(6_350_000)
    assert record.taxes == 0.0
    assert record.net_income == pytest.approx(6_350_000)
    assert record.ending_cash == pytest.approx(106_350_000)
    assert record.inventory == pytest.approx(1_575_000)
    assert record.accounts_payable == pytest.approx(1_575_000)

    # the returned state carries month 1's ending values, the input is untouched
    assert nxt.last_month_revenue == record.revenue
    assert nxt.last_cash == record.ending_cash
    assert state.last_cash == 100_000_000


def test_cogs_step_months():
    assert [m for m in range(1, 40) if is_cogs_step_month(m)] == [13, 25, 37]


def test_working_capital_releases_opening_imbalance():
    a = ProjectionAssumptions(
        horizon_months=2,
        revenue_growth=0.0,
        cogs_percentage=0.5,
        starting_balance=StartingBalance(cash=0, inventory=300, accounts_payable=100),
    )
    state = SimulationState.seed(a, 1_000)
    kwargs = dict(assumptions=a, schedule=AmortizationSchedule(), historical_opex=0.0, config=ProjectionConfig())
    first, state = step_period(state, 1, **kwargs)
    second, _ = step_period(state, 2, **kwargs)
    assert first.working_capital_change == pytest.approx(200.0)
    assert second.working_capital_change == pytest.approx(0.0)
    assert first.total_assets == pytest.approx(first.total_liabilities_and_equity)


def test_capex_month_hits_cash_and_fixed_assets():
    a = ProjectionAssumptions(
        horizon_months=1,
        revenue_growth=0.0,
        cogs_percentage=0.0,
        starting_balance=StartingBalance(cash=10_000, fixed_assets=500),
        capex=(CapitalExpenditureLine(asset_name="Oven", cost=1_200, purchase_month=1, useful_life_years=1),),
    )
    schedule = AmortizationSchedule(capex=a.capex)
    record, _ = step_period(
        SimulationState.seed(a, 0.0), 1,
        assumptions=a, schedule=schedule, historical_opex=0.0, config=ProjectionConfig(),
    )
    assert record.capex == 1_200
    assert record.depreciation == pytest.approx(100.0)
    assert record.net_income == pytest.approx(-100.0)
    assert record.net_cash_flow == pytest.approx(-1_200.0)
    assert record.fixed_assets == pytest.approx(1_600.0)
