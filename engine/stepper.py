"""
One month of the projection.

step_period() is a pure transition: (SimulationState for month m-1, month m)
-> (PeriodRecord for month m, SimulationState for month m). Nothing is mutated;
the runner threads the returned state into the next call.

Per month m:
  1. revenue    = last revenue * (1 + growth)
  2. COGS ratio steps up by (1 + inflation) at months 13, 25, 37, ...
  3. cogs       = revenue * ratio,  gross profit = revenue - cogs
  4. capex cash = lines bought in m,  depreciation from the amortization schedule
  5. opex       = historical average + manual lines (flat over the horizon)
  6. EBITDA -> EBIT -> taxes (always 0) -> net income
  7. inventory and payables = fraction of this month's COGS; their movement
     versus last month is the working-capital line of the cash flow
  8. cash       = last cash + net income + depreciation - capex + working capital
  9. fixed assets roll forward, retained earnings accumulate net income
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from core.assumptions import ProjectionAssumptions
from core.config import ProjectionConfig
from core.utils import MONTHS_PER_YEAR

from .amortization import AmortizationSchedule


@dataclass(frozen=True)
class SimulationState:
    """Ending values of the previous month (or the opening position for month 1)."""
    last_month_revenue: float
    current_cogs_ratio: float
    last_cash: float
    last_inventory: float
    last_fixed_assets: float
    last_accounts_payable: float
    last_retained_earnings: float

    @classmethod
    def seed(cls, assumptions: ProjectionAssumptions, baseline_revenue: float) -> "SimulationState":
        sb = assumptions.starting_balance
        return cls(
            last_month_revenue=float(baseline_revenue),
            current_cogs_ratio=float(assumptions.cogs_percentage),
            last_cash=float(sb.cash),
            last_inventory=float(sb.inventory),
            last_fixed_assets=float(sb.fixed_assets),
            last_accounts_payable=float(sb.accounts_payable),
            # opening equity = opening net assets, so month 0 balances
            last_retained_earnings=float(sb.net_assets),
        )


@dataclass(frozen=True)
class PeriodRecord:
    """Every figure produced for one month."""
    month: int

    # income statement
    revenue: float
    cogs_ratio: float
    cogs: float
    gross_profit: float
    opex_historical: float
    opex_manual: float
    total_opex: float
    ebitda: float
    depreciation: float
    ebit: float
    taxes: float
    net_income: float

    # cash flow
    capex: float
    working_capital_change: float
    net_cash_flow: float
    ending_cash: float

    # balance sheet
    inventory: float
    fixed_assets: float
    total_assets: float
    accounts_payable: float
    total_liabilities: float
    retained_earnings: float
    total_equity: float
    total_liabilities_and_equity: float


def is_cogs_step_month(month: int) -> bool:
    """True on the first month of every projection year after the first (13, 25, ...)."""
    return month > 1 and month % MONTHS_PER_YEAR == 1


def step_period(
    state: SimulationState,
    month: int,
    *,
    assumptions: ProjectionAssumptions,
    schedule: AmortizationSchedule,
    historical_opex: float,
    config: ProjectionConfig,
) -> Tuple[PeriodRecord, SimulationState]:
    revenue = state.last_month_revenue * (1.0 + assumptions.revenue_growth)

    cogs_ratio = state.current_cogs_ratio
    if is_cogs_step_month(month):
        cogs_ratio = cogs_ratio * (1.0 + assumptions.cogs_inflation)

    cogs = revenue * cogs_ratio
    gross_profit = revenue - cogs

    capex = schedule.capex_outflow(month)
    depreciation = schedule.monthly_depreciation(month)

    opex_manual = assumptions.manual_monthly_opex
    total_opex = historical_opex + opex_manual

    ebitda = gross_profit - total_opex
    ebit = ebitda - depreciation
    taxes = 0.0  # no tax modelling
    net_income = ebit - taxes

    inventory = cogs * config.inventory_cogs_fraction
    accounts_payable = cogs * config.payables_cogs_fraction
    working_capital_change = (state.last_inventory - inventory) + (
        accounts_payable - state.last_accounts_payable
    )

    net_cash_flow = net_income + depreciation - capex + working_capital_change
    ending_cash = state.last_cash + net_cash_flow

    fixed_assets = state.last_fixed_assets + capex - depreciation
    retained_earnings = state.last_retained_earnings + net_income

    total_assets = ending_cash + inventory + fixed_assets
    total_liabilities = accounts_payable
    total_equity = retained_earnings

    record = PeriodRecord(
        month=month,
        revenue=revenue,
        cogs_ratio=cogs_ratio,
        cogs=cogs,
        gross_profit=gross_profit,
        opex_historical=historical_opex,
        opex_manual=opex_manual,
        total_opex=total_opex,
        ebitda=ebitda,
        depreciation=depreciation,
        ebit=ebit,
        taxes=taxes,
        net_income=net_income,
        capex=capex,
        working_capital_change=working_capital_change,
        net_cash_flow=net_cash_flow,
        ending_cash=ending_cash,
        inventory=inventory,
        fixed_assets=fixed_assets,
        total_assets=total_assets,
        accounts_payable=accounts_payable,
        total_liabilities=total_liabilities,
        retained_earnings=retained_earnings,
        total_equity=total_equity,
        total_liabilities_and_equity=total_liabilities + total_equity,
    )

    next_state = SimulationState(
        last_month_revenue=revenue,
        current_cogs_ratio=cogs_ratio,
        last_cash=ending_cash,
        last_inventory=inventory,
        last_fixed_assets=fixed_assets,
        last_accounts_payable=accounts_payable,
        last_retained_earnings=retained_earnings,
    )
    return record, next_state
