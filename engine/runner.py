"""
Projection runner: validates assumptions, walks the months, assembles and
checks the statements.

Two entry points:
  1. run_projection():       synchronous, baseline already known (pure CPU work)
  2. generate_projection():  async, reads the baseline from a HistoryStore first

Each call builds its own SimulationState; nothing is shared between runs, so
concurrent projections cannot interfere. Either a complete ProjectionResult is
returned or an exception is raised; there are no partial results.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pandas as pd

from core.assumptions import ProjectionAssumptions
from core.config import ProjectionConfig
from core.errors import InvalidAssumptions
from core.utils import is_finite_number
from data_prep.baseline import Baseline, estimate_baseline, load_baseline
from data_prep.history import HistoryInput
from data_prep.store import HistoryStore
from data_prep.validators import ValidationResult, validate_assumptions
from statements.assembler import assemble_statements, statement_months
from statements.checks import check_accounting_identity, check_cash_roll_forward, check_month_sequence
from statements.result import ProjectionResult

from .amortization import AmortizationSchedule
from .stepper import PeriodRecord, SimulationState, step_period

logger = logging.getLogger(__name__)


def ensure_valid(assumptions: ProjectionAssumptions, baseline: Optional[Baseline] = None) -> ValidationResult:
    """Raise InvalidAssumptions when assumptions (or baseline seeds) cannot be simulated."""
    result = validate_assumptions(assumptions)
    if baseline is not None:
        if not is_finite_number(baseline.baseline_monthly_revenue):
            result.errors.append(f"Baseline revenue must be finite, got {baseline.baseline_monthly_revenue!r}.")
        if not is_finite_number(baseline.avg_monthly_expense):
            result.errors.append(f"Average monthly expense must be finite, got {baseline.avg_monthly_expense!r}.")
    if not result.is_valid:
        raise InvalidAssumptions(result.summary())
    return result


def simulate(
    assumptions: ProjectionAssumptions,
    baseline: Baseline,
    schedule: AmortizationSchedule,
    config: ProjectionConfig,
) -> List[PeriodRecord]:
    """Walk months 1..horizon from the seed state. Assumes validated input."""
    state = SimulationState.seed(assumptions, baseline.baseline_monthly_revenue)
    records: List[PeriodRecord] = []
    for month in range(1, assumptions.horizon_months + 1):
        record, state = step_period(
            state,
            month,
            assumptions=assumptions,
            schedule=schedule,
            historical_opex=baseline.avg_monthly_expense,
            config=config,
        )
        logger.debug("month %d: revenue=%.2f net_income=%.2f cash=%.2f",
                     month, record.revenue, record.net_income, record.ending_cash)
        records.append(record)
    return records


def run_projection(
    assumptions: ProjectionAssumptions,
    baseline: Baseline,
    *,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """
    Run the monthly projection.

    Parameters
    ----------
    assumptions : ProjectionAssumptions
        User assumptions (horizon, growth, COGS, opening balances, opex, capex)
    baseline : Baseline
        Month-0 revenue and historical average monthly expense
    config : ProjectionConfig, optional
        Engine policy (working-capital fractions, depreciation cap, tolerances)

    Returns
    -------
    ProjectionResult with income statement, cash flow, balance sheet and details.

    Raises
    ------
    InvalidAssumptions   before the loop, when inputs cannot be simulated
    InvariantViolation   after the loop, when the statements are inconsistent
    """
    cfg = config or ProjectionConfig()
    validation = ensure_valid(assumptions, baseline)
    for w in validation.warnings:
        logger.warning("Assumption warning: %s", w)

    logger.info(
        "Running %d-month projection (baseline revenue %.2f, historical opex %.2f)",
        assumptions.horizon_months,
        baseline.baseline_monthly_revenue,
        baseline.avg_monthly_expense,
    )

    schedule = AmortizationSchedule(capex=tuple(assumptions.capex), cap=cfg.cap_depreciation)
    records = simulate(assumptions, baseline, schedule, cfg)

    result = assemble_statements(
        records,
        assumptions=assumptions,
        baseline=baseline,
        schedule=schedule,
        config=cfg,
    )

    check_month_sequence(statement_months(result), assumptions.horizon_months)
    check_cash_roll_forward(
        result.cash_flow_statement,
        opening_cash=assumptions.starting_balance.cash,
        rel_tol=cfg.identity_rel_tol,
    )
    check_accounting_identity(result.balance_sheet, rel_tol=cfg.identity_rel_tol)

    last = records[-1]
    logger.info(
        "Projection complete: month %d ending cash %.2f, retained earnings %.2f",
        last.month,
        last.ending_cash,
        last.retained_earnings,
    )
    return result


def project_from_history(
    assumptions: ProjectionAssumptions,
    orders: HistoryInput,
    expenses: HistoryInput,
    *,
    as_of: Optional[pd.Timestamp] = None,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """Estimate the baseline from in-hand history records, then run."""
    cfg = config or ProjectionConfig()
    ensure_valid(assumptions)
    baseline = estimate_baseline(orders, expenses, as_of=as_of, config=cfg)
    return run_projection(assumptions, baseline, config=cfg)


async def generate_projection(
    assumptions: ProjectionAssumptions,
    store: HistoryStore,
    *,
    as_of: Optional[pd.Timestamp] = None,
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """
    Read history from the store (orders and expenses concurrently), then run.

    Invalid assumptions are rejected before the store is touched. A store
    failure surfaces as DataUnavailable; the caller may retry.
    """
    cfg = config or ProjectionConfig()
    ensure_valid(assumptions)
    baseline = await load_baseline(store, as_of=as_of, config=cfg)
    return run_projection(assumptions, baseline, config=cfg)
