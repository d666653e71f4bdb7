import pandas as pd
import pytest

from core.assumptions import OperatingExpenseLine, ProjectionAssumptions, StartingBalance
from data_prep.baseline import Baseline


@pytest.fixture
def scenario_assumptions() -> ProjectionAssumptions:
    """3 months, 5% growth, 30% COGS, Rent 1,000,000, no capex."""
    return ProjectionAssumptions(
        horizon_months=3,
        revenue_growth=0.05,
        cogs_percentage=0.30,
        cogs_inflation=0.0,
        starting_balance=StartingBalance(cash=100_000_000),
        opex=(OperatingExpenseLine(category="Rent", amount=1_000_000),),
    )


@pytest.fixture
def scenario_baseline() -> Baseline:
    return Baseline(baseline_monthly_revenue=10_000_000, avg_monthly_expense=0.0)


@pytest.fixture
def as_of() -> pd.Timestamp:
    return pd.Timestamp("2025-06-15")
