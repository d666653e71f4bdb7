"""
User-facing projection assumptions.

Pydantic models so raw request payloads (camelCase, string numbers from form
fields) coerce cleanly. Only types are enforced here; the business rules
(positive horizon, finite amounts, ...) live in data_prep.validators so that a
well-typed but invalid value surfaces as InvalidAssumptions when a run starts.
"""

from __future__ import annotations

from typing import Any, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidAssumptions

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class StartingBalance(BaseModel):
    """Opening balance sheet. Cash may be negative (overdrawn)."""
    model_config = _MODEL_CONFIG

    cash: float = 0.0
    inventory: float = 0.0
    fixed_assets: float = Field(0.0, alias="fixedAssets")
    accounts_payable: float = Field(0.0, alias="accountsPayable")

    @property
    def net_assets(self) -> float:
        return self.cash + self.inventory + self.fixed_assets - self.accounts_payable


class OperatingExpenseLine(BaseModel):
    """Flat monthly operating expense (rent, salaries, ...)."""
    model_config = _MODEL_CONFIG

    category: str
    amount: float


class CapitalExpenditureLine(BaseModel):
    """One-off asset purchase, depreciated straight-line from its purchase month."""
    model_config = _MODEL_CONFIG

    asset_name: str = Field(alias="assetName")
    cost: float
    purchase_month: int = Field(alias="purchaseMonth")  # 1-indexed
    useful_life_years: float = Field(alias="usefulLife")


class ProjectionAssumptions(BaseModel):
    model_config = _MODEL_CONFIG

    horizon_months: int = Field(alias="projectionPeriod")
    revenue_growth: float = Field(alias="revenueGrowth")  # monthly, fractional
    cogs_percentage: float = Field(alias="cogsPercentage")  # fraction of revenue
    cogs_inflation: float = Field(0.0, alias="cogsInflation")  # applied once a year
    starting_balance: StartingBalance = Field(default_factory=StartingBalance, alias="startingBalance")
    opex: Tuple[OperatingExpenseLine, ...] = ()
    capex: Tuple[CapitalExpenditureLine, ...] = ()

    @property
    def manual_monthly_opex(self) -> float:
        return float(sum(line.amount for line in self.opex))


def parse_assumptions(payload: Mapping[str, Any]) -> ProjectionAssumptions:
    """Build assumptions from a raw mapping; type errors become InvalidAssumptions."""
    try:
        return ProjectionAssumptions.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidAssumptions(f"Malformed projection assumptions: {exc}") from exc


def default_assumptions() -> ProjectionAssumptions:
    """Starting values offered by the projection form (amounts in IDR)."""
    return ProjectionAssumptions(
        horizon_months=12,
        revenue_growth=0.05,
        cogs_percentage=0.30,
        cogs_inflation=0.02,
        starting_balance=StartingBalance(
            cash=150_000_000,
            inventory=30_000_000,
            fixed_assets=120_000_000,
            accounts_payable=7_500_000,
        ),
        opex=(OperatingExpenseLine(category="Rent", amount=22_500_000),),
        capex=(
            CapitalExpenditureLine(
                asset_name="New Espresso Machine",
                cost=75_000_000,
                purchase_month=3,
                useful_life_years=5,
            ),
        ),
    )
