"""
Assumption validation before anything enters the engine.

Catches problems early:
- Non-positive horizon
- Non-finite rates or amounts
- Impossible useful lives / purchase months
- Suspicious-but-legal inputs (reported as warnings)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List

from core.assumptions import ProjectionAssumptions
from core.utils import is_finite_number


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a set of assumptions."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_assumptions(assumptions: ProjectionAssumptions) -> ValidationResult:
    """
    Run all validation checks on projection assumptions.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()
    a = assumptions

    # --- Horizon ---
    if a.horizon_months <= 0:
        result.errors.append(f"Projection horizon must be positive, got {a.horizon_months} months.")

    # --- Rates ---
    for label, value in [
        ("revenue growth", a.revenue_growth),
        ("COGS percentage", a.cogs_percentage),
        ("COGS inflation", a.cogs_inflation),
    ]:
        if not is_finite_number(value):
            result.errors.append(f"{label} must be a finite number, got {value!r}.")

    if is_finite_number(a.cogs_percentage) and not (0.0 <= a.cogs_percentage <= 1.0):
        result.warnings.append(
            f"COGS percentage {a.cogs_percentage} is outside [0, 1]; check if it is in "
            f"percent vs decimal form."
        )
    if is_finite_number(a.revenue_growth) and a.revenue_growth <= -1.0:
        result.warnings.append("Revenue growth <= -100% drives revenue to zero or below.")

    # --- Starting balances ---
    sb = a.starting_balance
    if not is_finite_number(sb.cash):
        result.errors.append(f"Starting cash must be finite, got {sb.cash!r}.")
    for label, value in [
        ("inventory", sb.inventory),
        ("fixed assets", sb.fixed_assets),
        ("accounts payable", sb.accounts_payable),
    ]:
        if not is_finite_number(value):
            result.errors.append(f"Starting {label} must be finite, got {value!r}.")
        elif value < 0:
            result.errors.append(f"Starting {label} cannot be negative ({value}).")

    # --- Opex ---
    for line in a.opex:
        if not is_finite_number(line.amount):
            result.errors.append(f"Opex line {line.category!r} has non-finite amount {line.amount!r}.")
    dupes = [c for c, n in Counter(line.category for line in a.opex).items() if n > 1]
    if dupes:
        result.warnings.append(f"Duplicate opex categories: {dupes} (amounts are summed).")

    # --- Capex ---
    for line in a.capex:
        name = line.asset_name
        if not is_finite_number(line.cost):
            result.errors.append(f"Capex line {name!r} has non-finite cost {line.cost!r}.")
        elif line.cost < 0:
            result.errors.append(f"Capex line {name!r} has negative cost ({line.cost}).")
        if not is_finite_number(line.useful_life_years) or line.useful_life_years <= 0:
            result.errors.append(
                f"Capex line {name!r} needs a positive useful life, got {line.useful_life_years!r}."
            )
        if line.purchase_month < 1:
            result.errors.append(f"Capex line {name!r} purchase month must be >= 1 ({line.purchase_month}).")
        elif a.horizon_months > 0 and line.purchase_month > a.horizon_months:
            result.warnings.append(
                f"Capex line {name!r} is purchased in month {line.purchase_month}, "
                f"after the {a.horizon_months}-month horizon; it has no effect."
            )

    return result
