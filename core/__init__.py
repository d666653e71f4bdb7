"""
Core package: assumption types, configuration, errors, schema and shared utilities.
No business logic lives here.
"""

from .assumptions import (
    CapitalExpenditureLine,
    OperatingExpenseLine,
    ProjectionAssumptions,
    StartingBalance,
    default_assumptions,
    parse_assumptions,
)
from .config import ProjectionConfig
from .errors import DataUnavailable, InvalidAssumptions, InvariantViolation, ProjectionError
from .utils import require_columns, month_starts, months_between

__all__ = [
    "CapitalExpenditureLine",
    "OperatingExpenseLine",
    "ProjectionAssumptions",
    "StartingBalance",
    "default_assumptions",
    "parse_assumptions",
    "ProjectionConfig",
    "DataUnavailable",
    "InvalidAssumptions",
    "InvariantViolation",
    "ProjectionError",
    "require_columns",
    "month_starts",
    "months_between",
]
