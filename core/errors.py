"""
Projection error taxonomy.

InvalidAssumptions : caller input rejected before the monthly loop starts.
DataUnavailable    : the history store could not be read (recoverable by retry).
InvariantViolation : a produced balance sheet does not balance (implementation bug).
"""

from __future__ import annotations

from typing import Optional


class ProjectionError(Exception):
    """Base class for everything the projection engine raises on purpose."""


class InvalidAssumptions(ProjectionError, ValueError):
    """Assumptions failed validation; the simulation never ran."""


class DataUnavailable(ProjectionError):
    """Historical orders or expenses could not be read from the store."""


class InvariantViolation(ProjectionError, AssertionError):
    """Assets != Liabilities + Equity (or another structural check failed) for a month."""

    def __init__(
        self,
        message: str,
        *,
        month: Optional[int] = None,
        total_assets: Optional[float] = None,
        total_liabilities_and_equity: Optional[float] = None,
    ):
        super().__init__(message)
        self.month = month
        self.total_assets = total_assets
        self.total_liabilities_and_equity = total_liabilities_and_equity
