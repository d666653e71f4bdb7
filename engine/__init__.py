"""
Projection engine: straight-line amortization and the monthly period stepper.

The orchestrating runner lives in engine.runner (imported explicitly, since it
depends on the statements package which in turn uses the types defined here).
"""

from .amortization import AmortizationSchedule, line_depreciation
from .stepper import PeriodRecord, SimulationState, step_period

__all__ = [
    "AmortizationSchedule",
    "line_depreciation",
    "PeriodRecord",
    "SimulationState",
    "step_period",
]
