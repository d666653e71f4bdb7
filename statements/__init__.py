"""
Statements: assemble period records into the income statement, cash-flow
statement and balance sheet, check them, and summarise them.
"""

from .result import ProjectionResult
from .assembler import assemble_statements
from .checks import check_accounting_identity, check_cash_roll_forward, check_month_sequence
from .summary import annual_summary

__all__ = [
    "ProjectionResult",
    "assemble_statements",
    "check_accounting_identity",
    "check_cash_roll_forward",
    "check_month_sequence",
    "annual_summary",
]
