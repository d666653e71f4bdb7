from __future__ import annotations

from typing import Tuple

# Canonical history columns. Loaders canonicalise aliases onto these names.
ORDER_COLUMNS: Tuple[str, ...] = (
    "timestamp",
    "gross_revenue",
)

EXPENSE_COLUMNS: Tuple[str, ...] = (
    "expense_date",
    "amount",
)

# Statement row layouts. Every statement frame starts with "month" (1..horizon).
INCOME_STATEMENT_COLUMNS: Tuple[str, ...] = (
    "month",
    "revenue",
    "cogs",
    "gross_profit",
    "total_opex",
    "ebitda",
    "depreciation",
    "ebit",
    "taxes",
    "net_income",
)

CASH_FLOW_COLUMNS: Tuple[str, ...] = (
    "month",
    "net_income",
    "depreciation",
    "working_capital_change",
    "capex",
    "net_cash_flow",
    "ending_cash",
)

BALANCE_SHEET_COLUMNS: Tuple[str, ...] = (
    "month",
    "cash",
    "inventory",
    "fixed_assets",
    "total_assets",
    "accounts_payable",
    "total_liabilities",
    "retained_earnings",
    "total_equity",
    "total_liabilities_and_equity",
)

# (label, column) pairs for the line-items x months balance sheet layout.
# A column of None marks a section heading row.
BALANCE_SHEET_LINE_ITEMS: Tuple[Tuple[str, object], ...] = (
    ("ASSETS", None),
    ("Cash", "cash"),
    ("Inventory", "inventory"),
    ("Fixed Assets, Net", "fixed_assets"),
    ("Total Assets", "total_assets"),
    ("LIABILITIES & EQUITY", None),
    ("Accounts Payable", "accounts_payable"),
    ("Total Liabilities", "total_liabilities"),
    ("Retained Earnings", "retained_earnings"),
    ("Total Equity", "total_equity"),
    ("Total Liabilities & Equity", "total_liabilities_and_equity"),
)
