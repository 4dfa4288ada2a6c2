"""
Ledger configuration schema.

Frozen dataclasses parsed from a YAML configuration set by
``ledger_config.loader``.  They describe tunable limits and the fixed
statement layouts; they carry no executable logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

# ---------------------------------------------------------------------------
# Income statement
# ---------------------------------------------------------------------------


class StatementSide(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class StatementLevel(str, Enum):
    """Analytic level of an income-statement line."""

    OPERATING = "operating"
    FINANCIAL = "financial"
    EXCEPTIONAL = "exceptional"


@dataclass(frozen=True)
class StatementLine:
    """An income-statement line shown even when it has no activity."""

    number: str
    label: str
    side: StatementSide
    priority: int
    level: StatementLevel = StatementLevel.OPERATING


@dataclass(frozen=True)
class IncomeStatementLayout:
    """Fixed line set and ordering rules of the income statement."""

    expected_lines: tuple[StatementLine, ...] = ()
    revenue_priorities: tuple[tuple[str, int], ...] = ()  # (prefix, priority)
    expense_priorities: tuple[tuple[str, int], ...] = ()
    default_priority: int = 100
    financial_prefixes: tuple[str, ...] = ("76", "66")
    exceptional_prefixes: tuple[str, ...] = ("77", "67")


# ---------------------------------------------------------------------------
# Balance sheet
# ---------------------------------------------------------------------------


class PeriodResultBasis(str, Enum):
    """How the balance-sheet period result classifies accounts.

    PREFIX reproduces historical figures (class 7 / class 6 numbering);
    KIND uses the REVENUE / EXPENSE account kind like the income statement.
    """

    PREFIX = "prefix"
    KIND = "kind"


@dataclass(frozen=True)
class BalanceSheetLayout:
    capital_number: str = "10"
    capital_label: str = "Capital"
    capital_amount: Decimal = Decimal("1000000.00")
    result_number: str = "12"
    result_label: str = "Period result"
    revenue_prefix: str = "7"
    expense_prefix: str = "6"
    period_result_basis: PeriodResultBasis = PeriodResultBasis.PREFIX


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    """Root configuration object returned by ``get_active_config()``."""

    config_id: str
    version: int
    balance_tolerance: Decimal = Decimal("0.01")
    account_number_max_length: int = 10
    account_label_max_length: int = 100
    default_page_size: int = 20
    account_search_limit: int = 10
    piece_number_prefix: str = "PIECE"
    income_statement: IncomeStatementLayout = field(default_factory=IncomeStatementLayout)
    balance_sheet: BalanceSheetLayout = field(default_factory=BalanceSheetLayout)
    checksum: str = ""
