"""
Financial Statement Models (``ledger_reports.models``).

Responsibility
--------------
Frozen dataclass value objects for every calculator output: trial
balance, general ledger, comparative balance sheet, income statement and
its per-level analysis.

Architecture position
---------------------
**Reports layer** -- pure data definitions with ZERO I/O.  Built by the
pure functions in ``statements.py`` and returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields are ``Decimal`` -- NEVER ``float``.
* Magnitudes shown to a reader (general-ledger balance, balance-sheet
  amounts, income-statement result) are non-negative; the sign lives in a
  separate side/kind discriminator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_config.schema import StatementLevel, StatementSide
from ledger_kernel.models.account import AccountKind

# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    TRIAL_BALANCE = "trial_balance"
    GENERAL_LEDGER = "general_ledger"
    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"
    INCOME_ANALYSIS = "income_analysis"


class BalanceSide(str, Enum):
    """Side of a running balance: DEBTOR when >= 0, else CREDITOR."""

    DEBTOR = "debtor"
    CREDITOR = "creditor"


class ResultKind(str, Enum):
    PROFIT = "profit"
    LOSS = "loss"


class PeriodType(str, Enum):
    """How an income-statement window is specified."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    CUSTOM = "custom"
    FISCAL_PERIOD = "fiscal_period"


# =========================================================================
# Metadata
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every report."""

    report_type: ReportType
    generated_at: str  # ISO timestamp from the injected clock
    date_from: date | None = None
    date_to: date | None = None
    config_id: str | None = None


# =========================================================================
# Trial balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceLine:
    number: str
    label: str
    kind: AccountKind | None
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal           # debit_total - credit_total
    debtor_balance: Decimal    # max(balance, 0)
    creditor_balance: Decimal  # max(-balance, 0)


@dataclass(frozen=True)
class TrialBalanceTotals:
    debit_total: Decimal
    credit_total: Decimal
    debtor_balance: Decimal
    creditor_balance: Decimal


@dataclass(frozen=True)
class TrialBalanceReport:
    metadata: ReportMetadata
    lines: tuple[TrialBalanceLine, ...]
    totals: TrialBalanceTotals
    is_balanced: bool  # |Σdebit - Σcredit| < tolerance
    gap: Decimal       # |Σdebit - Σcredit|


# =========================================================================
# General ledger
# =========================================================================


@dataclass(frozen=True)
class GeneralLedgerLine:
    """One posting with the running balance after it."""

    entry_id: int
    entry_date: date
    label: str
    piece_number: str | None
    debit: Decimal | None
    credit: Decimal | None
    running_balance: Decimal  # signed
    balance: Decimal          # abs(running_balance)
    side: BalanceSide


@dataclass(frozen=True)
class GeneralLedgerAccount:
    number: str
    label: str
    kind: AccountKind | None
    opening_balance: Decimal  # signed carry-in
    lines: tuple[GeneralLedgerLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal  # signed
    final_balance: Decimal    # abs(closing_balance)
    final_side: BalanceSide


@dataclass(frozen=True)
class GeneralLedgerReport:
    metadata: ReportMetadata
    accounts: tuple[GeneralLedgerAccount, ...]


# =========================================================================
# Balance sheet
# =========================================================================


@dataclass(frozen=True)
class BalanceSheetLine:
    number: str
    label: str
    initial: Decimal
    final: Decimal
    variation: Decimal
    variation_pct: Decimal  # 0 when initial is 0


@dataclass(frozen=True)
class BalanceSheetSection:
    title: str
    lines: tuple[BalanceSheetLine, ...]
    total_initial: Decimal
    total_final: Decimal
    variation: Decimal
    variation_pct: Decimal


@dataclass(frozen=True)
class BalanceSheetReport:
    metadata: ReportMetadata
    initial_date: date
    final_date: date
    assets: BalanceSheetSection
    liabilities: BalanceSheetSection
    equity: BalanceSheetSection
    total_assets_initial: Decimal
    total_assets_final: Decimal
    total_liabilities_equity_initial: Decimal
    total_liabilities_equity_final: Decimal
    is_balanced: bool  # reported, never enforced
    gap: Decimal


# =========================================================================
# Income statement
# =========================================================================


@dataclass(frozen=True)
class ResolvedPeriod:
    """Concrete window an income statement covers."""

    period_type: PeriodType
    date_from: date
    date_to: date
    label: str


@dataclass(frozen=True)
class IncomeStatementLine:
    number: str
    label: str
    amount: Decimal
    side: StatementSide
    priority: int
    level: StatementLevel


@dataclass(frozen=True)
class IncomeStatementSection:
    title: str
    lines: tuple[IncomeStatementLine, ...]
    total: Decimal


@dataclass(frozen=True)
class IncomeStatementReport:
    metadata: ReportMetadata
    period: ResolvedPeriod
    revenue: IncomeStatementSection
    expenses: IncomeStatementSection
    total_revenue: Decimal
    total_expense: Decimal
    profit_or_loss: Decimal   # signed: revenue - expense
    result_kind: ResultKind
    result_amount: Decimal    # abs(profit_or_loss)
    margin_rate: Decimal | None  # only for a profit with revenue > 0


@dataclass(frozen=True)
class LevelBreakdown:
    level: StatementLevel
    revenue: Decimal
    expense: Decimal
    result: Decimal
    ratio: Decimal  # result / total revenue * 100, 0 without revenue


@dataclass(frozen=True)
class IncomeStatementAnalysis:
    metadata: ReportMetadata
    period: ResolvedPeriod
    total_revenue: Decimal
    levels: tuple[LevelBreakdown, ...]

    def level(self, level: StatementLevel) -> LevelBreakdown:
        for item in self.levels:
            if item.level == level:
                return item
        raise KeyError(level)
