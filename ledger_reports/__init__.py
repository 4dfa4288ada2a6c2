"""
Ledger Reports - financial statements over the ledger kernel.

Trial balance, general ledger, comparative balance sheet and income
statement, each recomputed from the journal on every call.
"""

from ledger_reports.export import (
    balance_sheet_to_csv,
    general_ledger_to_csv,
    income_statement_to_csv,
    trial_balance_to_csv,
)
from ledger_reports.models import (
    BalanceSheetLine,
    BalanceSheetReport,
    BalanceSheetSection,
    BalanceSide,
    GeneralLedgerAccount,
    GeneralLedgerLine,
    GeneralLedgerReport,
    IncomeStatementAnalysis,
    IncomeStatementLine,
    IncomeStatementReport,
    IncomeStatementSection,
    LevelBreakdown,
    PeriodType,
    ReportMetadata,
    ReportType,
    ResolvedPeriod,
    ResultKind,
    TrialBalanceLine,
    TrialBalanceReport,
    TrialBalanceTotals,
)
from ledger_reports.service import ReportingService
from ledger_reports.statements import render_to_dict

__all__ = [
    "BalanceSheetLine",
    "BalanceSheetReport",
    "BalanceSheetSection",
    "BalanceSide",
    "GeneralLedgerAccount",
    "GeneralLedgerLine",
    "GeneralLedgerReport",
    "IncomeStatementAnalysis",
    "IncomeStatementLine",
    "IncomeStatementReport",
    "IncomeStatementSection",
    "LevelBreakdown",
    "PeriodType",
    "ReportMetadata",
    "ReportType",
    "ReportingService",
    "ResolvedPeriod",
    "ResultKind",
    "TrialBalanceLine",
    "TrialBalanceReport",
    "TrialBalanceTotals",
    "balance_sheet_to_csv",
    "general_ledger_to_csv",
    "income_statement_to_csv",
    "render_to_dict",
    "trial_balance_to_csv",
]
