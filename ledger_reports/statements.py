"""
Pure financial statement transformation functions.

These functions turn selector rows (``ledger_kernel.selectors.ledger_selector``)
and configuration layouts into the frozen report models of
``ledger_reports.models``.  ZERO I/O. ZERO side effects.

All monetary values are Decimal. All inputs/outputs are frozen dataclasses.

Functions in this module follow the ledger_kernel/domain/ purity convention:
- No database access
- No clock access (``today`` is passed in where a default window needs it)
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import calendar
import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_config.schema import (
    BalanceSheetLayout,
    IncomeStatementLayout,
    StatementLevel,
    StatementSide,
)
from ledger_kernel.db.types import ZERO, round_money
from ledger_kernel.domain.dtos import AccountInfo, FiscalPeriodInfo
from ledger_kernel.exceptions import InvalidDateRangeError, InvalidPeriodRequestError
from ledger_kernel.models.account import AccountKind
from ledger_kernel.selectors.ledger_selector import (
    AccountPosting,
    IncomeRow,
    TrialBalanceRow,
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
    ResolvedPeriod,
    ResultKind,
    TrialBalanceLine,
    TrialBalanceReport,
    TrialBalanceTotals,
)

HUNDRED = Decimal("100")
DEFAULT_TOLERANCE = Decimal("0.01")

# =========================================================================
# Helpers
# =========================================================================


def side_of(balance: Decimal) -> BalanceSide:
    """DEBTOR for a balance >= 0, CREDITOR otherwise."""
    return BalanceSide.DEBTOR if balance >= 0 else BalanceSide.CREDITOR


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100`` rounded to 2 places; 0 when ``whole`` is 0."""
    if whole == 0:
        return ZERO
    return round_money(part / whole * HUNDRED)


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


# =========================================================================
# 1. TRIAL BALANCE
# =========================================================================


def trial_balance_line(row: TrialBalanceRow) -> TrialBalanceLine:
    """Split one account's net balance into debtor / creditor columns."""
    balance = row.balance
    return TrialBalanceLine(
        number=row.number,
        label=row.label,
        kind=row.kind,
        debit_total=row.debit_total,
        credit_total=row.credit_total,
        balance=balance,
        debtor_balance=balance if balance > 0 else ZERO,
        creditor_balance=-balance if balance < 0 else ZERO,
    )


def build_trial_balance(
    rows: Sequence[TrialBalanceRow],
    metadata: ReportMetadata,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> TrialBalanceReport:
    """Build a trial balance with column totals and the equilibrium check."""
    lines = tuple(trial_balance_line(row) for row in rows)
    totals = TrialBalanceTotals(
        debit_total=_total(line.debit_total for line in lines),
        credit_total=_total(line.credit_total for line in lines),
        debtor_balance=_total(line.debtor_balance for line in lines),
        creditor_balance=_total(line.creditor_balance for line in lines),
    )
    gap = abs(totals.debit_total - totals.credit_total)
    return TrialBalanceReport(
        metadata=metadata,
        lines=lines,
        totals=totals,
        is_balanced=gap < tolerance,
        gap=gap,
    )


# =========================================================================
# 2. GENERAL LEDGER
# =========================================================================


def build_general_ledger_account(
    account: AccountInfo,
    postings: Sequence[AccountPosting],
    opening_balance: Decimal = ZERO,
) -> GeneralLedgerAccount:
    """
    Running balance of one account over ``postings`` (already in date, id
    order), starting from ``opening_balance``.

    Splitting a posting list into pages and seeding each page with the
    previous page's closing balance yields the same lines as one pass.
    """
    running = opening_balance
    total_debit = ZERO
    total_credit = ZERO
    lines: list[GeneralLedgerLine] = []

    for posting in postings:
        if posting.debit is not None:
            running += posting.debit
            total_debit += posting.debit
        if posting.credit is not None:
            running -= posting.credit
            total_credit += posting.credit
        lines.append(
            GeneralLedgerLine(
                entry_id=posting.entry_id,
                entry_date=posting.entry_date,
                label=posting.label,
                piece_number=posting.piece_number,
                debit=posting.debit,
                credit=posting.credit,
                running_balance=running,
                balance=abs(running),
                side=side_of(running),
            )
        )

    return GeneralLedgerAccount(
        number=account.number,
        label=account.label,
        kind=account.kind,
        opening_balance=opening_balance,
        lines=tuple(lines),
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=running,
        final_balance=abs(running),
        final_side=side_of(running),
    )


def build_general_ledger(
    accounts: Sequence[tuple[AccountInfo, Sequence[AccountPosting]]],
    metadata: ReportMetadata,
    opening_balances: Mapping[str, Decimal] | None = None,
) -> GeneralLedgerReport:
    """General ledger for several accounts, in the order given."""
    opening_balances = opening_balances or {}
    return GeneralLedgerReport(
        metadata=metadata,
        accounts=tuple(
            build_general_ledger_account(
                account, postings, opening_balances.get(account.number, ZERO)
            )
            for account, postings in accounts
        ),
    )


# =========================================================================
# 3. BALANCE SHEET
# =========================================================================


def _balance_sheet_line(
    number: str, label: str, initial: Decimal, final: Decimal
) -> BalanceSheetLine:
    variation = final - initial
    return BalanceSheetLine(
        number=number,
        label=label,
        initial=initial,
        final=final,
        variation=variation,
        variation_pct=percentage(variation, abs(initial)),
    )


def _make_section(title: str, lines: Sequence[BalanceSheetLine]) -> BalanceSheetSection:
    total_initial = _total(line.initial for line in lines)
    total_final = _total(line.final for line in lines)
    variation = total_final - total_initial
    return BalanceSheetSection(
        title=title,
        lines=tuple(lines),
        total_initial=total_initial,
        total_final=total_final,
        variation=variation,
        variation_pct=percentage(variation, abs(total_initial)),
    )


def magnitude_lines(
    accounts: Sequence[AccountInfo],
    initial_balances: Mapping[str, Decimal],
    final_balances: Mapping[str, Decimal],
) -> list[BalanceSheetLine]:
    """
    Absolute balance of each account at both boundaries.

    Accounts whose magnitude is zero at both boundaries are omitted.
    """
    lines = []
    for account in accounts:
        initial = abs(initial_balances.get(account.number, ZERO))
        final = abs(final_balances.get(account.number, ZERO))
        if initial == 0 and final == 0:
            continue
        lines.append(_balance_sheet_line(account.number, account.label, initial, final))
    return lines


def build_balance_sheet(
    assets: Sequence[AccountInfo],
    liabilities: Sequence[AccountInfo],
    initial_balances: Mapping[str, Decimal],
    final_balances: Mapping[str, Decimal],
    result_initial: Decimal,
    result_final: Decimal,
    layout: BalanceSheetLayout,
    metadata: ReportMetadata,
    initial_date: date,
    final_date: date,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> BalanceSheetReport:
    """
    Comparative balance sheet at ``initial_date`` and ``final_date``.

    Equity is the configured capital placeholder plus the period result
    evaluated at each boundary.  The balance check compares total assets
    to total liabilities + equity at the final boundary and is reported,
    never enforced.
    """
    asset_section = _make_section(
        "Assets", magnitude_lines(assets, initial_balances, final_balances)
    )
    liability_section = _make_section(
        "Liabilities", magnitude_lines(liabilities, initial_balances, final_balances)
    )
    equity_section = _make_section(
        "Equity",
        [
            _balance_sheet_line(
                layout.capital_number,
                layout.capital_label,
                layout.capital_amount,
                layout.capital_amount,
            ),
            _balance_sheet_line(
                layout.result_number, layout.result_label, result_initial, result_final
            ),
        ],
    )

    le_initial = liability_section.total_initial + equity_section.total_initial
    le_final = liability_section.total_final + equity_section.total_final
    gap = abs(asset_section.total_final - le_final)

    return BalanceSheetReport(
        metadata=metadata,
        initial_date=initial_date,
        final_date=final_date,
        assets=asset_section,
        liabilities=liability_section,
        equity=equity_section,
        total_assets_initial=asset_section.total_initial,
        total_assets_final=asset_section.total_final,
        total_liabilities_equity_initial=le_initial,
        total_liabilities_equity_final=le_final,
        is_balanced=gap < tolerance,
        gap=gap,
    )


# =========================================================================
# 4. INCOME STATEMENT
# =========================================================================


def resolve_statement_period(
    period_type: PeriodType | str,
    today: date,
    year: int | None = None,
    month: int | None = None,
    quarter: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    fiscal_period: FiscalPeriodInfo | None = None,
) -> ResolvedPeriod:
    """
    Turn a period request into a concrete [date_from, date_to] window.

    Missing year / month / quarter default to the ones containing ``today``.

    Raises:
        InvalidPeriodRequestError: unknown period type, month outside 1..12,
            quarter outside 1..4, a CUSTOM window without both bounds, or
            FISCAL_PERIOD without a period.
        InvalidDateRangeError: CUSTOM window with date_from > date_to.
    """
    try:
        period_type = PeriodType(period_type)
    except ValueError as exc:
        raise InvalidPeriodRequestError(
            "period_type", period_type, "unknown period type"
        ) from exc
    year = year if year is not None else today.year

    if period_type == PeriodType.MONTH:
        month = month if month is not None else today.month
        if not 1 <= month <= 12:
            raise InvalidPeriodRequestError("month", month, "must be between 1 and 12")
        last_day = calendar.monthrange(year, month)[1]
        return ResolvedPeriod(
            period_type=period_type,
            date_from=date(year, month, 1),
            date_to=date(year, month, last_day),
            label=f"{calendar.month_name[month]} {year}",
        )

    if period_type == PeriodType.QUARTER:
        quarter = quarter if quarter is not None else (today.month - 1) // 3 + 1
        if not 1 <= quarter <= 4:
            raise InvalidPeriodRequestError("quarter", quarter, "must be between 1 and 4")
        first_month = (quarter - 1) * 3 + 1
        last_month = first_month + 2
        return ResolvedPeriod(
            period_type=period_type,
            date_from=date(year, first_month, 1),
            date_to=date(year, last_month, calendar.monthrange(year, last_month)[1]),
            label=f"Q{quarter} {year}",
        )

    if period_type == PeriodType.YEAR:
        return ResolvedPeriod(
            period_type=period_type,
            date_from=date(year, 1, 1),
            date_to=date(year, 12, 31),
            label=f"Year {year}",
        )

    if period_type == PeriodType.FISCAL_PERIOD:
        if fiscal_period is None:
            raise InvalidPeriodRequestError(
                "period_id", None, "FISCAL_PERIOD requires a fiscal period"
            )
        return ResolvedPeriod(
            period_type=period_type,
            date_from=fiscal_period.start_date,
            date_to=fiscal_period.end_date,
            label=fiscal_period.period_name,
        )

    if date_from is None or date_to is None:
        missing = "date_from" if date_from is None else "date_to"
        raise InvalidPeriodRequestError(missing, None, "CUSTOM period requires both bounds")
    if date_from > date_to:
        raise InvalidDateRangeError(date_from.isoformat(), date_to.isoformat())
    return ResolvedPeriod(
        period_type=period_type,
        date_from=date_from,
        date_to=date_to,
        label=f"{date_from.isoformat()} to {date_to.isoformat()}",
    )


def statement_priority(
    number: str, priorities: Sequence[tuple[str, int]], default: int
) -> int:
    """Priority of the longest configured prefix ``number`` starts with."""
    best_prefix = ""
    best_priority = default
    for prefix, priority in priorities:
        if number.startswith(prefix) and len(prefix) > len(best_prefix):
            best_prefix, best_priority = prefix, priority
    return best_priority


def statement_level(number: str, layout: IncomeStatementLayout) -> StatementLevel:
    if number.startswith(tuple(layout.financial_prefixes)):
        return StatementLevel.FINANCIAL
    if number.startswith(tuple(layout.exceptional_prefixes)):
        return StatementLevel.EXCEPTIONAL
    return StatementLevel.OPERATING


def _statement_lines(
    rows: Sequence[IncomeRow],
    side: StatementSide,
    layout: IncomeStatementLayout,
) -> tuple[IncomeStatementLine, ...]:
    priorities = (
        layout.revenue_priorities
        if side == StatementSide.REVENUE
        else layout.expense_priorities
    )
    lines = [
        IncomeStatementLine(
            number=row.number,
            label=row.label,
            amount=row.amount,
            side=side,
            priority=statement_priority(row.number, priorities, layout.default_priority),
            level=statement_level(row.number, layout),
        )
        for row in rows
        if row.amount > 0
    ]

    present = {line.number for line in lines}
    for expected in layout.expected_lines:
        if expected.side == side and expected.number not in present:
            lines.append(
                IncomeStatementLine(
                    number=expected.number,
                    label=expected.label,
                    amount=ZERO,
                    side=side,
                    priority=expected.priority,
                    level=expected.level,
                )
            )

    lines.sort(key=lambda line: (line.priority, line.number))
    return tuple(lines)


def build_income_statement(
    rows: Sequence[IncomeRow],
    layout: IncomeStatementLayout,
    period: ResolvedPeriod,
    metadata: ReportMetadata,
) -> IncomeStatementReport:
    """
    Income statement over ``period``.

    Revenue lines come from REVENUE-kind rows, expense lines from
    EXPENSE-kind rows.  The configured expected lines are added with a
    zero amount when absent, and each section is ordered by priority then
    account number.
    """
    revenue_lines = _statement_lines(
        [r for r in rows if r.kind == AccountKind.REVENUE], StatementSide.REVENUE, layout
    )
    expense_lines = _statement_lines(
        [r for r in rows if r.kind == AccountKind.EXPENSE], StatementSide.EXPENSE, layout
    )
    total_revenue = _total(line.amount for line in revenue_lines)
    total_expense = _total(line.amount for line in expense_lines)

    profit_or_loss = total_revenue - total_expense
    result_kind = ResultKind.PROFIT if profit_or_loss >= 0 else ResultKind.LOSS
    margin_rate = None
    if result_kind == ResultKind.PROFIT and total_revenue > 0:
        margin_rate = percentage(profit_or_loss, total_revenue)

    return IncomeStatementReport(
        metadata=metadata,
        period=period,
        revenue=IncomeStatementSection("Revenue", revenue_lines, total_revenue),
        expenses=IncomeStatementSection("Expenses", expense_lines, total_expense),
        total_revenue=total_revenue,
        total_expense=total_expense,
        profit_or_loss=profit_or_loss,
        result_kind=result_kind,
        result_amount=abs(profit_or_loss),
        margin_rate=margin_rate,
    )


def analyze_income_statement(
    report: IncomeStatementReport,
    metadata: ReportMetadata,
) -> IncomeStatementAnalysis:
    """Per-level revenue, expense, result and ratio to total revenue."""
    levels = []
    for level in StatementLevel:
        revenue = _total(
            line.amount for line in report.revenue.lines if line.level == level
        )
        expense = _total(
            line.amount for line in report.expenses.lines if line.level == level
        )
        result = revenue - expense
        levels.append(
            LevelBreakdown(
                level=level,
                revenue=revenue,
                expense=expense,
                result=result,
                ratio=percentage(result, report.total_revenue),
            )
        )
    return IncomeStatementAnalysis(
        metadata=metadata,
        period=report.period,
        total_revenue=report.total_revenue,
        levels=tuple(levels),
    )


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
