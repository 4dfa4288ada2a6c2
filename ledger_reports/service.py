"""
Reporting Service (``ledger_reports.service``).

Responsibility
--------------
Orchestrates financial statement generation -- trial balance, general
ledger, comparative balance sheet, income statement and its analysis --
by bridging kernel selectors (``LedgerSelector``, ``AccountSelector``) to
the pure transformation functions in ``statements.py``.  This is a
**read-only** service: nothing is flushed.

Architecture position
---------------------
**Reports layer**.  ``ReportingService`` is the sole public entry point
for statement generation.  Constructor: ``session`` + ``clock`` +
``config``.

Invariants enforced
-------------------
* Read-only -- no mutations to the journal.
* Every figure is recomputed from the journal on each call; two calls
  with the same parameters and no intervening write return equal reports
  (apart from ``metadata.generated_at`` when the clock moves).
* All monetary amounts use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* ``DateFormatInvalidError`` -- a date parameter is not YYYY-MM-DD.
* ``InvalidDateRangeError`` -- a window or comparison ends before it starts.
* ``AccountNotFoundError`` / ``PeriodNotFoundError`` -- unknown identifier.
* ``InvalidPeriodRequestError`` -- malformed income-statement period request.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, PeriodResultBasis, get_active_config
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.parsing import parse_entry_date, parse_optional_date
from ledger_kernel.exceptions import InvalidDateRangeError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import AccountKind
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.services.period_service import PeriodService
from ledger_reports.models import (
    BalanceSheetReport,
    GeneralLedgerAccount,
    GeneralLedgerReport,
    IncomeStatementAnalysis,
    IncomeStatementReport,
    PeriodType,
    ReportMetadata,
    ReportType,
    ResolvedPeriod,
    TrialBalanceLine,
    TrialBalanceReport,
)
from ledger_reports.statements import (
    analyze_income_statement,
    build_balance_sheet,
    build_general_ledger,
    build_general_ledger_account,
    build_income_statement,
    build_trial_balance,
    render_to_dict,
    resolve_statement_period,
    trial_balance_line,
)

logger = get_logger("reports.service")


def _check_window(date_from: date | None, date_to: date | None) -> None:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise InvalidDateRangeError(date_from.isoformat(), date_to.isoformat())


class ReportingService:
    """
    Financial statement generation service.

    Contract
    --------
    Receives a SQLAlchemy ``Session``, an optional ``Clock`` (for the
    ``generated_at`` stamp and default windows) and an optional
    ``LedgerConfig`` (packaged defaults when omitted).  Date parameters
    accept ``date`` objects or YYYY-MM-DD strings.

    Non-goals
    ---------
    * Does NOT post, edit or delete entries.
    * Does NOT enforce fiscal-period locks.
    * Does NOT cache results.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._ledger = LedgerSelector(session)
        self._accounts = AccountSelector(session)

        logger.debug(
            "reporting_service_initialized",
            extra={"config_id": self._config.config_id},
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _build_metadata(
        self,
        report_type: ReportType,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            report_type=report_type,
            generated_at=self._clock.now().isoformat(),
            date_from=date_from,
            date_to=date_to,
            config_id=self._config.config_id,
        )

    def _period_result(self, as_of: date) -> Decimal:
        """Revenue credits minus expense debits dated on or before ``as_of``."""
        layout = self._config.balance_sheet
        if layout.period_result_basis == PeriodResultBasis.KIND:
            revenue = self._ledger.leg_total("credit", as_of, kind=AccountKind.REVENUE)
            expense = self._ledger.leg_total("debit", as_of, kind=AccountKind.EXPENSE)
        else:
            revenue = self._ledger.leg_total("credit", as_of, prefix=layout.revenue_prefix)
            expense = self._ledger.leg_total("debit", as_of, prefix=layout.expense_prefix)
        return revenue - expense

    def _resolve_period(
        self,
        period_type: PeriodType | str,
        year: int | None,
        month: int | None,
        quarter: int | None,
        date_from: date | str | None,
        date_to: date | str | None,
        period_id: int | None,
    ) -> ResolvedPeriod:
        fiscal_period = None
        if period_id is not None:
            fiscal_period = PeriodService(self._session, self._clock).get_period(period_id)
            period_type = PeriodType.FISCAL_PERIOD
        return resolve_statement_period(
            period_type,
            today=self._clock.today(),
            year=year,
            month=month,
            quarter=quarter,
            date_from=parse_optional_date(date_from),
            date_to=parse_optional_date(date_to),
            fiscal_period=fiscal_period,
        )

    # =========================================================================
    # Trial balance
    # =========================================================================

    def trial_balance(
        self,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        kinds: list[AccountKind] | None = None,
    ) -> TrialBalanceReport:
        """
        Trial balance of every account (optionally restricted to ``kinds``)
        over entries dated in [date_from, date_to].

        Accounts without activity appear with zero totals.
        """
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        _check_window(start, end)

        rows = self._ledger.trial_balance(kinds=kinds, date_from=start, date_to=end)
        report = build_trial_balance(
            rows,
            self._build_metadata(ReportType.TRIAL_BALANCE, start, end),
            self._config.balance_tolerance,
        )

        logger.debug(
            "trial_balance_computed",
            extra={
                "line_count": len(report.lines),
                "is_balanced": report.is_balanced,
                "gap": report.gap,
            },
        )
        return report

    def trial_balance_for_account(
        self,
        number: str,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> TrialBalanceLine:
        """
        Trial-balance line of a single account.

        Raises:
            AccountNotFoundError: unknown account number.
        """
        self._accounts.get_account(number)
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        _check_window(start, end)

        rows = self._ledger.trial_balance(
            date_from=start, date_to=end, account_number=number
        )
        return trial_balance_line(rows[0])

    # =========================================================================
    # General ledger
    # =========================================================================

    def general_ledger(
        self,
        number: str,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> GeneralLedgerAccount:
        """
        Chronological postings of one account with a running balance from
        zero.

        Raises:
            AccountNotFoundError: unknown account number.
        """
        account = self._accounts.get_account(number)
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        _check_window(start, end)

        postings = self._ledger.account_postings(number, start, end)
        result = build_general_ledger_account(account, postings)
        logger.debug(
            "general_ledger_computed",
            extra={"account_number": number, "line_count": len(result.lines)},
        )
        return result

    def general_ledger_range(
        self,
        number_from: str | None = None,
        number_to: str | None = None,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> GeneralLedgerReport:
        """
        General ledger of every account numbered in [number_from, number_to],
        including accounts without postings in the window.
        """
        start = parse_optional_date(date_from)
        end = parse_optional_date(date_to)
        _check_window(start, end)

        accounts = self._ledger.accounts_in_range(number_from, number_to)
        report = build_general_ledger(
            [
                (account, self._ledger.account_postings(account.number, start, end))
                for account in accounts
            ],
            self._build_metadata(ReportType.GENERAL_LEDGER, start, end),
        )
        logger.debug(
            "general_ledger_range_computed",
            extra={
                "number_from": number_from,
                "number_to": number_to,
                "account_count": len(report.accounts),
            },
        )
        return report

    def account_balances_as_of(self, as_of: date | str | None = None) -> dict[str, Decimal]:
        """Signed balance (Σdebit - Σcredit) per account up to ``as_of``."""
        return self._ledger.balances_as_of(parse_optional_date(as_of))

    # =========================================================================
    # Balance sheet
    # =========================================================================

    def balance_sheet(
        self,
        initial_date: date | str,
        final_date: date | str,
    ) -> BalanceSheetReport:
        """
        Comparative balance sheet at two dates.

        Balances are cumulative to each date regardless of fiscal period.
        Treasury accounts are not part of the asset section.
        """
        initial = parse_entry_date(initial_date)
        final = parse_entry_date(final_date)
        _check_window(initial, final)

        report = build_balance_sheet(
            assets=self._accounts.list_accounts(kind=AccountKind.ASSET, active_only=False),
            liabilities=self._accounts.list_accounts(
                kind=AccountKind.LIABILITY, active_only=False
            ),
            initial_balances=self._ledger.balances_as_of(initial),
            final_balances=self._ledger.balances_as_of(final),
            result_initial=self._period_result(initial),
            result_final=self._period_result(final),
            layout=self._config.balance_sheet,
            metadata=self._build_metadata(ReportType.BALANCE_SHEET, initial, final),
            initial_date=initial,
            final_date=final,
            tolerance=self._config.balance_tolerance,
        )

        logger.debug(
            "balance_sheet_computed",
            extra={
                "initial_date": initial,
                "final_date": final,
                "is_balanced": report.is_balanced,
            },
        )
        return report

    # =========================================================================
    # Income statement
    # =========================================================================

    def income_statement(
        self,
        period_type: PeriodType | str = PeriodType.MONTH,
        year: int | None = None,
        month: int | None = None,
        quarter: int | None = None,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        period_id: int | None = None,
    ) -> IncomeStatementReport:
        """
        Income statement over a month, quarter, year, custom window or
        fiscal period (``period_id`` wins over ``period_type``).

        Raises:
            PeriodNotFoundError: unknown ``period_id``.
            InvalidDateRangeError: custom window ends before it starts.
            InvalidPeriodRequestError: month / quarter out of range or missing bounds.
        """
        period = self._resolve_period(
            period_type, year, month, quarter, date_from, date_to, period_id
        )
        rows = self._ledger.income_rows(period.date_from, period.date_to)
        report = build_income_statement(
            rows,
            self._config.income_statement,
            period,
            self._build_metadata(ReportType.INCOME_STATEMENT, period.date_from, period.date_to),
        )

        logger.debug(
            "income_statement_computed",
            extra={
                "period_label": period.label,
                "result_kind": report.result_kind,
                "result_amount": report.result_amount,
            },
        )
        return report

    def income_statement_analysis(
        self,
        period_type: PeriodType | str = PeriodType.MONTH,
        year: int | None = None,
        month: int | None = None,
        quarter: int | None = None,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        period_id: int | None = None,
    ) -> IncomeStatementAnalysis:
        """Operating / financial / exceptional breakdown of the income statement."""
        report = self.income_statement(
            period_type, year, month, quarter, date_from, date_to, period_id
        )
        return analyze_income_statement(
            report,
            self._build_metadata(
                ReportType.INCOME_ANALYSIS, report.period.date_from, report.period.date_to
            ),
        )

    # =========================================================================
    # Rendering
    # =========================================================================

    def to_dict(self, report: object) -> dict:
        """
        Convert any report DTO to a plain dict for JSON serialization.

        Delegates to the pure render_to_dict function.
        """
        return render_to_dict(report)
