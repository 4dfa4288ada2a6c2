"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only aggregation queries that feed the financial
    statements: per-account debit/credit totals, per-account posting
    history, signed balances to a date, leg totals by account class, and
    revenue/expense amounts over a window.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - No stored balances.  Every figure is computed from journal_entries at
      query time; calling any method twice with no intervening write
      returns identical results.
    - Every entry contributes its amount exactly once to its debit account
      and once to its credit account, so Σdebit == Σcredit over any set of
      rows that is not filtered asymmetrically by account.
    - Trial-balance date bounds live in the JOIN condition, not the WHERE
      clause, so accounts without activity still produce a zero row.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, case, func, or_, select

from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.parsing import parse_account_kind
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountKind
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")


@dataclass(frozen=True)
class TrialBalanceRow:
    """Accumulated debit and credit totals of one account."""

    number: str
    label: str
    kind: AccountKind | None
    debit_total: Decimal
    credit_total: Decimal

    @property
    def balance(self) -> Decimal:
        """Net balance (debits - credits)."""
        return self.debit_total - self.credit_total


@dataclass(frozen=True)
class AccountPosting:
    """One entry as seen from one account: exactly one of debit/credit is set."""

    entry_id: int
    entry_date: date
    label: str
    piece_number: str | None
    debit: Decimal | None
    credit: Decimal | None
    counterpart: str


@dataclass(frozen=True)
class IncomeRow:
    """Revenue credits or expense debits of one account over a window."""

    number: str
    label: str
    kind: AccountKind
    amount: Decimal


def _kind_or_none(value) -> AccountKind | None:
    return AccountKind(value) if value is not None else None


def _date_bounds(column, date_from: date | None, date_to: date | None) -> list:
    conditions = []
    if date_from is not None:
        conditions.append(column >= date_from)
    if date_to is not None:
        conditions.append(column <= date_to)
    return conditions


class LedgerSelector(BaseSelector[JournalEntry]):
    """
    Selector for statement aggregations.

    Contract:
        Every method is a pure read.  Money comes back as Decimal.
    """

    def trial_balance(
        self,
        kinds: Sequence[AccountKind] | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        account_number: str | None = None,
    ) -> list[TrialBalanceRow]:
        """
        One row per account (optionally restricted by kind or number),
        ordered by account number, including accounts with no activity.
        """
        join_on = and_(
            or_(
                JournalEntry.debit_account == Account.number,
                JournalEntry.credit_account == Account.number,
            ),
            *_date_bounds(JournalEntry.entry_date, date_from, date_to),
        )

        debit_sum = func.coalesce(
            func.sum(
                case(
                    (JournalEntry.debit_account == Account.number, JournalEntry.amount),
                    else_=0,
                )
            ),
            0,
        ).label("debit_total")

        credit_sum = func.coalesce(
            func.sum(
                case(
                    (JournalEntry.credit_account == Account.number, JournalEntry.amount),
                    else_=0,
                )
            ),
            0,
        ).label("credit_total")

        stmt = (
            select(Account.number, Account.label, Account.kind, debit_sum, credit_sum)
            .select_from(Account)
            .outerjoin(JournalEntry, join_on)
            .group_by(Account.number, Account.label, Account.kind)
            .order_by(Account.number)
        )
        if kinds:
            stmt = stmt.where(Account.kind.in_([parse_account_kind(k) for k in kinds]))
        if account_number is not None:
            stmt = stmt.where(Account.number == account_number)

        rows = [
            TrialBalanceRow(
                number=row.number,
                label=row.label,
                kind=_kind_or_none(row.kind),
                debit_total=row.debit_total if row.debit_total is not None else ZERO,
                credit_total=row.credit_total if row.credit_total is not None else ZERO,
            )
            for row in self.session.execute(stmt)
        ]
        logger.debug(
            "trial_balance_rows_loaded",
            extra={"row_count": len(rows), "date_from": date_from, "date_to": date_to},
        )
        return rows

    def account_postings(
        self,
        number: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AccountPosting]:
        """Entries touching ``number``, ordered by date then id ascending."""
        stmt = (
            select(JournalEntry)
            .where(
                or_(
                    JournalEntry.debit_account == number,
                    JournalEntry.credit_account == number,
                ),
                *_date_bounds(JournalEntry.entry_date, date_from, date_to),
            )
            .order_by(JournalEntry.entry_date, JournalEntry.id)
        )
        postings = []
        for entry in self.session.scalars(stmt):
            is_debit = entry.debit_account == number
            postings.append(
                AccountPosting(
                    entry_id=entry.id,
                    entry_date=entry.entry_date,
                    label=entry.label,
                    piece_number=entry.piece_number,
                    debit=entry.amount if is_debit else None,
                    credit=None if is_debit else entry.amount,
                    counterpart=entry.credit_account if is_debit else entry.debit_account,
                )
            )
        return postings

    def accounts_in_range(
        self,
        number_from: str | None = None,
        number_to: str | None = None,
    ) -> list[AccountInfo]:
        """Accounts whose number lies in [number_from, number_to] (text order)."""
        stmt = select(Account)
        if number_from:
            stmt = stmt.where(Account.number >= number_from)
        if number_to:
            stmt = stmt.where(Account.number <= number_to)
        stmt = stmt.order_by(Account.number)
        return [AccountInfo.from_model(a) for a in self.session.scalars(stmt)]

    def balances_as_of(self, as_of: date | None = None) -> dict[str, Decimal]:
        """
        Signed balance (Σdebit - Σcredit) per account number, over entries
        dated on or before ``as_of`` (all entries when None).

        Only accounts with at least one posting appear.
        """
        bounds = _date_bounds(JournalEntry.entry_date, None, as_of)
        debits = select(
            JournalEntry.debit_account, func.sum(JournalEntry.amount)
        ).where(*bounds).group_by(JournalEntry.debit_account)
        credits = select(
            JournalEntry.credit_account, func.sum(JournalEntry.amount)
        ).where(*bounds).group_by(JournalEntry.credit_account)

        balances: dict[str, Decimal] = {}
        for number, total in self.session.execute(debits):
            balances[number] = balances.get(number, ZERO) + total
        for number, total in self.session.execute(credits):
            balances[number] = balances.get(number, ZERO) - total
        return dict(sorted(balances.items()))

    def leg_total(
        self,
        side: str,
        as_of: date | None = None,
        prefix: str | None = None,
        kind: AccountKind | None = None,
        date_from: date | None = None,
    ) -> Decimal:
        """
        Sum of amounts posted on the ``side`` leg ("debit" or "credit") of
        accounts matching ``prefix`` (number starts with) and/or ``kind``.
        """
        if side not in ("debit", "credit"):
            raise ValueError(f"side must be 'debit' or 'credit', got {side!r}")
        leg = JournalEntry.debit_account if side == "debit" else JournalEntry.credit_account

        stmt = select(func.coalesce(func.sum(JournalEntry.amount), 0)).where(
            *_date_bounds(JournalEntry.entry_date, date_from, as_of)
        )
        if prefix is not None:
            stmt = stmt.where(leg.startswith(prefix, autoescape=True))
        if kind is not None:
            stmt = stmt.join(Account, Account.number == leg).where(
                Account.kind == AccountKind(kind)
            )
        total = self.session.scalar(stmt)
        return total if total is not None else ZERO

    def income_rows(self, date_from: date, date_to: date) -> list[IncomeRow]:
        """
        REVENUE accounts' credit-leg totals and EXPENSE accounts' debit-leg
        totals over [date_from, date_to].  Accounts without activity in the
        window do not appear.
        """
        rows: list[IncomeRow] = []
        for kind, leg in (
            (AccountKind.REVENUE, JournalEntry.credit_account),
            (AccountKind.EXPENSE, JournalEntry.debit_account),
        ):
            stmt = (
                select(Account.number, Account.label, func.sum(JournalEntry.amount))
                .select_from(JournalEntry)
                .join(Account, Account.number == leg)
                .where(
                    Account.kind == kind,
                    JournalEntry.entry_date >= date_from,
                    JournalEntry.entry_date <= date_to,
                )
                .group_by(Account.number, Account.label)
                .order_by(Account.number)
            )
            for number, label, amount in self.session.execute(stmt):
                rows.append(IncomeRow(number=number, label=label, kind=kind, amount=amount))
        return rows
