"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only journal queries: entry lookup with account
    labels, filtered pagination and its matching count, piece-number
    lookups, and the per-period journal summary.
Architecture position: Kernel > Selectors.

Ordering:
    Every listing returns date descending, then id descending.  The id
    tiebreak makes pages deterministic so a client-side re-sort
    (``domain.sorting.sort_entries``) never depends on storage order.

Search modes (exactly one per query):
    TEXT      -- label, note or piece number contains the term
    ACCOUNTS  -- debit or credit account number or label contains the term
    AMOUNT    -- amount_min <= amount <= amount_max (search_term unused)
"""

from datetime import date

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.orm import aliased

from ledger_kernel.domain.dtos import (
    EntryFilters,
    EntryPage,
    JournalEntryInfo,
    PeriodSummary,
    SearchMode,
)
from ledger_kernel.exceptions import EntryNotFoundError, InvalidSearchModeError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.journal")

DebitAccount = aliased(Account, name="debit_acct")
CreditAccount = aliased(Account, name="credit_acct")


def _apply_filters(stmt: Select, filters: EntryFilters | None) -> Select:
    if filters is None:
        return stmt

    if filters.date_from is not None:
        stmt = stmt.where(JournalEntry.entry_date >= filters.date_from)
    if filters.date_to is not None:
        stmt = stmt.where(JournalEntry.entry_date <= filters.date_to)
    if filters.account_number:
        stmt = stmt.where(
            or_(
                JournalEntry.debit_account == filters.account_number,
                JournalEntry.credit_account == filters.account_number,
            )
        )

    try:
        mode = SearchMode(filters.search_mode)
    except ValueError as exc:
        raise InvalidSearchModeError(
            str(filters.search_mode), tuple(m.value for m in SearchMode)
        ) from exc
    term = (filters.search_term or "").strip()

    if mode == SearchMode.TEXT and term:
        stmt = stmt.where(
            or_(
                JournalEntry.label.icontains(term, autoescape=True),
                JournalEntry.note.icontains(term, autoescape=True),
                JournalEntry.piece_number.icontains(term, autoescape=True),
            )
        )
    elif mode == SearchMode.ACCOUNTS and term:
        matching = select(Account.number).where(
            or_(
                Account.number.icontains(term, autoescape=True),
                Account.label.icontains(term, autoescape=True),
            )
        )
        stmt = stmt.where(
            or_(
                JournalEntry.debit_account.in_(matching),
                JournalEntry.credit_account.in_(matching),
            )
        )
    elif mode == SearchMode.AMOUNT:
        if filters.amount_min is not None:
            stmt = stmt.where(JournalEntry.amount >= filters.amount_min)
        if filters.amount_max is not None:
            stmt = stmt.where(JournalEntry.amount <= filters.amount_max)

    return stmt


class JournalSelector(BaseSelector[JournalEntry]):
    """Read-only journal queries."""

    def _labelled(self) -> Select:
        return (
            select(JournalEntry, DebitAccount.label, CreditAccount.label)
            .outerjoin(DebitAccount, DebitAccount.number == JournalEntry.debit_account)
            .outerjoin(CreditAccount, CreditAccount.number == JournalEntry.credit_account)
        )

    def find(self, entry_id: int) -> JournalEntryInfo | None:
        row = self.session.execute(
            self._labelled().where(JournalEntry.id == entry_id)
        ).first()
        if row is None:
            return None
        entry, debit_label, credit_label = row
        return JournalEntryInfo.from_model(entry, debit_label, credit_label)

    def get_entry(self, entry_id: int) -> JournalEntryInfo:
        """Get an entry with its account labels or raise EntryNotFoundError."""
        entry = self.find(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def list_entries(
        self,
        filters: EntryFilters | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[JournalEntryInfo]:
        """Filtered entries, date descending then id descending."""
        stmt = _apply_filters(self._labelled(), filters).order_by(
            JournalEntry.entry_date.desc(), JournalEntry.id.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        rows = self.session.execute(stmt).all()
        return [
            JournalEntryInfo.from_model(entry, debit_label, credit_label)
            for entry, debit_label, credit_label in rows
        ]

    def count_entries(self, filters: EntryFilters | None = None) -> int:
        """Number of entries matching ``filters`` (ignores pagination)."""
        stmt = _apply_filters(
            select(func.count(JournalEntry.id)).select_from(JournalEntry), filters
        )
        return self.session.scalar(stmt) or 0

    def list_page(
        self,
        filters: EntryFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> EntryPage:
        """One page of entries plus the total match count."""
        entries = self.list_entries(filters, limit=limit, offset=offset)
        total = self.count_entries(filters)
        logger.debug(
            "journal_page_listed",
            extra={"limit": limit, "offset": offset, "total": total},
        )
        return EntryPage(entries=tuple(entries), total=total, limit=limit, offset=offset)

    def piece_number_exists(
        self, piece_number: str, exclude_entry_id: int | None = None
    ) -> bool:
        stmt = select(func.count(JournalEntry.id)).where(
            JournalEntry.piece_number == piece_number
        )
        if exclude_entry_id is not None:
            stmt = stmt.where(JournalEntry.id != exclude_entry_id)
        return (self.session.scalar(stmt) or 0) > 0

    def piece_numbers_with_prefix(self, prefix: str) -> list[str]:
        stmt = select(JournalEntry.piece_number).where(
            JournalEntry.piece_number.startswith(prefix, autoescape=True)
        )
        return [p for p in self.session.scalars(stmt) if p is not None]

    def period_summary(self, period_id: int | None, today: date) -> PeriodSummary:
        """
        Entry count, summed amount and entries dated ``today``.

        ``period_id=None`` summarises the whole journal.
        """
        stmt = select(
            func.count(JournalEntry.id),
            func.coalesce(func.sum(JournalEntry.amount), 0),
            func.coalesce(
                func.sum(case((JournalEntry.entry_date == today, 1), else_=0)), 0
            ),
        )
        if period_id is not None:
            stmt = stmt.where(JournalEntry.fiscal_period_id == period_id)
        count, total, today_count = self.session.execute(stmt).one()
        return PeriodSummary(
            period_id=period_id,
            entry_count=count or 0,
            total_amount=total,
            entries_today=int(today_count or 0),
        )
