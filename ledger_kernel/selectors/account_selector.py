"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Read-only queries over the chart of accounts: lookups,
    filtered listing, relevance-ranked search, and reference counting.
Architecture position: Kernel > Selectors.

Search relevance (lower is better), each tier ordered by account number:
    0 -- number equals the term
    1 -- number starts with the term
    2 -- label contains the term
    3 -- anything else that matched (number contains the term)
"""

from sqlalchemy import case, func, or_, select

from ledger_kernel.domain.dtos import AccountInfo
from ledger_kernel.domain.parsing import parse_account_kind
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account, AccountKind
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.account")

DEFAULT_SEARCH_LIMIT = 10


class AccountSelector(BaseSelector[Account]):
    """Read-only chart-of-accounts queries."""

    def get(self, number: str) -> AccountInfo | None:
        account = self.session.get(Account, number)
        return AccountInfo.from_model(account) if account is not None else None

    def get_account(self, number: str) -> AccountInfo:
        """Get an account or raise AccountNotFoundError."""
        account = self.get(number)
        if account is None:
            raise AccountNotFoundError(number)
        return account

    def exists(self, number: str) -> bool:
        return self.session.get(Account, number) is not None

    def list_accounts(
        self,
        kind: AccountKind | str | None = None,
        active_only: bool = True,
    ) -> list[AccountInfo]:
        """List accounts ordered by number."""
        stmt = select(Account)
        if kind is not None:
            stmt = stmt.where(Account.kind == parse_account_kind(kind))
        if active_only:
            stmt = stmt.where(Account.active.is_(True))
        stmt = stmt.order_by(Account.number)
        return [AccountInfo.from_model(a) for a in self.session.scalars(stmt)]

    def search_accounts(
        self, term: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[AccountInfo]:
        """
        Case-insensitive substring search on number or label.

        A blank term returns the first ``limit`` accounts by number.
        """
        term = (term or "").strip()
        stmt = select(Account)
        if term:
            relevance = case(
                (Account.number == term, 0),
                (Account.number.istartswith(term, autoescape=True), 1),
                (Account.label.icontains(term, autoescape=True), 2),
                else_=3,
            )
            stmt = stmt.where(
                or_(
                    Account.number.icontains(term, autoescape=True),
                    Account.label.icontains(term, autoescape=True),
                )
            ).order_by(relevance, Account.number)
        else:
            stmt = stmt.order_by(Account.number)
        stmt = stmt.limit(limit)
        results = [AccountInfo.from_model(a) for a in self.session.scalars(stmt)]
        logger.debug(
            "accounts_searched",
            extra={"term": term, "limit": limit, "result_count": len(results)},
        )
        return results

    def count_references(self, number: str) -> int:
        """Number of journal entries using the account on either leg."""
        stmt = select(func.count(JournalEntry.id)).where(
            or_(
                JournalEntry.debit_account == number,
                JournalEntry.credit_account == number,
            )
        )
        return self.session.scalar(stmt) or 0

    def is_account_used(self, number: str) -> bool:
        return self.count_references(number) > 0

    def find_label_owner(
        self, label: str, exclude_number: str | None = None
    ) -> str | None:
        """
        Number of the active account whose label equals ``label``
        case-insensitively, or None.

        Compared with ``str.casefold`` in Python: SQLite's lower() only folds
        ASCII, and accented labels are common.
        """
        wanted = label.strip().casefold()
        stmt = select(Account.number, Account.label).where(Account.active.is_(True))
        for number, existing in self.session.execute(stmt):
            if number != exclude_number and existing.strip().casefold() == wanted:
                return number
        return None
