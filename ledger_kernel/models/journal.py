"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries.  One row carries both
    legs of a double-entry transaction, so an entry is balanced by
    construction: the same amount is debited on one account and credited on
    the other.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (by JournalService, query-then-write):
    - debit_account and credit_account exist and differ.
    - amount > 0, rounded to 2 decimal places.
    - entry_date lies inside the fiscal period the entry is posted into.

Non-goals:
    - piece_number is NOT unique at the storage level.  Duplicates are a
      soft check in JournalService.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.db.types import MoneyType


class JournalEntry(TrackedBase):
    """A single two-legged posting."""

    __tablename__ = "journal_entries"

    __table_args__ = (
        Index("idx_entry_date", "date"),
        Index("idx_entry_debit", "debit_account"),
        Index("idx_entry_credit", "credit_account"),
        Index("idx_entry_piece", "piece_number"),
        Index("idx_entry_period", "fiscal_period_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    entry_date: Mapped[date] = mapped_column("date", Date, nullable=False)

    label: Mapped[str] = mapped_column(String(255), nullable=False)

    debit_account: Mapped[str] = mapped_column(
        String(20), ForeignKey("accounts.number"), nullable=False
    )

    credit_account: Mapped[str] = mapped_column(
        String(20), ForeignKey("accounts.number"), nullable=False
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType(), nullable=False)

    piece_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    fiscal_period_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("fiscal_periods.id"), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<JournalEntry {self.id} {self.entry_date} "
            f"{self.debit_account}/{self.credit_account} {self.amount}>"
        )
