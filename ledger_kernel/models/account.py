"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the chart of accounts, the target of
    both legs of every journal entry.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - number is the primary key: digits only, at most 10 characters at
      creation (enforced by AccountService, not this model).
    - label is unique case-insensitively among active accounts (enforced
      by AccountService).

Failure modes:
    - AccountNotFoundError when an operation references an unknown number.
    - AccountInUseError when deletion is attempted on a referenced account.
"""

from enum import Enum

from sqlalchemy import Boolean, Index, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class AccountKind(str, Enum):
    """Closed classification of an account."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    TREASURY = "TREASURY"


class Account(TrackedBase):
    """
    Chart of accounts entry.

    Contract:
        Accounts are created explicitly and never implicitly by a posting.

    Guarantees:
        - kind is optional; unclassified accounts take part in the trial
          balance and general ledger but in no statement section.

    Non-goals:
        - This model does NOT check references before delete; that is
          AccountService's job.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_kind", "kind"),
        Index("idx_account_label", "label"),
    )

    number: Mapped[str] = mapped_column(String(20), primary_key=True)

    label: Mapped[str] = mapped_column(String(100), nullable=False)

    kind: Mapped[AccountKind | None] = mapped_column(
        SAEnum(AccountKind, native_enum=False, length=20),
        nullable=True,
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Account {self.number}: {self.label}>"
