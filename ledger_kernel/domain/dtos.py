"""
DTOs -- Immutable data transfer objects for the ledger kernel.

Responsibility:
    Defines the frozen structures that cross the service/selector boundary:
    account, fiscal period and journal entry snapshots, the entry draft a
    caller submits, and the filter/sort descriptors for journal retrieval.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only from
    services and selectors, inside an open session.

Invariants enforced:
    - Selectors and services never hand ORM instances to callers.
    - Optional text fields are ``None`` when absent, never ``""``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from ledger_kernel.models.account import AccountKind

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account as AccountModel
    from ledger_kernel.models.fiscal_period import FiscalPeriod as FiscalPeriodModel
    from ledger_kernel.models.journal import JournalEntry as JournalEntryModel


class SearchMode(str, Enum):
    """Which fields the free-text journal search looks at.

    Exactly one mode is active per query.
    """

    TEXT = "text"          # label, note, piece number
    ACCOUNTS = "accounts"  # debit/credit account number or label
    AMOUNT = "amount"      # amount_min / amount_max range


class SortField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    LABEL = "label"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Snapshot of a chart-of-accounts row."""

    number: str
    label: str
    kind: AccountKind | None = None
    active: bool = True

    @classmethod
    def from_model(cls, model: AccountModel) -> AccountInfo:
        return cls(
            number=model.number,
            label=model.label,
            kind=AccountKind(model.kind) if model.kind is not None else None,
            active=model.active,
        )


@dataclass(frozen=True, slots=True)
class FiscalPeriodInfo:
    """Snapshot of a fiscal period."""

    id: int
    company_name: str
    period_name: str
    start_date: date
    end_date: date
    closed: bool = False
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return not self.closed

    def contains_date(self, check_date: date) -> bool:
        """Check if a date falls within this period (inclusive)."""
        return self.start_date <= check_date <= self.end_date

    @classmethod
    def from_model(cls, model: FiscalPeriodModel) -> FiscalPeriodInfo:
        return cls(
            id=model.id,
            company_name=model.company_name,
            period_name=model.period_name,
            start_date=model.start_date,
            end_date=model.end_date,
            closed=model.closed,
            closed_at=model.closed_at,
        )


@dataclass(frozen=True, slots=True)
class JournalEntryInfo:
    """
    Snapshot of a persisted journal entry.

    ``debit_label`` / ``credit_label`` are filled by selectors that join the
    chart of accounts; they are ``None`` when the account row is missing.
    """

    id: int
    entry_date: date
    label: str
    debit_account: str
    credit_account: str
    amount: Decimal
    piece_number: str | None = None
    note: str | None = None
    fiscal_period_id: int | None = None
    debit_label: str | None = None
    credit_label: str | None = None

    @classmethod
    def from_model(
        cls,
        model: JournalEntryModel,
        debit_label: str | None = None,
        credit_label: str | None = None,
    ) -> JournalEntryInfo:
        return cls(
            id=model.id,
            entry_date=model.entry_date,
            label=model.label,
            debit_account=model.debit_account,
            credit_account=model.credit_account,
            amount=model.amount,
            piece_number=model.piece_number,
            note=model.note,
            fiscal_period_id=model.fiscal_period_id,
            debit_label=debit_label,
            credit_label=credit_label,
        )


@dataclass(frozen=True, slots=True)
class EntryDraft:
    """
    Caller-supplied journal entry, not yet validated.

    Values are kept as given (strings from a form are fine); JournalService
    parses and validates them in a fixed order.  ``period_id`` targets an
    explicit fiscal period; when omitted the period is resolved from the
    entry date.
    """

    entry_date: date | str
    label: str
    debit_account: str
    credit_account: str
    amount: Decimal | int | float | str
    piece_number: str | None = None
    note: str | None = None
    period_id: int | None = None


@dataclass(frozen=True, slots=True)
class EntryFilters:
    """
    Journal retrieval filters.

    ``search_term`` is interpreted according to ``search_mode``;
    ``amount_min`` / ``amount_max`` apply only in AMOUNT mode.
    ``account_number`` matches either leg exactly and combines with any mode.
    """

    date_from: date | None = None
    date_to: date | None = None
    search_mode: SearchMode = SearchMode.TEXT
    search_term: str | None = None
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    account_number: str | None = None


@dataclass(frozen=True, slots=True)
class EntryPage:
    """One page of journal entries plus the unpaginated match count."""

    entries: tuple[JournalEntryInfo, ...]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.entries) < self.total


@dataclass(frozen=True, slots=True)
class PeriodSummary:
    """Journal summary for a fiscal period."""

    period_id: int | None
    entry_count: int
    total_amount: Decimal
    entries_today: int

