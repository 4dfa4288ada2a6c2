"""
JournalService -- validated creation, update and deletion of entries.

Responsibility:
    Turns an ``EntryDraft`` into a persisted journal entry after running
    the ordered validation pipeline, and guards updates and deletes with
    the same period rules.

Architecture position:
    Kernel > Services -- imperative shell.  Uses PeriodService to resolve
    the target period and the account/journal selectors for existence and
    duplicate checks.

Validation order (fail fast, first violation wins):
    1. entry date is YYYY-MM-DD                    DATE_FORMAT_INVALID
    2. entry date inside the target period         DATE_OUT_OF_PERIOD
    3. debit account exists                        DEBIT_ACCOUNT_MISSING
    4. credit account exists                       CREDIT_ACCOUNT_MISSING
    5. debit account != credit account             ACCOUNTS_IDENTICAL
    6. amount is a finite number > 0               AMOUNT_INVALID
    7. target period is not closed                 PERIOD_CLOSED
    8. label is not blank                          FIELD_REQUIRED
    9. piece number not used by another entry      DUPLICATE_PIECE_NUMBER

    Target period: the draft's explicit ``period_id``; otherwise the period
    whose span contains the date; otherwise the open period.  With no
    period at all the draft fails with NO_OPEN_PERIOD before step 2.

    Update runs the same pipeline after ENTRY_NOT_FOUND, and step 7 also
    covers the period the entry currently sits in.  The piece-number check
    only runs on update when the piece number changes.

Known limitation:
    Checks and the write are separate statements.  Under a concurrent
    writer a checked account could vanish before the insert.  The ledger
    is single-user, so this is accepted.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import EntryDraft, JournalEntryInfo
from ledger_kernel.domain.parsing import (
    clean_optional,
    clean_required,
    parse_amount,
    parse_entry_date,
)
from ledger_kernel.domain.settings import KernelSettings
from ledger_kernel.exceptions import (
    AccountsIdenticalError,
    ClosedPeriodError,
    CreditAccountMissingError,
    DateOutOfPeriodError,
    DebitAccountMissingError,
    DuplicatePieceNumberError,
    EntryNotFoundError,
    FieldRequiredError,
    LedgerError,
    NoOpenPeriodError,
    PeriodNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.fiscal_period import FiscalPeriod
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.period_service import PeriodService

logger = get_logger("services.journal")


@dataclass(frozen=True)
class _ValidatedEntry:
    entry_date: date
    label: str
    debit_account: str
    credit_account: str
    amount: Decimal
    piece_number: str | None
    note: str | None
    period_id: int


class JournalService(BaseService[JournalEntry]):
    """
    Service for journal entry mutations.

    Contract:
        ``create_entry`` / ``update_entry`` accept an ``EntryDraft`` and
        return the persisted ``JournalEntryInfo`` (with account labels).
        Any failure raises before anything is added to the session.

    Guarantees:
        - Every persisted entry has two existing, distinct accounts, a
          positive amount and a date inside an open period.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: KernelSettings | None = None,
    ):
        super().__init__(session, settings)
        self._clock = clock or SystemClock()
        self._periods = PeriodService(session, self._clock, self.settings)
        self._journal = JournalSelector(session)

    # ------------------------------------------------------------------
    # Validation pipeline
    # ------------------------------------------------------------------

    def _resolve_period(self, period_id: int | None, entry_date: date) -> FiscalPeriod:
        if period_id is not None:
            period = self.session.get(FiscalPeriod, period_id)
            if period is None:
                raise PeriodNotFoundError(period_id)
            return period
        period = self._periods.period_for_date_orm(entry_date)
        if period is None:
            period = self._periods.open_period_orm()
        if period is None:
            raise NoOpenPeriodError()
        return period

    def _validate(
        self, draft: EntryDraft, current: JournalEntry | None = None
    ) -> _ValidatedEntry:
        entry_date = parse_entry_date(draft.entry_date)

        period = self._resolve_period(draft.period_id, entry_date)
        if not period.contains_date(entry_date):
            raise DateOutOfPeriodError(
                entry_date.isoformat(),
                period.id,
                period.start_date.isoformat(),
                period.end_date.isoformat(),
            )

        debit = clean_required(draft.debit_account)
        if not debit or self.session.get(Account, debit) is None:
            raise DebitAccountMissingError(debit)

        credit = clean_required(draft.credit_account)
        if not credit or self.session.get(Account, credit) is None:
            raise CreditAccountMissingError(credit)

        if debit == credit:
            raise AccountsIdenticalError(debit)

        amount = parse_amount(draft.amount)

        if period.closed:
            raise ClosedPeriodError(period.id, period.period_name)
        if current is not None and current.fiscal_period_id not in (None, period.id):
            current_period = self.session.get(FiscalPeriod, current.fiscal_period_id)
            if current_period is not None and current_period.closed:
                raise ClosedPeriodError(current_period.id, current_period.period_name)

        label = clean_required(draft.label)
        if not label:
            raise FieldRequiredError("label")

        piece_number = clean_optional(draft.piece_number)
        piece_changed = current is None or piece_number != current.piece_number
        if piece_number is not None and piece_changed:
            exclude = current.id if current is not None else None
            if self._journal.piece_number_exists(piece_number, exclude_entry_id=exclude):
                raise DuplicatePieceNumberError(piece_number)

        return _ValidatedEntry(
            entry_date=entry_date,
            label=label,
            debit_account=debit,
            credit_account=credit,
            amount=amount,
            piece_number=piece_number,
            note=clean_optional(draft.note),
            period_id=period.id,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_entry(self, draft: EntryDraft) -> JournalEntryInfo:
        """
        Validate and persist a new entry.

        Raises:
            LedgerError subclass for the first failed check (see module
            docstring for the order).
        """
        try:
            valid = self._validate(draft)
        except LedgerError as exc:
            logger.warning(
                "entry_rejected",
                extra={"operation": "create", "code": exc.code, "kind": exc.kind},
            )
            raise

        entry = JournalEntry(
            entry_date=valid.entry_date,
            label=valid.label,
            debit_account=valid.debit_account,
            credit_account=valid.credit_account,
            amount=valid.amount,
            piece_number=valid.piece_number,
            note=valid.note,
            fiscal_period_id=valid.period_id,
        )
        self.session.add(entry)
        self._flush("create_entry")

        logger.info(
            "entry_created",
            extra={
                "entry_id": entry.id,
                "period_id": valid.period_id,
                "debit_account": valid.debit_account,
                "credit_account": valid.credit_account,
                "amount": valid.amount,
            },
        )
        return self._journal.get_entry(entry.id)

    def update_entry(self, entry_id: int, draft: EntryDraft) -> JournalEntryInfo:
        """
        Re-validate and overwrite an existing entry.

        Raises:
            EntryNotFoundError: unknown id.
            LedgerError subclass for the first failed check.
        """
        with LogContext.bind(entry_id=entry_id):
            entry = self.session.get(JournalEntry, entry_id)
            if entry is None:
                logger.warning(
                    "entry_rejected",
                    extra={"operation": "update", "code": EntryNotFoundError.code},
                )
                raise EntryNotFoundError(entry_id)

            try:
                valid = self._validate(draft, current=entry)
            except LedgerError as exc:
                logger.warning(
                    "entry_rejected",
                    extra={"operation": "update", "code": exc.code, "kind": exc.kind},
                )
                raise

            entry.entry_date = valid.entry_date
            entry.label = valid.label
            entry.debit_account = valid.debit_account
            entry.credit_account = valid.credit_account
            entry.amount = valid.amount
            entry.piece_number = valid.piece_number
            entry.note = valid.note
            entry.fiscal_period_id = valid.period_id
            self._flush("update_entry")

            logger.info("entry_updated", extra={"period_id": valid.period_id})
            return self._journal.get_entry(entry.id)

    def delete_entry(self, entry_id: int) -> None:
        """
        Delete an entry.

        Raises:
            EntryNotFoundError: unknown id.
            ClosedPeriodError: the entry's period is closed.
        """
        with LogContext.bind(entry_id=entry_id):
            entry = self.session.get(JournalEntry, entry_id)
            if entry is None:
                logger.warning(
                    "entry_rejected",
                    extra={"operation": "delete", "code": EntryNotFoundError.code},
                )
                raise EntryNotFoundError(entry_id)

            period = self._period_of(entry)
            if period is not None and period.closed:
                logger.warning(
                    "entry_rejected",
                    extra={"operation": "delete", "code": ClosedPeriodError.code},
                )
                raise ClosedPeriodError(period.id, period.period_name)

            self.session.delete(entry)
            self._flush("delete_entry")
            logger.info("entry_deleted")

    def _period_of(self, entry: JournalEntry) -> FiscalPeriod | None:
        if entry.fiscal_period_id is not None:
            return self.session.get(FiscalPeriod, entry.fiscal_period_id)
        return self._periods.period_for_date_orm(entry.entry_date)

    # ------------------------------------------------------------------
    # Helpers for callers
    # ------------------------------------------------------------------

    def can_modify_entry(self, entry_id: int) -> tuple[bool, str | None]:
        """
        Whether an entry may be edited or deleted.

        Returns:
            (True, None) or (False, reason) where reason is an error code.
        """
        entry = self.session.get(JournalEntry, entry_id)
        if entry is None:
            return False, EntryNotFoundError.code
        period = self._period_of(entry)
        if period is not None and period.closed:
            return False, ClosedPeriodError.code
        return True, None

    def piece_number_exists(self, piece_number: str) -> bool:
        return self._journal.piece_number_exists(piece_number)

    def next_piece_number(self, year: int | None = None) -> str:
        """
        Next free ``<PREFIX>-<year>-<nnnn>`` piece number.

        ``year`` defaults to the open period's start year, else the clock's
        current year.
        """
        if year is None:
            open_period = self._periods.get_open_period()
            year = open_period.start_date.year if open_period else self._clock.today().year

        stem = f"{self.settings.piece_number_prefix}-{year}-"
        highest = 0
        for piece in self._journal.piece_numbers_with_prefix(stem):
            suffix = piece[len(stem):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{stem}{highest + 1:04d}"
