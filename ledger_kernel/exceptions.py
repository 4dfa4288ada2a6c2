"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Bookkeeping callers render a different message for every rejection:
"the date is outside the fiscal period" is not the same instruction to the
user as "the fiscal period is closed".  Matching substrings of a message is
fragile, so every failure is a class with:

  1. a CODE class attribute (machine-readable, stable), and
  2. a KIND class attribute (the taxonomy bucket a caller can branch on), and
  3. structured DATA as instance attributes (e.g. the offending account).

Example - RIGHT way to handle errors:
    try:
        journal.create_entry(draft)
    except ClosedPeriodError as e:
        show(f"Period {e.period_name} is closed")
    except DateOutOfPeriodError as e:
        show(f"{e.entry_date} is outside {e.start_date}..{e.end_date}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from LedgerError:

    LedgerError (base)
    |
    +-- LedgerValidationError                     kind=VALIDATION
    |   +-- DateFormatInvalidError
    |   +-- DateOutOfPeriodError
    |   +-- AmountInvalidError
    |   +-- FieldRequiredError
    |   +-- FieldTooLongError
    |   +-- InvalidAccountNumberError
    |   +-- InvalidDateRangeError
    |   +-- InvalidAccountKindError
    |   +-- InvalidSearchModeError
    |   +-- InvalidPeriodRequestError
    |
    +-- ReferentialError                          kind=REFERENTIAL
    |   +-- DebitAccountMissingError
    |   +-- CreditAccountMissingError
    |   +-- AccountsIdenticalError
    |
    +-- StateConflictError                        kind=STATE_CONFLICT
    |   +-- ClosedPeriodError
    |   +-- PeriodOverlapError
    |   +-- OpenPeriodExistsError
    |   +-- NoOpenPeriodError
    |   +-- DuplicateAccountNumberError
    |   +-- DuplicateAccountLabelError
    |   +-- DuplicatePieceNumberError
    |
    +-- NotFoundError                             kind=NOT_FOUND
    |   +-- AccountNotFoundError
    |   +-- PeriodNotFoundError
    |   +-- EntryNotFoundError
    |   +-- LedgerFileNotFoundError
    |
    +-- IntegrityBlockError                       kind=INTEGRITY_BLOCK
    |   +-- AccountInUseError
    |
    +-- StoreError                                kind=FATAL_STORE

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Inherit from Exception, not ValueError/LookupError, so domain failures
   are catchable as one group without catching programming errors.

2. ``code`` and ``kind`` are class attributes: static per type, readable
   without instantiation.

3. Nothing in the kernel retries.  Every error is terminal for the single
   operation that raised it.  StoreError means the file itself failed and
   the caller should stop.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Taxonomy bucket for every ledger error."""

    VALIDATION = "validation"
    REFERENTIAL = "referential"
    STATE_CONFLICT = "state_conflict"
    NOT_FOUND = "not_found"
    INTEGRITY_BLOCK = "integrity_block"
    FATAL_STORE = "fatal_store"


class LedgerError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have ``code`` and ``kind`` class attributes.
    """

    code: str = "LEDGER_ERROR"
    kind: ErrorKind = ErrorKind.VALIDATION


# Validation (bad input shape)


class LedgerValidationError(LedgerError):
    """Base exception for malformed input."""

    code: str = "VALIDATION_ERROR"
    kind: ErrorKind = ErrorKind.VALIDATION


class DateFormatInvalidError(LedgerValidationError):
    """Date is not a valid YYYY-MM-DD calendar date."""

    code: str = "DATE_FORMAT_INVALID"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date (expected YYYY-MM-DD): {value!r}")


class DateOutOfPeriodError(LedgerValidationError):
    """Entry date falls outside the targeted fiscal period."""

    code: str = "DATE_OUT_OF_PERIOD"

    def __init__(self, entry_date: str, period_id: int, start_date: str, end_date: str):
        self.entry_date = entry_date
        self.period_id = period_id
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Date {entry_date} is outside fiscal period {period_id} "
            f"({start_date} to {end_date})"
        )


class AmountInvalidError(LedgerValidationError):
    """Amount is not a finite number strictly greater than zero."""

    code: str = "AMOUNT_INVALID"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Amount must be a finite number > 0: {value!r}")


class FieldRequiredError(LedgerValidationError):
    """A required text field is missing or blank."""

    code: str = "FIELD_REQUIRED"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Field is required: {field_name}")


class FieldTooLongError(LedgerValidationError):
    """A text field exceeds its maximum length."""

    code: str = "FIELD_TOO_LONG"

    def __init__(self, field_name: str, max_length: int, actual_length: int):
        self.field_name = field_name
        self.max_length = max_length
        self.actual_length = actual_length
        super().__init__(
            f"Field {field_name} is {actual_length} characters "
            f"(maximum {max_length})"
        )


class InvalidAccountNumberError(LedgerValidationError):
    """Account number contains characters other than digits."""

    code: str = "INVALID_NUMBER"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Account number must contain only digits: {number!r}")


class InvalidDateRangeError(LedgerValidationError):
    """Start date is not strictly before end date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"start_date ({start_date}) must be before end_date ({end_date})"
        )


class InvalidAccountKindError(LedgerValidationError):
    """Account kind is not one of the known classifications."""

    code: str = "INVALID_KIND"

    def __init__(self, value: str, allowed: tuple[str, ...]):
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Unknown account kind {value!r} (expected one of {', '.join(allowed)})"
        )


class InvalidSearchModeError(LedgerValidationError):
    """Journal search mode is not one of the supported modes."""

    code: str = "INVALID_SEARCH_MODE"

    def __init__(self, value: str, allowed: tuple[str, ...]):
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Unknown search mode {value!r} (expected one of {', '.join(allowed)})"
        )


class InvalidPeriodRequestError(LedgerValidationError):
    """Statement period request is incomplete or out of range."""

    code: str = "INVALID_PERIOD_REQUEST"

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid period request {field_name}={value!r}: {reason}")


# Referential (missing or self-referencing account)


class ReferentialError(LedgerError):
    """Base exception for account reference errors."""

    code: str = "REFERENTIAL_ERROR"
    kind: ErrorKind = ErrorKind.REFERENTIAL


class DebitAccountMissingError(ReferentialError):
    """Debit leg references an account that does not exist."""

    code: str = "DEBIT_ACCOUNT_MISSING"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Debit account does not exist: {number}")


class CreditAccountMissingError(ReferentialError):
    """Credit leg references an account that does not exist."""

    code: str = "CREDIT_ACCOUNT_MISSING"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Credit account does not exist: {number}")


class AccountsIdenticalError(ReferentialError):
    """Debit and credit legs reference the same account."""

    code: str = "ACCOUNTS_IDENTICAL"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Debit and credit account are both {number}")


# State conflicts


class StateConflictError(LedgerError):
    """Base exception for conflicts with current ledger state."""

    code: str = "STATE_CONFLICT"
    kind: ErrorKind = ErrorKind.STATE_CONFLICT


class ClosedPeriodError(StateConflictError):
    """Attempted to write into a closed fiscal period."""

    code: str = "PERIOD_CLOSED"

    def __init__(self, period_id: int, period_name: str):
        self.period_id = period_id
        self.period_name = period_name
        super().__init__(f"Fiscal period {period_name} (id={period_id}) is closed")


class PeriodOverlapError(StateConflictError):
    """New period date range overlaps an existing period."""

    code: str = "OVERLAP"

    def __init__(
        self,
        existing_period_id: int,
        existing_period_name: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.existing_period_id = existing_period_id
        self.existing_period_name = existing_period_name
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Period overlaps with {existing_period_name} "
            f"({overlap_start} to {overlap_end})"
        )


class OpenPeriodExistsError(StateConflictError):
    """A new period was requested while another period is still open."""

    code: str = "OPEN_PERIOD_EXISTS"

    def __init__(self, open_period_id: int, open_period_name: str):
        self.open_period_id = open_period_id
        self.open_period_name = open_period_name
        super().__init__(
            f"Fiscal period {open_period_name} (id={open_period_id}) "
            "must be closed first"
        )


class NoOpenPeriodError(StateConflictError):
    """No fiscal period exists that an entry could be posted into."""

    code: str = "NO_OPEN_PERIOD"

    def __init__(self):
        super().__init__("No fiscal period is available for posting")


class DuplicateAccountNumberError(StateConflictError):
    """An account with this number already exists."""

    code: str = "DUPLICATE_NUMBER"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"An account with number {number} already exists")


class DuplicateAccountLabelError(StateConflictError):
    """Another active account already uses this label (case-insensitive)."""

    code: str = "DUPLICATE_LABEL"

    def __init__(self, label: str, existing_number: str):
        self.label = label
        self.existing_number = existing_number
        super().__init__(
            f"Label {label!r} is already used by account {existing_number}"
        )


class DuplicatePieceNumberError(StateConflictError):
    """Piece number is already used by another entry."""

    code: str = "DUPLICATE_PIECE_NUMBER"

    def __init__(self, piece_number: str):
        self.piece_number = piece_number
        super().__init__(f"Piece number already used: {piece_number}")


# Not found


class NotFoundError(LedgerError):
    """Base exception for unknown identifiers."""

    code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND


class AccountNotFoundError(NotFoundError):
    """Account number is unknown."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Account not found: {number}")


class PeriodNotFoundError(NotFoundError):
    """Fiscal period id is unknown."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: int):
        self.period_id = period_id
        super().__init__(f"Fiscal period not found: {period_id}")


class EntryNotFoundError(NotFoundError):
    """Journal entry id is unknown."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}")


class LedgerFileNotFoundError(NotFoundError):
    """Ledger file to open does not exist."""

    code: str = "LEDGER_FILE_NOT_FOUND"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Ledger file not found: {path}")


# Integrity blocks


class IntegrityBlockError(LedgerError):
    """Base exception for operations blocked by existing references."""

    code: str = "INTEGRITY_BLOCK"
    kind: ErrorKind = ErrorKind.INTEGRITY_BLOCK


class AccountInUseError(IntegrityBlockError):
    """Account cannot be deleted because journal entries reference it."""

    code: str = "ACCOUNT_IN_USE"

    def __init__(self, number: str, reference_count: int):
        self.number = number
        self.reference_count = reference_count
        super().__init__(
            f"Account {number} is used by {reference_count} journal "
            "entry(ies) and cannot be deleted"
        )


# Storage


class StoreError(LedgerError):
    """
    The ledger file failed underneath an operation (I/O, corruption,
    constraint violation raised by the database engine).

    Callers should surface a full-stop message and not attempt recovery.
    """

    code: str = "FATAL_STORE"
    kind: ErrorKind = ErrorKind.FATAL_STORE

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Ledger store failure during {operation}: {detail}")
