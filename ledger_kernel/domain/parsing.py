"""
Parsing -- Input normalization for dates, amounts, account kinds and optional text.

Responsibility:
    Turns caller-supplied values (strings from a form, or already-typed
    Python values) into the kernel's canonical types, raising the typed
    validation errors the journal and period services surface.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - Dates are calendar-valid and written exactly as YYYY-MM-DD.
    - Amounts are finite, rounded to 2 places (ROUND_HALF_UP), > 0 after
      rounding, and small enough to store as 64-bit integer cents.
    - Optional text is ``None`` when absent or blank, never ``""``.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from ledger_kernel.db.types import MAX_MINOR_UNITS, round_money, to_minor_units
from ledger_kernel.exceptions import (
    AmountInvalidError,
    DateFormatInvalidError,
    InvalidAccountKindError,
)
from ledger_kernel.models.account import AccountKind

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_entry_date(value: date | str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        DateFormatInvalidError: Wrong shape or not a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip() if value is not None else ""
    if not _ISO_DATE.match(text):
        raise DateFormatInvalidError(str(value))
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise DateFormatInvalidError(text) from exc


def parse_optional_date(value: date | str | None) -> date | None:
    """Like parse_entry_date, but None and blank strings pass through as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_entry_date(value)


def parse_amount(value: Decimal | int | float | str) -> Decimal:
    """
    Parse a strictly positive monetary amount.

    Raises:
        AmountInvalidError: Not a number, not finite, <= 0 once rounded, or
            too large to store.
    """
    if isinstance(value, bool) or value is None:
        raise AmountInvalidError(str(value))
    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError) as exc:
        raise AmountInvalidError(str(value)) from exc
    if not amount.is_finite():
        raise AmountInvalidError(str(value))
    try:
        amount = round_money(amount)
    except InvalidOperation as exc:
        # Magnitude beyond decimal context precision
        raise AmountInvalidError(str(value)) from exc
    if amount <= 0 or to_minor_units(amount) > MAX_MINOR_UNITS:
        raise AmountInvalidError(str(value))
    return amount


def parse_account_kind(value: AccountKind | str | None) -> AccountKind | None:
    """
    Account kind from its enum or string value; None and "" mean unclassified.

    Raises:
        InvalidAccountKindError: Not one of the ``AccountKind`` values.
    """
    if value is None or value == "":
        return None
    try:
        return AccountKind(value)
    except ValueError as exc:
        raise InvalidAccountKindError(
            str(value), tuple(k.value for k in AccountKind)
        ) from exc


def clean_optional(value: str | None) -> str | None:
    """Strip text and map blank to None."""
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def clean_required(value: str | None) -> str:
    """Strip text; blank stays blank so the caller can reject it."""
    return "" if value is None else str(value).strip()
