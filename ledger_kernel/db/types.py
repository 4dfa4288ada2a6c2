"""
Module: ledger_kernel.db.types
Responsibility: Column types and utility functions for monetary values.
    Centralizes precision and rounding so that every model, selector and
    report uses identical money semantics.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Amounts are stored as integer minor units (2 decimal places) so that
      SQL aggregation over a SQLite file is exact.  Python code only ever
      sees Decimal.
    - round_money() is the ONLY sanctioned rounding function for monetary
      values.
    CRITICAL: No floats for money anywhere in the kernel.

Failure modes:
    - decimal.InvalidOperation when a non-numeric value reaches the bind
      processor (callers validate with domain.parsing first).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0.00")

# Money columns are signed 64-bit integers of minor units
MAX_MINOR_UNITS = 2**63 - 1


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized to decimal_places using the
        given rounding mode.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def to_minor_units(value: Decimal | int) -> int:
    """Convert a major-unit amount to integer minor units (cents)."""
    return int(round_money(Decimal(value)).scaleb(MONEY_DECIMAL_PLACES))


def from_minor_units(value: int) -> Decimal:
    """Convert integer minor units back to a 2-place Decimal."""
    return Decimal(int(value)).scaleb(-MONEY_DECIMAL_PLACES)


class MoneyType(TypeDecorator):
    """
    Decimal amount stored as BIGINT minor units.

    Contract:
        Transparently converts between Decimal (major units) and integer
        cents.  Because SUM/COALESCE/CASE keep the argument type, SQL
        aggregates over a MoneyType column come back as Decimal too.

    Guarantees:
        - process_bind_param: Decimal -> int cents on INSERT/UPDATE/WHERE.
        - process_result_value: int cents -> Decimal with 2 places.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_minor_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_minor_units(value)


# Monetary amount, major units
Money = Annotated[Decimal, MoneyType()]
