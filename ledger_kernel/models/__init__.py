"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountKind
from ledger_kernel.models.fiscal_period import FiscalPeriod
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.models.user import User

__all__ = [
    "Account",
    "AccountKind",
    "FiscalPeriod",
    "JournalEntry",
    "User",
]
