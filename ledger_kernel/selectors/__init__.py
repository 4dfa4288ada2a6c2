"""Read-only query selectors."""

from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import (
    AccountPosting,
    IncomeRow,
    LedgerSelector,
    TrialBalanceRow,
)

__all__ = [
    "AccountPosting",
    "AccountSelector",
    "BaseSelector",
    "IncomeRow",
    "JournalSelector",
    "LedgerSelector",
    "TrialBalanceRow",
]
