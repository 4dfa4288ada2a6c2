"""Kernel services: every write to the ledger goes through these."""

from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.period_service import PeriodService

__all__ = [
    "AccountService",
    "BaseService",
    "JournalService",
    "PeriodService",
]
