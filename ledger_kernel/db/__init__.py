"""Database layer - store handle, declarative base, money type."""

from ledger_kernel.db.base import Base, TrackedBase
from ledger_kernel.db.engine import LedgerDatabase
from ledger_kernel.db.types import Money, MoneyType, round_money

__all__ = [
    "LedgerDatabase",
    "Base",
    "TrackedBase",
    "Money",
    "MoneyType",
    "round_money",
]
