"""Pure domain layer: DTOs, clock, parsing and sorting helpers."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import (
    AccountInfo,
    EntryDraft,
    EntryFilters,
    EntryPage,
    FiscalPeriodInfo,
    JournalEntryInfo,
    PeriodSummary,
    SearchMode,
    SortDirection,
    SortField,
)
from ledger_kernel.domain.sorting import sort_entries

__all__ = [
    "AccountInfo",
    "Clock",
    "DeterministicClock",
    "EntryDraft",
    "EntryFilters",
    "EntryPage",
    "FiscalPeriodInfo",
    "JournalEntryInfo",
    "PeriodSummary",
    "SearchMode",
    "SortDirection",
    "SortField",
    "SystemClock",
    "sort_entries",
]
