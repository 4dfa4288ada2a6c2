"""
Client-side re-sort of journal entries.

The journal selector always returns date descending, id descending.  A
caller that wants another order re-sorts the fetched page with
``sort_entries``; the sort is stable and uses the entry id as the final
key so equal keys never reorder between calls.
"""

from collections.abc import Iterable

from ledger_kernel.domain.dtos import JournalEntryInfo, SortDirection, SortField


def _key(field: SortField):
    if field == SortField.DATE:
        return lambda e: (e.entry_date, e.id)
    if field == SortField.AMOUNT:
        return lambda e: (e.amount, e.id)
    if field == SortField.LABEL:
        return lambda e: (e.label.casefold(), e.id)
    raise ValueError(f"Unknown sort field: {field!r}")


def sort_entries(
    entries: Iterable[JournalEntryInfo],
    field: SortField = SortField.DATE,
    direction: SortDirection = SortDirection.DESC,
) -> list[JournalEntryInfo]:
    """Return a new list sorted by ``field`` in ``direction``."""
    return sorted(
        entries,
        key=_key(SortField(field)),
        reverse=SortDirection(direction) == SortDirection.DESC,
    )
