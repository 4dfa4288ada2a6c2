"""
Injectable time source.

Services never call ``datetime.now()`` or ``date.today()`` themselves.
"Today" matters to the ledger in three places: the closure timestamp of a
fiscal period, the "entries dated today" figure of the journal summary,
and the default month/year of an income statement.

Architecture position:
    Kernel > Domain -- pure, zero I/O (``SystemClock`` is the one place
    the wall clock is read).
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

DEFAULT_TEST_TIME = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """
    Time source passed to services through their constructors.

    Guarantees:
        - ``now()`` is timezone-aware.
        - ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests; defaults to 2025-06-15 12:00 UTC.

    Time only moves through ``advance()``, ``set_time()`` or ``set_date()``.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or DEFAULT_TEST_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def set_date(self, day: date) -> None:
        """Move to noon UTC on ``day``."""
        self._current = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
