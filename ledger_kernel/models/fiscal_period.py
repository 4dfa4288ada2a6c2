"""
Module: ledger_kernel.models.fiscal_period
Responsibility: ORM persistence for fiscal periods, the date ranges that
    accept postings.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - start_date < end_date, no two periods overlap, and at most one period
      is open (all enforced by PeriodService at creation time).
    - Closing is monotonic: a closed period never reopens.

Failure modes:
    - ClosedPeriodError when an entry targets a closed period.
    - PeriodNotFoundError when an id is unknown.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class FiscalPeriod(TrackedBase):
    """
    Fiscal period (exercice) for posting control.

    Guarantees:
        - Boundaries are inclusive on both ends.
        - close() requires a clock-injected timestamp.
    """

    __tablename__ = "fiscal_periods"

    __table_args__ = (
        Index("idx_period_dates", "start_date", "end_date"),
        Index("idx_period_closed", "closed"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)

    period_name: Mapped[str] = mapped_column(String(100), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    closed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<FiscalPeriod {self.id} {self.period_name}: {state}>"

    def contains_date(self, check_date: date) -> bool:
        """Check if a date falls within this period."""
        return self.start_date <= check_date <= self.end_date

    def close(self, closed_at: datetime, closed_by: str | None = None) -> None:
        """Close the period.

        Raises: ValueError if the period is already closed.
        """
        if self.closed:
            raise ValueError(f"Period {self.period_name} is already closed")
        self.closed = True
        self.closed_at = closed_at
        self.closed_by = closed_by
