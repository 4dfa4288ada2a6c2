"""
PeriodService -- fiscal period lifecycle.

Responsibility:
    Creates, lists and closes fiscal periods, and resolves which period a
    date belongs to.

Architecture position:
    Kernel > Services -- imperative shell.  JournalService calls into it to
    resolve the target period of every entry.

Invariants enforced:
    - start_date < end_date.
    - No two periods overlap: a new [start, end] is rejected when any
      existing period satisfies ``start <= new_end AND end >= new_start``.
    - At most one period is open: creating a period while another is open
      is rejected (OpenPeriodExistsError).
    - Closing is monotonic and stamps ``closed_at`` from the injected clock.

Failure modes:
    - FieldRequiredError, DateFormatInvalidError, InvalidDateRangeError.
    - PeriodOverlapError, OpenPeriodExistsError.
    - PeriodNotFoundError for an unknown id.
    - ClosedPeriodError when closing an already closed period.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import FiscalPeriodInfo, PeriodSummary
from ledger_kernel.domain.parsing import clean_required, parse_entry_date
from ledger_kernel.domain.settings import KernelSettings
from ledger_kernel.exceptions import (
    ClosedPeriodError,
    FieldRequiredError,
    InvalidDateRangeError,
    LedgerError,
    OpenPeriodExistsError,
    PeriodNotFoundError,
    PeriodOverlapError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.fiscal_period import FiscalPeriod
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.base import BaseService

logger = get_logger("services.period")


class PeriodService(BaseService[FiscalPeriod]):
    """
    Service for managing fiscal periods.

    Contract:
        Accepts ISO date strings or ``date`` objects and returns frozen
        ``FiscalPeriodInfo`` DTOs.  Flushes within the caller's transaction.

    Non-goals:
        - Does NOT reopen closed periods.
        - Does NOT move entries between periods.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: KernelSettings | None = None,
    ):
        super().__init__(session, settings)
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_period(
        self,
        company_name: str,
        period_name: str,
        start_date: date | str,
        end_date: date | str,
    ) -> FiscalPeriodInfo:
        """
        Create a new, open fiscal period.

        Raises:
            FieldRequiredError: blank company or period name.
            DateFormatInvalidError: a bound is not YYYY-MM-DD.
            InvalidDateRangeError: start_date >= end_date.
            PeriodOverlapError: the range overlaps an existing period.
            OpenPeriodExistsError: another period is still open.
        """
        company_name = clean_required(company_name)
        period_name = clean_required(period_name)
        try:
            if not company_name:
                raise FieldRequiredError("company_name")
            if not period_name:
                raise FieldRequiredError("period_name")
            start = parse_entry_date(start_date)
            end = parse_entry_date(end_date)
            if start >= end:
                raise InvalidDateRangeError(start.isoformat(), end.isoformat())
            self._validate_no_overlap(start, end)
            self._validate_no_open_period()
        except LedgerError as exc:
            logger.warning(
                "period_rejected",
                extra={"operation": "create", "period_name": period_name, "code": exc.code},
            )
            raise

        period = FiscalPeriod(
            company_name=company_name,
            period_name=period_name,
            start_date=start,
            end_date=end,
            closed=False,
            active=True,
        )
        self.session.add(period)
        self._flush("create_period")

        logger.info(
            "period_created",
            extra={
                "period_id": period.id,
                "period_name": period_name,
                "start_date": start,
                "end_date": end,
            },
        )
        return FiscalPeriodInfo.from_model(period)

    def _find_overlapping(
        self, start: date, end: date, exclude_id: int | None = None
    ) -> FiscalPeriod | None:
        stmt = (
            select(FiscalPeriod)
            .where(FiscalPeriod.start_date <= end, FiscalPeriod.end_date >= start)
            .order_by(FiscalPeriod.start_date)
        )
        if exclude_id is not None:
            stmt = stmt.where(FiscalPeriod.id != exclude_id)
        return self.session.scalars(stmt).first()

    def _validate_no_overlap(self, start: date, end: date) -> None:
        overlapping = self._find_overlapping(start, end)
        if overlapping is not None:
            raise PeriodOverlapError(
                existing_period_id=overlapping.id,
                existing_period_name=overlapping.period_name,
                overlap_start=max(start, overlapping.start_date).isoformat(),
                overlap_end=min(end, overlapping.end_date).isoformat(),
            )

    def _validate_no_open_period(self) -> None:
        open_period = self.open_period_orm()
        if open_period is not None:
            raise OpenPeriodExistsError(open_period.id, open_period.period_name)

    def check_overlap(
        self,
        start_date: date | str,
        end_date: date | str,
        exclude_id: int | None = None,
    ) -> bool:
        """True when [start_date, end_date] overlaps an existing period."""
        start = parse_entry_date(start_date)
        end = parse_entry_date(end_date)
        return self._find_overlapping(start, end, exclude_id) is not None

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------

    def close_period(self, period_id: int, closed_by: str | None = None) -> FiscalPeriodInfo:
        """
        Close a fiscal period.  Irreversible.

        Postconditions:
            - ``closed`` is True and ``closed_at`` is the clock's now().
            - Entries can no longer be created in, moved into, edited in
              or deleted from this period.

        Raises:
            PeriodNotFoundError: unknown id.
            ClosedPeriodError: already closed.
        """
        with LogContext.bind(period_id=period_id):
            period = self.session.get(FiscalPeriod, period_id)
            if period is None:
                logger.warning("period_rejected", extra={"operation": "close", "code": PeriodNotFoundError.code})
                raise PeriodNotFoundError(period_id)
            if period.closed:
                logger.warning("period_rejected", extra={"operation": "close", "code": ClosedPeriodError.code})
                raise ClosedPeriodError(period.id, period.period_name)

            period.close(self._clock.now(), closed_by)
            self._flush("close_period")

            logger.info("period_closed", extra={"period_name": period.period_name})
            return FiscalPeriodInfo.from_model(period)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def open_period_orm(self) -> FiscalPeriod | None:
        """ORM row of the open period (kernel-internal; callers use get_open_period)."""
        stmt = (
            select(FiscalPeriod)
            .where(FiscalPeriod.closed.is_(False))
            .order_by(FiscalPeriod.start_date.desc(), FiscalPeriod.id.desc())
        )
        return self.session.scalars(stmt).first()

    def period_for_date_orm(self, check_date: date) -> FiscalPeriod | None:
        """ORM row of the period containing ``check_date``, if any."""
        stmt = select(FiscalPeriod).where(
            FiscalPeriod.start_date <= check_date,
            FiscalPeriod.end_date >= check_date,
        )
        return self.session.scalars(stmt).first()

    def get_open_period(self) -> FiscalPeriodInfo | None:
        """The unclosed period with the latest start date, if any."""
        period = self.open_period_orm()
        return FiscalPeriodInfo.from_model(period) if period is not None else None

    def get_period(self, period_id: int) -> FiscalPeriodInfo:
        period = self.session.get(FiscalPeriod, period_id)
        if period is None:
            raise PeriodNotFoundError(period_id)
        return FiscalPeriodInfo.from_model(period)

    def list_periods(self) -> list[FiscalPeriodInfo]:
        """All periods, most recent start date first."""
        stmt = select(FiscalPeriod).order_by(
            FiscalPeriod.start_date.desc(), FiscalPeriod.id.desc()
        )
        return [FiscalPeriodInfo.from_model(p) for p in self.session.scalars(stmt)]

    def find_period_for_date(self, check_date: date | str) -> FiscalPeriodInfo | None:
        period = self.period_for_date_orm(parse_entry_date(check_date))
        return FiscalPeriodInfo.from_model(period) if period is not None else None

    def period_summary(self, period_id: int | None = None) -> PeriodSummary:
        """
        Journal summary: entry count, summed amount and entries dated today.

        ``period_id=None`` summarises the whole journal.
        """
        if period_id is not None and self.session.get(FiscalPeriod, period_id) is None:
            raise PeriodNotFoundError(period_id)
        summary = JournalSelector(self.session).period_summary(
            period_id, self._clock.today()
        )
        logger.debug(
            "period_summary_computed",
            extra={"summary_period_id": period_id, "entry_count": summary.entry_count},
        )
        return summary
