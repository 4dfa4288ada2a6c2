"""Tests for fiscal period lifecycle (PeriodService)."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ledger_kernel.exceptions import (
    ClosedPeriodError,
    DateFormatInvalidError,
    FieldRequiredError,
    InvalidDateRangeError,
    OpenPeriodExistsError,
    PeriodNotFoundError,
    PeriodOverlapError,
)


class TestCreatePeriod:
    def test_create_open_period(self, period_service):
        period = period_service.create_period(
            "ACME SARL", "Exercice 2025", "2025-01-01", "2025-12-31"
        )

        assert period.id is not None
        assert period.company_name == "ACME SARL"
        assert period.start_date == date(2025, 1, 1)
        assert period.end_date == date(2025, 12, 31)
        assert period.closed is False
        assert period.is_open
        assert period.closed_at is None

    def test_accepts_date_objects(self, period_service):
        period = period_service.create_period(
            "ACME", "S1", date(2025, 1, 1), date(2025, 6, 30)
        )
        assert period.end_date == date(2025, 6, 30)

    @pytest.mark.parametrize(
        "company, name, field_name",
        [("", "2025", "company_name"), ("ACME", "  ", "period_name")],
    )
    def test_names_required(self, period_service, company, name, field_name):
        with pytest.raises(FieldRequiredError) as exc_info:
            period_service.create_period(company, name, "2025-01-01", "2025-12-31")
        assert exc_info.value.field_name == field_name

    @pytest.mark.parametrize("bad", ["2025/01/01", "01-01-2025", "2025-02-30", "", "2025-1-1"])
    def test_bad_date_format(self, period_service, bad):
        with pytest.raises(DateFormatInvalidError):
            period_service.create_period("ACME", "2025", bad, "2025-12-31")

    @pytest.mark.parametrize(
        "start, end",
        [("2025-12-31", "2025-01-01"), ("2025-06-01", "2025-06-01")],
    )
    def test_start_must_precede_end(self, period_service, start, end):
        with pytest.raises(InvalidDateRangeError):
            period_service.create_period("ACME", "2025", start, end)

    def test_overlap_is_rejected(self, period_service, deterministic_clock):
        first = period_service.create_period("ACME", "S1", "2025-01-01", "2025-06-30")
        period_service.close_period(first.id)

        with pytest.raises(PeriodOverlapError) as exc_info:
            period_service.create_period("ACME", "S2", "2025-05-01", "2025-12-31")
        assert exc_info.value.code == "OVERLAP"
        assert exc_info.value.existing_period_id == first.id
        assert exc_info.value.overlap_start == "2025-05-01"
        assert exc_info.value.overlap_end == "2025-06-30"

    def test_touching_bounds_overlap(self, period_service):
        """Bounds are inclusive: sharing a single day is an overlap."""
        first = period_service.create_period("ACME", "S1", "2025-01-01", "2025-06-30")
        period_service.close_period(first.id)
        with pytest.raises(PeriodOverlapError):
            period_service.create_period("ACME", "S2", "2025-06-30", "2025-12-31")

    def test_adjacent_period_after_close(self, period_service):
        first = period_service.create_period("ACME", "S1", "2025-01-01", "2025-06-30")
        period_service.close_period(first.id)

        second = period_service.create_period("ACME", "S2", "2025-07-01", "2025-12-31")
        assert second.is_open

    def test_single_open_period(self, period_service):
        first = period_service.create_period("ACME", "S1", "2025-01-01", "2025-06-30")
        with pytest.raises(OpenPeriodExistsError) as exc_info:
            period_service.create_period("ACME", "S2", "2025-07-01", "2025-12-31")
        assert exc_info.value.open_period_id == first.id

    def test_overlap_checked_before_open_period(self, period_service):
        period_service.create_period("ACME", "S1", "2025-01-01", "2025-06-30")
        with pytest.raises(PeriodOverlapError):
            period_service.create_period("ACME", "S2", "2025-03-01", "2025-12-31")

    def test_check_overlap(self, period_service, open_period):
        assert period_service.check_overlap("2025-12-31", "2026-01-31") is True
        assert period_service.check_overlap("2026-01-01", "2026-12-31") is False
        assert (
            period_service.check_overlap("2025-03-01", "2025-04-01", exclude_id=open_period.id)
            is False
        )


class TestClosePeriod:
    def test_close_stamps_clock_time(self, period_service, open_period, deterministic_clock):
        closed = period_service.close_period(open_period.id, closed_by="alice")

        assert closed.closed is True
        assert closed.is_open is False
        assert closed.closed_at == datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_close_twice(self, period_service, open_period):
        period_service.close_period(open_period.id)
        with pytest.raises(ClosedPeriodError):
            period_service.close_period(open_period.id)

    def test_close_unknown(self, period_service):
        with pytest.raises(PeriodNotFoundError) as exc_info:
            period_service.close_period(42)
        assert exc_info.value.period_id == 42

    def test_close_is_logged_with_period_context(
        self, period_service, open_period, captured_logs
    ):
        period_service.close_period(open_period.id)

        closed = [r for r in captured_logs() if r["message"] == "period_closed"]
        assert len(closed) == 1
        assert closed[0]["period_id"] == open_period.id
        assert closed[0]["level"] == "INFO"


class TestPeriodQueries:
    def test_open_period(self, period_service, open_period):
        assert period_service.get_open_period() == open_period

    def test_no_open_period_after_close(self, period_service, open_period):
        period_service.close_period(open_period.id)
        assert period_service.get_open_period() is None

    def test_list_periods_newest_first(self, period_service):
        first = period_service.create_period("ACME", "2024", "2024-01-01", "2024-12-31")
        period_service.close_period(first.id)
        second = period_service.create_period("ACME", "2025", "2025-01-01", "2025-12-31")

        assert [p.id for p in period_service.list_periods()] == [second.id, first.id]

    def test_get_period(self, period_service, open_period):
        assert period_service.get_period(open_period.id).period_name == "Exercice 2025"
        with pytest.raises(PeriodNotFoundError):
            period_service.get_period(999)

    def test_find_period_for_date(self, period_service, open_period):
        assert period_service.find_period_for_date("2025-12-31").id == open_period.id
        assert period_service.find_period_for_date(date(2026, 1, 1)) is None


class TestPeriodSummary:
    def test_summary_counts_entries(self, period_service, open_period, post):
        post("2025-06-15", "601", "512", "100.00")
        post("2025-06-14", "601", "512", "50.50")

        summary = period_service.period_summary(open_period.id)

        assert summary.period_id == open_period.id
        assert summary.entry_count == 2
        assert summary.total_amount == Decimal("150.50")
        assert summary.entries_today == 1

    def test_summary_of_empty_journal(self, period_service, open_period):
        summary = period_service.period_summary()

        assert summary.period_id is None
        assert summary.entry_count == 0
        assert summary.total_amount == Decimal("0")
        assert summary.entries_today == 0

    def test_summary_unknown_period(self, period_service):
        with pytest.raises(PeriodNotFoundError):
            period_service.period_summary(7)
