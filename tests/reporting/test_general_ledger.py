"""Integration tests for the general ledger and balances to date."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.exceptions import AccountNotFoundError
from ledger_reports.models import BalanceSide, ReportType


@pytest.fixture
def bank_activity(post):
    """Bank account 512 goes 1000 -> 700 -> -200."""
    return [
        post("2025-01-05", "512", "701", "1000.00", label="Encaissement", piece_number="B-1"),
        post("2025-01-20", "601", "512", "300.00", label="Achat"),
        post("2025-02-02", "613", "512", "900.00", label="Loyer"),
    ]


class TestGeneralLedger:
    def test_running_balance(self, reporting_service, bank_activity):
        ledger = reporting_service.general_ledger("512")

        assert [line.running_balance for line in ledger.lines] == [
            Decimal("1000.00"),
            Decimal("700.00"),
            Decimal("-200.00"),
        ]
        assert [line.balance for line in ledger.lines] == [
            Decimal("1000.00"),
            Decimal("700.00"),
            Decimal("200.00"),
        ]
        assert [line.side for line in ledger.lines] == [
            BalanceSide.DEBTOR,
            BalanceSide.DEBTOR,
            BalanceSide.CREDITOR,
        ]

    def test_each_line_hits_one_side(self, reporting_service, bank_activity):
        ledger = reporting_service.general_ledger("512")
        first, second, _ = ledger.lines

        assert first.debit == Decimal("1000.00") and first.credit is None
        assert second.credit == Decimal("300.00") and second.debit is None
        assert first.piece_number == "B-1"
        assert first.label == "Encaissement"

    def test_totals(self, reporting_service, bank_activity):
        ledger = reporting_service.general_ledger("512")

        assert ledger.label == "Banque"
        assert ledger.opening_balance == Decimal("0")
        assert ledger.total_debit == Decimal("1000.00")
        assert ledger.total_credit == Decimal("1200.00")
        assert ledger.closing_balance == Decimal("-200.00")
        assert ledger.final_balance == Decimal("200.00")
        assert ledger.final_side == BalanceSide.CREDITOR

    def test_zero_balance_is_debtor(self, reporting_service, post):
        post("2025-01-05", "512", "701", "100.00")
        post("2025-01-06", "601", "512", "100.00")

        ledger = reporting_service.general_ledger("512")
        assert ledger.final_balance == Decimal("0")
        assert ledger.final_side == BalanceSide.DEBTOR

    def test_chronological_order_regardless_of_insertion(self, reporting_service, post):
        late = post("2025-03-01", "512", "701", "10.00")
        early = post("2025-01-01", "512", "701", "20.00")
        same_day = post("2025-01-01", "512", "706", "5.00")

        ledger = reporting_service.general_ledger("512")
        assert [line.entry_id for line in ledger.lines] == [early.id, same_day.id, late.id]

    def test_date_window(self, reporting_service, bank_activity):
        ledger = reporting_service.general_ledger("512", date_from="2025-01-10")

        assert len(ledger.lines) == 2
        assert ledger.lines[0].running_balance == Decimal("-300.00")

    def test_account_without_postings(self, reporting_service, standard_accounts):
        ledger = reporting_service.general_ledger("771")
        assert ledger.lines == ()
        assert ledger.final_side == BalanceSide.DEBTOR

    def test_unknown_account(self, reporting_service, standard_accounts):
        with pytest.raises(AccountNotFoundError):
            reporting_service.general_ledger("999")


class TestGeneralLedgerRange:
    def test_range_includes_quiet_accounts(self, reporting_service, bank_activity):
        report = reporting_service.general_ledger_range("500", "699")

        assert [account.number for account in report.accounts] == [
            "512", "571", "601", "613", "661"
        ]
        quiet = report.accounts[1]
        assert quiet.lines == ()
        assert quiet.total_debit == Decimal("0")
        assert report.metadata.report_type == ReportType.GENERAL_LEDGER

    def test_open_ended_range(self, reporting_service, bank_activity, standard_accounts):
        report = reporting_service.general_ledger_range()
        assert len(report.accounts) == len(standard_accounts)

    def test_range_matches_single_account_ledgers(self, reporting_service, bank_activity):
        report = reporting_service.general_ledger_range("512", "613")
        for account in report.accounts:
            assert account == reporting_service.general_ledger(account.number)


class TestBalancesAsOf:
    def test_signed_balances(self, reporting_service, bank_activity):
        balances = reporting_service.account_balances_as_of()

        assert balances == {
            "512": Decimal("-200.00"),
            "601": Decimal("300.00"),
            "613": Decimal("900.00"),
            "701": Decimal("-1000.00"),
        }

    def test_cutoff_is_inclusive(self, reporting_service, bank_activity):
        balances = reporting_service.account_balances_as_of(date(2025, 1, 20))
        assert balances["512"] == Decimal("700.00")
        assert "613" not in balances

    def test_balances_sum_to_zero(self, reporting_service, bank_activity):
        assert sum(reporting_service.account_balances_as_of("2025-12-31").values()) == 0
