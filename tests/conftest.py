"""
Pytest fixtures for the ledger test suite.

Provides:
- A fresh in-memory SQLite ledger per test
- Deterministic clock and service instances
- A small French-style chart of accounts and an open 2025 fiscal period
- Captured JSON logs
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from ledger_config import LedgerConfig, get_active_config
from ledger_kernel.db.engine import LedgerDatabase
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.dtos import EntryDraft, FiscalPeriodInfo, JournalEntryInfo
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models.account import AccountKind
from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.period_service import PeriodService
from ledger_reports.service import ReportingService

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, account_service):
            account_service.create_account("601", "Achats")
            logs = captured_logs()
            assert any(r["message"] == "account_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def ledger_db() -> Generator[LedgerDatabase, None, None]:
    """A throwaway in-memory ledger."""
    db = LedgerDatabase.in_memory()
    yield db
    db.close()


@pytest.fixture
def session(ledger_db) -> Generator[Session, None, None]:
    """Session on the in-memory ledger; rolled back after the test."""
    sess = ledger_db.session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Clock fixed at 2025-06-15 12:00 UTC."""
    return DeterministicClock()


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return get_active_config()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def account_service(session) -> AccountService:
    return AccountService(session)


@pytest.fixture
def period_service(session, deterministic_clock) -> PeriodService:
    return PeriodService(session, deterministic_clock)


@pytest.fixture
def journal_service(session, deterministic_clock) -> JournalService:
    return JournalService(session, deterministic_clock)


@pytest.fixture
def reporting_service(session, deterministic_clock, ledger_config) -> ReportingService:
    return ReportingService(session, clock=deterministic_clock, config=ledger_config)


# =============================================================================
# Ledger data fixtures
# =============================================================================

STANDARD_CHART = (
    ("211", "Matériel de bureau", AccountKind.ASSET),
    ("411", "Clients", AccountKind.ASSET),
    ("164", "Emprunts bancaires", AccountKind.LIABILITY),
    ("401", "Fournisseurs", AccountKind.LIABILITY),
    ("512", "Banque", AccountKind.TREASURY),
    ("571", "Caisse", AccountKind.TREASURY),
    ("601", "Achats de marchandises", AccountKind.EXPENSE),
    ("613", "Locations", AccountKind.EXPENSE),
    ("661", "Charges d'intérêts", AccountKind.EXPENSE),
    ("701", "Ventes de marchandises", AccountKind.REVENUE),
    ("706", "Prestations de services", AccountKind.REVENUE),
    ("771", "Produits exceptionnels", AccountKind.REVENUE),
)


@pytest.fixture
def standard_accounts(account_service) -> dict[str, AccountKind]:
    """Create the standard chart of accounts; returns number -> kind."""
    for number, label, kind in STANDARD_CHART:
        account_service.create_account(number, label, kind)
    return {number: kind for number, _, kind in STANDARD_CHART}


@pytest.fixture
def open_period(period_service) -> FiscalPeriodInfo:
    """Open fiscal period covering calendar year 2025."""
    return period_service.create_period(
        "ACME SARL", "Exercice 2025", "2025-01-01", "2025-12-31"
    )


@pytest.fixture
def post(journal_service, standard_accounts, open_period):
    """
    Factory that records a journal entry in the 2025 period.

    Usage::

        entry = post("2025-03-01", "601", "571", "500.00", label="Fournitures")
    """

    def _post(
        entry_date: date | str,
        debit: str,
        credit: str,
        amount: Decimal | str | int,
        label: str = "Écriture",
        piece_number: str | None = None,
        note: str | None = None,
    ) -> JournalEntryInfo:
        return journal_service.create_entry(
            EntryDraft(
                entry_date=entry_date,
                label=label,
                debit_account=debit,
                credit_account=credit,
                amount=amount,
                piece_number=piece_number,
                note=note,
            )
        )

    return _post
