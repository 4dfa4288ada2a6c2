"""
CSV export of report models.

Serializes report models into comma-delimited text using ``csv.writer``
with minimal quoting: a field containing the delimiter, a double quote or
a newline is wrapped in ``"`` and embedded quotes are doubled.  Format
only -- no business logic, no file I/O.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date
from enum import Enum
from typing import Any

from ledger_reports.models import (
    BalanceSheetReport,
    BalanceSheetSection,
    GeneralLedgerReport,
    IncomeStatementReport,
    TrialBalanceReport,
)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def write_rows(rows: Iterable[Sequence[Any]], delimiter: str = ",") -> str:
    """Render rows to CSV text (``\\n`` line endings)."""
    buffer = io.StringIO()
    writer = csv.writer(
        buffer, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n"
    )
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return buffer.getvalue()


def trial_balance_to_csv(report: TrialBalanceReport, delimiter: str = ",") -> str:
    rows: list[Sequence[Any]] = [
        ("Account", "Label", "Debit", "Credit", "Debtor balance", "Creditor balance")
    ]
    rows.extend(
        (
            line.number,
            line.label,
            line.debit_total,
            line.credit_total,
            line.debtor_balance,
            line.creditor_balance,
        )
        for line in report.lines
    )
    totals = report.totals
    rows.append(
        (
            "TOTAL",
            "",
            totals.debit_total,
            totals.credit_total,
            totals.debtor_balance,
            totals.creditor_balance,
        )
    )
    return write_rows(rows, delimiter)


def general_ledger_to_csv(report: GeneralLedgerReport, delimiter: str = ",") -> str:
    """One block per account: postings, then a closing total row."""
    rows: list[Sequence[Any]] = [
        ("Account", "Date", "Piece", "Label", "Debit", "Credit", "Balance", "Side")
    ]
    for account in report.accounts:
        for line in account.lines:
            rows.append(
                (
                    account.number,
                    line.entry_date,
                    line.piece_number,
                    line.label,
                    line.debit,
                    line.credit,
                    line.balance,
                    line.side,
                )
            )
        rows.append(
            (
                account.number,
                "",
                "",
                f"Total {account.label}",
                account.total_debit,
                account.total_credit,
                account.final_balance,
                account.final_side,
            )
        )
    return write_rows(rows, delimiter)


def _balance_sheet_rows(section: BalanceSheetSection) -> list[Sequence[Any]]:
    rows: list[Sequence[Any]] = [
        (
            section.title,
            line.number,
            line.label,
            line.initial,
            line.final,
            line.variation,
            line.variation_pct,
        )
        for line in section.lines
    ]
    rows.append(
        (
            section.title,
            "",
            f"Total {section.title}",
            section.total_initial,
            section.total_final,
            section.variation,
            section.variation_pct,
        )
    )
    return rows


def balance_sheet_to_csv(report: BalanceSheetReport, delimiter: str = ",") -> str:
    rows: list[Sequence[Any]] = [
        (
            "Section",
            "Account",
            "Label",
            report.initial_date,
            report.final_date,
            "Variation",
            "Variation %",
        )
    ]
    for section in (report.assets, report.liabilities, report.equity):
        rows.extend(_balance_sheet_rows(section))
    return write_rows(rows, delimiter)


def income_statement_to_csv(report: IncomeStatementReport, delimiter: str = ",") -> str:
    rows: list[Sequence[Any]] = [("Section", "Account", "Label", "Amount")]
    for section in (report.revenue, report.expenses):
        rows.extend(
            (section.title, line.number, line.label, line.amount)
            for line in section.lines
        )
        rows.append((section.title, "", f"Total {section.title}", section.total))
    rows.append(("Result", "", report.result_kind, report.result_amount))
    if report.margin_rate is not None:
        rows.append(("Result", "", "Margin %", report.margin_rate))
    return write_rows(rows, delimiter)
