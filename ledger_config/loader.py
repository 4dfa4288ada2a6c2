"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``ledger_config.schema`` dataclasses.  Runtime callers go through
``ledger_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values (unknown enum member, bad decimal, non-positive limit)
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import (
    BalanceSheetLayout,
    IncomeStatementLayout,
    LedgerConfig,
    PeriodResultBasis,
    StatementLevel,
    StatementLine,
    StatementSide,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a Decimal from a YAML scalar (string, int or float)."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def _positive_int(data: dict[str, Any], key: str, default: int) -> int:
    value = int(data.get(key, default))
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def parse_statement_line(data: dict[str, Any]) -> StatementLine:
    """Parse one expected income-statement line."""
    return StatementLine(
        number=str(data["number"]),
        label=data["label"],
        side=StatementSide(data["side"]),
        priority=int(data["priority"]),
        level=StatementLevel(data.get("level", StatementLevel.OPERATING.value)),
    )


def _parse_priorities(data: dict[str, Any] | None) -> tuple[tuple[str, int], ...]:
    return tuple((str(prefix), int(priority)) for prefix, priority in (data or {}).items())


def parse_income_statement(data: dict[str, Any]) -> IncomeStatementLayout:
    """Parse the income-statement layout section."""
    return IncomeStatementLayout(
        expected_lines=tuple(
            parse_statement_line(line) for line in data.get("expected_lines", [])
        ),
        revenue_priorities=_parse_priorities(data.get("revenue_priorities")),
        expense_priorities=_parse_priorities(data.get("expense_priorities")),
        default_priority=int(data.get("default_priority", 100)),
        financial_prefixes=tuple(str(p) for p in data.get("financial_prefixes", ("76", "66"))),
        exceptional_prefixes=tuple(str(p) for p in data.get("exceptional_prefixes", ("77", "67"))),
    )


def parse_balance_sheet(data: dict[str, Any]) -> BalanceSheetLayout:
    """Parse the balance-sheet layout section."""
    defaults = BalanceSheetLayout()
    capital = data.get("capital", {})
    result = data.get("period_result", {})
    return BalanceSheetLayout(
        capital_number=str(capital.get("number", defaults.capital_number)),
        capital_label=capital.get("label", defaults.capital_label),
        capital_amount=parse_decimal(capital.get("amount", defaults.capital_amount)),
        result_number=str(result.get("number", defaults.result_number)),
        result_label=result.get("label", defaults.result_label),
        revenue_prefix=str(result.get("revenue_prefix", defaults.revenue_prefix)),
        expense_prefix=str(result.get("expense_prefix", defaults.expense_prefix)),
        period_result_basis=PeriodResultBasis(
            result.get("basis", defaults.period_result_basis.value)
        ),
    )


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """Parse a full configuration set."""
    limits = data.get("limits", {})
    return LedgerConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        balance_tolerance=parse_decimal(data.get("balance_tolerance", "0.01")),
        account_number_max_length=_positive_int(limits, "account_number_max_length", 10),
        account_label_max_length=_positive_int(limits, "account_label_max_length", 100),
        default_page_size=_positive_int(limits, "default_page_size", 20),
        account_search_limit=_positive_int(limits, "account_search_limit", 10),
        piece_number_prefix=str(data.get("piece_number_prefix", "PIECE")),
        income_statement=parse_income_statement(data.get("income_statement", {})),
        balance_sheet=parse_balance_sheet(data.get("balance_sheet", {})),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw configuration data."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
