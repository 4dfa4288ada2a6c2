"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain configuration at
    runtime.  It loads a YAML configuration set (the packaged
    ``sets/default.yaml`` unless a path is given) and returns a frozen
    ``LedgerConfig``.

Architecture position:
    Sits above ``ledger_kernel`` and beside ``ledger_reports``.  The kernel
    MUST NEVER import from ``ledger_config``; ``bridges`` translates the
    configuration into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` / ``KeyError`` -- schema errors in the YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_yaml_file, parse_config
from ledger_config.schema import (
    BalanceSheetLayout,
    IncomeStatementLayout,
    LedgerConfig,
    PeriodResultBasis,
    StatementLevel,
    StatementLine,
    StatementSide,
)

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """Load and parse a configuration set.

    Args:
        path: YAML file to load.  Defaults to ``sets/default.yaml``.

    Returns:
        LedgerConfig -- frozen, safe to share.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(config_path))
    _logger.info(
        "config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "config_path": str(config_path),
        },
    )
    return config


__all__ = [
    "BalanceSheetLayout",
    "DEFAULT_CONFIG_PATH",
    "IncomeStatementLayout",
    "LedgerConfig",
    "PeriodResultBasis",
    "StatementLevel",
    "StatementLine",
    "StatementSide",
    "get_active_config",
]
