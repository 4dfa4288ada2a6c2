"""
Config -> Kernel bridges.

The kernel never imports ledger_config; these functions translate the
active configuration into kernel inputs.
"""

from __future__ import annotations

from ledger_config.schema import LedgerConfig
from ledger_kernel.domain.settings import KernelSettings


def build_kernel_settings(config: LedgerConfig) -> KernelSettings:
    """Project the limits the kernel services enforce."""
    return KernelSettings(
        account_number_max_length=config.account_number_max_length,
        account_label_max_length=config.account_label_max_length,
        default_page_size=config.default_page_size,
        account_search_limit=config.account_search_limit,
        piece_number_prefix=config.piece_number_prefix,
    )
