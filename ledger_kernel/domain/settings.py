"""
Kernel settings -- the handful of limits the services enforce.

The kernel never reads configuration files.  ``ledger_config.bridges``
builds a ``KernelSettings`` from the active configuration; services fall
back to ``DEFAULT_SETTINGS`` when none is passed.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KernelSettings:
    account_number_max_length: int = 10
    account_label_max_length: int = 100
    default_page_size: int = 20
    account_search_limit: int = 10
    piece_number_prefix: str = "PIECE"


DEFAULT_SETTINGS = KernelSettings()
