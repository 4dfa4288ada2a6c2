"""
Ledger Kernel - double-entry bookkeeping core

A single-user, file-backed accounting core with:
- Chart of accounts with referential delete protection
- Fiscal periods with non-overlap and monotonic close
- Validated two-leg journal entries
- Typed error taxonomy and structured logging
"""

__version__ = "0.1.0"
