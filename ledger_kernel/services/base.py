"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Common constructor and session-handling contract for every service
    that mutates the ledger.  Services receive a SQLAlchemy ``Session``
    and persist with ``session.flush()``, never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction (``LedgerDatabase.session_scope()``) and never commit or
      roll back themselves.
    - Store failures surface as ``StoreError`` (kind FATAL_STORE), never as
      a raw SQLAlchemy exception.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base
from ledger_kernel.domain.settings import DEFAULT_SETTINGS, KernelSettings
from ledger_kernel.exceptions import StoreError
from ledger_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a ``Session`` from the caller and uses ``flush()`` to
        persist changes within the active transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Read-only listing belongs in ``ledger_kernel/selectors/``.
    """

    def __init__(self, session: Session, settings: KernelSettings | None = None):
        self.session = session
        self.settings = settings or DEFAULT_SETTINGS

    def _flush(self, operation: str) -> None:
        """Flush pending changes, translating engine failures to StoreError."""
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "store_flush_failed",
                extra={"operation": operation},
                exc_info=True,
            )
            raise StoreError(operation, str(exc)) from exc
