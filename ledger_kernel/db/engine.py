"""
Module: ledger_kernel.db.engine
Responsibility: The explicit store handle.  Owns the SQLAlchemy engine and
    session factory for exactly one ledger file and provides the
    transactional scope every caller works inside.
Architecture position: Kernel > DB.  May import from db/base.py.  Imports
    models/ lazily only to register tables before create_all().

Invariants enforced:
    - One file = one company ledger.  There is no module-level engine or
      session singleton; the handle is created by the bootstrapper and
      threaded into every service and selector via the Session it yields.
    - session_scope() commits on success and rolls back on any exception.
    - SQLite foreign-key enforcement is left OFF.  Referential checks are
      query-then-write in the services.

Failure modes:
    - LedgerFileNotFoundError from open() when the file does not exist.
    - StoreError when the engine raises any SQLAlchemyError (I/O failure,
      corrupted file, locked database).  The original exception is chained.

Known limitation:
    Validation and the subsequent write are separate statements inside the
    same session.  Under a second writer on the same file a time-of-check /
    time-of-use gap exists.  The application is single-user, so this is
    accepted and not guarded against.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.exceptions import LedgerFileNotFoundError, StoreError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.engine")

IN_MEMORY = ":memory:"


class LedgerDatabase:
    """
    Store handle for a single ledger file.

    Contract:
        Construct through ``create()``, ``open()`` or ``in_memory()``.
        Hand ``session_scope()`` sessions to services and selectors.
        Call ``close()`` on shutdown.

    Non-goals:
        Does not guard against two processes opening the same file.
    """

    def __init__(self, engine: Engine, path: str):
        self.engine = engine
        self.path = path
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, path: str | Path, echo: bool = False) -> "LedgerDatabase":
        """
        Create (or upgrade) a ledger file and install the schema.

        Postconditions: the file exists and contains every table.
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        db = cls(_file_engine(file_path, echo), str(file_path))
        db.create_tables()
        logger.info("ledger_file_created", extra={"ledger_file": str(file_path)})
        return db

    @classmethod
    def open(cls, path: str | Path, echo: bool = False) -> "LedgerDatabase":
        """
        Open an existing ledger file.

        Raises:
            LedgerFileNotFoundError: If the file does not exist.
        """
        file_path = Path(path)
        if not file_path.is_file():
            logger.warning(
                "ledger_file_not_found", extra={"ledger_file": str(file_path)}
            )
            raise LedgerFileNotFoundError(str(file_path))
        db = cls(_file_engine(file_path, echo), str(file_path))
        db.create_tables()
        logger.info("ledger_file_opened", extra={"ledger_file": str(file_path)})
        return db

    @classmethod
    def in_memory(cls, echo: bool = False) -> "LedgerDatabase":
        """Create a throwaway in-memory ledger (one shared connection)."""
        engine = create_engine(
            "sqlite://",
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        db = cls(engine, IN_MEMORY)
        db.create_tables()
        logger.debug("ledger_in_memory_created")
        return db

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        from ledger_kernel.db.base import Base
        import ledger_kernel.models  # noqa: F401  (registers tables)

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("create_tables", str(exc)) from exc

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def session(self) -> Session:
        """Get a new session bound to this ledger."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit, session is committed and closed.
            On exception, session is rolled back and closed.  LedgerError
            subclasses are re-raised unchanged; SQLAlchemyError is re-raised
            as StoreError.

        Usage:
            with db.session_scope() as session:
                AccountService(session).create_account("601", "Achats")
        """
        session = self.session()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("transaction_failed", exc_info=True)
            raise StoreError("session_scope", str(exc)) from exc
        except Exception:
            session.rollback()
            logger.debug("transaction_rolled_back")
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose the engine and release the file."""
        self.engine.dispose()
        logger.info("ledger_file_closed", extra={"ledger_file": self.path})

    def __enter__(self) -> "LedgerDatabase":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LedgerDatabase(path={self.path!r})"


def _file_engine(path: Path, echo: bool) -> Engine:
    return create_engine(f"sqlite:///{path}", echo=echo)
