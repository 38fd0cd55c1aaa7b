"""SQLAlchemy unit of work: one Session, one transaction.

Database errors never leave this module as SQLAlchemy exceptions; they
are translated into the domain's persistence errors so the outer layers
only deal with DomainException subclasses.
"""

from __future__ import annotations

import structlog
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from grocer.domain.exceptions import ConflictError, PersistenceError, TransientPersistenceError
from grocer.domain.model.clock import Clock, utc_now
from grocer.domain.repository.unit_of_work import UnitOfWork
from grocer.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from grocer.infrastructure.persistence.sql_catalog_repository import SqlCatalogRepository
from grocer.infrastructure.persistence.sql_inventory_repository import SqlInventoryRepository
from grocer.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from grocer.infrastructure.persistence.sql_stock_journal_repository import (
    SqlStockJournalRepository,
)

logger = structlog.get_logger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = {"40001", "40P01", "55P03"}
TRANSIENT_MESSAGES = ("database is locked", "database table is locked", "deadlock")


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def translate_error(exc: SQLAlchemyError) -> PersistenceError | ConflictError:
    """Map a SQLAlchemy failure to the domain error the caller should see."""
    if isinstance(exc, IntegrityError):
        logger.warning("integrity_error", error=str(exc.orig))
        return ConflictError("The record conflicts with existing data")

    if isinstance(exc, DBAPIError):
        message = str(exc.orig).lower()
        if _sqlstate(exc) in TRANSIENT_SQLSTATES or any(m in message for m in TRANSIENT_MESSAGES):
            logger.warning("transient_database_error", error=str(exc.orig))
            return TransientPersistenceError("The database is busy, please retry")

    logger.error("database_error", error=str(exc), exc_info=exc)
    return PersistenceError("Database operation failed")


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session], clock: Clock = utc_now) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.inventory = SqlInventoryRepository(self._session, self._clock)
        self.journal = SqlStockJournalRepository(self._session)
        self.orders = SqlOrderRepository(self._session)
        self.catalog = SqlCatalogRepository(self._session)
        self.carts = SqlCartRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._session is not None:
                self._session.close()
                self._session = None
        if isinstance(exc, SQLAlchemyError):
            raise translate_error(exc) from exc

    def commit(self) -> None:
        try:
            self._require_session().commit()
        except SQLAlchemyError as exc:
            self._require_session().rollback()
            raise translate_error(exc) from exc

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work used outside of its 'with' block")
        return self._session
