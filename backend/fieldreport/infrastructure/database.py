"""Database Session Manager: connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to StorageBackendError (core/errors.py)
    - Sessions are synchronous; the store contract has no awaited boundary

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (no global import side effects)
    - expire_on_commit=False: rows stay readable after the per-operation commit
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from fieldreport.core.errors import StorageBackendError
from fieldreport.db.base import Base
from fieldreport import models  # noqa: F401  (registers tables on Base.metadata)
from fieldreport.db.session import create_storage_engine

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages database sessions with pooling, rollback, and health checks."""

    def __init__(self, database_url: str, **engine_kwargs):
        self.engine = create_storage_engine(
            database_url, pool_pre_ping=True, **engine_kwargs,
        )
        self._session_factory = sessionmaker(
            self.engine, expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise StorageBackendError("Integrity constraint violated", "commit")
        except OperationalError as e:
            session.rollback()
            logger.error(f"DB operational error: {e}")
            raise StorageBackendError("Connection or operational error", "execute")
        except DBAPIError as e:
            session.rollback()
            logger.error(f"DB driver error: {e}")
            raise StorageBackendError("Database driver error", "query")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise StorageBackendError("Database operation failed", "unknown")
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create missing tables (dev and tests; production uses alembic)."""
        Base.metadata.create_all(self.engine)

    def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, create_schema: bool = True, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    if create_schema:
        db_manager.create_schema()
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager
