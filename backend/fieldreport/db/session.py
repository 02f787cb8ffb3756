"""Engine Factory: dialect-specific engine options for the storage database.

Invariants:
    - SQLite connections may be used from FastAPI's worker threads
    - SQLite in-memory URLs share one connection (StaticPool) so every session
      sees the same database
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool


def _is_sqlite_memory(database_url: str) -> bool:
    return ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///")


def create_storage_engine(database_url: str, **kwargs) -> Engine:
    """Engine for database_url with the pooling its dialect needs."""
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if _is_sqlite_memory(database_url):
            kwargs.setdefault("poolclass", StaticPool)
    return create_engine(database_url, echo=False, **kwargs)
