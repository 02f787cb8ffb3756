"""Service test fixtures: in-memory backends, stores, and a FastAPI test client.

Invariants:
    - Every test gets a fresh backend (dict-backed or in-memory SQLite)
    - get_backend dependency overridden so routes never touch the configured database
    - db_manager patched for the readiness probe

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, sufficient for SqlBackend tests
    - FailingBackend raises on demand to exercise the store's failure paths
"""

import pytest
from fastapi.testclient import TestClient

from fieldreport.api.dependencies import get_backend
from fieldreport.core.errors import StorageBackendError
from fieldreport.infrastructure import database as db_module
from fieldreport.infrastructure.database import DatabaseSessionManager
from fieldreport.infrastructure.kv_backends import InMemoryBackend, SqlBackend
from fieldreport.main import app
from fieldreport.services.scoped_store import ScopedStore


class FailingBackend(InMemoryBackend):
    """InMemoryBackend whose operations can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False

    def get_item(self, key):
        if self.fail_reads:
            raise StorageBackendError("backend offline", "read")
        return super().get_item(key)

    def set_item(self, key, value):
        if self.fail_writes:
            raise StorageBackendError("backend offline", "write")
        super().set_item(key, value)

    def remove_item(self, key):
        if self.fail_writes:
            raise StorageBackendError("backend offline", "delete")
        super().remove_item(key)

    def keys(self):
        if self.fail_reads:
            raise StorageBackendError("backend offline", "keys")
        return super().keys()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    return ScopedStore(backend, project_id="")


@pytest.fixture
def notices():
    return []


@pytest.fixture
def small_backend():
    return InMemoryBackend(quota_bytes=200)


@pytest.fixture
def small_store(small_backend, notices):
    return ScopedStore(small_backend, project_id="p1", notifier=notices.append)


@pytest.fixture
def failing_backend():
    return FailingBackend()


@pytest.fixture
def db_manager():
    manager = DatabaseSessionManager("sqlite:///:memory:")
    manager.create_schema()
    yield manager
    manager.dispose()


@pytest.fixture
def sql_backend(db_manager):
    return SqlBackend(db_manager)


@pytest.fixture
def client(backend, db_manager):
    """FastAPI test client with the storage backend overridden."""
    app.dependency_overrides[get_backend] = lambda: backend

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    # No context manager: lifespan (init_db against the configured URL) is skipped
    yield TestClient(app)

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
