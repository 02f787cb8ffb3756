"""API Dependencies: per-request ScopedStore and BackupService providers.

Invariants:
    - One SqlBackend per process, built lazily from db_manager and settings
    - A fresh ScopedStore per request; its ambient project is re-read from the
      reserved global key, so a switch made by one request is seen by the next

Design Decisions:
    - FastAPI Depends functions here, overridden in tests with in-memory backends
"""

from fastapi import Depends

from fieldreport.config import Settings, get_settings
from fieldreport.core.key_codec import KeyCodec
from fieldreport.core.repository_protocols import KeyValueBackend
from fieldreport.infrastructure.database import get_db_manager
from fieldreport.infrastructure.kv_backends import SqlBackend
from fieldreport.services.backup_service import BackupService
from fieldreport.services.scoped_store import ScopedStore

_backend: KeyValueBackend | None = None


def get_backend(settings: Settings = Depends(get_settings)) -> KeyValueBackend:
    global _backend
    if _backend is None:
        _backend = SqlBackend(
            get_db_manager(), quota_bytes=settings.storage_quota_bytes or None,
        )
    return _backend


def reset_backend() -> None:
    global _backend
    _backend = None


def get_store(
    backend: KeyValueBackend = Depends(get_backend),
    settings: Settings = Depends(get_settings),
) -> ScopedStore:
    return ScopedStore(
        backend,
        codec=KeyCodec(settings.key_scheme),
        current_project_key=settings.current_project_key,
    )


def get_backup_service(
    backend: KeyValueBackend = Depends(get_backend),
    settings: Settings = Depends(get_settings),
) -> BackupService:
    return BackupService(backend, settings)
