"""Health Probes: process liveness and storage readiness.

Invariants:
    - GET /health/ answers 200 whenever the process can serve a request
    - GET /health/ready answers 503 while the storage database is unreachable
    - A full storage area does not fail readiness (reads still work); it is
      reported under checks.storage so operators see it before writes fail
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fieldreport.api.dependencies import get_store
from fieldreport.infrastructure import database
from fieldreport.services.scoped_store import ScopedStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "fieldreport-storage"


@router.get("/", status_code=status.HTTP_200_OK)
def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": "1.0.0"}


def _storage_check(store: ScopedStore) -> dict:
    used = store.usage().used_bytes
    quota = store.quota_bytes
    return {
        "used_bytes": used,
        "quota_bytes": quota,
        "full": bool(quota) and used >= quota,
    }


@router.get("/ready")
def readiness(store: ScopedStore = Depends(get_store)):
    """Database connectivity plus storage headroom."""
    manager = database.db_manager
    if manager is None or not manager.health_check():
        logger.warning("Readiness failed: storage database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "storage": _storage_check(store)},
    }
