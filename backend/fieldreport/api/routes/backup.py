"""Backup Routes: whole-area backup download, restore and stats.

Invariants:
    - GET /backup returns the envelope with a Content-Disposition filename
    - POST /backup/restore validates the envelope before touching storage
    - mode=replace clears the area first; mode=merge never deletes

Design Decisions:
    - Restore results are returned, not raised: partial failures are data
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from fieldreport.api.dependencies import get_backup_service, get_store
from fieldreport.core.domain_types import ImportMode
from fieldreport.schemas.project import BackupEnvelope, ImportResultResponse
from fieldreport.services.backup_service import BackupService
from fieldreport.services.scoped_store import ScopedStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/backup", tags=["backup"])


@router.get("")
def download_backup(service: BackupService = Depends(get_backup_service)):
    """Full backup of every project and global key."""
    return JSONResponse(
        content=service.export_all(),
        headers={
            "Content-Disposition": f'attachment; filename="{service.filename()}"',
        },
    )


@router.post("/restore", response_model=ImportResultResponse)
def restore_backup(
    body: BackupEnvelope,
    mode: ImportMode = Query(ImportMode.MERGE),
    service: BackupService = Depends(get_backup_service),
):
    """Restore a backup by replacing or merging into existing data."""
    backup = body.model_dump()
    if mode == ImportMode.REPLACE:
        result = service.import_replace(backup)
    else:
        result = service.import_merge(backup)
    if not result.success:
        logger.warning(f"Restore ({mode.value}) finished with {len(result.errors)} errors")
    return ImportResultResponse(**result.to_dict())


@router.post("/stats")
def backup_stats(
    body: BackupEnvelope, service: BackupService = Depends(get_backup_service),
):
    """Counts of keys and records contained in a backup."""
    return service.stats(body.model_dump())


@router.get("/usage")
def storage_usage(store: ScopedStore = Depends(get_store)):
    """Current footprint of the storage area against its quota."""
    return {**store.usage().to_dict(), "quota_bytes": store.quota_bytes}
