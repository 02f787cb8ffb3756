"""Project Routes: project-scoped entries, export/import, seeding and clearing.

Invariants:
    - Every route goes through ScopedStore; routes never build physical keys
    - A failed write surfaces as the matching FieldReportError (507 quota, 503 backend,
      400 unserializable); reads that fall back to the default return 404
    - DELETE /projects/{pid} only removes keys under that project's prefix

Design Decisions:
    - Thin routes; the store already logs every failure, routes only map outcomes
"""

import logging

from fastapi import APIRouter, Depends, status

from fieldreport.api.dependencies import get_store
from fieldreport.core.domain_types import WriteOutcome
from fieldreport.core.errors import (
    ErrorContext, InvalidEntryError, ResourceNotFoundError,
    StorageBackendError, StorageQuotaExceededError,
)
from fieldreport.core.store_result import WriteResult
from fieldreport.schemas.project import (
    CurrentProjectResponse, CurrentProjectUpdate, EntryResponse, EntryWrite,
    ProjectImportRequest, ProjectImportResponse,
)
from fieldreport.services.scoped_store import ScopedStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


def raise_for_write(result: WriteResult, project_id: str, key: str, store: ScopedStore) -> None:
    """Map a non-ok WriteResult to the matching API error."""
    if result.ok:
        return
    ctx = ErrorContext(project_id=project_id, logical_key=key, physical_key=result.physical_key)
    if result.outcome == WriteOutcome.QUOTA_EXCEEDED:
        raise StorageQuotaExceededError(store.usage().used_bytes, store.quota_bytes or 0, ctx)
    if result.outcome == WriteOutcome.UNSERIALIZABLE:
        raise InvalidEntryError("Entry value must be JSON-serializable", ctx)
    raise StorageBackendError(result.error or "write rejected", "write", ctx)


@router.get("/current", response_model=CurrentProjectResponse)
def get_current_project(store: ScopedStore = Depends(get_store)):
    """Ambient project id ("" when unscoped)."""
    return CurrentProjectResponse(project_id=store.current_project_id)


@router.put("/current", response_model=CurrentProjectResponse)
def set_current_project(
    body: CurrentProjectUpdate, store: ScopedStore = Depends(get_store),
):
    """Switch the ambient project. Empty ids are not persisted."""
    if not store.set_current_project_id(body.project_id):
        raise StorageBackendError("could not persist current project", "write")
    logger.info("Current project switched", extra={"project_id": body.project_id})
    return CurrentProjectResponse(project_id=store.current_project_id)


@router.get("/{project_id}/keys")
def list_project_keys(project_id: str, store: ScopedStore = Depends(get_store)):
    return {"project_id": project_id, "keys": store.list_keys_for_project(project_id)}


@router.get("/{project_id}/export")
def export_project(project_id: str, store: ScopedStore = Depends(get_store)):
    """Flat {logicalKey: value} snapshot of the project."""
    return store.export_project(project_id)


@router.post("/{project_id}/import", response_model=ProjectImportResponse)
def import_project(
    project_id: str,
    body: ProjectImportRequest,
    store: ScopedStore = Depends(get_store),
):
    """Write every entry; partial failure is reported per key, not rolled back."""
    results = store.import_project(body.data, project_id)
    return ProjectImportResponse(
        project_id=project_id, success=all(results.values()), results=results,
    )


@router.post("/{project_id}/seed", status_code=status.HTTP_201_CREATED)
def seed_project(project_id: str, store: ScopedStore = Depends(get_store)):
    """Create the default aggregate for keys the project does not have yet."""
    written = store.seed_project(project_id)
    return {"project_id": project_id, "written": written}


@router.delete("/{project_id}")
def clear_project(project_id: str, store: ScopedStore = Depends(get_store)):
    """Remove every key of the project."""
    removed = store.clear_project(project_id)
    return {"project_id": project_id, "removed": removed}


@router.get("/{project_id}/entries/{key}", response_model=EntryResponse)
def get_entry(project_id: str, key: str, store: ScopedStore = Depends(get_store)):
    result = store.read(key, project_id=project_id)
    if not result.found:
        raise ResourceNotFoundError(
            "Entry", key,
            ErrorContext(project_id=project_id, logical_key=key,
                         debug_info={"outcome": result.outcome.value}),
        )
    return EntryResponse(project_id=project_id, key=key, value=result.value)


@router.put("/{project_id}/entries/{key}", response_model=EntryResponse)
def put_entry(
    project_id: str,
    key: str,
    body: EntryWrite,
    store: ScopedStore = Depends(get_store),
):
    raise_for_write(store.write(key, body.value, project_id), project_id, key, store)
    return EntryResponse(project_id=project_id, key=key, value=body.value)


@router.delete("/{project_id}/entries/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(project_id: str, key: str, store: ScopedStore = Depends(get_store)):
    raise_for_write(store.delete(key, project_id), project_id, key, store)
