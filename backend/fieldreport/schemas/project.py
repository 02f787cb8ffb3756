"""Project Schemas: Pydantic models for project-scoped storage endpoints.

Invariants:
    - CurrentProjectUpdate.project_id may be empty (switch to unscoped, not persisted)
    - Import payloads are flat {logicalKey: JSON value} mappings
    - Backup envelopes require a non-empty version and a data mapping

Design Decisions:
    - Any for entry values: the store is schema-agnostic; aggregate shape lives in
      core/default_states.py
    - Backup field names keep the on-disk camelCase (exportDate, appName)
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class CurrentProjectUpdate(BaseModel):
    """Switch the ambient project."""
    project_id: str = Field("", max_length=256)

    @field_validator("project_id")
    @classmethod
    def strip_project_id(cls, v: str) -> str:
        return v.strip()


class CurrentProjectResponse(BaseModel):
    project_id: str


class EntryWrite(BaseModel):
    """Body of PUT /projects/{pid}/entries/{key}."""
    value: Any = None


class EntryResponse(BaseModel):
    project_id: str
    key: str
    value: Any = None


class ProjectImportRequest(BaseModel):
    """Flat logical-key mapping, as produced by the export endpoint."""
    data: dict[str, Any]


class ProjectImportResponse(BaseModel):
    project_id: str
    success: bool
    results: dict[str, bool]


class BackupEnvelope(BaseModel):
    """Full-area backup file."""
    version: str = Field(min_length=1)
    exportDate: str | None = None
    appName: str | None = None
    data: dict[str, Any]


class ImportResultResponse(BaseModel):
    success: bool
    keys_imported: int
    keys_updated: int
    keys_skipped: int
    errors: list[str]
