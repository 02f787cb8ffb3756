"""Scoped Store: project-multiplexed JSON key-value operations over one backend.

Invariants:
    - No storage failure crosses the public boundary: reads degrade to the
      caller's default, writes/removes report False (or a non-ok WriteResult)
    - project_id=None means "use the ambient current project"; "" means unscoped
    - get(k, d, p) returns exactly what set(k, v, p) stored for any JSON value v
    - clear_project and seed_project never touch the unscoped namespace (empty id is a no-op)
    - read(key, default, project_id) takes arguments in the same order as get()
    - The current project id is stored raw (not JSON) under the reserved global key;
      only non-empty ids are persisted

Design Decisions:
    - read()/write() return result types; get()/set() are thin wrappers keeping the
      "default or bool" contract most callers want
    - Quota failures notify the UI error channel with current usage; no retry and
      no automatic eviction
    - Every call is independent: no caching of values, no cross-key transaction
"""

import json
import logging
from typing import Any

from fieldreport.core.default_states import Clock, build_complete_defaults
from fieldreport.core.domain_types import ReadOutcome, WriteOutcome
from fieldreport.core.errors import StorageBackendError, StorageQuotaExceededError
from fieldreport.core.key_codec import KeyCodec
from fieldreport.core.repository_protocols import KeyValueBackend, Notifier
from fieldreport.core.store_result import ReadResult, StorageUsage, WriteResult

logger = logging.getLogger(__name__)

CURRENT_PROJECT_KEY = "currentProjectId"

# Backend failures the store absorbs. Anything else is a programming error.
_BACKEND_ERRORS = (StorageBackendError, OSError)


class ScopedStore:
    """get/set/remove/list/export/import/clear over a KeyValueBackend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        codec: KeyCodec | None = None,
        project_id: str | None = None,
        notifier: Notifier | None = None,
        current_project_key: str = CURRENT_PROJECT_KEY,
    ):
        self._backend = backend
        self.codec = codec or KeyCodec()
        self._notifier = notifier
        self.current_project_key = current_project_key
        self._project_id = (
            project_id if project_id is not None else self.load_current_project_id()
        )

    # ─── Current project ─────────────────────────────────────────

    @property
    def current_project_id(self) -> str:
        return self._project_id

    @property
    def quota_bytes(self) -> int | None:
        """Backend capacity, when the backend declares one."""
        return getattr(self._backend, "quota_bytes", None)

    def load_current_project_id(self) -> str:
        """Read the persisted current project id ("" when unset or unreadable)."""
        try:
            return self._backend.get_item(self.current_project_key) or ""
        except _BACKEND_ERRORS as e:
            logger.error(f"Error loading current project id: {e}")
            return ""

    def set_current_project_id(self, project_id: str) -> bool:
        """Switch the ambient project. Empty ids change memory only."""
        self._project_id = project_id or ""
        if not project_id:
            return True
        try:
            self._backend.set_item(self.current_project_key, project_id)
            return True
        except StorageQuotaExceededError as e:
            self._handle_quota_exceeded(e)
            return False
        except _BACKEND_ERRORS as e:
            logger.error(
                f"Error saving current project id: {e}",
                extra={"project_id": project_id},
            )
            return False

    def _resolve(self, project_id: str | None) -> str:
        return self._project_id if project_id is None else project_id

    # ─── Result-typed primitives ─────────────────────────────────

    def read(self, key: str, default: Any = None, project_id: str | None = None) -> ReadResult:
        """Read one entry, reporting hit / miss / corrupt / failed."""
        pid = self._resolve(project_id)
        physical = self.codec.derive(key, pid)
        log_extra = {"project_id": pid, "logical_key": key, "physical_key": physical}
        try:
            raw = self._backend.get_item(physical)
        except _BACKEND_ERRORS as e:
            logger.error(f"Error loading from storage: {e}", extra=log_extra)
            return ReadResult(default, ReadOutcome.FAILED, physical, str(e))
        if not raw:
            return ReadResult(default, ReadOutcome.MISS, physical)
        try:
            value = json.loads(raw)
        except ValueError as e:
            logger.error(f"Error loading from storage: {e}", extra=log_extra)
            return ReadResult(default, ReadOutcome.CORRUPT, physical, str(e))
        return ReadResult(value, ReadOutcome.HIT, physical)

    def write(self, key: str, value: Any, project_id: str | None = None) -> WriteResult:
        """Encode and write one entry, reporting the outcome."""
        pid = self._resolve(project_id)
        physical = self.codec.derive(key, pid)
        log_extra = {"project_id": pid, "logical_key": key, "physical_key": physical}
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Error saving to storage: {e}", extra=log_extra)
            return WriteResult(WriteOutcome.UNSERIALIZABLE, physical, str(e))
        try:
            self._backend.set_item(physical, encoded)
        except StorageQuotaExceededError as e:
            logger.error(
                f"Error saving to storage: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            self._handle_quota_exceeded(e)
            return WriteResult(WriteOutcome.QUOTA_EXCEEDED, physical, e.message)
        except _BACKEND_ERRORS as e:
            logger.error(f"Error saving to storage: {e}", extra=log_extra)
            return WriteResult(WriteOutcome.FAILED, physical, str(e))
        return WriteResult(WriteOutcome.WRITTEN, physical)

    def delete(self, key: str, project_id: str | None = None) -> WriteResult:
        pid = self._resolve(project_id)
        physical = self.codec.derive(key, pid)
        try:
            self._backend.remove_item(physical)
        except _BACKEND_ERRORS as e:
            logger.error(
                f"Error removing from storage: {e}",
                extra={"project_id": pid, "logical_key": key, "physical_key": physical},
            )
            return WriteResult(WriteOutcome.FAILED, physical, str(e))
        return WriteResult(WriteOutcome.REMOVED, physical)

    # ─── Scoped contract ─────────────────────────────────────────

    def get(self, key: str, default: Any = None, project_id: str | None = None) -> Any:
        return self.read(key, default, project_id).value

    def set(self, key: str, value: Any, project_id: str | None = None) -> bool:
        return self.write(key, value, project_id).ok

    def remove(self, key: str, project_id: str | None = None) -> bool:
        return self.delete(key, project_id).ok

    def get_global(self, key: str, default: Any = None) -> Any:
        """Unscoped read: the logical key is the physical key."""
        return self.read(key, default, "").value

    def set_global(self, key: str, value: Any) -> bool:
        """Unscoped write for cross-project settings."""
        return self.write(key, value, "").ok

    def remove_global(self, key: str) -> bool:
        return self.delete(key, "").ok

    def list_keys_for_project(self, project_id: str | None = None) -> list[str]:
        """Logical keys under the project, in backend enumeration order."""
        pid = self._resolve(project_id)
        if not pid:
            return []
        try:
            physical_keys = self._backend.keys()
        except _BACKEND_ERRORS as e:
            logger.error(f"Error listing storage keys: {e}", extra={"project_id": pid})
            return []
        return [
            self.codec.strip(k, pid)
            for k in physical_keys if self.codec.belongs_to(k, pid)
        ]

    def export_project(self, project_id: str | None = None) -> dict[str, Any]:
        """Snapshot of every logical key/value of the project."""
        pid = self._resolve(project_id)
        return {
            key: self.get(key, None, pid)
            for key in self.list_keys_for_project(pid)
        }

    def import_project(self, data: dict[str, Any], project_id: str | None = None) -> dict[str, bool]:
        """Write every entry; last write wins, failures leave a mixed state."""
        pid = self._resolve(project_id)
        results = {key: self.set(key, value, pid) for key, value in data.items()}
        failed = [k for k, ok in results.items() if not ok]
        if failed:
            logger.warning(
                f"Project import partially failed: {len(failed)}/{len(results)} keys",
                extra={"project_id": pid},
            )
        return results

    def clear_project(self, project_id: str | None = None) -> int:
        """Remove every key under the project's prefix. Returns keys removed."""
        pid = self._resolve(project_id)
        if not pid:
            logger.warning("Refusing to clear project data without a project id")
            return 0
        removed = sum(
            1 for key in self.list_keys_for_project(pid) if self.remove(key, pid)
        )
        logger.info(f"Cleared {removed} keys", extra={"project_id": pid})
        return removed

    # ─── Project lifecycle helpers ───────────────────────────────

    def seed_project(self, project_id: str | None = None, clock: Clock | None = None) -> list[str]:
        """Write the default aggregate's keys that the project does not have yet."""
        pid = self._resolve(project_id)
        if not pid:
            logger.warning("Refusing to seed project data without a project id")
            return []
        written = []
        for key, value in build_complete_defaults(clock).items():
            if self.read(key, project_id=pid).found:
                continue
            if self.set(key, value, pid):
                written.append(key)
        return written

    def usage(self) -> StorageUsage:
        """Footprint of the whole area, all projects and global keys."""
        try:
            total = sum(len(k) + len(v) for k, v in self._backend.items() if k and v)
        except _BACKEND_ERRORS as e:
            logger.error(f"Error measuring storage usage: {e}")
            total = 0
        return StorageUsage(total)

    def _handle_quota_exceeded(self, error: StorageQuotaExceededError) -> None:
        usage = self.usage()
        limit_mb = error.quota_bytes / (1024 * 1024)
        logger.warning(
            f"Storage usage: {usage.used_mb:.2f}MB / ~{limit_mb:.0f}MB limit",
            extra={"used_bytes": usage.used_bytes, "error_code": error.code},
        )
        if self._notifier:
            self._notifier(error.context.user_message or error.message)
