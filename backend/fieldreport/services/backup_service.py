"""Backup Service: whole-area export and replace/merge restore.

Invariants:
    - export_all() covers every physical key; values that fail to decode are
      exported as their raw text
    - import_replace() clears the area first, then writes every backup key
    - import_merge() never deletes; list values merge by id, other values replace
    - Per-key failures are collected in ImportResult.errors, never raised;
      success is True only when errors is empty

Design Decisions:
    - Operates on the backend directly (physical keys): a backup restores every
      project and the global keys in one pass
    - Pure envelope/merge/stats rules live in core/backup.py; this module only
      sequences backend IO around them
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fieldreport.config import Settings, get_settings
from fieldreport.core.backup import (
    backup_filename, backup_stats, build_backup, encode_backup_value,
    merge_value, parse_backup_text, validate_backup,
)
from fieldreport.core.default_states import Clock, SystemClock, format_day
from fieldreport.core.errors import FieldReportError
from fieldreport.core.repository_protocols import KeyValueBackend

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of one restore run."""
    success: bool = False
    keys_imported: int = 0
    keys_updated: int = 0
    keys_skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "keys_imported": self.keys_imported,
            "keys_updated": self.keys_updated,
            "keys_skipped": self.keys_skipped,
            "errors": list(self.errors),
        }


class BackupService:
    """Full backup and restore of a KeyValueBackend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        self._backend = backend
        self._settings = settings or get_settings()
        self._clock = clock or SystemClock()

    def export_all(self, now: datetime | None = None) -> dict:
        """Backup envelope of every entry in the area."""
        entries = {}
        for key, raw in self._backend.items():
            if not raw:
                continue
            try:
                entries[key] = json.loads(raw)
            except ValueError as e:
                logger.warning(f"Could not parse key: {key}: {e}", extra={"physical_key": key})
                entries[key] = raw
        return build_backup(
            entries,
            now or datetime.now(timezone.utc),
            self._settings.backup_app_name,
            self._settings.backup_version,
        )

    def export_json(self, now: datetime | None = None) -> str:
        return json.dumps(self.export_all(now), indent=2)

    def filename(self) -> str:
        return backup_filename(format_day(self._clock.today()))

    def parse_backup(self, text: str) -> dict:
        return parse_backup_text(text)

    def stats(self, backup: dict) -> dict:
        return backup_stats(validate_backup(backup))

    def import_replace(self, backup: dict) -> ImportResult:
        """Clear the area, then write every key from the backup."""
        validate_backup(backup)
        result = ImportResult()
        try:
            self._backend.clear()
        except (FieldReportError, OSError) as e:
            result.errors.append(f"Import failed: {e}")
            return result

        for key, value in backup["data"].items():
            try:
                self._backend.set_item(key, encode_backup_value(value))
                result.keys_imported += 1
            except (FieldReportError, OSError, TypeError, ValueError) as e:
                result.errors.append(f'Failed to import key "{key}": {e}')

        result.success = not result.errors
        logger.info(
            f"Backup restored (replace): {result.keys_imported} keys, "
            f"{len(result.errors)} errors",
        )
        return result

    def import_merge(self, backup: dict) -> ImportResult:
        """Merge the backup into the existing area."""
        validate_backup(backup)
        result = ImportResult()
        for key, incoming in backup["data"].items():
            try:
                existing_raw = self._backend.get_item(key)
                if not existing_raw:
                    self._backend.set_item(key, encode_backup_value(incoming))
                    result.keys_imported += 1
                    continue
                try:
                    existing = json.loads(existing_raw)
                except ValueError:
                    # Unreadable existing entry: replace it
                    self._backend.set_item(key, encode_backup_value(incoming))
                    result.keys_updated += 1
                    continue
                merged = merge_value(existing, incoming)
                self._backend.set_item(
                    key,
                    json.dumps(merged) if merged is not incoming else encode_backup_value(incoming),
                )
                result.keys_updated += 1
            except (FieldReportError, OSError, TypeError, ValueError) as e:
                result.errors.append(f'Failed to merge key "{key}": {e}')
                result.keys_skipped += 1

        result.success = not result.errors
        logger.info(
            f"Backup restored (merge): {result.keys_imported} new, "
            f"{result.keys_updated} updated, {result.keys_skipped} skipped",
        )
        return result
