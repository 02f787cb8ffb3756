"""Full Backup: envelope, validation, stats and merge rules for whole-area backups.

Invariants:
    - All functions are PURE: no IO, the caller supplies entries and "now"
    - A valid backup has a truthy "version" and a "data" mapping
    - merge_arrays keeps existing order; matched ids are shallow-merged in place,
      unmatched items are appended in incoming order
    - encode_backup_value stores str values verbatim (they were raw text on export)

Design Decisions:
    - Backups cover the physical keyspace (every project plus global keys), unlike
      ScopedStore.export_project which covers one project in logical-key form
    - Stats match on key substrings so scoped keys ("<pid>_clients") count too
"""

import json
from datetime import datetime
from typing import Any

from fieldreport.core.errors import BackupFormatError

# Key fragment -> stats bucket. A key may feed several buckets.
_STATS_BUCKETS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("bossReports", "reportData"), "reports"),
    (("clients",), "clients"),
    (("invoices",), "invoices"),
    (("expenses",), "expenses"),
    (("rateSheets",), "rateSheets"),
    (("projectsList",), "projects"),
)


def build_backup(
    entries: dict[str, Any], now: datetime, app_name: str, version: str,
) -> dict:
    """Wrap physical-key entries in the backup envelope."""
    return {
        "version": version,
        "exportDate": now.isoformat(),
        "appName": app_name,
        "data": dict(entries),
    }


def validate_backup(payload: Any) -> dict:
    """Return payload if it is a usable backup, else raise BackupFormatError."""
    if not isinstance(payload, dict):
        raise BackupFormatError("Invalid backup file format")
    if not payload.get("version") or "data" not in payload:
        raise BackupFormatError("Invalid backup file format")
    if not isinstance(payload["data"], dict):
        raise BackupFormatError("Backup data must be an object")
    return payload


def parse_backup_text(text: str) -> dict:
    """Decode and validate a backup file's contents."""
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise BackupFormatError(f"Failed to parse backup file: {e}")
    return validate_backup(payload)


def backup_stats(backup: dict) -> dict:
    """Count keys and list lengths per record family."""
    data = backup.get("data", {})
    stats = {
        "exportDate": backup.get("exportDate"),
        "totalKeys": len(data),
        "reports": 0,
        "clients": 0,
        "invoices": 0,
        "expenses": 0,
        "rateSheets": 0,
        "projects": 0,
    }
    for key, value in data.items():
        if not isinstance(value, list):
            continue
        for fragments, bucket in _STATS_BUCKETS:
            if any(f in key for f in fragments):
                stats[bucket] += len(value)
    return stats


def encode_backup_value(value: Any) -> str:
    """Raw-text values go back verbatim; everything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def merge_arrays(existing: list, incoming: list) -> list:
    """Merge two record lists by "id"."""
    merged = list(existing)
    existing_ids = {
        item["id"] for item in existing
        if isinstance(item, dict) and item.get("id") is not None
    }
    for item in incoming:
        item_id = item.get("id") if isinstance(item, dict) else None
        if item_id and item_id in existing_ids:
            for index, current in enumerate(merged):
                if isinstance(current, dict) and current.get("id") == item_id:
                    merged[index] = {**current, **item}
                    break
        else:
            merged.append(item)
    return merged


def merge_value(existing: Any, incoming: Any) -> Any:
    """Arrays merge by id; any other pairing is replaced by incoming."""
    if isinstance(existing, list) and isinstance(incoming, list):
        return merge_arrays(existing, incoming)
    return incoming


def backup_filename(day: str) -> str:
    """Download name for a backup taken on day (YYYY-MM-DD)."""
    return f"driller-backup-{day}.json"
