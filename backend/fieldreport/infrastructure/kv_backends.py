"""Key-Value Backends: implementations of the KeyValueBackend protocol.

Invariants:
    - Keys and values are opaque str; backends never parse values
    - A write that would push usage (len(key) + len(value), summed) past quota
      raises StorageQuotaExceededError and leaves the area unchanged
    - quota_bytes of 0 / None means unlimited
    - Each SqlBackend call runs in its own session and commits on its own
      (single-key atomicity, no cross-key transaction)

Design Decisions:
    - InMemoryBackend enumerates in insertion order; SqlBackend in key order
      (enumeration order is not part of the store contract)
    - SqlBackend computes usage with one aggregate query before each write
"""

import logging
from typing import Iterator

from sqlalchemy import delete, func, select

from fieldreport.core.errors import StorageQuotaExceededError
from fieldreport.infrastructure.database import DatabaseSessionManager
from fieldreport.models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)


def entry_size(key: str, value: str) -> int:
    return len(key) + len(value)


def check_quota(
    used_bytes: int, replaced_bytes: int, new_bytes: int, quota_bytes: int | None,
) -> None:
    """Raise if replacing replaced_bytes with new_bytes would exceed quota."""
    if not quota_bytes:
        return
    if used_bytes - replaced_bytes + new_bytes > quota_bytes:
        raise StorageQuotaExceededError(used_bytes, quota_bytes)


class InMemoryBackend:
    """Dict-backed area. Ephemeral; used by tests and offline tooling."""

    def __init__(self, quota_bytes: int | None = None):
        self._data: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        old = self._data.get(key)
        replaced = entry_size(key, old) if old is not None else 0
        check_quota(self.usage_bytes(), replaced, entry_size(key, value), self.quota_bytes)
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._data.items()))

    def clear(self) -> None:
        self._data.clear()

    def usage_bytes(self) -> int:
        return sum(entry_size(k, v) for k, v in self._data.items())

    def __len__(self) -> int:
        return len(self._data)


class SqlBackend:
    """storage_entries table behind a DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager, quota_bytes: int | None = None):
        self._manager = manager
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        with self._manager.session() as db:
            row = db.get(StorageEntry, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._manager.session() as db:
            row = db.get(StorageEntry, key)
            if self.quota_bytes:
                replaced = entry_size(key, row.value) if row else 0
                check_quota(
                    self._usage(db), replaced, entry_size(key, value), self.quota_bytes,
                )
            if row:
                row.value = value
            else:
                db.add(StorageEntry(key=key, value=value))
            db.commit()

    def remove_item(self, key: str) -> None:
        with self._manager.session() as db:
            db.execute(delete(StorageEntry).where(StorageEntry.key == key))
            db.commit()

    def keys(self) -> list[str]:
        with self._manager.session() as db:
            return list(db.scalars(
                select(StorageEntry.key).order_by(StorageEntry.key),
            ))

    def items(self) -> Iterator[tuple[str, str]]:
        with self._manager.session() as db:
            rows = db.execute(
                select(StorageEntry.key, StorageEntry.value).order_by(StorageEntry.key),
            ).all()
        return iter([(k, v) for k, v in rows])

    def clear(self) -> None:
        with self._manager.session() as db:
            result = db.execute(delete(StorageEntry))
            db.commit()
            logger.warning(f"Storage area cleared ({result.rowcount} entries)")

    def usage_bytes(self) -> int:
        with self._manager.session() as db:
            return self._usage(db)

    @staticmethod
    def _usage(db) -> int:
        total = db.scalar(select(func.coalesce(
            func.sum(func.length(StorageEntry.key) + func.length(StorageEntry.value)), 0,
        )))
        return int(total or 0)
