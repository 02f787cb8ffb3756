"""Store Results: explicit outcome types for scoped reads and writes.

Invariants:
    - ReadResult.value is the decoded entry on HIT, else the caller's default
    - WriteResult.ok is True only for WRITTEN / REMOVED
    - Results are immutable values; they never carry live backend handles

Design Decisions:
    - get()/set() keep the simple "default or bool" contract; read()/write()
      expose the outcome so callers can tell a miss from a corrupt entry
"""

from dataclasses import dataclass
from typing import Any

from fieldreport.core.domain_types import ReadOutcome, WriteOutcome


@dataclass(frozen=True)
class ReadResult:
    """Outcome of one scoped read."""
    value: Any
    outcome: ReadOutcome
    physical_key: str
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.outcome == ReadOutcome.HIT

    @property
    def used_default(self) -> bool:
        return self.outcome != ReadOutcome.HIT


@dataclass(frozen=True)
class WriteResult:
    """Outcome of one scoped write or delete."""
    outcome: WriteOutcome
    physical_key: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (WriteOutcome.WRITTEN, WriteOutcome.REMOVED)


@dataclass(frozen=True)
class StorageUsage:
    """Approximate footprint of the whole storage area (keys + values)."""
    used_bytes: int

    @property
    def used_kb(self) -> float:
        return self.used_bytes / 1024

    @property
    def used_mb(self) -> float:
        return self.used_bytes / (1024 * 1024)

    def to_dict(self) -> dict:
        return {
            "used_bytes": self.used_bytes,
            "used_kb": self.used_kb,
            "used_mb": self.used_mb,
        }
