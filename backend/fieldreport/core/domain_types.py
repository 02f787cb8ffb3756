"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - ProjectId, LogicalKey, PhysicalKey wrap str; never mix them in store logic
    - An empty ProjectId means "unscoped" (global namespace)
    - All valid states encoded as Enums; no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProjectId = NewType("ProjectId", str)
LogicalKey = NewType("LogicalKey", str)
PhysicalKey = NewType("PhysicalKey", str)


# ─── Enums ───────────────────────────────────────────────────────

class AggregateKey(str, Enum):
    """Logical keys of the per-project domain aggregate."""
    REPORT_DATA = "reportData"
    EQUIPMENT = "equipment"
    WORK_DAYS = "workDays"
    BORINGS = "borings"
    SUPPLIES_DATA = "suppliesData"


class KeyScheme(str, Enum):
    """How a project id is joined to a logical key."""
    PLAIN = "plain"      # naive "<pid>_<key>"; pids containing "_" can collide
    ESCAPED = "escaped"  # "_" and "\\" in the pid are escaped before joining


class ReadOutcome(str, Enum):
    """Result of a single scoped read."""
    HIT = "hit"
    MISS = "miss"
    CORRUPT = "corrupt"
    FAILED = "failed"


class WriteOutcome(str, Enum):
    """Result of a single scoped write or delete."""
    WRITTEN = "written"
    REMOVED = "removed"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNSERIALIZABLE = "unserializable"
    FAILED = "failed"


class ImportMode(str, Enum):
    """Full-backup restore strategies."""
    REPLACE = "replace"
    MERGE = "merge"
