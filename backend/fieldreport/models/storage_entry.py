"""StorageEntry ORM: one physical key and its JSON-encoded value.

Invariants:
    - key is the physical key (project prefix already applied), primary key
    - value is the encoded text exactly as written; the table never parses it
    - updated_at refreshed on every write (last writer wins, no versioning)

Design Decisions:
    - Text column, not JSON: corrupt / non-JSON text must round-trip unchanged so
      the store can report it as corrupt instead of the driver rejecting it
    - No project_id column: scoping lives in the key, as in the browser area
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from fieldreport.db.base import Base


class StorageEntry(Base):
    """Single key-value row of the shared storage area."""
    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
