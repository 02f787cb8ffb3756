"""ORM Models: SQLAlchemy declarative models for the storage area.

Invariants:
    - All models inherit from Base (db/base.py)
    - StorageEntry is the only table; projects exist only as key prefixes

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from fieldreport.models.storage_entry import StorageEntry  # noqa: F401
