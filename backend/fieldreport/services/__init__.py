"""Services Layer: scoped store, reactive bindings, and full backups.

Invariants:
    - Services are the only callers of KeyValueBackend
    - No service raises storage errors to its caller

Design Decisions:
    - ScopedStore is the single entry point for project-scoped reads and writes
"""
