"""Core Layer: pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic; wall-clock time enters only through Clock

Design Decisions:
    - Functional core (codec, defaults, backup rules) separated from the imperative
      shell that talks to the storage backend
"""
