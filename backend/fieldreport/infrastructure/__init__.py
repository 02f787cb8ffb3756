"""Infrastructure Layer: storage backends and cross-cutting concerns.

Invariants:
    - Backends raise typed storage errors (core/errors.py), never driver exceptions
    - Logging configured here, once, at startup

Design Decisions:
    - Backends implement the KeyValueBackend protocol structurally (no base class)
"""
