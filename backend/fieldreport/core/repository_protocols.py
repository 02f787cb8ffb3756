"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Backend IO is accessed through KeyValueBackend only
    - Implementations provided by infrastructure/kv_backends.py via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Synchronous methods: every backend call completes or fails immediately
      (no awaited boundary inside the store)
    - Backends raise StorageQuotaExceededError / StorageBackendError; the
      ScopedStore boundary is the only place they are caught
"""

from typing import Iterator, Protocol


class KeyValueBackend(Protocol):
    """String-keyed, string-valued persistent area with finite capacity."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...
    def items(self) -> Iterator[tuple[str, str]]: ...
    def clear(self) -> None: ...


class Notifier(Protocol):
    """UI error channel (toast / alert) for surfacing store failures."""

    def __call__(self, message: str) -> None: ...
