"""Reactive Binding: an in-memory value kept in sync with one ScopedStore entry.

Invariants:
    - Hydration happens exactly once, at construction (default on miss / corrupt)
    - Every change (value assignment, update(), rebind()) produces exactly one write,
      to the key/project current at the time of the change
    - A failed write never reverts the in-memory value; it is logged and exposed
      through last_write
    - After detach() no further writes happen; nothing is flushed or rolled back

Design Decisions:
    - Construction does not write: the persisted copy is only touched by changes
    - No debouncing and no batching across bindings; two bindings on one physical
      key interleave their writes in call order with no arbitration
    - Subscribers run after the write attempt, so they observe last_write
"""

import logging
from typing import Any, Callable

from fieldreport.core.store_result import WriteResult
from fieldreport.services.scoped_store import ScopedStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]

_UNCHANGED = object()


class PersistedValue:
    """UI-visible mutable cell bound to (key, project_id) in a ScopedStore."""

    def __init__(
        self,
        store: ScopedStore,
        key: str,
        default: Any = None,
        project_id: str | None = None,
    ):
        self._store = store
        self._key = key
        self._project_id = project_id
        self._value = store.get(key, default, project_id)
        self._subscribers: list[Subscriber] = []
        self._attached = True
        self.last_write: WriteResult | None = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._value = new_value
        self._changed()

    def set(self, new_value: Any) -> None:
        self.value = new_value

    def update(self, fn: Callable[[Any], Any]) -> Any:
        """Functional update: value = fn(value). Returns the new value."""
        self.value = fn(self._value)
        return self._value

    def rebind(self, key: str | None = None, project_id: Any = _UNCHANGED) -> None:
        """Point the binding at another key/project; the current value follows.

        project_id defaults to "unchanged"; pass None explicitly to fall back to
        the store's ambient project.
        """
        if key is not None:
            self._key = key
        if project_id is not _UNCHANGED:
            self._project_id = project_id
        self._changed()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Observe changes. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def detach(self) -> None:
        """Stop persisting future changes (unmount)."""
        self._attached = False
        self._subscribers.clear()

    def _changed(self) -> None:
        if self._attached:
            self.last_write = self._store.write(self._key, self._value, self._project_id)
            if not self.last_write.ok:
                logger.warning(
                    f"Binding write failed ({self.last_write.outcome.value}); "
                    "keeping in-memory value",
                    extra={"project_id": self._project_id, "logical_key": self._key},
                )
        for callback in list(self._subscribers):
            callback(self._value)

