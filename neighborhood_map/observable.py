"""Push-based observable cells used to derive the visible location set."""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Generic, Iterable, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[Any], None]


class Observable(Generic[T]):
    """A value cell that notifies subscribers synchronously on every set.

    Sets issued while subscribers are still being notified are queued and
    applied in order once the current round finishes, so notification
    rounds never overlap.
    """

    def __init__(self, value: T, name: str = "") -> None:
        self._value = value
        self.name = name
        self._listeners: List[Listener] = []
        self._pending: Deque[T] = deque()
        self._notifying = False

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, value: T) -> None:
        self._pending.append(value)
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._pending:
                self._value = self._pending.popleft()
                for listener in list(self._listeners):
                    listener(self._value)
        finally:
            self._notifying = False
            self._pending.clear()


class Computed(Observable[T]):
    """A derived cell recomputed whenever any dependency changes."""

    def __init__(
        self,
        compute: Callable[[], T],
        dependencies: Iterable[Observable[Any]],
        name: str = "",
    ) -> None:
        super().__init__(compute(), name=name)
        self._compute = compute
        self._unsubscribers = [dep.subscribe(self._on_dependency) for dep in dependencies]

    def _on_dependency(self, _value: Any) -> None:
        self.recompute()

    def recompute(self) -> None:
        logger.debug("Recomputing %s", self.name or "computed value")
        self.set(self._compute())

    def dispose(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
