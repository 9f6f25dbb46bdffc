"""Observable values — the unit of change notification.

An Observable can be followed in two ways:

- Watchers are plain callbacks invoked with ``(value, old_value)`` whenever
  update() runs.
- Observers are ComputedObservables derived from this value. After the
  watchers ran, every observer re-evaluates and pushes its own result through
  the same notification logic.

    observable = Observable(20)
    observable.watch(lambda value, old: print(value, old))
    observable.update(15)  # prints: 15 20
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from stashfx._tracking import track

if TYPE_CHECKING:
    from stashfx.computed import ComputedObservable

T = TypeVar("T")

WatcherFunction = Callable[[T, T], None]

logger = logging.getLogger("stashfx.observable")


class Observable(Generic[T]):
    """A value with a watcher list and a list of dependent computeds."""

    __slots__ = ("value", "_watchers", "_observers", "__weakref__")

    def __init__(self, value: T | None = None) -> None:
        self.value = value
        # dicts used as ordered sets: idempotent add, insertion order kept
        self._watchers: dict[WatcherFunction, None] = {}
        self._observers: dict[ComputedObservable, None] = {}

    def get(self) -> T | None:
        """Read the value. If a computed is evaluating, it becomes a dependent."""
        track(self)
        return self.value

    def update(self, value: T | None) -> None:
        """Store a new value and notify watchers, then dependent computeds.

        A watcher that raises is logged and skipped; the others still run.
        """
        old_value = self.value
        self.value = value

        for watcher in list(self._watchers):
            try:
                watcher(value, old_value)
            except Exception:
                logger.exception("Watcher %r failed to execute", watcher)

        for observer in list(self._observers):
            observer.refresh()

    def observe(self, computed: ComputedObservable) -> None:
        """Recompute ``computed`` whenever this value changes."""
        self._observers[computed] = None

    def unobserve(self, computed: ComputedObservable) -> None:
        self._observers.pop(computed, None)

    def watch(self, watcher: WatcherFunction) -> None:
        """Call ``watcher(value, old_value)`` whenever this value changes."""
        self._watchers[watcher] = None

    def unwatch(self, watcher: WatcherFunction) -> None:
        self._watchers.pop(watcher, None)

    @property
    def watchers(self) -> tuple[WatcherFunction, ...]:
        return tuple(self._watchers)

    @property
    def observers(self) -> tuple[ComputedObservable, ...]:
        return tuple(self._observers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"
