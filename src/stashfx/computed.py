"""Computed observables — derived values with automatic dependency tracking.

A ComputedObservable wraps a zero-argument function. Every evaluation runs
the function with the computed installed as the evaluation context, so each
Observable it reads registers it as an observer. When one of those changes,
the computed re-evaluates and notifies its own watchers and observers.

Dependencies are discovered, never declared: only the branches that actually
ran on the latest evaluation are tracked.

Computed functions must be pure. They run with reactivity DISABLED, so any
write to observed data inside one raises MutationDisabledError, which is
logged like any other evaluation failure.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from stashfx._tracking import evaluating
from stashfx.mode import ReactivityMode, reactivity
from stashfx.observable import Observable

T = TypeVar("T")

logger = logging.getLogger("stashfx.computed")

_FAILED = object()


class ComputedObservable(Observable[T]):
    """An Observable whose value is produced by a tracked function."""

    __slots__ = ("_fn", "_dependencies", "_refreshing")

    def __init__(self, fn: Callable[[], T]) -> None:
        super().__init__(None)
        self._fn = fn
        self._dependencies: dict[Observable, None] = {}
        self._refreshing = False
        self.value = self.evaluate()

    @property
    def dependencies(self) -> tuple[Observable, ...]:
        """Observables read during the most recent evaluation."""
        return tuple(self._dependencies)

    def evaluate(self) -> T | None:
        """Run the function and return its result, or None if it raised."""
        result = self._run()
        return None if result is _FAILED else result

    def refresh(self) -> None:
        """Re-evaluate and push the result through update().

        A failed evaluation keeps the current value and notifies nobody.
        """
        if self._refreshing:
            logger.warning("Skipping re-entrant refresh of %r; its update feeds back into itself", self)
            return
        self._refreshing = True
        try:
            result = self._run()
            if result is not _FAILED:
                self.update(result)
        finally:
            self._refreshing = False

    def _run(self):
        for dependency in list(self._dependencies):
            dependency.unobserve(self)
        self._dependencies.clear()

        try:
            with evaluating(self), reactivity(ReactivityMode.DISABLED):
                return self._fn()
        except Exception:
            logger.exception("Computed function %s failed to evaluate", _name(self._fn))
            return _FAILED

    def __repr__(self) -> str:
        return f"ComputedObservable({_name(self._fn)}, {self.value!r})"


def _name(fn) -> str:
    # computed fields are partials bound to their object
    fn = getattr(fn, "func", fn)
    return getattr(fn, "__qualname__", None) or type(fn).__qualname__


def computed(fn: Callable[[], T]) -> ComputedObservable[T]:
    """Decorator/factory to create a ComputedObservable from a function.

    Usage:
        price = Observable(10)

        @computed
        def doubled():
            return price.get() * 2

        doubled.value  # 20
        price.update(5)
        doubled.value  # 10
    """
    return ComputedObservable(fn)
