"""Watchers on observed data, addressed by dot-delimited property paths.

    state = observe({"price": 43, "nested": {"qty": 10}})

    def on_qty(value, old_value):
        print(value, old_value)

    add_watcher(state, "nested.qty", on_qty)
    state.nested.qty = 12       # prints: 12 10
    remove_watcher(state, "nested.qty", on_qty)

Numeric segments address list indices: ``"items.0.name"``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, TypeVar

from stashfx.errors import NotObservableError, PathNotFoundError
from stashfx.observable import WatcherFunction
from stashfx.observer import ReactiveObject, raw_observable

R = TypeVar("R")


def _owns(container: Any, segment: str) -> bool:
    """Does ``container`` literally own a field named ``segment``?"""
    if isinstance(container, (ReactiveObject, Mapping)):
        return segment in container
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        return segment.isdigit() and int(segment) < len(container)
    return segment in getattr(container, "__dict__", {})


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, (ReactiveObject, Mapping)):
        return container[segment]
    if isinstance(container, Sequence):
        return container[int(segment)]
    return getattr(container, segment)


def resolve_path(root: Any, path: str, callback: Callable[[Any, str], R]) -> R:
    """Walk ``path`` from ``root`` and call ``callback(parent, last_segment)``.

    Raises PathNotFoundError if any segment is missing.
    """
    segments = path.split(".")
    container = root
    for segment in segments[:-1]:
        if not _owns(container, segment):
            raise PathNotFoundError(path)
        container = _child(container, segment)

    last = segments[-1]
    if not _owns(container, last):
        raise PathNotFoundError(path)
    return callback(container, last)


def _modify_watchers(root: Any, path: str, watcher: WatcherFunction, operation: str) -> None:
    def _apply(container: Any, key: str) -> None:
        observable = raw_observable(container, key)
        if observable is None:
            raise NotObservableError(f"Property {path!r} is not observable")
        if operation == "add":
            observable.watch(watcher)
        else:
            observable.unwatch(watcher)

    resolve_path(root, path, _apply)


def add_watcher(root: Any, path: str, watcher: WatcherFunction) -> WatcherFunction:
    """Call ``watcher(value, old_value)`` whenever the field at ``path`` changes.

    Returns ``watcher`` so it can be kept for remove_watcher().
    """
    _modify_watchers(root, path, watcher, "add")
    return watcher


def remove_watcher(root: Any, path: str, watcher: WatcherFunction) -> None:
    """Stop calling ``watcher`` for changes of the field at ``path``."""
    _modify_watchers(root, path, watcher, "remove")
