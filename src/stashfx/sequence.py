"""Sequence interception — observed lists.

A ReactiveList keeps one ReactiveCell per index, so ``lst[i] = value`` is an
ordinary field write and ``lst[i]`` is a tracked read. Structural operations
(append, extend, insert, pop, remove, clear, sort, reverse, ``del`` and slice
assignment) are wrapped: they run the native list operation, make every
element they introduced reactive, and then update the list's attached
Observable once with the list itself. That structural notification always
fires, even when the contents end up equal.

The attached Observable is the one of the field or element holding the list,
so a computed that read ``self.items`` recomputes when ``items`` grows.

Cells are bound to positions, not to elements: after a structural change,
each index whose value changed notifies its own watchers.
"""

from __future__ import annotations

import functools
from collections.abc import MutableSequence
from typing import Any, Callable, Iterable, Iterator

from stashfx._tracking import track
from stashfx.errors import MutationDisabledError
from stashfx.mode import QueueItem, ReactivityMode, enqueue, get_mode
from stashfx.observable import Observable
from stashfx.observer import ReactiveCell, make_reactive


def _structural(operation: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a native ``list`` operation for use on a ReactiveList."""

    @functools.wraps(operation)
    def mutator(self: ReactiveList, *args: Any, **kwargs: Any) -> Any:
        mode = get_mode()
        if mode is ReactivityMode.DISABLED:
            raise MutationDisabledError()
        if mode is ReactivityMode.LAZY:
            enqueue(QueueItem(mutator, args, kwargs, self))
            return None

        values = [cell.observable.value for cell in self._cells]
        result = operation(values, *args, **kwargs)
        self._sync(values)
        if self._observable is not None:
            self._observable.update(self)
        return result

    mutator.__qualname__ = f"ReactiveList.{operation.__name__}"
    return mutator


class ReactiveList(MutableSequence):
    """A list whose elements and structure are observed."""

    __slots__ = ("_cells", "_observable")

    def __init__(self, items: Iterable[Any] = (), observable: Observable | None = None) -> None:
        self._observable = observable
        self._cells = [self._new_cell(value) for value in items]

    @property
    def observable(self) -> Observable | None:
        """The Observable notified on structural change."""
        return self._observable

    def _attach(self, observable: Observable | None) -> None:
        if self._observable is None:
            self._observable = observable

    @staticmethod
    def _new_cell(value: Any) -> ReactiveCell:
        observable = Observable()
        observable.value = make_reactive(value, observable)
        return ReactiveCell(observable)

    def _track(self) -> None:
        if self._observable is not None:
            track(self._observable)

    def _sync(self, values: list) -> None:
        """Write ``values`` back into the cells, growing or shrinking them.

        Positions compare by identity: an element moved onto a position that
        held an equal but distinct element still replaces it.
        """
        cells = self._cells
        for cell, value in zip(cells, values):
            observable = cell.observable
            if observable.value is not value:
                observable.update(make_reactive(value, observable))
        if len(values) > len(cells):
            cells.extend(self._new_cell(value) for value in values[len(cells):])
        else:
            del cells[len(values):]

    # --- Read operations (track) ---

    def __getitem__(self, index):
        if isinstance(index, slice):
            self._track()
            return [cell.get() for cell in self._cells[index]]
        return self._cells[index].get()

    def __len__(self) -> int:
        self._track()
        return len(self._cells)

    def __iter__(self) -> Iterator[Any]:
        self._track()
        for cell in list(self._cells):
            yield cell.get()

    # --- Write operations (notify) ---

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._splice(index, value)
        else:
            self._cells[index].set(value)

    append = _structural(list.append)
    extend = _structural(list.extend)
    insert = _structural(list.insert)
    pop = _structural(list.pop)
    remove = _structural(list.remove)
    clear = _structural(list.clear)
    sort = _structural(list.sort)
    reverse = _structural(list.reverse)
    __delitem__ = _structural(list.__delitem__)
    _splice = _structural(list.__setitem__)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (ReactiveList, list)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"ReactiveList({list(self)!r})"
