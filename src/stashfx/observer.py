"""Property interception — turning plain dicts into reactive objects.

observe() walks a plain dict and backs every key with a ReactiveCell: a
get/set pair bound to the key's own Observable. Reading a field records a
dependency of the evaluating computed; writing it notifies watchers and
recomputes dependents. Nested dicts and lists are made reactive first, so a
whole tree becomes observable in one call.

    state = observe({
        "price": 55,
        "quantity": 10,
        "total": lambda self: self.price * self.quantity,
    })

    state.total      # 550
    state.price = 60
    state.total      # 600

Function values become computed fields. A function taking one argument
receives the reactive object itself, so it can read sibling fields.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Iterator

from stashfx.computed import ComputedObservable
from stashfx.errors import (
    InvalidInputError,
    MutationDisabledError,
    ReadOnlyFieldError,
    SealedObjectError,
)
from stashfx.mode import QueueItem, ReactivityMode, enqueue, get_mode
from stashfx.observable import Observable

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ReactiveCell:
    """Intercepted accessor for one field or element.

    Reads go through get(), writes through set(), which dispatches on the
    current reactivity mode. A user-defined ``property`` found in the source
    data keeps working: reads defer to its getter, writes call its setter and
    then re-read the effective value through the getter.
    """

    __slots__ = ("_observable", "_accessor", "_receiver")

    def __init__(self, observable: Observable, accessor: property | None = None, receiver: Any = None) -> None:
        self._observable = observable
        self._accessor = accessor
        self._receiver = receiver

    @property
    def observable(self) -> Observable:
        return self._observable

    @property
    def computed(self) -> bool:
        return isinstance(self._observable, ComputedObservable)

    def get(self, raw: bool = False) -> Any:
        """Current value; ``raw=True`` returns the backing Observable instead."""
        if raw:
            return self._observable
        value = self._observable.get()
        if self._accessor is not None and self._accessor.fget is not None:
            return self._accessor.fget(self._receiver)
        return value

    def set(self, value: Any) -> None:
        if self.computed:
            raise ReadOnlyFieldError("Computed fields cannot be assigned to")

        mode = get_mode()
        if mode is ReactivityMode.ENABLED:
            self.write(value)
        elif mode is ReactivityMode.DISABLED:
            raise MutationDisabledError()
        else:
            enqueue(QueueItem(self.set, (value,)))

    def write(self, value: Any) -> None:
        """Apply a write unconditionally. Callers check the mode."""
        accessor = self._accessor
        if accessor is not None:
            if accessor.fset is not None:
                accessor.fset(self._receiver, value)
            if accessor.fget is not None:
                value = accessor.fget(self._receiver)

        current = self._observable.value
        if current is not value and current != value:
            self._observable.update(make_reactive(value, self._observable))

    def __repr__(self) -> str:
        return f"ReactiveCell({self._observable!r})"


class ReactiveObject:
    """A sealed, observed version of a plain dict.

    Fields are reachable both as attributes and as items. The key set is fixed
    at observation time: adding or deleting a key raises SealedObjectError.
    Iterating yields the keys, like a dict.
    """

    __slots__ = ("_cells", "_pending")

    def __init__(self, data: dict) -> None:
        cells: dict[Any, ReactiveCell | None] = dict.fromkeys(data)
        pending: dict[Any, Callable[[], Any]] = {}
        object.__setattr__(self, "_cells", cells)
        object.__setattr__(self, "_pending", pending)
        accessors = []

        for key, value in data.items():
            if isinstance(value, property):
                accessors.append((key, value))
                continue

            fn = _computed_function(value, self)
            if fn is not None:
                pending[key] = fn
                continue

            observable = Observable()
            observable.value = make_reactive(value, observable)
            cells[key] = ReactiveCell(observable)

        for key, accessor in accessors:
            initial = accessor.fget(self) if accessor.fget is not None else None
            observable = Observable()
            observable.value = make_reactive(initial, observable)
            cells[key] = ReactiveCell(observable, accessor, self)

        # computed fields last; one read by an earlier computed is installed on first read
        for key in list(pending):
            if key in pending:
                self._install(key)

    def _install(self, key: Any) -> ReactiveCell:
        fn = self._pending.pop(key)
        cell = self._cells[key] = ReactiveCell(ComputedObservable(fn))
        return cell

    def _cell(self, key: Any) -> ReactiveCell:
        cell = self._cells[key]
        if cell is None:
            if key in self._pending:
                return self._install(key)
            # a computed field reading itself, directly or through others
            raise KeyError(f"Field {key!r} is not initialized yet")
        return cell

    # --- Attribute access ---

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for field names.
        if name.startswith("__") or name in ReactiveObject.__slots__:
            raise AttributeError(name)
        try:
            cell = self._cell(name)
        except KeyError as e:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}") from e
        return cell.get()

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._cells:
            raise SealedObjectError(f"Cannot add field {name!r} to a sealed object")
        self._cell(name).set(value)

    def __delattr__(self, name: str) -> None:
        raise SealedObjectError(f"Cannot delete field {name!r} from a sealed object")

    # --- Item access ---

    def __getitem__(self, key: Any) -> Any:
        return self._cell(key).get()

    def __setitem__(self, key: Any, value: Any) -> None:
        if key not in self._cells:
            raise SealedObjectError(f"Cannot add field {key!r} to a sealed object")
        self._cell(key).set(value)

    def __delitem__(self, key: Any) -> None:
        raise SealedObjectError(f"Cannot delete field {key!r} from a sealed object")

    def __contains__(self, key: Any) -> bool:
        return key in self._cells

    def __iter__(self) -> Iterator[Any]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (ReactiveObject, Mapping)):
            if len(self) != len(other):
                return False
            return all(key in other and self[key] == other[key] for key in self._cells)
        return NotImplemented

    __hash__ = None

    def __dir__(self) -> list[str]:
        fields = [key for key in self._cells if isinstance(key, str)]
        return sorted(set(super().__dir__()) | set(fields))

    def __repr__(self) -> str:
        # cells are None while a computed field is still being installed
        fields = ", ".join(
            f"{key!r}: {cell.get()!r}" if cell is not None else f"{key!r}: <pending>"
            for key, cell in self._cells.items()
        )
        return f"ReactiveObject({{{fields}}})"


def _computed_function(value: Any, receiver: Any) -> Callable[[], Any] | None:
    """Return a zero-argument function for a computed field, or None.

    Callables (other than classes) qualify when they need no arguments, or
    exactly one positional argument, which is bound to ``receiver``.
    """
    if isinstance(value, type) or not callable(value):
        return None
    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        return None

    parameters = signature.parameters.values()
    if any(p.kind is p.KEYWORD_ONLY and p.default is p.empty for p in parameters):
        return None
    required = [p for p in parameters if p.kind in _POSITIONAL and p.default is p.empty]
    if not required:
        return value
    if len(required) == 1:
        return partial(value, receiver)
    return None


def make_reactive(value: Any, observable: Observable | None = None) -> Any:
    """Return the reactive form of ``value``.

    Plain dicts become ReactiveObjects and plain lists become ReactiveLists
    attached to ``observable`` (the Observable of the field holding them).
    Values that are already reactive and everything else pass through.
    """
    from stashfx.sequence import ReactiveList  # circular: lists hold cells

    if isinstance(value, ReactiveList):
        value._attach(observable)
        return value
    if type(value) is dict:
        return ReactiveObject(value)
    if type(value) is list:
        return ReactiveList(value, observable)
    return value


def observe(data: dict) -> ReactiveObject:
    """Make every field of a plain dict reactive, recursively.

    Returns a new ReactiveObject; ``data`` is copied, not mutated, so keep
    working with the returned object. Raises InvalidInputError for anything
    that is not a plain dict.
    """
    if type(data) is not dict:
        raise InvalidInputError(f"observe() expects a plain dict, got {type(data).__name__}")
    return ReactiveObject(data)


def is_reactive(value: Any) -> bool:
    from stashfx.sequence import ReactiveList

    return isinstance(value, (ReactiveObject, ReactiveList))


def raw_observable(container: Any, key: Any) -> Observable | None:
    """Backing Observable of ``container[key]``, or None if it is not observed."""
    from stashfx.sequence import ReactiveList

    if isinstance(container, ReactiveObject):
        cell = container._cells.get(key)
    elif isinstance(container, ReactiveList):
        try:
            cell = container._cells[int(key)]
        except (ValueError, IndexError):
            cell = None
    else:
        cell = None
    return cell.get(raw=True) if cell is not None else None
