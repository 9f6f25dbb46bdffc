"""stashfx: fine-grained reactive state for plain Python data."""

from importlib.metadata import version as _version

__version__ = _version("stashfx")

from stashfx.errors import (
    ReactivityError,
    InvalidInputError,
    MutationDisabledError,
    NotObservableError,
    PathNotFoundError,
    SealedObjectError,
    ReadOnlyFieldError,
)
from stashfx.mode import (
    ReactivityMode,
    get_mode,
    set_mode,
    drain_queue,
    purge_queue,
    pending_count,
    reactivity,
    deferred,
)
from stashfx.observable import Observable
from stashfx.computed import ComputedObservable, computed
from stashfx.observer import ReactiveObject, observe, is_reactive, raw_observable
from stashfx.sequence import ReactiveList
from stashfx.watcher import add_watcher, remove_watcher, resolve_path
from stashfx.store import Store
# textual NOT auto-imported — opt-in only

__all__ = [
    "ReactivityError",
    "InvalidInputError",
    "MutationDisabledError",
    "NotObservableError",
    "PathNotFoundError",
    "SealedObjectError",
    "ReadOnlyFieldError",
    "ReactivityMode",
    "get_mode",
    "set_mode",
    "drain_queue",
    "purge_queue",
    "pending_count",
    "reactivity",
    "deferred",
    "Observable",
    "ComputedObservable",
    "computed",
    "ReactiveObject",
    "ReactiveList",
    "observe",
    "is_reactive",
    "raw_observable",
    "add_watcher",
    "remove_watcher",
    "resolve_path",
    "Store",
]
