"""Reactivity mode — the process-wide switch gating every mutation.

ENABLED applies writes immediately, DISABLED rejects them, and LAZY captures
them in a FIFO queue to be replayed later with drain_queue().

Every mode change made by this package is paired with a restore in a
``finally`` block; reactivity() and deferred() are the scoped forms.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, NamedTuple

logger = logging.getLogger("stashfx.mode")


class ReactivityMode(enum.Enum):
    """All the possible reactivity states."""

    DISABLED = 0  # writes raise MutationDisabledError
    LAZY = 1  # writes are queued, not applied
    ENABLED = 2  # writes apply immediately


class QueueItem(NamedTuple):
    """A captured mutation call, replayed verbatim by drain_queue()."""

    fn: Callable[..., Any]
    args: tuple = ()
    kwargs: Mapping[str, Any] = MappingProxyType({})
    context: Any = None

    def __call__(self) -> Any:
        if self.context is not None:
            return self.fn(self.context, *self.args, **self.kwargs)
        return self.fn(*self.args, **self.kwargs)


_mode: ReactivityMode = ReactivityMode.ENABLED

_queue: deque[QueueItem] = deque()

# Depth of nested deferred() blocks; only the outermost one drains.
_deferred_depth: int = 0


def get_mode() -> ReactivityMode:
    return _mode


def set_mode(mode: ReactivityMode) -> None:
    """Switch the process-wide mode. Unknown values are ignored."""
    global _mode
    if not isinstance(mode, ReactivityMode):
        logger.warning("Ignoring unrecognized reactivity mode %r", mode)
        return
    if mode is not _mode:
        _mode = mode


def enqueue(item: QueueItem) -> None:
    """Add a deferred mutation to the tail of the queue."""
    _queue.append(item)


def drain_queue() -> None:
    """Replay queued mutations in order with reactivity enabled.

    Items run under ENABLED regardless of the mode they were captured in, so
    anything they write applies immediately instead of being queued again.
    The previous mode is restored afterwards, also when an item raises; items
    not yet replayed stay queued.
    """
    previous = _mode
    set_mode(ReactivityMode.ENABLED)
    try:
        while _queue:
            item = _queue.popleft()
            logger.debug("Replaying %s", getattr(item.fn, "__qualname__", item.fn))
            item()
    finally:
        set_mode(previous)


def purge_queue() -> None:
    """Drop every queued mutation without running it."""
    _queue.clear()


def pending_count() -> int:
    """Number of mutations waiting in the queue. Useful for testing."""
    return len(_queue)


@contextmanager
def reactivity(mode: ReactivityMode) -> Iterator[None]:
    """Run a block under ``mode``, restoring the previous mode afterwards.

    Usage:
        with reactivity(ReactivityMode.ENABLED):
            state.price = 50
    """
    previous = _mode
    set_mode(mode)
    try:
        yield
    finally:
        set_mode(previous)


@contextmanager
def deferred() -> Iterator[None]:
    """Collect writes made inside the block and apply them when it exits.

    Usage:
        with deferred():
            state.price = 1
            state.qty = 2
            # state is unchanged here
        # both writes applied, in order

    If the block raises, the writes it queued are discarded. Nested blocks
    defer to the outermost one.
    """
    global _deferred_depth
    previous = _mode
    _deferred_depth += 1
    set_mode(ReactivityMode.LAZY)
    try:
        yield
    except BaseException:
        _deferred_depth -= 1
        set_mode(previous)
        if _deferred_depth == 0:
            purge_queue()
        raise
    _deferred_depth -= 1
    set_mode(previous)
    if _deferred_depth == 0:
        drain_queue()
