"""Dependency tracking — how reads discover which computed depends on them.

While a ComputedObservable evaluates its function it is installed as the
current evaluation context. Any Observable read during that time registers
the computed as one of its observers, building the dependency graph as a
side effect of ordinary reads.

The context is a ContextVar that is set and reset by token, so evaluating a
computed from inside another one's evaluation restores the outer context
when the inner one finishes.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from stashfx.computed import ComputedObservable
    from stashfx.observable import Observable

current_evaluation: contextvars.ContextVar[ComputedObservable | None] = contextvars.ContextVar(
    "current_evaluation", default=None
)


@contextmanager
def evaluating(computed: ComputedObservable) -> Iterator[None]:
    """Make ``computed`` the evaluation context for the duration of the block."""
    token = current_evaluation.set(computed)
    try:
        yield
    finally:
        current_evaluation.reset(token)


def track(observable: Observable) -> None:
    """Register the evaluating computed, if any, as a dependent of ``observable``."""
    computed = current_evaluation.get()
    if computed is not None and computed is not observable:
        observable.observe(computed)
        computed._dependencies[observable] = None
