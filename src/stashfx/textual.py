"""Textual integration for stashfx. Opt-in, requires textual.

Watchers that update widgets can fire while the widget tree is not queryable:
before the app runs, or while widgets are being replaced. add_watcher()
registers a guarded watcher that skips those moments and treats a NoMatches
from a widget query as "nothing to update".
"""

from collections import Counter
from contextlib import contextmanager

from textual.css.query import NoMatches

from stashfx import watcher as _watcher

# Pause depth per app, keyed by id(app); nested pauses resume at the outermost exit.
_pause_depth: Counter[int] = Counter()


@contextmanager
def pause(app):
    """Suspend guarded watchers during widget replacement."""
    key = id(app)
    _pause_depth[key] += 1
    try:
        yield
    finally:
        _pause_depth[key] -= 1
        if _pause_depth[key] <= 0:
            del _pause_depth[key]


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and not _pause_depth[id(app)]


def add_watcher(app, root, path, fn):
    """add_watcher() that safely bridges to Textual widgets.

    Returns the guarded watcher; pass it to remove_watcher() to unregister.
    Errors other than NoMatches are left to the engine, which logs them.
    """

    def _guarded(value, old_value):
        if not is_safe(app):
            return
        try:
            fn(value, old_value)
        except NoMatches:
            pass

    return _watcher.add_watcher(root, path, _guarded)


def remove_watcher(app, root, path, guarded):
    _watcher.remove_watcher(root, path, guarded)
