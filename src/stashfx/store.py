"""Store — named mutations and actions around an observed state tree.

Mutations are the only functions meant to change state: commit() runs them
with reactivity ENABLED. Actions orchestrate work and run with reactivity
DISABLED, so they must go through their context's commit() to change state.
Nested modules become nested stores.

    store = Store(
        state={"price": 20, "qty": 10, "total": lambda s: s.price * s.qty},
        mutations={"set_price": lambda ctx, price: setattr(ctx.state, "price", price)},
        actions={"reprice": lambda ctx, payload: ctx.commit("set_price", payload * 2)},
    )

    store.commit("set_price", 30)
    store.dispatch("reprice", 25)
    store.state.total  # 500
"""

from __future__ import annotations

import logging
from typing import Any, Callable, NamedTuple

from stashfx.errors import InvalidInputError
from stashfx.mode import ReactivityMode, reactivity, set_mode
from stashfx.observable import WatcherFunction
from stashfx.observer import ReactiveObject, observe
from stashfx.watcher import add_watcher, remove_watcher

logger = logging.getLogger("stashfx.store")


class MutationContext(NamedTuple):
    state: ReactiveObject
    commit: Callable[..., Any]


class ActionContext(NamedTuple):
    state: ReactiveObject
    commit: Callable[..., Any]
    dispatch: Callable[..., Any]


def _check_functions(kind: str, definitions: dict | None) -> dict:
    definitions = definitions or {}
    for name, fn in definitions.items():
        if not callable(fn):
            raise InvalidInputError(f"{kind} definitions should be functions but {name!r} is not a function")
    return definitions


class Store:
    """Observed state plus the mutations and actions allowed to work on it."""

    def __init__(
        self,
        state: dict | None = None,
        mutations: dict[str, Callable] | None = None,
        actions: dict[str, Callable] | None = None,
        modules: dict[str, dict] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self.state = observe(state if state is not None else {})
        self._mutations = _check_functions("Mutation", mutations)
        self._actions = _check_functions("Action", actions)
        self.modules: dict[str, Store] = {}
        for name, options in (modules or {}).items():
            if type(options) is not dict:
                raise InvalidInputError(f"Module {name!r} must be a dict of store options")
            if "strict" in options:
                raise InvalidInputError(f"Module {name!r} cannot set strict; it follows the root store")
            self.modules[name] = Store(**options, strict=strict)
        if strict:
            # state outside commit() is read-only
            set_mode(ReactivityMode.DISABLED)

    def __getattr__(self, name: str) -> Store:
        modules = self.__dict__.get("modules", {})
        try:
            return modules[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no module {name!r}") from None

    def commit(self, mutation: str, payload: Any = None) -> Any:
        """Run a mutation with reactivity enabled and return its result."""
        fn = self._mutations.get(mutation)
        if fn is None:
            logger.warning("Mutation with key %r does not exist", mutation)
            return None
        with reactivity(ReactivityMode.ENABLED):
            return fn(MutationContext(self.state, self.commit), payload)

    def dispatch(self, action: str, payload: Any = None) -> Any:
        """Run an action with reactivity disabled and return its result."""
        fn = self._actions.get(action)
        if fn is None:
            logger.warning("Action with key %r does not exist", action)
            return None
        with reactivity(ReactivityMode.DISABLED):
            return fn(ActionContext(self.state, self.commit, self.dispatch), payload)

    def watch(self, path: str, watcher: WatcherFunction) -> WatcherFunction:
        """Call ``watcher(value, old_value)`` when the state field at ``path`` changes."""
        return add_watcher(self.state, path, watcher)

    def unwatch(self, path: str, watcher: WatcherFunction) -> None:
        remove_watcher(self.state, path, watcher)
