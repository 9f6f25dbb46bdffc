"""Exceptions raised by the reactivity engine.

These are raised synchronously to the caller that triggered them. Failures
inside watcher callbacks and computed functions are not represented here:
those are logged and contained where they happen.
"""


class ReactivityError(Exception):
    """Base class for all stashfx errors."""


class InvalidInputError(ReactivityError, TypeError):
    """A value of the wrong shape was handed to the engine."""


class MutationDisabledError(ReactivityError):
    """Observed data was written while reactivity is disabled."""

    def __init__(self, message: str = "Cannot assign to an observed field while reactivity is disabled.") -> None:
        super().__init__(message)


class NotObservableError(ReactivityError):
    """A path resolved to a field with no backing Observable."""


class PathNotFoundError(ReactivityError, LookupError):
    """A segment of a property path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Object does not contain the property with path {path!r}")
        self.path = path


class SealedObjectError(ReactivityError, AttributeError):
    """A key was added to or removed from a sealed reactive object."""


class ReadOnlyFieldError(ReactivityError, AttributeError):
    """A computed field was assigned to."""
