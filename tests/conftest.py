"""Shared pytest fixtures for stashfx tests."""

import pytest

import stashfx.mode as _mode_mod
from stashfx import ReactivityMode, purge_queue, set_mode


@pytest.fixture(autouse=True)
def reset_reactivity():
    """Every test starts and ends with reactivity enabled and an empty queue."""
    set_mode(ReactivityMode.ENABLED)
    purge_queue()
    yield
    set_mode(ReactivityMode.ENABLED)
    purge_queue()
    _mode_mod._deferred_depth = 0
