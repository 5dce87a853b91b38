"""
Shared pytest fixtures and configuration for reactable tests.
"""

import pytest

from reactable import ReactiveObjectFactory
from reactable.reactive import _reset_default_factory
from tests.utils.memory_utils import create_no_leaks_fixture


class HookRecorder:
    """Records what the trap handlers report through the tracking hooks."""

    def __init__(self):
        self.reads = []
        self.writes = []

    def track(self, target, op, key):
        self.reads.append((target, op, key))

    def trigger(self, target, op, key):
        self.writes.append((target, op, key))


@pytest.fixture(autouse=True)
def reset_default_factory():
    """Reset the default factory before each test to prevent state leakage."""
    _reset_default_factory()


@pytest.fixture
def factory():
    """Provide a fresh, isolated ReactiveObjectFactory."""
    return ReactiveObjectFactory()


@pytest.fixture
def recorder():
    """Provide an empty HookRecorder."""
    return HookRecorder()


no_leaks = create_no_leaks_fixture()
