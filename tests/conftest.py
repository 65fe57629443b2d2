"""Pytest configuration and fixtures for memocachex tests."""
import gc

import pytest


class Payload:
    """Weakly referenceable value produced by the counting origin."""

    def __init__(self, first, second):
        self.args = (first, second)


class CountingOrigin:
    """Two-argument origin that counts its calls and returns fresh objects."""

    def __init__(self):
        self.calls = 0

    def __call__(self, first, second):
        self.calls += 1
        return Payload(first, second)


@pytest.fixture
def origin():
    """Create a fresh counting origin."""
    return CountingOrigin()


@pytest.fixture
def collect():
    """Run a full garbage collection on demand."""

    def _collect():
        for _ in range(3):
            gc.collect()

    return _collect
