"""Pytest configuration and fixtures for pushpipe tests."""

import pytest
from typing import Any, Callable

from pushpipe import ManualScheduler, Stream, Transform


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Provide a hand-driven scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def sample_data() -> list[int]:
    """Provide sample data for testing."""
    return [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]


class Collector:
    """Terminal node recording everything it receives."""

    def __init__(self) -> None:
        self.items: list[Any] = []

    def input(self, obj: Any) -> None:
        self.items.append(obj)


@pytest.fixture
def collect() -> Callable[[Stream[Any, Any]], Collector]:
    """Pipe a fresh Collector onto a node and return it."""
    def _collect(node: Stream[Any, Any]) -> Collector:
        return node.pipe(Collector())
    return _collect


def echo() -> Transform[Any, Any]:
    """Identity transform; handy as a pass-through node under test."""
    return Transform(lambda obj, emit: emit(obj))


# Pytest markers for organizing tests
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
