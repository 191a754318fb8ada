"""
Shared pytest fixtures and configuration for bulwark tests.

This module provides:
- A controllable epoch-millisecond clock for window arithmetic
- A recorder for fallback / on_error invocations
- structlog configuration and contextvars reset for test isolation

Usage:
    Fixtures are auto-discovered by pytest:

    def test_window(clock):
        boundary = create_boundary(name="x", fallback=fb, clock=clock)
        clock.advance(60_000)
"""

from pathlib import Path
from typing import Any, Generator

import pytest
import structlog


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore default structlog config and clear contextvars around each test."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Clock and Recorders
# =============================================================================


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class HandlerRecorder:
    """Records (error, context) pairs and returns a fixed value."""

    def __init__(self, result: Any = "fallback"):
        self.result = result
        self.calls: list[tuple[Exception, Any]] = []

    def __call__(self, error: Exception, context: Any) -> Any:
        self.calls.append((error, context))
        return self.result

    @property
    def called(self) -> bool:
        return bool(self.calls)


@pytest.fixture
def fallback() -> HandlerRecorder:
    return HandlerRecorder("default")


@pytest.fixture
def on_error() -> HandlerRecorder:
    return HandlerRecorder(None)


class FailingOperation:
    """Fails ``failures`` times, then returns ``result``. -1 fails forever."""

    def __init__(self, failures: int = -1, result: Any = "success", error: type = RuntimeError):
        self.failures = failures
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        if self.failures < 0 or self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return self.result


@pytest.fixture
def failing_operation() -> type[FailingOperation]:
    return FailingOperation
