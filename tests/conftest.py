"""
Shared test configuration and fixtures.
"""

import pytest

from infrastructure.resilience.circuit_breaker import CircuitBreaker


class FakeClock:
    """Manually advanced monotonic clock for breaker timing tests"""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state_changes():
    return []


@pytest.fixture
def breaker(clock, state_changes):
    """Breaker with the production defaults and a fake clock"""
    return CircuitBreaker(
        name="openexchange-api",
        on_state_change=lambda name, old, new: state_changes.append((old.value, new.value)),
        clock=clock,
    )
