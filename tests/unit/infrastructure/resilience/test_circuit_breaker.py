import asyncio

import pytest

from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
    TooManyTrialRequestsError,
)


async def successful_api_call():
    return "Success!"


async def failing_api_call():
    raise RuntimeError("API is down!")


async def trip(breaker: CircuitBreaker, failures: int = 3) -> None:
    for _ in range(failures):
        with pytest.raises(RuntimeError):
            await breaker.call(failing_api_call)


class TestCircuitBreakerClosedState:
    """Test fundamental circuit breaker behavior - CLOSED state"""

    @pytest.mark.asyncio
    async def test_successful_call_when_closed(self, breaker):
        result = await breaker.call(successful_api_call)

        assert result == "Success!"
        assert breaker.state == CircuitState.CLOSED
        assert breaker.counts.total_successes == 1

    @pytest.mark.asyncio
    async def test_failure_increments_count_but_stays_closed(self, breaker, state_changes):
        with pytest.raises(RuntimeError, match="API is down!"):
            await breaker.call(failing_api_call)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.counts.consecutive_failures == 1
        assert state_changes == []

    @pytest.mark.asyncio
    async def test_success_resets_consecutive_failures(self, breaker):
        await trip(breaker, failures=2)
        await breaker.call(successful_api_call)
        await trip(breaker, failures=2)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.counts.consecutive_failures == 2

    @pytest.mark.asyncio
    async def test_counters_reset_when_interval_elapses(self, breaker, clock):
        await trip(breaker, failures=2)
        clock.advance(60)

        assert breaker.counts.consecutive_failures == 0

        with pytest.raises(RuntimeError):
            await breaker.call(failing_api_call)
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_counters_survive_within_interval(self, breaker, clock):
        await trip(breaker, failures=2)
        clock.advance(59)

        await trip(breaker, failures=1)

        assert breaker.state == CircuitState.OPEN


class TestCircuitBreakerOpenState:

    @pytest.mark.asyncio
    async def test_circuit_opens_after_failure_threshold(self, breaker, state_changes):
        await trip(breaker)

        assert breaker.state == CircuitState.OPEN
        assert state_changes == [("CLOSED", "OPEN")]

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast_without_calling(self, breaker):
        await trip(breaker)
        calls = []

        async def tracked_call():
            calls.append(1)
            return "should not run"

        with pytest.raises(CircuitOpenError) as exc_info:
            await breaker.call(tracked_call)

        assert calls == []
        assert exc_info.value.failure_count == 3
        assert "OPEN" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_stays_open_during_cooldown(self, breaker, clock):
        await trip(breaker)
        clock.advance(29.9)

        with pytest.raises(CircuitOpenError):
            await breaker.call(successful_api_call)
        assert breaker.state == CircuitState.OPEN


class TestCircuitBreakerRecovery:

    @pytest.mark.asyncio
    async def test_moves_to_half_open_after_recovery_timeout(self, breaker, clock, state_changes):
        await trip(breaker)
        clock.advance(30)

        assert breaker.state == CircuitState.HALF_OPEN
        assert state_changes == [("CLOSED", "OPEN"), ("OPEN", "HALF_OPEN")]

    @pytest.mark.asyncio
    async def test_first_trial_success_closes_circuit(self, breaker, clock, state_changes):
        await trip(breaker)
        clock.advance(30)

        result = await breaker.call(successful_api_call)

        assert result == "Success!"
        assert breaker.state == CircuitState.CLOSED
        assert state_changes[-1] == ("HALF_OPEN", "CLOSED")
        assert breaker.counts.consecutive_failures == 0

    @pytest.mark.asyncio
    async def test_trial_failure_reopens_circuit(self, breaker, clock, state_changes):
        await trip(breaker)
        clock.advance(30)

        with pytest.raises(RuntimeError):
            await breaker.call(failing_api_call)

        assert breaker.state == CircuitState.OPEN
        assert state_changes[-1] == ("HALF_OPEN", "OPEN")

        # a fresh cooldown starts from the failed trial
        clock.advance(29)
        with pytest.raises(CircuitOpenError):
            await breaker.call(successful_api_call)

    @pytest.mark.asyncio
    async def test_half_open_admits_limited_concurrent_trials(self, breaker, clock, state_changes):
        await trip(breaker)
        clock.advance(30)

        release = asyncio.Event()
        started = []

        async def slow_trial():
            started.append(1)
            await release.wait()
            return "recovered"

        trials = [asyncio.create_task(breaker.call(slow_trial)) for _ in range(3)]
        await asyncio.sleep(0)
        assert len(started) == 3

        with pytest.raises(TooManyTrialRequestsError):
            await breaker.call(successful_api_call)
        assert breaker.state == CircuitState.OPEN
        assert state_changes[-1] == ("HALF_OPEN", "OPEN")

        release.set()
        results = await asyncio.gather(*trials)

        # outcomes from the superseded half-open generation are ignored
        assert results == ["recovered"] * 3
        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_cancelled_call_counts_as_failure(self, breaker):
        async def hanging_call():
            await asyncio.sleep(10)

        task = asyncio.create_task(breaker.call(hanging_call))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert breaker.counts.consecutive_failures == 1


def test_get_status_reports_state(breaker):
    status = breaker.get_status()

    assert status["name"] == "openexchange-api"
    assert status["state"] == "CLOSED"
    assert status["status"] == "healthy"
    assert status["failure_threshold"] == 3


@pytest.mark.asyncio
async def test_get_status_when_open(breaker):
    await trip(breaker)

    status = breaker.get_status()

    assert status["state"] == "OPEN"
    assert status["status"] == "unhealthy"
    assert status["failure_count"] == 3


@pytest.mark.asyncio
async def test_success_threshold_requires_multiple_trial_successes(clock):
    cb = CircuitBreaker(name="strict", success_threshold=2, clock=clock)
    await trip(cb)
    clock.advance(30)

    await cb.call(successful_api_call)
    assert cb.state == CircuitState.HALF_OPEN

    await cb.call(successful_api_call)
    assert cb.state == CircuitState.CLOSED
