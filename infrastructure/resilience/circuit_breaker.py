import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

StateChangeListener = Callable[[str, 'CircuitState', 'CircuitState'], None]


class CircuitState(Enum):
	CLOSED = 'CLOSED'
	OPEN = 'OPEN'
	HALF_OPEN = 'HALF_OPEN'


class CircuitBreakerError(Exception):
	"""Raised when the breaker rejects a call without executing it"""

	def __init__(self, name: str, state: CircuitState, message: str):
		self.name = name
		self.state = state
		super().__init__(message)


class CircuitOpenError(CircuitBreakerError):
	def __init__(self, name: str, failure_count: int):
		self.failure_count = failure_count
		super().__init__(
			name, CircuitState.OPEN, f'Circuit breaker OPEN for {name} ({failure_count} failures)'
		)


class TooManyTrialRequestsError(CircuitBreakerError):
	def __init__(self, name: str, limit: int):
		self.limit = limit
		super().__init__(
			name,
			CircuitState.HALF_OPEN,
			f'Circuit breaker HALF_OPEN for {name}: more than {limit} trial requests',
		)


@dataclass
class Counts:
	requests: int = 0
	total_successes: int = 0
	total_failures: int = 0
	consecutive_successes: int = 0
	consecutive_failures: int = 0

	def on_request(self) -> None:
		self.requests += 1

	def on_success(self) -> None:
		self.total_successes += 1
		self.consecutive_successes += 1
		self.consecutive_failures = 0

	def on_failure(self) -> None:
		self.total_failures += 1
		self.consecutive_failures += 1
		self.consecutive_successes = 0


class CircuitBreaker:
	"""In-process circuit breaker guarding a single external dependency.

	Counters belong to a generation. A generation ends on every state
	transition and, while CLOSED, whenever ``interval`` seconds elapse, so the
	failure count is a rolling window rather than a lifetime total. Outcomes of
	calls admitted in an earlier generation are discarded.

	State bookkeeping happens under a ``threading.RLock``; the protected call
	itself is awaited outside of it.
	"""

	def __init__(
		self,
		name: str,
		failure_threshold: int = 3,
		interval: float = 60,
		recovery_timeout: float = 30,
		half_open_max_requests: int = 3,
		success_threshold: int = 1,
		on_state_change: StateChangeListener | None = None,
		clock: Callable[[], float] = time.monotonic,
	):
		self.name = name
		self.failure_threshold = failure_threshold
		self.interval = interval
		self.recovery_timeout = recovery_timeout
		self.half_open_max_requests = half_open_max_requests
		self.success_threshold = success_threshold
		self.on_state_change = on_state_change
		self._clock = clock

		self._lock = threading.RLock()
		self._state = CircuitState.CLOSED
		self._generation = 0
		self._counts = Counts()
		self._tripped_failures = 0
		self._state_changed_at = clock()
		self._expiry = self._state_changed_at + interval if interval > 0 else None

	@property
	def state(self) -> CircuitState:
		with self._lock:
			state, _ = self._current_state(self._clock())
			return state

	@property
	def counts(self) -> Counts:
		with self._lock:
			self._current_state(self._clock())
			return replace(self._counts)

	async def call(self, func: Callable[[], Awaitable[T]]) -> T:
		"""Execute ``func`` with circuit breaker protection"""
		generation = self._before_request()
		try:
			result = await func()
		except BaseException:
			# cancellation counts against the dependency as well
			self._after_request(generation, success=False)
			raise
		self._after_request(generation, success=True)
		return result

	def get_status(self) -> dict[str, Any]:
		with self._lock:
			now = self._clock()
			state, _ = self._current_state(now)
			return {
				'name': self.name,
				'state': state.value,
				'status': 'healthy' if state == CircuitState.CLOSED else 'unhealthy',
				'failure_count': self._tripped_failures if state == CircuitState.OPEN else self._counts.consecutive_failures,
				'failure_threshold': self.failure_threshold,
				'requests': self._counts.requests,
				'seconds_in_state': round(now - self._state_changed_at, 3),
			}

	def _before_request(self) -> int:
		with self._lock:
			now = self._clock()
			state, generation = self._current_state(now)

			if state == CircuitState.OPEN:
				raise CircuitOpenError(self.name, self._tripped_failures)

			if state == CircuitState.HALF_OPEN and self._counts.requests >= self.half_open_max_requests:
				self._set_state(CircuitState.OPEN, now, reason='trial_quota_exceeded')
				raise TooManyTrialRequestsError(self.name, self.half_open_max_requests)

			self._counts.on_request()
			return generation

	def _after_request(self, before_generation: int, success: bool) -> None:
		with self._lock:
			now = self._clock()
			state, generation = self._current_state(now)
			if generation != before_generation:
				return

			if success:
				self._on_success(state, now)
			else:
				self._on_failure(state, now)

	def _on_success(self, state: CircuitState, now: float) -> None:
		self._counts.on_success()
		if state == CircuitState.HALF_OPEN and self._counts.consecutive_successes >= self.success_threshold:
			self._set_state(CircuitState.CLOSED, now, reason='recovery_successful')

	def _on_failure(self, state: CircuitState, now: float) -> None:
		self._counts.on_failure()
		if state == CircuitState.HALF_OPEN:
			self._set_state(CircuitState.OPEN, now, reason='failure_during_recovery')
		elif self._counts.consecutive_failures >= self.failure_threshold:
			self._set_state(
				CircuitState.OPEN, now, reason=f'{self._counts.consecutive_failures}_consecutive_failures'
			)
		else:
			logger.warning(
				'API failure for %s: %d/%d',
				self.name,
				self._counts.consecutive_failures,
				self.failure_threshold,
			)

	def _current_state(self, now: float) -> tuple[CircuitState, int]:
		if self._state == CircuitState.CLOSED:
			if self._expiry is not None and self._expiry <= now:
				self._new_generation(now)
		elif self._state == CircuitState.OPEN:
			if self._expiry is not None and self._expiry <= now:
				self._set_state(CircuitState.HALF_OPEN, now, reason='attempting_recovery')
		return self._state, self._generation

	def _set_state(self, new_state: CircuitState, now: float, reason: str) -> None:
		if self._state == new_state:
			return

		old_state = self._state
		if new_state == CircuitState.OPEN:
			self._tripped_failures = self._counts.consecutive_failures
		self._state = new_state
		self._state_changed_at = now
		self._new_generation(now)

		logger.debug(
			'Circuit breaker %s state change: %s -> %s (%s)',
			self.name,
			old_state.value,
			new_state.value,
			reason,
		)
		if self.on_state_change is not None:
			self.on_state_change(self.name, old_state, new_state)

	def _new_generation(self, now: float) -> None:
		self._generation += 1
		self._counts = Counts()

		if self._state == CircuitState.CLOSED:
			self._expiry = now + self.interval if self.interval > 0 else None
		elif self._state == CircuitState.OPEN:
			self._expiry = now + self.recovery_timeout
		else:
			self._expiry = None
