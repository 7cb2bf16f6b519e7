from infrastructure.resilience.circuit_breaker import CircuitBreaker

from .base import BASE_CURRENCY, RateProvider
from .mock import MockRateProvider
from .openexchange import OpenExchangeProvider


def create_rate_provider(
	api_key: str,
	breaker: CircuitBreaker,
	base_url: str = OpenExchangeProvider.BASE_URL,
	timeout: float = 10,
) -> RateProvider:
	"""Pick the rate provider once, based on whether a credential is configured."""
	if not api_key.strip():
		return MockRateProvider()
	return OpenExchangeProvider(app_id=api_key, breaker=breaker, base_url=base_url, timeout=timeout)


__all__ = [
	'BASE_CURRENCY',
	'MockRateProvider',
	'OpenExchangeProvider',
	'RateProvider',
	'create_rate_provider',
]
