import asyncio
import logging
from collections.abc import Sequence
from decimal import Decimal

import httpx

from domain.exceptions.currency import (
	ProviderDecodeError,
	ProviderError,
	ProviderHTTPError,
	ProviderNetworkError,
	ProviderOverloadedError,
	ProviderUnavailableError,
	UnsupportedCurrencyError,
)
from domain.models.money import to_decimal
from infrastructure.providers.base import BASE_CURRENCY, RateProvider
from infrastructure.resilience.circuit_breaker import (
	CircuitBreaker,
	CircuitOpenError,
	TooManyTrialRequestsError,
)

logger = logging.getLogger(__name__)


class OpenExchangeProvider(RateProvider):
	"""Live rates from openexchangerates.org, guarded by a circuit breaker.

	Every request goes through ``breaker``; transport, HTTP and decoding
	failures, as well as a requested currency missing from the response, count
	as breaker failures. Calls are never retried here.
	"""

	BASE_URL = 'https://openexchangerates.org/api'
	SOURCE_INFO = 'API key provided: using live rates'

	def __init__(
		self,
		app_id: str,
		breaker: CircuitBreaker,
		base_url: str = BASE_URL,
		client: httpx.AsyncClient | None = None,
		timeout: float = 10,
	):
		self.app_id = app_id
		self.breaker = breaker
		self.base_url = base_url.rstrip('/')
		self.timeout = timeout
		self._client = client or httpx.AsyncClient(timeout=timeout)

	@property
	def name(self) -> str:
		return 'openexchange'

	@property
	def source_info(self) -> str:
		return self.SOURCE_INFO

	async def get_rates(
		self, currencies: Sequence[str], timeout: float | None = None
	) -> tuple[dict[str, Decimal], str]:
		try:
			rates = await self.breaker.call(lambda: self._fetch_rates(currencies, timeout))
		except CircuitOpenError as e:
			logger.error('Circuit breaker is OPEN - external rates API unavailable: %s', e)
			raise ProviderUnavailableError(
				'external rates API is currently unavailable (service protection active)'
			) from e
		except TooManyTrialRequestsError as e:
			logger.error('Circuit breaker limiting requests: %s', e)
			raise ProviderOverloadedError(
				'external rates API is being rate limited (too many requests)'
			) from e
		except (ProviderError, UnsupportedCurrencyError) as e:
			logger.error(
				'External rates API failed for %s: %s (circuit_state=%s)',
				','.join(currencies),
				e,
				self.breaker.state.value,
			)
			raise

		logger.info(
			'Fetched live rates for %d currencies (circuit_state=%s)',
			len(currencies),
			self.breaker.state.value,
		)
		return rates, self.SOURCE_INFO

	async def _fetch_rates(
		self, currencies: Sequence[str], timeout: float | None
	) -> dict[str, Decimal]:
		symbols = ','.join(currencies)
		logger.debug('Fetching rates from external API: %s', symbols)
		try:
			async with asyncio.timeout(timeout):
				data = await self._request('latest.json', {'symbols': symbols})
		except TimeoutError as e:
			raise ProviderNetworkError(f'OpenExchange request timed out after {timeout}s') from e

		return self._map_rates(data['rates'], currencies)

	async def _request(self, endpoint: str, params: dict) -> dict:
		params = {'app_id': self.app_id, **params}
		url = f'{self.base_url}/{endpoint}'

		try:
			response = await self._client.get(url, params=params)
			response.raise_for_status()
		except httpx.HTTPStatusError as e:
			raise ProviderHTTPError(
				e.response.status_code,
				f'OpenExchange HTTP error {e.response.status_code}: {e.response.text[:200]}',
			) from e
		except httpx.RequestError as e:
			raise ProviderNetworkError(f'OpenExchange request failed: {e.__class__.__name__}') from e

		try:
			data = response.json(parse_float=Decimal)
		except ValueError as e:
			raise ProviderDecodeError(f'OpenExchange response parsing error: {e}') from e

		if not isinstance(data, dict):
			raise ProviderDecodeError('OpenExchange response parsing error: expected a JSON object')
		if data.get('error'):
			message = data.get('description', data.get('message', 'Unknown error'))
			raise ProviderHTTPError(
				data.get('status', response.status_code), f'OpenExchange API error: {message}'
			)
		if not isinstance(data.get('rates'), dict):
			raise ProviderDecodeError('OpenExchange response parsing error: missing rates object')

		return data

	@staticmethod
	def _map_rates(raw_rates: dict, currencies: Sequence[str]) -> dict[str, Decimal]:
		# the base currency is implicit and never part of the response
		result: dict[str, Decimal] = {}
		if BASE_CURRENCY in currencies:
			result[BASE_CURRENCY] = Decimal('1')

		for code in currencies:
			if code == BASE_CURRENCY:
				continue
			if code not in raw_rates:
				raise UnsupportedCurrencyError(
					code, f"currency '{code}' is not supported by the exchange rates provider"
				)
			try:
				result[code] = to_decimal(raw_rates[code])
			except ValueError as e:
				raise ProviderDecodeError(f'invalid rate for {code}: {raw_rates[code]!r}') from e

		return result

	async def close(self) -> None:
		await self._client.aclose()
