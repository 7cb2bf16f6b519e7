import logging
from collections.abc import Iterable
from decimal import Decimal

from domain.exceptions.currency import (
	InsufficientInputError,
	InvalidRateError,
	UnsupportedCurrencyError,
	ValidationError,
)
from domain.models.currency import ExchangeRate
from domain.models.money import divide
from infrastructure.providers.base import RateProvider

logger = logging.getLogger(__name__)


class RateService:
	def __init__(self, provider: RateProvider):
		self.provider = provider

	async def get_all_rates(
		self, currencies: Iterable[str], timeout: float | None = None
	) -> tuple[list[ExchangeRate], str]:
		"""Build every ordered cross rate between ``currencies``.

		Rates are returned unrounded, ordered by the normalized input list
		(outer loop over the source currency, inner over the target).
		``timeout`` is handed to the provider and bounds the fetch.
		"""
		codes = self._normalize(currencies)

		rates, source_info = await self.provider.get_rates(codes, timeout=timeout)

		for code in codes:
			if code not in rates:
				raise UnsupportedCurrencyError(
					code, f"currency '{code}' is not supported or not available"
				)

		result = [
			ExchangeRate(
				from_currency=from_code,
				to_currency=to_code,
				rate=self._cross_rate(rates, from_code, to_code),
			)
			for from_code in codes
			for to_code in codes
			if from_code != to_code
		]

		logger.debug('Calculated %d cross rates from %s', len(result), self.provider.name)
		return result, source_info

	@staticmethod
	def _normalize(currencies: Iterable[str]) -> list[str]:
		raw = list(currencies)
		if len(raw) < 2:
			raise InsufficientInputError(len(raw))

		codes = [code.strip().upper() for code in raw]
		if any(not code for code in codes):
			raise ValidationError('currency codes must not be empty')

		# duplicates collapse, first occurrence keeps its position
		codes = list(dict.fromkeys(codes))
		if len(codes) < 2:
			raise InsufficientInputError(len(codes))
		return codes

	@staticmethod
	def _cross_rate(rates: dict[str, Decimal], from_code: str, to_code: str) -> Decimal:
		from_rate = rates[from_code]
		to_rate = rates[to_code]

		if not (from_rate.is_finite() and to_rate.is_finite()) or from_rate <= 0 or to_rate <= 0:
			raise InvalidRateError(from_code, from_rate, to_code, to_rate)

		return divide(to_rate, from_rate)
