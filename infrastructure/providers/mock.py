import logging
from collections.abc import Sequence
from decimal import Decimal

from infrastructure.providers.base import RateProvider

logger = logging.getLogger(__name__)

MOCK_RATES: dict[str, Decimal] = {
	'USD': Decimal('1.0'),
	'EUR': Decimal('0.85'),
	'GBP': Decimal('0.73'),
	'JPY': Decimal('110.0'),
	'CAD': Decimal('1.25'),
	'AUD': Decimal('1.35'),
	'CHF': Decimal('0.92'),
	'CNY': Decimal('7.2'),
	'SEK': Decimal('10.5'),
	'NOK': Decimal('11.2'),
}


class MockRateProvider(RateProvider):
	SOURCE_INFO = 'No API key: using mock rates'

	def __init__(self, rates: dict[str, Decimal] | None = None):
		self._rates = dict(MOCK_RATES if rates is None else rates)

	@property
	def name(self) -> str:
		return 'mock'

	@property
	def source_info(self) -> str:
		return self.SOURCE_INFO

	async def get_rates(
		self, currencies: Sequence[str], timeout: float | None = None
	) -> tuple[dict[str, Decimal], str]:
		logger.info(self.SOURCE_INFO)
		# unknown codes are left out; the caller checks completeness
		rates = {code: self._rates[code] for code in currencies if code in self._rates}
		return rates, self.SOURCE_INFO
