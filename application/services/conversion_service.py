import logging
from decimal import DecimalException

from domain.exceptions.currency import NonPositiveAmountError, ValidationError
from domain.models.currency import CRYPTO_CURRENCIES, CurrencyRegistry, ExchangeResult
from domain.models.money import divide, multiply, parse_amount

logger = logging.getLogger(__name__)


class ConversionService:
	"""Converts between registry currencies using their fixed USD rates.

	Never calls the live rate provider.
	"""

	def __init__(self, registry: CurrencyRegistry = CRYPTO_CURRENCIES):
		self.registry = registry

	def convert(self, from_currency: str | None, to_currency: str | None, amount: str | None) -> ExchangeResult:
		from_code = (from_currency or '').strip().upper()
		to_code = (to_currency or '').strip().upper()

		if not from_code or not to_code or not amount or not amount.strip():
			raise ValidationError('from, to, and amount parameters are required')

		value = parse_amount(amount)
		if value <= 0:
			raise NonPositiveAmountError(value)

		source = self.registry.lookup(from_code)
		target = self.registry.lookup(to_code)

		# bridge through USD, round once at the end
		try:
			usd_amount = multiply(value, source.rate_to_usd)
			converted = target.round(divide(usd_amount, target.rate_to_usd))
		except DecimalException as e:
			raise ValidationError(f'amount is too large: {amount.strip()[:32]}') from e

		logger.debug('Converted %s %s -> %s %s', value, from_code, converted, to_code)
		return ExchangeResult(from_currency=from_code, to_currency=to_code, amount=converted)

	def supported_currencies(self) -> list[str]:
		return self.registry.codes()
