from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal

from domain.exceptions.currency import UnsupportedCurrencyError
from domain.models.money import round_to_places


@dataclass(frozen=True)
class Currency:
	code: str
	decimal_places: int
	rate_to_usd: Decimal

	@property
	def is_valid(self) -> bool:
		return bool(self.code) and self.decimal_places >= 0 and self.rate_to_usd > 0

	def round(self, amount: Decimal) -> Decimal:
		return round_to_places(amount, self.decimal_places)


@dataclass(frozen=True)
class ExchangeRate:
	from_currency: str
	to_currency: str
	rate: Decimal

	def __post_init__(self):
		if self.from_currency == self.to_currency:
			raise ValueError(f'exchange rate needs two different currencies, got {self.from_currency}')
		if self.rate <= 0:
			raise ValueError(f'exchange rate must be positive, got {self.rate}')


@dataclass(frozen=True)
class ExchangeResult:
	from_currency: str
	to_currency: str
	amount: Decimal


class CurrencyRegistry:
	"""Immutable, case-insensitive lookup table of supported currencies."""

	def __init__(self, currencies: Iterable[Currency]):
		table: dict[str, Currency] = {}
		for currency in currencies:
			if not currency.is_valid:
				raise ValueError(f'invalid currency definition: {currency!r}')
			if currency.code in table:
				raise ValueError(f'duplicate currency code: {currency.code}')
			table[currency.code] = currency
		self._currencies = table

	def lookup(self, code: str) -> Currency:
		normalized = code.strip().upper()
		try:
			return self._currencies[normalized]
		except KeyError:
			raise UnsupportedCurrencyError(normalized) from None

	def codes(self) -> list[str]:
		return list(self._currencies)

	def __contains__(self, code: object) -> bool:
		return isinstance(code, str) and code.strip().upper() in self._currencies

	def __iter__(self) -> Iterator[Currency]:
		return iter(self._currencies.values())

	def __len__(self) -> int:
		return len(self._currencies)


CRYPTO_CURRENCIES = CurrencyRegistry(
	[
		Currency(code='BEER', decimal_places=18, rate_to_usd=Decimal('0.00002461')),
		Currency(code='FLOKI', decimal_places=18, rate_to_usd=Decimal('0.0001428')),
		Currency(code='GATE', decimal_places=18, rate_to_usd=Decimal('6.87')),
		Currency(code='USDT', decimal_places=6, rate_to_usd=Decimal('0.999')),
		Currency(code='WBTC', decimal_places=8, rate_to_usd=Decimal('57037.22')),
	]
)
