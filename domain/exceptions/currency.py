from decimal import Decimal


class CurrencyException(Exception):
	pass


class ValidationError(CurrencyException):
	pass


class NonPositiveAmountError(ValidationError):
	def __init__(self, amount: Decimal):
		self.amount = amount
		super().__init__(f'amount must be positive, got {amount}')


class UnsupportedCurrencyError(CurrencyException):
	def __init__(self, code: str, message: str | None = None):
		self.code = code
		super().__init__(message or f'unsupported currency {code}')


class InsufficientInputError(CurrencyException):
	def __init__(self, count: int):
		self.count = count
		super().__init__(f'at least two currencies are required, got {count}')


class InvalidRateError(CurrencyException):
	def __init__(self, from_currency: str, from_rate, to_currency: str, to_rate):
		self.from_currency = from_currency
		self.from_rate = from_rate
		self.to_currency = to_currency
		self.to_rate = to_rate
		super().__init__(
			f'invalid rate: {from_currency}={from_rate}, {to_currency}={to_rate}'
		)


class ProviderError(CurrencyException):
	"""Base for every failure on the external rate provider path."""


class ProviderUnavailableError(ProviderError):
	pass


class ProviderOverloadedError(ProviderError):
	pass


class ProviderNetworkError(ProviderError):
	pass


class ProviderDecodeError(ProviderError):
	pass


class ProviderHTTPError(ProviderError):
	def __init__(self, status_code: int, message: str):
		self.status_code = status_code
		super().__init__(message)
