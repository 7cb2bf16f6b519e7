from .responses import (
	CurrenciesResponse,
	ErrorResponse,
	ExchangeRateResponse,
	ExchangeResponse,
	HealthResponse,
	RatesResponse,
)

__all__ = [
	'CurrenciesResponse',
	'ErrorResponse',
	'ExchangeRateResponse',
	'ExchangeResponse',
	'HealthResponse',
	'RatesResponse',
]
