import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	CurrencyException,
	InsufficientInputError,
	InvalidRateError,
	ProviderError,
	ProviderOverloadedError,
	ProviderUnavailableError,
	UnsupportedCurrencyError,
	ValidationError,
)

logger = logging.getLogger(__name__)

CLIENT_ERRORS = (
	ValidationError,
	UnsupportedCurrencyError,
	InsufficientInputError,
	InvalidRateError,
)


def _error_response(status_code: int, exc: Exception, detail: str | None = None) -> JSONResponse:
	return JSONResponse(
		status_code=status_code,
		content={'detail': detail or str(exc), 'error': type(exc).__name__},
	)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(CurrencyException)
	async def currency_error_handler(request: Request, exc: CurrencyException):
		if isinstance(exc, CLIENT_ERRORS):
			logger.warning('Rejected request to %s: %s', request.url.path, exc)
			return _error_response(status.HTTP_400_BAD_REQUEST, exc)

		if isinstance(exc, ProviderUnavailableError):
			logger.error('Provider unavailable: %s', exc)
			return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)

		if isinstance(exc, ProviderOverloadedError):
			logger.error('Provider overloaded: %s', exc)
			return _error_response(status.HTTP_429_TOO_MANY_REQUESTS, exc)

		if isinstance(exc, ProviderError):
			logger.error('Provider error: %s', exc)
			return _error_response(
				status.HTTP_502_BAD_GATEWAY, exc, detail='Exchange rate service unavailable'
			)

		logger.error('Unhandled currency error: %s', exc)
		return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return JSONResponse(status_code=500, content={'detail': 'Internal server error'})
