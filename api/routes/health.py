import time
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_circuit_breaker, get_rate_provider
from api.schemas import HealthResponse
from config.settings import Settings, get_settings
from infrastructure.providers import RateProvider
from infrastructure.resilience.circuit_breaker import CircuitBreaker

router = APIRouter(tags=['health'])


@router.get('/health', response_model=HealthResponse, summary='Service health and circuit breaker state')
async def health_check(
	settings: Annotated[Settings, Depends(get_settings)],
	provider: Annotated[RateProvider, Depends(get_rate_provider)],
	breaker: Annotated[CircuitBreaker, Depends(get_circuit_breaker)],
) -> HealthResponse:
	live = provider.name != 'mock'
	breaker_status = breaker.get_status() if live else None
	degraded = breaker_status is not None and breaker_status['status'] != 'healthy'

	return HealthResponse(
		status='degraded' if degraded else 'healthy',
		service='currency-exchange-api',
		version=settings.VERSION,
		timestamp=int(time.time()),
		environment=settings.ENVIRONMENT,
		rates_mode='live' if live else 'mock',
		circuit_breaker=breaker_status,
		features=[
			'cross rates for any currency set',
			'fixed-rate crypto exchange',
			'circuit breaker protected live rates',
		],
		endpoints={
			'health': '/health',
			'rates': '/api/v1/rates?currencies=USD,EUR,GBP',
			'exchange': '/api/v1/exchange?from=WBTC&to=USDT&amount=1.0',
			'currencies': '/api/v1/currencies',
		},
	)
