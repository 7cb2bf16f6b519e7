import logging

from application.services import ConversionService, RateService
from config.settings import Settings, get_settings
from domain.models.currency import CRYPTO_CURRENCIES
from infrastructure.monitoring.logger import log_circuit_breaker_event
from infrastructure.providers import RateProvider, create_rate_provider
from infrastructure.resilience.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	breaker: CircuitBreaker | None = None
	provider: RateProvider | None = None


deps = AppDependencies()


def init_dependencies(settings: Settings | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()

	deps.breaker = CircuitBreaker(
		name='openexchange-api',
		on_state_change=log_circuit_breaker_event,
	)
	deps.provider = create_rate_provider(
		api_key=settings.OPEN_EXCHANGE_API_KEY,
		breaker=deps.breaker,
		base_url=settings.OPEN_EXCHANGE_BASE_URL,
		timeout=settings.PROVIDER_TIMEOUT_SECONDS,
	)
	logger.info('Dependencies initialized (rates provider: %s)', deps.provider.name)


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.provider:
		await deps.provider.close()
	deps.provider = None
	deps.breaker = None

	logger.info('Cleanup complete')


def get_circuit_breaker() -> CircuitBreaker:
	if deps.breaker is None:
		raise RuntimeError('Circuit breaker not initialized')
	return deps.breaker


def get_rate_provider() -> RateProvider:
	if deps.provider is None:
		raise RuntimeError('Rates provider not initialized')
	return deps.provider


def get_rate_service() -> RateService:
	return RateService(provider=get_rate_provider())


def get_conversion_service() -> ConversionService:
	return ConversionService(registry=CRYPTO_CURRENCIES)
