from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
ENVIRONMENTS = {'development', 'staging', 'production', 'test'}


class Settings(BaseSettings):
	# Application
	APP_NAME: str = 'Currency Exchange API'
	VERSION: str = '2.0.0'
	ENVIRONMENT: str = 'development'
	DEBUG: bool = False

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	# Rates provider; a blank key switches to the built-in mock rates
	OPEN_EXCHANGE_API_KEY: str = ''
	OPEN_EXCHANGE_BASE_URL: str = 'https://openexchangerates.org/api'
	PROVIDER_TIMEOUT_SECONDS: float = 10

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@field_validator('LOG_LEVEL')
	@classmethod
	def validate_log_level(cls, v: str) -> str:
		level = v.strip().upper()
		if level not in LOG_LEVELS:
			raise ValueError(f'LOG_LEVEL must be one of: {", ".join(sorted(LOG_LEVELS))}')
		return level

	@field_validator('ENVIRONMENT')
	@classmethod
	def validate_environment(cls, v: str) -> str:
		env = v.strip().lower()
		if env not in ENVIRONMENTS:
			raise ValueError(f'ENVIRONMENT must be one of: {", ".join(sorted(ENVIRONMENTS))}')
		return env

	@field_validator('PROVIDER_TIMEOUT_SECONDS')
	@classmethod
	def validate_timeout(cls, v: float) -> float:
		if v <= 0:
			raise ValueError('PROVIDER_TIMEOUT_SECONDS must be positive')
		return v


@lru_cache
def get_settings() -> Settings:
	return Settings()
