from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExchangeRateResponse(BaseModel):
	from_currency: str = Field(..., serialization_alias='from', description='Source currency code')
	to_currency: str = Field(..., serialization_alias='to', description='Target currency code')
	rate: Decimal = Field(..., description='Unrounded cross rate')


class RatesResponse(BaseModel):
	source_info: str = Field(..., description='Where the rates came from (live or mock)')
	rates: list[ExchangeRateResponse]

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'source_info': 'No API key: using mock rates',
				'rates': [{'from': 'EUR', 'to': 'GBP', 'rate': '0.8588235294117647'}],
			}
		}
	)


class ExchangeResponse(BaseModel):
	from_currency: str = Field(..., serialization_alias='from', description='Source currency code')
	to_currency: str = Field(..., serialization_alias='to', description='Target currency code')
	amount: Decimal = Field(..., description='Converted amount, rounded to the target scale')

	model_config = ConfigDict(
		json_schema_extra={'example': {'from': 'WBTC', 'to': 'USDT', 'amount': '57094.314314'}}
	)


class CurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')


class ErrorResponse(BaseModel):
	detail: str
	error: str | None = None
	example: str | None = None


class HealthResponse(BaseModel):
	status: str
	service: str
	version: str
	timestamp: int
	environment: str
	rates_mode: str = Field(..., description='live or mock')
	circuit_breaker: dict[str, Any] | None = None
	features: list[str]
	endpoints: dict[str, str]
