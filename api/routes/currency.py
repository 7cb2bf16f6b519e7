from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from api.dependencies import get_conversion_service, get_rate_service
from api.schemas import (
	CurrenciesResponse,
	ErrorResponse,
	ExchangeRateResponse,
	ExchangeResponse,
	RatesResponse,
)
from application.services import ConversionService, RateService
from config.settings import Settings, get_settings

router = APIRouter(prefix='/api/v1', tags=['currency'])


@router.get(
	'/rates',
	response_model=RatesResponse,
	responses={400: {'model': ErrorResponse}},
	status_code=status.HTTP_200_OK,
	summary='Get cross rates for a list of currencies (minimum 2)',
)
async def get_rates(
	service: Annotated[RateService, Depends(get_rate_service)],
	settings: Annotated[Settings, Depends(get_settings)],
	currencies: Annotated[
		str | None,
		Query(description='Comma-separated list of currency codes, e.g. USD,EUR,GBP'),
	] = None,
):
	if not currencies or not currencies.strip():
		return JSONResponse(
			status_code=status.HTTP_400_BAD_REQUEST,
			content={
				'detail': 'currencies parameter is required',
				'example': 'GET /api/v1/rates?currencies=USD,EUR,GBP',
			},
		)

	rates, source_info = await service.get_all_rates(
		currencies.split(','), timeout=settings.PROVIDER_TIMEOUT_SECONDS
	)
	return RatesResponse(
		source_info=source_info,
		rates=[
			ExchangeRateResponse(from_currency=r.from_currency, to_currency=r.to_currency, rate=r.rate)
			for r in rates
		],
	)


@router.get(
	'/exchange',
	response_model=ExchangeResponse,
	responses={400: {'model': ErrorResponse}},
	status_code=status.HTTP_200_OK,
	summary='Exchange one cryptocurrency for another at fixed rates',
)
async def exchange(
	service: Annotated[ConversionService, Depends(get_conversion_service)],
	from_currency: Annotated[str | None, Query(alias='from', description='Source currency code')] = None,
	to_currency: Annotated[str | None, Query(alias='to', description='Target currency code')] = None,
	amount: Annotated[str | None, Query(description='Amount to exchange')] = None,
) -> ExchangeResponse:
	result = service.convert(from_currency, to_currency, amount)
	return ExchangeResponse(
		from_currency=result.from_currency,
		to_currency=result.to_currency,
		amount=result.amount,
	)


@router.get(
	'/currencies',
	response_model=CurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List currencies supported by the exchange endpoint',
)
async def get_supported_currencies(
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> CurrenciesResponse:
	return CurrenciesResponse(currencies=service.supported_currencies())
