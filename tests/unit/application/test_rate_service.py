import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from application.services import RateService
from domain.exceptions.currency import (
    InsufficientInputError,
    InvalidRateError,
    ProviderNetworkError,
    ProviderUnavailableError,
    UnsupportedCurrencyError,
    ValidationError,
)
from domain.models.money import divide
from infrastructure.providers import MockRateProvider, OpenExchangeProvider, RateProvider
from infrastructure.resilience.circuit_breaker import CircuitState


def provider_returning(rates: dict[str, Decimal], source_info: str = "test rates"):
    provider = AsyncMock(spec=RateProvider)
    provider.name = "test"
    provider.get_rates.return_value = (rates, source_info)
    return provider


@pytest.mark.asyncio
async def test_cross_rates_for_three_currencies():
    service = RateService(provider=MockRateProvider())

    rates, source_info = await service.get_all_rates(["USD", "EUR", "GBP"])

    pairs = [(r.from_currency, r.to_currency) for r in rates]
    assert pairs == [
        ("USD", "EUR"),
        ("USD", "GBP"),
        ("EUR", "USD"),
        ("EUR", "GBP"),
        ("GBP", "USD"),
        ("GBP", "EUR"),
    ]
    assert source_info == MockRateProvider.SOURCE_INFO

    eur_gbp = next(r for r in rates if (r.from_currency, r.to_currency) == ("EUR", "GBP"))
    assert str(eur_gbp.rate).startswith("0.8588235294117647")
    assert eur_gbp.rate == divide(Decimal("0.73"), Decimal("0.85"))


@pytest.mark.asyncio
async def test_every_cross_rate_is_exact_quotient():
    live = {"USD": Decimal("1"), "JPY": Decimal("110.0"), "CHF": Decimal("0.92"), "SEK": Decimal("10.5")}
    service = RateService(provider=provider_returning(live))

    rates, _ = await service.get_all_rates(list(live))

    assert len(rates) == 12
    for rate in rates:
        assert rate.rate == divide(live[rate.to_currency], live[rate.from_currency])


@pytest.mark.asyncio
async def test_codes_are_normalized_before_calling_provider():
    provider = provider_returning({"USD": Decimal("1"), "EUR": Decimal("0.85")})
    service = RateService(provider=provider)

    rates, _ = await service.get_all_rates([" usd", "Eur "])

    provider.get_rates.assert_awaited_once_with(["USD", "EUR"], timeout=None)
    assert [(r.from_currency, r.to_currency) for r in rates] == [("USD", "EUR"), ("EUR", "USD")]


@pytest.mark.asyncio
async def test_ordering_ignores_provider_key_order():
    provider = provider_returning({"GBP": Decimal("0.73"), "EUR": Decimal("0.85")})
    service = RateService(provider=provider)

    rates, _ = await service.get_all_rates(["EUR", "GBP"])

    assert [(r.from_currency, r.to_currency) for r in rates] == [("EUR", "GBP"), ("GBP", "EUR")]


@pytest.mark.asyncio
@pytest.mark.parametrize("currencies", [[], ["A"], ["usd", "USD"]])
async def test_insufficient_currencies(currencies):
    provider = provider_returning({})
    service = RateService(provider=provider)

    with pytest.raises(InsufficientInputError):
        await service.get_all_rates(currencies)

    provider.get_rates.assert_not_called()


@pytest.mark.asyncio
async def test_blank_code_is_rejected():
    service = RateService(provider=provider_returning({}))

    with pytest.raises(ValidationError):
        await service.get_all_rates(["USD", " "])


@pytest.mark.asyncio
async def test_missing_currency_from_provider_fails():
    service = RateService(provider=MockRateProvider())

    with pytest.raises(UnsupportedCurrencyError) as exc_info:
        await service.get_all_rates(["USD", "XYZ"])

    assert exc_info.value.code == "XYZ"
    assert "not supported or not available" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_rate", [Decimal("0"), Decimal("-1"), Decimal("NaN")])
async def test_invalid_rate_names_both_sides(bad_rate):
    service = RateService(provider=provider_returning({"USD": Decimal("1"), "EUR": bad_rate}))

    with pytest.raises(InvalidRateError) as exc_info:
        await service.get_all_rates(["USD", "EUR"])

    assert exc_info.value.from_currency == "USD"
    assert exc_info.value.to_currency == "EUR"
    assert "USD=1" in str(exc_info.value)


@pytest.mark.asyncio
async def test_provider_errors_propagate_without_retry():
    provider = AsyncMock(spec=RateProvider)
    provider.get_rates.side_effect = ProviderUnavailableError("service protection active")
    service = RateService(provider=provider)

    with pytest.raises(ProviderUnavailableError):
        await service.get_all_rates(["USD", "EUR"])

    assert provider.get_rates.await_count == 1


@pytest.mark.asyncio
async def test_timeout_bounds_live_fetch_and_counts_as_breaker_failure(breaker):
    async def never_answers(*args, **kwargs):
        await asyncio.sleep(10)

    client = AsyncMock(spec=httpx.AsyncClient)
    client.get.side_effect = never_answers
    provider = OpenExchangeProvider(app_id="test_key", breaker=breaker, client=client)
    service = RateService(provider=provider)

    with pytest.raises(ProviderNetworkError, match="timed out"):
        await service.get_all_rates(["USD", "EUR"], timeout=0.01)

    assert client.get.await_count == 1
    assert breaker.counts.consecutive_failures == 1
    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_mock_provider_accepts_timeout():
    service = RateService(provider=MockRateProvider())

    rates, _ = await service.get_all_rates(["USD", "EUR"], timeout=0.01)

    assert len(rates) == 2
