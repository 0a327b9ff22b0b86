from decimal import Decimal

import pytest

from app.cache import TTLCache
from app.services.price_oracle import PriceOracle, PriceQuote, estimate_price_impact


class FakeCoingecko:
    def __init__(self, prices=None, error=None):
        self.prices = prices or {}
        self.error = error
        self.calls = 0

    async def get_token_prices(self, ids):
        self.calls += 1
        if self.error:
            raise self.error
        return {i: self.prices[i] for i in ids if i in self.prices}


@pytest.mark.asyncio
async def test_live_quote_is_cached():
    provider = FakeCoingecko({"solana": {"price_usd": 180.5, "change_24h": 4.2}})
    oracle = PriceOracle(provider=provider, cache=TTLCache())

    first = await oracle.get_quote("sol")
    second = await oracle.get_quote("SOL")

    assert first.price_usd == Decimal("180.5")
    assert first.source == "coingecko"
    assert first.trend == "up"
    assert second is first
    assert provider.calls == 1


@pytest.mark.asyncio
async def test_reference_price_when_provider_fails():
    provider = FakeCoingecko(error=RuntimeError("429"))
    oracle = PriceOracle(provider=provider, cache=TTLCache())

    quote = await oracle.get_quote("USDC")
    await oracle.get_quote("USDC")

    assert quote.price_usd == Decimal("1")
    assert quote.source == "reference"
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_unknown_symbol_raises():
    oracle = PriceOracle(provider=FakeCoingecko(), cache=TTLCache())

    with pytest.raises(ValueError):
        await oracle.get_quote("DOGE")


@pytest.mark.asyncio
async def test_get_prices_skips_unknown_symbols():
    oracle = PriceOracle(provider=FakeCoingecko(), cache=TTLCache())

    prices = await oracle.get_prices(["SOL", "NOPE"])

    assert prices == {"SOL": Decimal("150")}


@pytest.mark.asyncio
async def test_estimate_rejects_bad_amount():
    oracle = PriceOracle(provider=FakeCoingecko(), cache=TTLCache())

    with pytest.raises(ValueError):
        await oracle.estimate_swap_value("SOL", "USDC", "zero")
    with pytest.raises(ValueError):
        await oracle.estimate_swap_value("SOL", "USDC", "0")


@pytest.mark.asyncio
async def test_estimate_applies_trend_of_target_token():
    provider = FakeCoingecko({"usd-coin": {"price_usd": 1.0, "change_24h": -3.0}})
    oracle = PriceOracle(provider=provider, cache=TTLCache())

    estimate = await oracle.estimate_swap_value("SOL", "USDC", "0.5")

    assert estimate.usd_value == Decimal("75.0")
    assert estimate.price_impact == 0.0
    assert estimate.estimated_value == Decimal("75.0")
    assert estimate.trend == "down"


def test_price_impact_tiers():
    assert estimate_price_impact(Decimal(50)) == 0.0
    assert estimate_price_impact(Decimal(500)) == 0.1
    assert estimate_price_impact(Decimal(5_000)) == 0.5
    assert estimate_price_impact(Decimal(50_000)) == 1.0


def test_trend_without_change_is_stable():
    assert PriceQuote(symbol="SOL", price_usd=Decimal(1)).trend == "stable"
    assert PriceQuote(symbol="SOL", price_usd=Decimal(1), change_24h=1.9).trend == "stable"
