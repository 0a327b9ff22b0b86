"""
Token price oracle.

Live USD prices come from Coingecko and are cached for ``price_cache_ttl_seconds``.
When Coingecko is unreachable the registry's reference price is used instead,
so a quote is always available for a supported token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from ..cache import TTLCache
from ..config import settings
from ..providers.coingecko import CoingeckoProvider
from .tokens import get_token_info

logger = logging.getLogger(__name__)

TREND_THRESHOLD_PCT = 2.0


@dataclass
class PriceQuote:
    symbol: str
    price_usd: Decimal
    change_24h: Optional[float] = None
    source: str = "reference"

    @property
    def trend(self) -> str:
        if self.change_24h is None:
            return "stable"
        if self.change_24h > TREND_THRESHOLD_PCT:
            return "up"
        if self.change_24h < -TREND_THRESHOLD_PCT:
            return "down"
        return "stable"


@dataclass
class SwapValueEstimate:
    estimated_value: Decimal
    price_impact: float
    trend: str
    from_price: Decimal
    to_price: Decimal
    usd_value: Decimal


def estimate_price_impact(usd_value: Decimal) -> float:
    """Rough price impact (percent) by trade size in USD"""
    if usd_value > 10_000:
        return 1.0
    if usd_value > 1_000:
        return 0.5
    if usd_value > 100:
        return 0.1
    return 0.0


class PriceOracle:
    def __init__(
        self,
        provider: Optional[CoingeckoProvider] = None,
        cache: Optional[TTLCache] = None,
    ):
        self.provider = provider or CoingeckoProvider()
        self.cache = cache or TTLCache(
            default_ttl=settings.price_cache_ttl_seconds,
            max_size=settings.max_cache_size,
        )

    async def get_quote(self, symbol: str) -> PriceQuote:
        """Quote for a supported token; raises ``ValueError`` for unknown symbols"""
        info = get_token_info(symbol)
        if info is None:
            raise ValueError(f"Unsupported token: {symbol}")

        cache_key = f"price:{info.symbol}"
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            prices = await self.provider.get_token_prices([info.coingecko_id])
        except Exception as exc:
            logger.warning("Price lookup for %s failed, using reference price: %s", info.symbol, exc)
            return PriceQuote(symbol=info.symbol, price_usd=info.reference_price_usd)

        entry = prices.get(info.coingecko_id)
        if not entry or entry.get("price_usd") is None:
            return PriceQuote(symbol=info.symbol, price_usd=info.reference_price_usd)

        quote = PriceQuote(
            symbol=info.symbol,
            price_usd=Decimal(str(entry["price_usd"])),
            change_24h=entry.get("change_24h"),
            source="coingecko",
        )
        await self.cache.set(cache_key, quote)
        return quote

    async def get_price(self, symbol: str) -> Decimal:
        return (await self.get_quote(symbol)).price_usd

    async def get_prices(self, symbols: Iterable[str]) -> Dict[str, Decimal]:
        """USD prices for the supported symbols among ``symbols``"""
        prices: Dict[str, Decimal] = {}
        for symbol in symbols:
            if get_token_info(symbol) is None:
                continue
            prices[symbol.upper()] = await self.get_price(symbol)
        return prices

    async def estimate_swap_value(self, from_token: str, to_token: str, amount: str) -> SwapValueEstimate:
        """Expected output of swapping ``amount`` of ``from_token`` into ``to_token``

        Raises:
            ValueError: unknown token, non-numeric or non-positive amount
        """
        try:
            quantity = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid amount: {amount}") from exc
        if quantity <= 0:
            raise ValueError(f"Invalid amount: {amount}")

        from_quote = await self.get_quote(from_token)
        to_quote = await self.get_quote(to_token)
        if to_quote.price_usd <= 0:
            raise ValueError(f"No price available for {to_token}")

        usd_value = quantity * from_quote.price_usd
        price_impact = estimate_price_impact(usd_value)
        estimated = usd_value / to_quote.price_usd
        estimated *= Decimal(1) - Decimal(str(price_impact)) / Decimal(100)

        return SwapValueEstimate(
            estimated_value=estimated,
            price_impact=price_impact,
            trend=to_quote.trend,
            from_price=from_quote.price_usd,
            to_price=to_quote.price_usd,
            usd_value=usd_value,
        )


price_oracle = PriceOracle()
