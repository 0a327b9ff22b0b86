import asyncio
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .base import PriceProvider

_SOURCE = {"name": "coingecko", "url": "https://coingecko.com"}

PLATFORM_IDS: Dict[str, str] = {
    "ethereum": "ethereum",
    "bsc": "binance-smart-chain",
    "solana": "solana",
}


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for token prices and market listings"""

    name = "coingecko"
    timeout_s = 15

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = settings.coingecko_api_key if api_key is None else api_key
        self.base_url = "https://api.coingecko.com/api/v3"

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"accept": "application/json"}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def ready(self) -> bool:
        return True  # API key is optional for the public tier

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/ping",
                    headers=self._build_headers(),
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        async with httpx.AsyncClient() as client:
            for attempt in range(2):
                response = await client.get(
                    f"{self.base_url}{path}",
                    headers=self._build_headers(),
                    params=params,
                    timeout=self.timeout_s,
                )
                # One short pause on the free tier's rate limit, then surface it
                if response.status_code == 429 and attempt == 0:
                    await asyncio.sleep(1)
                    continue
                return response
        return response

    async def get_token_prices(self, coin_ids: List[str], vs_currency: str = "usd") -> Dict[str, Any]:
        """Get current prices and 24h change for CoinGecko coin ids"""
        if not coin_ids:
            return {}

        params = {
            "ids": ",".join(coin_ids),
            "vs_currencies": vs_currency,
            "include_24hr_change": "true",
        }
        response = await self._get("/simple/price", params)
        response.raise_for_status()
        data = response.json()

        prices: Dict[str, Any] = {}
        for coin_id, price_data in data.items():
            if vs_currency not in price_data:
                continue
            prices[coin_id] = {
                "price_usd": price_data[vs_currency],
                "change_24h": price_data.get(f"{vs_currency}_24h_change"),
                "_source": _SOURCE,
            }
        return prices

    async def get_markets(self, per_page: int = 100, page: int = 1, vs_currency: str = "usd") -> List[Dict[str, Any]]:
        """Market listing ordered by market cap, as returned by Coingecko"""
        params = {
            "vs_currency": vs_currency,
            "order": "market_cap_desc",
            "per_page": per_page,
            "page": page,
        }
        response = await self._get("/coins/markets", params)
        response.raise_for_status()
        return response.json()

    async def get_contract_info(self, address: str, chain: str = "ethereum") -> Optional[Dict[str, Any]]:
        """Coin details for a token contract, or None when Coingecko does not list it"""
        platform = PLATFORM_IDS.get(chain, "ethereum")
        response = await self._get(f"/coins/{platform}/contract/{address}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()
