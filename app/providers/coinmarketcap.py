"""CoinMarketCap listings provider used by the market trends route."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings
from .base import Provider


class CoinMarketCapError(Exception):
    """Upstream responded with a non-success status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"CoinMarketCap returned {status_code}")


class CoinMarketCapProvider(Provider):
    name = "coinmarketcap"
    timeout_s = 15

    def __init__(self, api_key: Optional[str] = None) -> None:
        self.api_key = settings.coinmarketcap_api_key if api_key is None else api_key
        self.base_url = "https://pro-api.coinmarketcap.com/v1"

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "API key not configured"}
        return {"status": "configured"}

    async def get_latest_listings(self, limit: int = 30) -> Dict[str, Any]:
        """Raw ``/cryptocurrency/listings/latest`` payload"""
        if not await self.ready():
            raise RuntimeError("CoinMarketCap API key not configured")

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.get(
                f"{self.base_url}/cryptocurrency/listings/latest",
                params={"limit": limit},
                headers={
                    "X-CMC_PRO_API_KEY": self.api_key,
                    "Accept": "application/json",
                },
            )

        if response.status_code >= 400:
            raise CoinMarketCapError(response.status_code, response.text)
        return response.json()
