"""DexScreener token pair lookups."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .base import Provider


class DexScreenerProvider(Provider):
    name = "dexscreener"
    timeout_s = 15

    def __init__(self) -> None:
        self.base_url = "https://api.dexscreener.com/latest/dex"

    async def ready(self) -> bool:
        return True  # public API

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "configured"}

    async def get_token_pairs(self, address: str, chain: Optional[str] = None) -> Dict[str, Any]:
        """Pairs trading ``address``; ``chain`` narrows the base chain for solana/bsc"""
        params = {}
        if chain in {"solana", "bsc"}:
            params["baseChain"] = chain

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.get(f"{self.base_url}/tokens/{address}", params=params)
            response.raise_for_status()
            return response.json()
