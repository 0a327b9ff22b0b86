import asyncio
from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings
from ..providers.coingecko import CoingeckoProvider
from ..providers.coinmarketcap import CoinMarketCapProvider
from ..providers.solana import SolanaProvider

router = APIRouter()

# "unavailable" means not configured, which only degrades optional features
_OK_STATUSES = {"healthy", "configured", "unavailable"}
_AVAILABLE_STATUSES = {"healthy", "configured"}


def _llm_status() -> Dict[str, Any]:
    if settings.has_llm_key:
        return {"status": "configured", "provider": settings.llm_provider, "model": settings.llm_model}
    return {
        "status": "unavailable",
        "provider": settings.llm_provider,
        "reason": "No API key; chat falls back to the local intent matcher",
    }


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Upstream status for the Solana RPC node, market data APIs and the LLM key"""
    solana, coingecko, coinmarketcap = await asyncio.gather(
        SolanaProvider().health_check(),
        CoingeckoProvider().health_check(),
        CoinMarketCapProvider().health_check(),
    )
    providers = {
        "solana": solana,
        "coingecko": coingecko,
        "coinmarketcap": coinmarketcap,
        "llm": _llm_status(),
    }

    available = sum(1 for status in providers.values() if status["status"] in _AVAILABLE_STATUSES)
    all_ok = all(status["status"] in _OK_STATUSES for status in providers.values())

    return {
        "status": "healthy" if all_ok and available > 0 else "degraded",
        "providers": providers,
        "available_providers": available,
        "total_providers": len(providers),
        "network": settings.normalized_network,
    }
