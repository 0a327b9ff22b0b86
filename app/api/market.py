import logging
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..cache import TTLCache
from ..config import settings
from ..providers.coingecko import CoingeckoProvider
from ..providers.coinmarketcap import CoinMarketCapError, CoinMarketCapProvider

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

TRENDS_CACHE_KEY = "market-trends"
MARKET_DATA_ERROR = {"error": "Failed to fetch market data"}

coingecko = CoingeckoProvider()
trends_cache = TTLCache(default_ttl=settings.market_trends_cache_seconds, max_size=8)


def get_trends_provider() -> CoinMarketCapProvider:
    return CoinMarketCapProvider()


def shape_listings(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the listing fields the market panel renders"""
    coins = []
    for coin in payload.get("data") or []:
        usd = (coin.get("quote") or {}).get("USD") or {}
        coins.append(
            {
                "id": coin.get("id"),
                "name": coin.get("name"),
                "symbol": coin.get("symbol"),
                "quote": {
                    "USD": {
                        "price": usd.get("price"),
                        "percent_change_24h": usd.get("percent_change_24h"),
                        "percent_change_7d": usd.get("percent_change_7d"),
                        "market_cap": usd.get("market_cap"),
                        "volume_24h": usd.get("volume_24h"),
                    }
                },
            }
        )

    status = payload.get("status") or {}
    return {
        "data": coins,
        "status": {
            "timestamp": status.get("timestamp"),
            "error_code": status.get("error_code"),
            "error_message": status.get("error_message"),
        },
    }


@router.get("/market-data")
async def get_market_data():
    """Top 100 coins by market cap, straight from Coingecko"""
    try:
        return await coingecko.get_markets(per_page=100, page=1)
    except Exception as exc:
        logger.warning("Market data fetch failed: %s", exc)
        return JSONResponse(status_code=500, content=MARKET_DATA_ERROR)


@router.post("/market-data")
async def post_market_data():
    return JSONResponse(status_code=501, content={"message": "Method not implemented"})


@router.get("/market-trends")
async def get_market_trends():
    """Top 30 CoinMarketCap listings, cached between refreshes"""
    provider = get_trends_provider()
    if not await provider.ready():
        logger.error("CoinMarketCap API key not found")
        return JSONResponse(status_code=500, content={"error": "API key not configured"})

    cached = await trends_cache.get(TRENDS_CACHE_KEY)
    if cached is not None:
        return cached

    try:
        payload = await provider.get_latest_listings(limit=30)
    except CoinMarketCapError as exc:
        logger.error("CoinMarketCap API error: %s", exc.body)
        return JSONResponse(status_code=exc.status_code, content=MARKET_DATA_ERROR)
    except Exception as exc:
        logger.error("Error fetching from CoinMarketCap: %s", exc)
        return JSONResponse(status_code=500, content=MARKET_DATA_ERROR)

    shaped = shape_listings(payload)
    await trends_cache.set(TRENDS_CACHE_KEY, shaped)
    return shaped
