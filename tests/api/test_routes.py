import pytest
from fastapi.testclient import TestClient

from app.api import health, intent_parser, market, swap_execution, token_data, wallet
from app.cache import TTLCache
from app.core.intents import IntentMatcher
from app.core.recovery import RequestTimeoutError
from app.core.swap import SwapService
from app.core.wallet import WalletOverview
from app.main import app
from app.providers.coinmarketcap import CoinMarketCapError, CoinMarketCapProvider
from app.services.price_oracle import PriceOracle

client = TestClient(app)

ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class OfflineCoingecko:
    async def get_token_prices(self, ids):
        return {}

    async def get_markets(self, per_page=100, page=1):
        return [{"id": "solana", "symbol": "sol"}]


class FixedRandom:
    def random(self):
        return 0.0


class FakeChatService:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []
        self.matcher = IntentMatcher(
            price_oracle=PriceOracle(provider=OfflineCoingecko(), cache=TTLCache()),
            rng=FixedRandom(),
        )

    async def process(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def chat(monkeypatch):
    service = FakeChatService(result={"message": "ok", "intent": None})
    monkeypatch.setattr(intent_parser, "chat_service", service)
    return service


def test_root():
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.json()["name"] == "Solana Wallet Assistant API"


@pytest.mark.parametrize("payload", [{}, {"prompt": ""}, {"prompt": 42}])
def test_intent_parser_requires_prompt(chat, payload):
    resp = client.post("/api/intent-parser", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request. Prompt is required."}
    assert chat.requests == []


def test_intent_parser_success_envelope(chat):
    resp = client.post(
        "/api/intent-parser",
        json={"prompt": "hi", "walletConnected": True, "walletAddress": ADDRESS, "sessionId": "abc"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"result": {"message": "ok", "intent": None}, "status": "success"}
    assert chat.requests[0].session_id == "abc"
    assert chat.requests[0].wallet_address == ADDRESS


def test_null_session_id_uses_default_session(chat):
    resp = client.post("/api/intent-parser", json={"prompt": "hi", "sessionId": None})

    assert resp.status_code == 200
    assert chat.requests[0].session_id == "default"

    resp = client.post("/api/intent-match", json={"prompt": "hello", "sessionId": None})

    assert resp.status_code == 200
    assert resp.json()["message"]


def test_intent_parser_failure(monkeypatch):
    monkeypatch.setattr(intent_parser, "chat_service", FakeChatService(error=RequestTimeoutError(30, "Intent processing")))

    resp = client.post("/api/intent-parser", json={"prompt": "hi"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to process intent"
    assert "timed out after 30s" in body["details"]


def test_intent_match_runs_local_matcher(chat):
    resp = client.post("/api/intent-match", json={"prompt": "What is SOL"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["intent"] == {"action": "tokenInfo", "token": "SOL"}
    assert "Solana" in body["message"]


def test_market_data_post_not_implemented():
    resp = client.post("/api/market-data")

    assert resp.status_code == 501
    assert resp.json() == {"message": "Method not implemented"}


def test_market_data_get(monkeypatch):
    monkeypatch.setattr(market, "coingecko", OfflineCoingecko())

    resp = client.get("/api/market-data")

    assert resp.status_code == 200
    assert resp.json() == [{"id": "solana", "symbol": "sol"}]


def test_market_data_failure(monkeypatch):
    class Broken:
        async def get_markets(self, per_page=100, page=1):
            raise RuntimeError("down")

    monkeypatch.setattr(market, "coingecko", Broken())

    resp = client.get("/api/market-data")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch market data"}


def test_market_trends_without_key(monkeypatch):
    monkeypatch.setattr(market, "get_trends_provider", lambda: CoinMarketCapProvider(api_key=""))

    resp = client.get("/api/market-trends")

    assert resp.status_code == 500
    assert resp.json() == {"error": "API key not configured"}


class FakeTrendsProvider:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    async def ready(self):
        return True

    async def get_latest_listings(self, limit=30):
        self.calls += 1
        if self.error:
            raise self.error
        return {
            "data": [
                {
                    "id": 5426,
                    "name": "Solana",
                    "symbol": "SOL",
                    "tags": ["layer-1"],
                    "quote": {"USD": {"price": 150.0, "percent_change_24h": 3.1, "market_cap": 7e10}},
                }
            ],
            "status": {"timestamp": "2024-01-01T00:00:00Z", "error_code": 0, "error_message": None},
        }


def test_market_trends_are_shaped_and_cached(monkeypatch):
    provider = FakeTrendsProvider()
    monkeypatch.setattr(market, "get_trends_provider", lambda: provider)
    monkeypatch.setattr(market, "trends_cache", TTLCache(default_ttl=120))

    first = client.get("/api/market-trends")
    second = client.get("/api/market-trends")

    assert first.status_code == 200
    coin = first.json()["data"][0]
    assert coin["symbol"] == "SOL"
    assert "tags" not in coin
    assert coin["quote"]["USD"]["percent_change_24h"] == 3.1
    assert second.json() == first.json()
    assert provider.calls == 1


def test_market_trends_upstream_status(monkeypatch):
    provider = FakeTrendsProvider(error=CoinMarketCapError(429, "rate limited"))
    monkeypatch.setattr(market, "get_trends_provider", lambda: provider)
    monkeypatch.setattr(market, "trends_cache", TTLCache(default_ttl=120))

    resp = client.get("/api/market-trends")

    assert resp.status_code == 429
    assert resp.json() == {"error": "Failed to fetch market data"}


@pytest.fixture
def offline_swaps(monkeypatch):
    service = SwapService(price_oracle=PriceOracle(provider=OfflineCoingecko(), cache=TTLCache()))
    monkeypatch.setattr(swap_execution, "swap_service", service)
    return service


def test_swap_execution_missing_fields(offline_swaps):
    resp = client.post("/api/swap-execution", json={"intent": {"fromToken": "SOL", "amount": "1"}})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid swap request. Missing required parameters."}


def test_swap_execution_invalid_swap(offline_swaps):
    resp = client.post(
        "/api/swap-execution",
        json={"intent": {"fromToken": "SOL", "toToken": "SOL", "amount": "1"}},
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot swap a token for itself"


def test_swap_execution_valid(offline_swaps):
    intent = {"action": "swap", "fromToken": "SOL", "toToken": "USDC", "amount": "1"}

    resp = client.post("/api/swap-execution", json={"intent": intent, "walletData": {"solBalance": 5}})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["intent"] == intent
    assert body["estimate"]["estimatedOutput"] == "149.850000"


def test_wallet_rejects_bad_address():
    resp = client.get("/api/wallet/not-a-wallet")

    assert resp.status_code == 400


def test_wallet_upstream_failure(monkeypatch):
    class Failing:
        async def get_wallet_overview_with_retry(self, address):
            raise RuntimeError("rpc unavailable")

    monkeypatch.setattr(wallet, "wallet_data_provider", Failing())

    resp = client.get(f"/api/wallet/{ADDRESS}")

    assert resp.status_code == 502
    assert "rpc unavailable" in resp.json()["error"]


def test_wallet_overview(monkeypatch):
    class Working:
        async def get_wallet_overview_with_retry(self, address):
            return WalletOverview(
                address=address,
                sol_balance=1.0,
                total_value_usd=150.0,
                explorer_url=f"https://explorer.solana.com/address/{address}",
            )

    monkeypatch.setattr(wallet, "wallet_data_provider", Working())

    resp = client.get(f"/api/wallet/{ADDRESS}")

    assert resp.status_code == 200
    assert resp.json()["solBalance"] == 1.0
    assert resp.json()["totalValueUsd"] == 150.0


def test_token_data_requires_address():
    resp = client.get("/api/token-data")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"


def test_token_data_rejects_unknown_chain():
    resp = client.get("/api/token-data", params={"address": ADDRESS, "chain": "dogechain"})

    assert resp.status_code == 400


def test_token_data_rejects_unrecognised_address():
    resp = client.get("/api/token-data", params={"address": "hello"})

    assert resp.status_code == 400
    assert "Unrecognised token address" in resp.json()["error"]


def test_health_reports_providers(monkeypatch):
    class Healthy:
        async def health_check(self):
            return {"status": "healthy"}

    monkeypatch.setattr(health, "SolanaProvider", Healthy)
    monkeypatch.setattr(health, "CoingeckoProvider", Healthy)
    monkeypatch.setattr(health, "CoinMarketCapProvider", lambda: CoinMarketCapProvider(api_key=""))

    resp = client.get("/healthz")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert set(body["providers"]) == {"solana", "coingecko", "coinmarketcap", "llm"}
    assert body["providers"]["coinmarketcap"]["status"] == "unavailable"
