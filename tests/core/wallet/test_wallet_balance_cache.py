import pytest

from app.core.wallet import (
    TokenBalance,
    WalletBalanceCache,
    WalletBalances,
    WalletDataProvider,
)

ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    def __init__(self, sol_balance: float = 1.5):
        self.sol_balance = sol_balance
        self.calls = 0
        self.error = None

    async def get_wallet_balances(self, address: str) -> WalletBalances:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return WalletBalances(
            sol_balance=self.sol_balance,
            token_balances=[TokenBalance(symbol="USDC", balance=25.0)],
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def cache(provider, clock):
    return WalletBalanceCache(provider=provider, ttl_seconds=30, clock=clock)


@pytest.mark.asyncio
async def test_fresh_entry_is_served_without_refetch(cache, provider, clock):
    first = await cache.get(ADDRESS)
    clock.advance(29)
    second = await cache.get(ADDRESS)

    assert second is first
    assert provider.calls == 1


@pytest.mark.asyncio
async def test_expired_entry_triggers_one_refetch(cache, provider, clock):
    await cache.get(ADDRESS)
    provider.sol_balance = 3.0
    clock.advance(30)

    entry = await cache.get(ADDRESS)
    again = await cache.get(ADDRESS)

    assert provider.calls == 2
    assert entry.sol_balance == 3.0
    assert again is entry


@pytest.mark.asyncio
async def test_stale_entry_served_when_refresh_fails(cache, provider, clock):
    original = await cache.get(ADDRESS)
    clock.advance(120)
    provider.error = RuntimeError("rpc down")

    entry = await cache.get(ADDRESS)

    assert entry is original
    assert entry.sol_balance == 1.5


@pytest.mark.asyncio
async def test_zero_balance_when_nothing_cached_and_not_stored(cache, provider):
    provider.error = RuntimeError("rpc down")

    entry = await cache.get(ADDRESS)

    assert entry.sol_balance == 0
    assert entry.token_balances == []
    assert entry.address == ADDRESS

    provider.error = None
    recovered = await cache.get(ADDRESS)
    assert recovered.sol_balance == 1.5
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_get_wallet_balances_without_address(cache, provider):
    balances = await cache.get_wallet_balances(None)

    assert balances.sol_balance == 0
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(cache, provider):
    await cache.get(ADDRESS)
    cache.invalidate(ADDRESS)
    await cache.get(ADDRESS)

    assert provider.calls == 2


@pytest.mark.asyncio
async def test_prefetch_swallows_errors(cache, provider):
    provider.error = RuntimeError("boom")

    await cache.prefetch(ADDRESS)

    assert provider.calls == 1


class FakeIndexer:
    async def get_native_balance(self, address):
        return {"symbol": "SOL", "balance": 2.25}

    async def get_token_balances(self, address):
        return {
            "tokens": [
                {"symbol": "SOL", "balance": 9, "mint": "So11111111111111111111111111111111111111112"},
                {"symbol": "BONK", "balance": 1_000_000, "decimals": 5},
            ]
        }

    async def get_recent_transactions(self, address, limit=10):
        return [
            {
                "signature": "sig1",
                "timestamp": 1700000000,
                "type": "swap",
                "amount": "0.5000",
                "from_token": "SOL",
                "status": "confirmed",
                "description": "Swapped 0.5000 SOL",
            }
        ][:limit]


@pytest.mark.asyncio
async def test_provider_excludes_sol_from_token_list():
    provider = WalletDataProvider(indexer=FakeIndexer())

    balances = await provider.get_wallet_balances(ADDRESS)

    assert balances.sol_balance == 2.25
    assert [token.symbol for token in balances.token_balances] == ["BONK"]


@pytest.mark.asyncio
async def test_provider_transactions_serialize_camel_case():
    provider = WalletDataProvider(indexer=FakeIndexer())

    transactions = await provider.get_recent_transactions(ADDRESS, 5)

    assert transactions[0].to_wire()["fromToken"] == "SOL"
    assert "toToken" not in transactions[0].to_wire()
