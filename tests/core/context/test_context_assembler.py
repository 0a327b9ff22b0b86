import pytest

from app.core.context import ContextAssembler
from app.core.context.assembler import MAX_SUGGESTED_TOPICS, suggest_topics
from app.core.session import ChatMessage, SessionStore, UserProfile
from app.core.wallet import TokenBalance, WalletBalanceCache, WalletBalances, WalletTransaction

OLD_ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
NEW_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class FakeWalletProvider:
    def __init__(self):
        self.balance_calls = []
        self.transactions = [
            WalletTransaction(
                signature="sig",
                timestamp=1700000000,
                type="swap",
                amount="0.5000",
                from_token="SOL",
                to_token="USDC",
            )
        ]

    async def get_wallet_balances(self, address):
        self.balance_calls.append(address)
        return WalletBalances(
            sol_balance=2.5,
            token_balances=[TokenBalance(symbol="USDC", balance=40.0)],
        )

    async def get_recent_transactions(self, address, limit=10):
        return self.transactions[:limit]


class FakeOracle:
    async def get_price(self, symbol):
        return 100


@pytest.fixture
def provider():
    return FakeWalletProvider()


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def assembler(provider, sessions):
    return ContextAssembler(
        sessions=sessions,
        balance_cache=WalletBalanceCache(provider=provider, ttl_seconds=30),
        wallet_provider=provider,
        price_oracle=FakeOracle(),
    )


@pytest.mark.asyncio
async def test_disconnected_context(assembler):
    context = await assembler.generate_context("s1")

    assert "hasn't connected their wallet" in context.system_prompt
    assert "beginner crypto user" in context.system_prompt
    assert context.wallet_data is None
    assert "Check my balance" not in context.suggested_topics
    assert len(context.suggested_topics) == MAX_SUGGESTED_TOPICS


@pytest.mark.asyncio
async def test_connected_context_includes_wallet(assembler):
    context = await assembler.generate_context("s1", OLD_ADDRESS)

    prompt = context.system_prompt
    assert "7xKX...gAsU" in prompt
    assert "2.5000 SOL (≈$250.00)" in prompt
    assert "They also have 40 USDC." in prompt
    assert "1. 2023-11-14: Swapped 0.5000 SOL to USDC" in prompt
    assert "I can remember your transaction history" in prompt

    wallet = context.wallet_data
    assert wallet["address"] == OLD_ADDRESS
    assert wallet["solBalance"] == 2.5
    assert wallet["tokenBalances"] == [{"symbol": "USDC", "balance": 40.0}]
    assert wallet["recentTransactions"][0]["toToken"] == "USDC"
    assert wallet["memoryEnabled"] is True


@pytest.mark.asyncio
async def test_recent_messages_are_limited(assembler, sessions):
    for index in range(8):
        sessions.append_message("s1", ChatMessage(role="user", content=f"message {index}"))

    context = await assembler.generate_context("s1")

    assert [m.content for m in context.recent_messages] == [f"message {i}" for i in range(3, 8)]


@pytest.mark.asyncio
async def test_profile_shapes_prompt(assembler, sessions):
    sessions.append_message("s1", ChatMessage(role="user", content="I want to farm yield in a liquidity pool for defi"))

    context = await assembler.generate_context("s1")

    assert "advanced crypto user" in context.system_prompt
    assert "Your interests include defi" in context.system_prompt
    assert "What are the best DeFi protocols on Solana?" in context.suggested_topics


@pytest.mark.asyncio
async def test_wallet_change_invalidates_previous_balance(assembler, provider):
    await assembler.generate_context("s1", OLD_ADDRESS)
    await assembler.generate_context("s1", OLD_ADDRESS)
    assert provider.balance_calls == [OLD_ADDRESS]

    await assembler.generate_context("s1", NEW_ADDRESS)
    await assembler.generate_context("s1", OLD_ADDRESS)

    assert provider.balance_calls == [OLD_ADDRESS, NEW_ADDRESS, OLD_ADDRESS]


@pytest.mark.asyncio
async def test_binding_new_wallet_warms_balance_cache(assembler, provider, sessions):
    await assembler.bind_wallet("s1", OLD_ADDRESS)
    assert provider.balance_calls == [OLD_ADDRESS]
    assert sessions.get_or_create("s1").wallet_address == OLD_ADDRESS

    await assembler.bind_wallet("s1", OLD_ADDRESS)
    await assembler.generate_context("s1")
    assert provider.balance_calls == [OLD_ADDRESS]


@pytest.mark.asyncio
async def test_unbinding_wallet_skips_prefetch(assembler, provider, sessions):
    await assembler.bind_wallet("s1", OLD_ADDRESS)
    await assembler.bind_wallet("s1", None)

    assert provider.balance_calls == [OLD_ADDRESS]
    assert sessions.get_or_create("s1").wallet_address is None


def test_suggestions_for_sol_holder():
    topics = suggest_topics(UserProfile(), 1.0, [], wallet_connected=True)

    assert topics[:3] == ["Tell me about SOL", "Swap 0.05 SOL to USDC", "Check my balance"]
    assert len(topics) == MAX_SUGGESTED_TOPICS


def test_suggestions_for_held_spl_token():
    profile = UserProfile(preferred_tokens=["BONK", "SOL"])

    topics = suggest_topics(profile, 0.0, [TokenBalance(symbol="BONK", balance=1000.0)], wallet_connected=False)

    assert topics[:2] == ["Tell me about BONK", "Swap 100.00 BONK to SOL"]
