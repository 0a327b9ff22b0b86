import asyncio

import pytest

from app.cache import TTLCache
from app.core.chat import RESPONSE_FORMAT, ChatService, parse_llm_reply
from app.core.context import ContextAssembler
from app.core.intents import IntentMatcher
from app.core.recovery import RequestTimeoutError
from app.core.session import SessionStore
from app.core.wallet import TokenBalance, WalletBalanceCache, WalletBalances, WalletTransaction
from app.providers.llm import LLMNotConfiguredError, LLMResponse
from app.providers.llm.anthropic import AnthropicProvider
from app.services.price_oracle import PriceOracle
from app.types import IntentParserRequest

ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


class FixedRandom:
    def random(self):
        return 0.0


class OfflineCoingecko:
    async def get_token_prices(self, ids):
        return {}


class FakeWalletProvider:
    def __init__(self, error=None):
        self.error = error

    async def get_wallet_balances(self, address):
        if self.error:
            raise self.error
        return WalletBalances(sol_balance=2.5, token_balances=[TokenBalance(symbol="USDC", balance=40.0)])

    async def get_recent_transactions(self, address, limit=10):
        if self.error:
            raise self.error
        return [WalletTransaction(signature="sig", timestamp=1700000000, type="swap", amount="0.5000", from_token="SOL")]


class FakeLLM:
    def __init__(self, content="", delay=0.0):
        self.content = content
        self.delay = delay
        self.messages = None

    async def generate_response(self, messages, max_tokens=None, temperature=None, **kwargs):
        self.messages = messages
        if self.delay:
            await asyncio.sleep(self.delay)
        return LLMResponse(content=self.content)


def _no_llm():
    raise LLMNotConfiguredError("No API key configured for provider: anthropic")


def _service(llm_factory=_no_llm, provider=None, **kwargs) -> ChatService:
    provider = provider or FakeWalletProvider()
    oracle = PriceOracle(provider=OfflineCoingecko(), cache=TTLCache())
    sessions = SessionStore()
    assembler = ContextAssembler(
        sessions=sessions,
        balance_cache=WalletBalanceCache(provider=provider, ttl_seconds=30),
        wallet_provider=provider,
        price_oracle=oracle,
    )
    return ChatService(
        sessions=sessions,
        assembler=assembler,
        wallet_provider=provider,
        matcher=IntentMatcher(price_oracle=oracle, transactions=provider.get_recent_transactions, rng=FixedRandom()),
        llm_factory=llm_factory,
        **kwargs,
    )


def _request(**fields) -> IntentParserRequest:
    return IntentParserRequest.model_validate(fields)


@pytest.mark.asyncio
async def test_falls_back_to_matcher_without_llm():
    service = _service()

    result = await service.process(
        _request(prompt="swap 1 SOL to USDC", walletConnected=True, walletAddress=ADDRESS, sessionId="s1")
    )

    assert result["intent"]["action"] == "swap"
    assert result["intent"]["fromToken"] == "SOL"
    assert result["suggestions"] == ["Check my balance", "Show my transaction history"]
    assert result["walletData"]["address"] == ADDRESS
    assert result["walletData"]["solBalance"] == 2.5

    history = service.sessions.get_messages("s1")
    assert [m.role for m in history] == ["user", "assistant"]
    assert history[1].content == result["message"]


@pytest.mark.asyncio
async def test_llm_json_reply_is_parsed():
    llm = FakeLLM('```json\n{"message": "Hi!", "intent": null, "suggestions": ["Check my balance"]}\n```')
    service = _service(llm_factory=lambda: llm)

    result = await service.process(_request(prompt="hello", sessionId="s2"))

    assert result["message"] == "Hi!"
    assert result["intent"] is None
    assert result["suggestions"] == ["Check my balance"]
    assert result["walletData"] == {
        "solBalance": 0.0,
        "address": None,
        "tokenBalances": [],
        "recentTransactions": [],
    }

    assert llm.messages[0].role == "system"
    assert llm.messages[0].content.endswith(RESPONSE_FORMAT)
    assert llm.messages[-1].content == "hello"


@pytest.mark.asyncio
async def test_plain_llm_reply_gets_context_suggestions():
    service = _service(llm_factory=lambda: FakeLLM("Solana is fast."))

    result = await service.process(_request(prompt="tell me something", sessionId="s3"))

    assert result["message"] == "Solana is fast."
    assert result["intent"] is None
    assert result["suggestions"][0] == "Tell me about SOL"


@pytest.mark.asyncio
async def test_empty_llm_reply_uses_matcher():
    service = _service(llm_factory=lambda: FakeLLM(""))

    result = await service.process(_request(prompt="check my balance", sessionId="s4"))

    assert result["message"] == "Please connect your wallet first to check your balance."


@pytest.mark.asyncio
async def test_memory_question_adds_transaction_summary():
    llm = FakeLLM("You swapped once.")
    service = _service(llm_factory=lambda: llm)

    await service.process(
        _request(prompt="show my transaction history", walletConnected=True, walletAddress=ADDRESS, sessionId="s5")
    )

    contents = [m.content for m in llm.messages]
    assert "Transaction data: Transaction (0.5000)" in contents

    turns = [m for m in llm.messages if m.role != "system"]
    assert turns[-1].role == "user"
    assert turns[-1].content == "show my transaction history"


@pytest.mark.asyncio
async def test_history_question_sends_user_turn_last_to_anthropic():
    llm = FakeLLM("You swapped once.")
    service = _service(llm_factory=lambda: llm)

    await service.process(_request(prompt="hi", sessionId="s5b"))
    await service.process(
        _request(prompt="what have I spent", walletConnected=True, walletAddress=ADDRESS, sessionId="s5b")
    )

    system, converted = AnthropicProvider._split_system(llm.messages)

    assert [turn["role"] for turn in converted] == ["user", "assistant", "user"]
    assert converted[-1]["content"] == "what have I spent"
    assert "Transaction data: Transaction (0.5000)" in converted[1]["content"]
    assert system.endswith(RESPONSE_FORMAT)


@pytest.mark.asyncio
async def test_first_turn_history_question_opens_on_user_turn():
    llm = FakeLLM("You swapped once.")
    service = _service(llm_factory=lambda: llm)

    await service.process(
        _request(prompt="show my payment history", walletConnected=True, walletAddress=ADDRESS, sessionId="s5c")
    )

    system, converted = AnthropicProvider._split_system(llm.messages)

    assert [turn["role"] for turn in converted] == ["user"]
    assert "Transaction data: Transaction (0.5000)" in system


@pytest.mark.asyncio
async def test_client_data_used_when_refresh_fails():
    service = _service(provider=FakeWalletProvider(error=RuntimeError("rpc down")))

    result = await service.process(
        _request(
            prompt="check my balance",
            walletConnected=True,
            walletAddress=ADDRESS,
            balance=1.2,
            sessionId="s6",
        )
    )

    assert "1.2000 SOL" in result["message"]


@pytest.mark.asyncio
async def test_invalid_client_balance_counts_as_zero():
    service = _service(provider=FakeWalletProvider(error=RuntimeError("rpc down")))

    result = await service.process(
        _request(prompt="check my balance", walletConnected=True, walletAddress=ADDRESS, balance="lots", sessionId="s7")
    )

    assert "0.0000 SOL" in result["message"]


@pytest.mark.asyncio
async def test_slow_turn_times_out():
    service = _service(llm_factory=lambda: FakeLLM("late", delay=1), timeout_seconds=0.01)

    with pytest.raises(RequestTimeoutError):
        await service.process(_request(prompt="hello", sessionId="s8"))


def test_parse_plain_json_without_message():
    result = parse_llm_reply('{"answer": 42}')

    assert result.message == '{"answer": 42}'
    assert result.intent is None
