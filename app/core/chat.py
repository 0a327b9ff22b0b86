"""
Chat pipeline behind the intent-parser route.

Refreshes wallet data, assembles context, asks the LLM for a reply and
falls back to the local intent matcher when no LLM is configured or the
provider fails. The whole turn runs under the request timeout.
"""

import asyncio
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..config import settings
from ..providers.coingecko import CoingeckoProvider
from ..providers.llm import LLMMessage, LLMProvider, LLMProviderError, get_llm_provider
from ..services.tokens import shorten_address
from ..types import IntentParserRequest
from .context import ContextAssembler, context_assembler as default_context_assembler
from .intents import IntentMatcher, IntentResult, MatchContext
from .recovery import run_with_timeout
from .session import ChatMessage, SessionStore, session_store as default_session_store
from .wallet import TokenBalance, WalletDataProvider, wallet_data_provider as default_wallet_provider

logger = logging.getLogger(__name__)

MEMORY_KEYWORDS = ("transaction", "spent", "history", "payment")

RESPONSE_FORMAT = (
    "\n\nReply with a single JSON object and nothing else: "
    '{"message": "<reply to the user>", "intent": <null or an object such as '
    '{"action": "swap", "amount": "1", "fromToken": "SOL", "toToken": "USDC"}>, '
    '"suggestions": ["<up to 3 short follow-up prompts>"]}'
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_llm_reply(text: str) -> IntentResult:
    """Read the model's JSON reply; anything else is taken as plain text"""
    cleaned = _CODE_FENCE.sub("", (text or "").strip())
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError):
        return IntentResult(message=text.strip())

    if not isinstance(data, dict) or not isinstance(data.get("message"), str):
        return IntentResult(message=text.strip())

    intent = data.get("intent") if isinstance(data.get("intent"), dict) else None
    suggestions = data.get("suggestions")
    if not isinstance(suggestions, list):
        suggestions = None
    else:
        suggestions = [str(item) for item in suggestions]
    return IntentResult(message=data["message"], intent=intent, suggestions=suggestions)


def summarize_transactions(transactions: List[Dict[str, Any]]) -> str:
    if not transactions:
        return "Transaction data: no recent transactions found for this wallet."
    parts = [
        f"{tx.get('description') or 'Transaction'} ({tx.get('amount') or 'amount unknown'})"
        for tx in transactions
    ]
    return f"Transaction data: {', '.join(parts)}"


def client_token_balances(raw: Optional[List[Dict[str, Any]]]) -> List[TokenBalance]:
    balances: List[TokenBalance] = []
    for item in raw or []:
        try:
            balances.append(TokenBalance.model_validate(item))
        except ValidationError:
            logger.debug("Ignoring malformed token balance from client: %s", item)
    return balances


class ChatService:
    def __init__(
        self,
        sessions: Optional[SessionStore] = None,
        assembler: Optional[ContextAssembler] = None,
        wallet_provider: Optional[WalletDataProvider] = None,
        matcher: Optional[IntentMatcher] = None,
        llm_factory: Callable[[], LLMProvider] = get_llm_provider,
        timeout_seconds: Optional[float] = None,
    ):
        self.sessions = sessions or default_session_store
        self.assembler = assembler or default_context_assembler
        self.wallet_provider = wallet_provider or default_wallet_provider
        self.matcher = matcher or IntentMatcher(
            transactions=self.wallet_provider.get_recent_transactions,
            markets=CoingeckoProvider().get_markets,
        )
        self.llm_factory = llm_factory
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds

    async def process(self, request: IntentParserRequest) -> Dict[str, Any]:
        """Run one chat turn; raises ``RequestTimeoutError`` past the request timeout"""
        return await run_with_timeout(
            self._process(request), self.timeout_seconds, operation="Intent processing"
        )

    async def _process(self, request: IntentParserRequest) -> Dict[str, Any]:
        prompt: str = request.prompt
        session_id = request.session_id
        connected = bool(request.wallet_connected and request.wallet_address)
        address = request.wallet_address if connected else None

        await self.assembler.bind_wallet(session_id, address)

        balance = request.valid_balance
        token_balances = client_token_balances(request.token_balances)
        transactions: List[Dict[str, Any]] = list(request.recent_transactions or [])

        if connected:
            try:
                fresh, history = await asyncio.gather(
                    self.wallet_provider.get_wallet_balances(address),
                    self.wallet_provider.get_recent_transactions(address, settings.chat_transaction_limit),
                )
                balance = fresh.sol_balance
                token_balances = fresh.token_balances
                transactions = [tx.to_wire() for tx in history]
            except Exception as exc:
                logger.warning("Fresh wallet data for %s unavailable, using client data: %s",
                               shorten_address(address), exc)

        # the prompt stays the last turn in the history
        lowered = prompt.lower()
        if connected and any(keyword in lowered for keyword in MEMORY_KEYWORDS):
            self.sessions.append_message(
                session_id, ChatMessage(role="assistant", content=summarize_transactions(transactions))
            )
        self.sessions.append_message(session_id, ChatMessage(role="user", content=prompt))

        context = await self.assembler.generate_context(session_id)
        match_context = MatchContext(
            wallet_connected=connected,
            wallet_address=address,
            balance=balance,
            token_balances=token_balances,
        )

        reply = await self._respond(prompt, context.system_prompt, context.recent_messages, match_context, session_id)
        self.sessions.append_message(session_id, ChatMessage(role="assistant", content=reply.message))

        if not reply.suggestions:
            reply.suggestions = list(context.suggested_topics)

        payload = reply.to_wire()
        payload["walletData"] = context.wallet_data or {
            "solBalance": balance,
            "address": request.wallet_address,
            "tokenBalances": [token.to_wire() for token in token_balances],
            "recentTransactions": transactions,
        }
        return payload

    async def _respond(
        self,
        prompt: str,
        system_prompt: str,
        recent_messages: List[ChatMessage],
        match_context: MatchContext,
        session_id: str,
    ) -> IntentResult:
        try:
            llm = self.llm_factory()
            messages = [LLMMessage(role="system", content=system_prompt + RESPONSE_FORMAT)]
            messages += [
                LLMMessage(role=msg.role, content=msg.content)
                for msg in recent_messages
                if msg.role in ("user", "assistant")
            ]
            response = await llm.generate_response(
                messages,
                max_tokens=settings.max_tokens,
                temperature=settings.temperature,
            )
        except LLMProviderError as exc:
            logger.info("LLM unavailable (%s); using local intent matcher", exc)
            return await self.matcher.match(prompt, match_context, session_id)

        if not response.content:
            return await self.matcher.match(prompt, match_context, session_id)
        return parse_llm_reply(response.content)


chat_service = ChatService()
