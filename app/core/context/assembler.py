"""
Context Assembly

Builds what the LLM needs for one turn: a personalised system prompt, the
most recent messages, suggested follow-up topics and a wallet snapshot.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ...config import settings
from ...services.price_oracle import PriceOracle, price_oracle as default_price_oracle
from ...services.tokens import shorten_address
from ..session import ChatMessage, ExpertiseLevel, SessionStore, UserProfile, session_store as default_session_store
from ..wallet import (
    TokenBalance,
    WalletBalanceCache,
    WalletDataProvider,
    WalletTransaction,
    wallet_balance_cache as default_balance_cache,
    wallet_data_provider as default_wallet_provider,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTED_TOPICS = 4
SOL_SWAP_SUGGESTION_MIN = 0.05

INTEREST_SUGGESTIONS: Dict[str, str] = {
    "defi": "What are the best DeFi protocols on Solana?",
    "nft": "How do NFTs work on Solana?",
    "meme coins": "Tell me about trending meme coins",
    "governance": "How do DAOs work on Solana?",
    "trading": "What are the best DEXes on Solana?",
    "security": "How can I keep my wallet secure?",
}

GENERAL_SUGGESTIONS = (
    "What can you help me with?",
    "Show my transaction history",
    "What are current gas fees?",
    "What's a good beginner token?",
    "How do I stake SOL?",
    "Explain Solana's consensus model",
)

EXPERTISE_GUIDANCE: Dict[ExpertiseLevel, str] = {
    ExpertiseLevel.ADVANCED: (
        "I'll provide detailed technical information about DeFi protocols, tokenomics, and market "
        "analysis. I'll assume you understand concepts like liquidity pools, impermanent loss, and "
        "yield farming strategies. "
    ),
    ExpertiseLevel.INTERMEDIATE: (
        "I'll balance technical details with clear explanations, focusing on practical applications "
        "of blockchain technology and investment strategies. "
    ),
    ExpertiseLevel.BEGINNER: (
        "I'll explain crypto concepts in simple terms and provide guidance on basic operations, "
        "avoiding technical jargon when possible. "
    ),
}

SWAP_REMINDER = (
    "When providing swap recommendations, ensure you check the user's actual token balances first. "
    "If the user doesn't have enough of a token, suggest alternatives based on their current "
    "holdings. Always convert crypto slang to clear instructions."
)

MEMORY_NOTE = (
    "\n\nI can remember your transaction history and answer questions about your past activities. "
    "You can ask things like:\n"
    '- "What were my transactions last week?"\n'
    '- "How much did I spend on SOL last month?"\n'
    '- "Show my failed transactions"\n'
    '- "When was my last swap?"'
)


class AssembledContext(BaseModel):
    system_prompt: str
    recent_messages: List[ChatMessage] = Field(default_factory=list)
    suggested_topics: List[str] = Field(default_factory=list)
    wallet_data: Optional[Dict[str, Any]] = None


def _format_quantity(value: float) -> str:
    return format(Decimal(str(value)).normalize(), "f")


def describe_transaction(tx: WalletTransaction) -> str:
    if tx.type == "swap":
        return f"Swapped {tx.amount} {tx.from_token} to {tx.to_token or 'unknown token'}"
    if tx.type == "transfer":
        return f"Transferred {tx.amount} {tx.from_token}"
    return f"{tx.type} of {tx.amount} {tx.from_token}"


def _format_date(timestamp: Optional[int]) -> str:
    if not timestamp:
        return "unknown date"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def suggest_topics(
    profile: UserProfile,
    sol_balance: float,
    token_balances: List[TokenBalance],
    wallet_connected: bool,
) -> List[str]:
    topics: List[str] = []

    if profile.preferred_tokens:
        token = profile.preferred_tokens[0]
        topics.append(f"Tell me about {token}")
        if token == "SOL":
            if sol_balance > SOL_SWAP_SUGGESTION_MIN:
                topics.append("Swap 0.05 SOL to USDC")
        else:
            holding = next((t for t in token_balances if t.symbol == token), None)
            if holding and holding.balance > 0:
                topics.append(f"Swap {holding.balance * 0.1:.2f} {token} to SOL")
            else:
                topics.append(f"Swap SOL to {token}")

    for interest in profile.interests:
        suggestion = INTEREST_SUGGESTIONS.get(interest)
        if suggestion:
            topics.append(suggestion)
        if len(topics) >= 3:
            break

    if len(topics) < MAX_SUGGESTED_TOPICS:
        if wallet_connected and "Check my balance" not in topics:
            topics.append("Check my balance")
        for suggestion in GENERAL_SUGGESTIONS:
            if len(topics) >= MAX_SUGGESTED_TOPICS:
                break
            topics.append(suggestion)

    return topics[:MAX_SUGGESTED_TOPICS]


class ContextAssembler:
    def __init__(
        self,
        sessions: Optional[SessionStore] = None,
        balance_cache: Optional[WalletBalanceCache] = None,
        wallet_provider: Optional[WalletDataProvider] = None,
        price_oracle: Optional[PriceOracle] = None,
    ):
        self.sessions = sessions or default_session_store
        self.balance_cache = balance_cache or default_balance_cache
        self.wallet_provider = wallet_provider or default_wallet_provider
        self.price_oracle = price_oracle or default_price_oracle

    async def bind_wallet(self, session_id: str, wallet_address: Optional[str]) -> None:
        """Bind ``wallet_address`` to the session.

        Switching wallets drops the old wallet's cached balances and warms the
        cache for the new one.
        """
        previous = self.sessions.bind_wallet(session_id, wallet_address)
        if previous == wallet_address:
            return
        if previous:
            self.balance_cache.invalidate(previous)
        if wallet_address:
            await self.balance_cache.prefetch(wallet_address)

    async def _recent_transactions(self, address: str) -> List[WalletTransaction]:
        try:
            return await self.wallet_provider.get_recent_transactions(
                address, settings.context_transaction_limit
            )
        except Exception as exc:
            logger.warning("Transactions for context unavailable: %s", exc)
            return []

    async def _wallet_line(self, address: str, sol_balance: float, token_balances: List[TokenBalance]) -> str:
        line = f"The user's wallet ({shorten_address(address)}) is connected with {sol_balance:.4f} SOL"
        try:
            sol_price = await self.price_oracle.get_price("SOL")
            if sol_price:
                line += f" (≈${sol_balance * float(sol_price):.2f})"
        except Exception as exc:
            logger.debug("SOL price unavailable for prompt: %s", exc)
        line += ". "

        if token_balances:
            holdings = []
            for token in token_balances:
                holding = f"{_format_quantity(token.balance)} {token.symbol}"
                if token.usd_value:
                    holding += f" (≈${token.usd_value:.2f})"
                holdings.append(holding)
            line += f"They also have {', '.join(holdings)}. "
        return line

    async def generate_context(self, session_id: str, wallet_address: Optional[str] = None) -> AssembledContext:
        if wallet_address is not None:
            await self.bind_wallet(session_id, wallet_address)
        address = self.sessions.get_or_create(session_id).wallet_address

        profile = self.sessions.get_profile(session_id)
        messages = self.sessions.get_messages(session_id)
        balances = await self.balance_cache.get_wallet_balances(address)
        transactions = await self._recent_transactions(address) if address else []

        prompt = "You are a Web3 AI assistant specializing in Solana blockchain. "
        if address:
            prompt += await self._wallet_line(address, balances.sol_balance, balances.token_balances)
        else:
            prompt += (
                "The user hasn't connected their wallet yet. Guide them to connect their wallet "
                "to access full functionality. "
            )

        prompt += f"Based on your interactions, you appear to be a {profile.expertise_level.value} crypto user. "
        if profile.preferred_tokens:
            prompt += f"You've shown interest in {', '.join(profile.preferred_tokens)}. "
        if profile.interests:
            prompt += f"Your interests include {', '.join(profile.interests)}. "
        prompt += EXPERTISE_GUIDANCE[profile.expertise_level]
        prompt += SWAP_REMINDER

        if transactions:
            prompt += "\n\nRecent transactions: "
            for index, tx in enumerate(transactions, start=1):
                prompt += f"\n{index}. {_format_date(tx.timestamp)}: {describe_transaction(tx)}"
            prompt += "\n"

        prompt += MEMORY_NOTE

        wallet_data = None
        if address:
            wallet_data = {
                "address": address,
                "solBalance": balances.sol_balance,
                "tokenBalances": [token.to_wire() for token in balances.token_balances],
                "recentTransactions": [tx.to_wire() for tx in transactions],
                "memoryEnabled": True,
            }

        return AssembledContext(
            system_prompt=prompt,
            recent_messages=messages[-settings.context_recent_messages:],
            suggested_topics=suggest_topics(profile, balances.sol_balance, balances.token_balances, bool(address)),
            wallet_data=wallet_data,
        )


context_assembler = ContextAssembler()
