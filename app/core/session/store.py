"""
In-memory session store.

Sessions are created on first access and never deleted; a restart loses
them. Mutations are not locked: two requests for the same session that
interleave across awaits can overwrite each other's updates.
"""

import logging
import re
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ...config import settings
from .models import ChatMessage, ExpertiseLevel, Session, UserProfile

logger = logging.getLogger(__name__)

ADVANCED_TERMS: Tuple[str, ...] = (
    "liquidity pool", "impermanent loss", "yield farming", "amm",
    "slippage tolerance", "tokenomics", "staking", "gdp", "market cap",
    "mev", "jito", "flashbots", "arbitrage", "derivative", "options",
    "futures", "tvl", "order book", "liquidity", "consensus", "mempool",
    "gas optimization", "validator",
)

INTERMEDIATE_TERMS: Tuple[str, ...] = (
    "defi", "staking", "wallet", "blockchain", "transaction", "nft",
    "token", "crypto", "exchange", "market", "trading", "network",
    "gas fee", "chain", "block",
)

TOKEN_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\bsol\b|\bsolana\b", re.IGNORECASE), "SOL"),
    (re.compile(r"\busdc\b|\busd coin\b", re.IGNORECASE), "USDC"),
    (re.compile(r"\busdt\b|\btether\b", re.IGNORECASE), "USDT"),
    (re.compile(r"\bbonk\b", re.IGNORECASE), "BONK"),
    (re.compile(r"\bjup\b|\bjupiter\b", re.IGNORECASE), "JUP"),
    (re.compile(r"\bjto\b", re.IGNORECASE), "JTO"),
    (re.compile(r"\bray\b|\braydium\b", re.IGNORECASE), "RAY"),
    (re.compile(r"\bwif\b|\bdogwifhat\b", re.IGNORECASE), "WIF"),
    (re.compile(r"\bmeme\b", re.IGNORECASE), "MEME"),
)

INTEREST_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(defi|yield|farming|staking|liquidity|pool|swap|exchange|dex)\b", re.IGNORECASE), "defi"),
    (re.compile(r"\b(nft|collectible|art|pfp|jpeg|collection|creator|rarity)\b", re.IGNORECASE), "nft"),
    (re.compile(r"\b(dao|governance|voting|proposal|vote|community|token holder)\b", re.IGNORECASE), "governance"),
    (re.compile(r"\b(meme|dog coin|pepe|doge|shib|bonk|wif)\b", re.IGNORECASE), "meme coins"),
    (re.compile(r"\b(trade|trading|chart|candle|technical|indicator|resistance|support)\b", re.IGNORECASE), "trading"),
    (re.compile(r"\b(security|safety|hack|exploit|vulnerability|risk|protect)\b", re.IGNORECASE), "security"),
)

INTENT_KEYWORDS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"swap|exchange|trade|convert", re.IGNORECASE), "swap"),
    (re.compile(r"balance|portfolio|holding", re.IGNORECASE), "balance"),
    (re.compile(r"history|transaction|recent|activity", re.IGNORECASE), "history"),
    (re.compile(r"price|worth|value|cost", re.IGNORECASE), "price"),
    (re.compile(r"trend|market|chart", re.IGNORECASE), "market"),
)


def detect_intent(text: str) -> Optional[str]:
    """Coarse keyword intent used to steer the profile, not to execute anything"""
    for pattern, intent in INTENT_KEYWORDS:
        if pattern.search(text):
            return intent
    return None


def _detect_expertise(text: str, current: ExpertiseLevel) -> ExpertiseLevel:
    lowered = text.lower()
    for term in ADVANCED_TERMS:
        if term in lowered:
            return ExpertiseLevel.ADVANCED
    if current == ExpertiseLevel.ADVANCED:
        return current
    for term in INTERMEDIATE_TERMS:
        if term in lowered:
            return ExpertiseLevel.INTERMEDIATE
    return current


class SessionStore:
    """Session id -> bounded history plus inferred profile"""

    def __init__(
        self,
        max_history: Optional[int] = None,
        max_preferred_tokens: Optional[int] = None,
    ):
        self.max_history = max_history or settings.session_max_history
        self.max_preferred_tokens = max_preferred_tokens or settings.max_preferred_tokens
        self._sessions: Dict[str, Session] = {}

    def get_or_create(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id=session_id)
            self._sessions[session_id] = session
            logger.debug("Created session %s", session_id)
        return session

    def append_message(self, session_id: str, message: ChatMessage) -> None:
        """Append to the history, dropping the oldest messages past capacity"""
        session = self.get_or_create(session_id)
        session.messages.append(message)
        overflow = len(session.messages) - self.max_history
        if overflow > 0:
            del session.messages[:overflow]
        session.last_activity = datetime.now()

        if message.role == "user":
            self.update_profile(session_id, message.content)

    def update_profile(self, session_id: str, text: str) -> UserProfile:
        profile = self.get_or_create(session_id).profile

        profile.expertise_level = _detect_expertise(text, profile.expertise_level)

        for pattern, symbol in TOKEN_PATTERNS:
            if pattern.search(text):
                # Most recently mentioned first
                if symbol in profile.preferred_tokens:
                    profile.preferred_tokens.remove(symbol)
                profile.preferred_tokens.insert(0, symbol)
        del profile.preferred_tokens[self.max_preferred_tokens:]

        for pattern, interest in INTEREST_PATTERNS:
            if pattern.search(text) and interest not in profile.interests:
                profile.interests.append(interest)

        intent = detect_intent(text)
        if intent:
            profile.last_intent = intent

        return profile

    def get_messages(self, session_id: str) -> List[ChatMessage]:
        return list(self.get_or_create(session_id).messages)

    def get_profile(self, session_id: str) -> UserProfile:
        return self.get_or_create(session_id).profile

    def bind_wallet(self, session_id: str, wallet_address: Optional[str]) -> Optional[str]:
        """Remember the wallet for this session; returns the previously bound address"""
        session = self.get_or_create(session_id)
        previous = session.wallet_address
        session.wallet_address = wallet_address
        return previous

    def reset(self) -> None:
        self._sessions.clear()


session_store = SessionStore()
