"""
Per-session conversation tracker.

Remembers which operations and tokens came up recently and turns that into
next-action suggestions and the occasional tip.
"""

import random
from typing import List, Optional

from .models import MatchContext

MAX_RECENT_TOPICS = 8
MAX_RECENT_TOKENS = 10
MAX_FAVORITE_TOKENS = 5
MAX_PREFERRED_ACTIONS = 3
MAX_SUGGESTIONS = 3
LOW_BALANCE_SOL = 0.05

TECHNICAL_TERMS = ("tvl", "liquidity", "amm", "slippage", "liquidity pool", "apy", "yield")
CASUAL_TERMS = ("moon", "dump", "pump", "wen", "lambo", "fomo", "yolo")


def _push_front(items: List[str], value: str, limit: int) -> None:
    items.insert(0, value)
    del items[limit:]


class ConversationTracker:
    def __init__(self) -> None:
        self.recent_topics: List[str] = []
        self.recent_tokens: List[str] = []
        self.favorite_tokens: List[str] = []
        self.preferred_actions: List[str] = []
        self.interaction_style = "neutral"
        self.suggested_next_actions: List[str] = []

    def record(self, text: str, operation: Optional[str], tokens: List[str]) -> None:
        if operation:
            _push_front(self.recent_topics, operation, MAX_RECENT_TOPICS)
            if operation not in self.preferred_actions:
                _push_front(self.preferred_actions, operation, MAX_PREFERRED_ACTIONS)

        for token in tokens:
            _push_front(self.recent_tokens, token, MAX_RECENT_TOKENS)
            if token not in self.favorite_tokens:
                _push_front(self.favorite_tokens, token, MAX_FAVORITE_TOKENS)

        lowered = text.lower()
        has_technical = any(term in lowered for term in TECHNICAL_TERMS)
        has_casual = any(term in lowered for term in CASUAL_TERMS)
        if has_technical and not has_casual:
            self.interaction_style = "technical"
        elif has_casual and not has_technical:
            self.interaction_style = "casual"

        self.suggested_next_actions = self._generate_suggestions()

    def _generate_suggestions(self) -> List[str]:
        last_topic = self.recent_topics[0] if self.recent_topics else None
        last_token = self.recent_tokens[0] if self.recent_tokens else None
        suggestions: List[str] = []

        if last_topic == "balance":
            suggestions += ["Swap 1 SOL to USDC", "Show my transaction history"]
        elif last_topic == "tokenInfo" and last_token:
            if last_token != "SOL":
                suggestions.append(f"Swap 10 {last_token} to SOL")
            else:
                favorite = self.favorite_tokens[0] if self.favorite_tokens else "USDC"
                suggestions.append(f"Swap 1 SOL to {favorite}")
            suggestions.append("What are the market trends?")
        elif last_topic == "marketTrends":
            suggestions += [f"Tell me about {last_token or 'JUP'}", "Check my balance"]
        elif last_topic == "history":
            suggestions += ["Check my balance", "What are the market trends?"]
        elif last_topic == "swap":
            suggestions += ["Check my balance", "Show my transaction history"]

        if not suggestions:
            suggestions = ["What tokens do you support?", "Check my balance", "What are the market trends?"]

        return suggestions[:MAX_SUGGESTIONS]

    def personalized_tip(self, context: MatchContext, rng: random.Random) -> Optional[str]:
        topics = self.recent_topics

        if "balance" in topics and "swap" not in topics and rng.random() > 0.6:
            return "Tip: You can swap your SOL for other tokens by typing 'Swap 1 SOL to USDC'."

        if "swap" in topics and "tokenInfo" not in topics and rng.random() > 0.6:
            favorite = (self.favorite_tokens or self.recent_tokens or [None])[0]
            if favorite:
                return f'Tip: You can learn more about {favorite} by asking "Tell me about {favorite}".'

        if context.wallet_connected and context.balance < LOW_BALANCE_SOL:
            return "Tip: Your SOL balance is low. You'll need SOL to pay for transaction fees when swapping tokens."

        if "marketTrends" not in topics and self.recent_tokens and rng.random() > 0.7:
            return "Tip: Ask 'What are the market trends?' to get insights on current token performance."

        if (
            context.wallet_connected
            and len(topics) > 2
            and "history" not in topics
            and rng.random() > 0.7
        ):
            return "Tip: You can view your recent transactions by asking 'Show my transaction history'."

        return None
