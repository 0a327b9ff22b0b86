"""
Regex intent matcher.

Operations are tried in declaration order and so are each operation's
patterns; the first pattern found anywhere in the text (case-insensitive)
picks the handler. Text that matches no operation gets a conversational
reply and no intent.
"""

import logging
import random
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

from ...services.price_oracle import PriceOracle, price_oracle as default_price_oracle
from ...services.tokens import SUPPORTED_SYMBOLS
from .conversation import respond_to_conversation
from .handlers import (
    HandlerDeps,
    MarketSource,
    TransactionSource,
    handle_balance,
    handle_help,
    handle_history,
    handle_market_trends,
    handle_price,
    handle_swap,
    handle_token_info,
)
from .models import IntentResult, MatchContext
from .tracker import ConversationTracker

logger = logging.getLogger(__name__)

ERROR_MESSAGE = (
    "Sorry, I encountered an error understanding your request. Please try again with a simpler query."
)
ERROR_SUGGESTIONS = ["Check my balance", "Help"]

Handler = Callable[[re.Match, MatchContext, HandlerDeps], Awaitable[IntentResult]]


@dataclass(frozen=True)
class Operation:
    name: str
    description: str
    patterns: Tuple[re.Pattern, ...]
    handler: Handler


def _patterns(*sources: str) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


OPERATIONS: Tuple[Operation, ...] = (
    Operation(
        name="swap",
        description="Exchange one token for another",
        patterns=_patterns(
            r"swap\s+(\d+\.?\d*)\s+(\w+)\s+(?:to|for)\s+(\w+)",
            r"convert\s+(\d+\.?\d*)\s+(\w+)\s+(?:to|into)\s+(\w+)",
            r"exchange\s+(\d+\.?\d*)\s+(\w+)\s+(?:to|for)\s+(\w+)",
            r"trade\s+(\d+\.?\d*)\s+(\w+)\s+(?:to|for)\s+(\w+)",
            r"change\s+(\d+\.?\d*)\s+(\w+)\s+(?:to|into|for)\s+(\w+)",
            r"(\d+\.?\d*)\s+(\w+)\s+(?:to|into|for)\s+(\w+)",
            r"swap\s+(?:all|everything|all\s+my)\s+(\w+)\s+(?:to|for)\s+(\w+)",
            r"convert\s+(?:all|everything|all\s+my)\s+(\w+)\s+(?:to|into)\s+(\w+)",
            r"exchange\s+(?:all|everything|all\s+my)\s+(\w+)\s+(?:to|for)\s+(\w+)",
            r"trade\s+(?:all|everything|all\s+my)\s+(\w+)\s+(?:to|for)\s+(\w+)",
        ),
        handler=handle_swap,
    ),
    Operation(
        name="balance",
        description="Check token balances",
        patterns=_patterns(
            r"(?:check|show|what(?:'|i)?s\s+(?:my|the))\s+balance",
            r"how\s+much\s+(?:\w+\s+)?(?:do\s+i\s+have|is\s+in\s+my\s+wallet)",
            r"balance\s+(?:of|for)\s+my\s+(?:wallet|account)",
            r"my\s+balance",
            r"wallet\s+balance",
        ),
        handler=handle_balance,
    ),
    Operation(
        name="tokenInfo",
        description="Get information about tokens",
        patterns=_patterns(
            r"(?:tell|what|info|information)\s+(?:me|about|is)\s+(?:the\s+)?(?:token\s+)?(\w+)",
            r"what\s+is\s+(\w+)(?:\s+token)?",
            r"explain\s+(\w+)(?:\s+token)?",
            r"(\w+)\s+info(?:rmation)?",
            r"info\s+on\s+(\w+)",
        ),
        handler=handle_token_info,
    ),
    Operation(
        name="price",
        description="Check token prices",
        patterns=_patterns(
            r"(?:what(?:'|i)?s\s+(?:the|current))?\s*price\s+(?:of|for)\s+(\w+)",
            r"how\s+much\s+(?:is|does)\s+(\w+)\s+cost",
            r"(\w+)\s+price",
        ),
        handler=handle_price,
    ),
    Operation(
        name="history",
        description="View transaction history",
        patterns=_patterns(
            r"(?:show|view|get|check)\s+(?:my\s+)?(?:transaction|tx)\s+history",
            r"(?:what|show)\s+(?:are|were)\s+my\s+(?:recent|last|previous)\s+transactions",
            r"(?:my|wallet)\s+(?:transaction|tx)\s+history",
            r"(?:recent|last|previous)\s+transactions",
            r"what\s+(?:did|have)\s+i\s+(?:do|done|transact)",
        ),
        handler=handle_history,
    ),
    Operation(
        name="marketTrends",
        description="Get market trends and insights",
        patterns=_patterns(
            r"(?:what|how)(?:'s| is| are)\s+(?:the\s+)?(?:market|markets)(?:\s+doing)?",
            r"market\s+(?:trend|trends|overview|update|sentiment)",
            r"(?:what|which)\s+(?:token|tokens|coin|coins)(?:\s+are|\s+is)?\s+(?:trending|hot|popular)",
            r"what\s+should\s+i\s+(?:buy|invest|trade)",
            r"(?:crypto|token|coin)\s+recommendations",
        ),
        handler=handle_market_trends,
    ),
    Operation(
        name="help",
        description="Get help on using the assistant",
        patterns=_patterns(
            r"(?:help|assist|guide|tutorial|how\s+to\s+use)",
            r"what\s+can\s+you\s+do",
            r"(?:list|show)\s+(?:commands|features|abilities)",
            r"help\s+me",
        ),
        handler=handle_help,
    ),
)


def mentioned_tokens(text: str) -> list:
    upper = text.upper()
    return [symbol for symbol in SUPPORTED_SYMBOLS if symbol in upper]


class IntentMatcher:
    """Match free text against the operation table, one tracker per session"""

    def __init__(
        self,
        price_oracle: Optional[PriceOracle] = None,
        transactions: Optional[TransactionSource] = None,
        markets: Optional[MarketSource] = None,
        rng: Optional[random.Random] = None,
    ):
        self.deps = HandlerDeps(
            price_oracle=price_oracle or default_price_oracle,
            transactions=transactions,
            markets=markets,
        )
        self.rng = rng or random.Random()
        self._trackers: Dict[str, ConversationTracker] = {}

    def tracker_for(self, session_id: str) -> ConversationTracker:
        tracker = self._trackers.get(session_id)
        if tracker is None:
            tracker = ConversationTracker()
            self._trackers[session_id] = tracker
        return tracker

    async def match(
        self,
        text: str,
        context: Optional[MatchContext] = None,
        session_id: str = "default",
    ) -> IntentResult:
        context = context or MatchContext()
        try:
            for operation in OPERATIONS:
                for pattern in operation.patterns:
                    found = pattern.search(text)
                    if not found:
                        continue

                    tracker = self.tracker_for(session_id)
                    tracker.record(text, operation.name, mentioned_tokens(text))
                    logger.debug("Matched %s for session %s", operation.name, session_id)

                    result = await operation.handler(found, context, self.deps)
                    tip = tracker.personalized_tip(context, self.rng)
                    if tip:
                        result.message = f"{result.message}\n\n{tip}"
                    result.suggestions = list(tracker.suggested_next_actions)
                    return result

            return respond_to_conversation(text, self.rng)
        except Exception:
            logger.exception("Intent matching failed")
            return IntentResult(message=ERROR_MESSAGE, suggestions=list(ERROR_SUGGESTIONS))
