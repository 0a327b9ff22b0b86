"""
Local intent matching for wallet commands.

Used directly by the intent-match route and as the fallback whenever the
LLM is not configured or fails.
"""

from .models import IntentResult, MatchContext, SwapIntent
from .matcher import OPERATIONS, IntentMatcher, Operation
from .tracker import ConversationTracker

__all__ = [
    "IntentResult",
    "MatchContext",
    "SwapIntent",
    "OPERATIONS",
    "IntentMatcher",
    "Operation",
    "ConversationTracker",
]
