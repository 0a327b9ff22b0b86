"""Replies for small talk that matches no wallet operation."""

import random
import re
from typing import Dict, List, Sequence, Tuple

from .models import IntentResult

GENERAL_KNOWLEDGE: Dict[str, List[str]] = {
    "greetings": [
        "Hello! How can I help with your Web3 journey today?",
        "Hi there! I'm your AI assistant for Web3 and crypto. What can I do for you?",
        "Hey! Ready to explore the blockchain world together?",
    ],
    "thanks": [
        "You're welcome! Happy to assist with your crypto needs.",
        "Anytime! Let me know if you need anything else related to blockchain.",
        "Glad I could help! Feel free to ask more about Web3.",
    ],
    "identity": [
        "I'm an AI assistant specialized in Web3 and cryptocurrency. While I can chat about general "
        "topics, I'm most knowledgeable about blockchain technology, Solana, and token swaps.",
        "I'm your Web3 AI Wallet assistant. I can help with token swaps, provide crypto information, "
        "and chat about various topics, though my expertise is in blockchain.",
    ],
    "capabilities": [
        "I can help you swap tokens on Solana, check token prices and balances, provide information "
        "about cryptocurrencies, and chat about various topics. Try asking me to 'Swap 1 SOL to USDC' "
        "or 'Tell me about NFTs'.",
    ],
}

CRYPTO_JOKES: List[str] = [
    "Why don't programmers like nature? It has too many bugs and no debugging tools!",
    "Why did the blockchain go to therapy? It had too many trust issues!",
    "How many Bitcoin miners does it take to change a lightbulb? 21 million, but only one gets the reward!",
    "Why did the crypto investor go to the dentist? Because of the tooth decay... just like their "
    "portfolio in a bear market!",
    "What do you call a cryptocurrency investor who finally breaks even? A miracle!",
]

FAREWELL_MESSAGE = (
    "Goodbye! Feel free to return whenever you have Web3 questions or want to make transactions."
)

FALLBACK_MESSAGE = (
    "I'm here to help with Web3 and blockchain topics primarily! You can ask me to swap tokens, "
    "check prices, or learn about crypto concepts. I can also chat about other topics, but my "
    "expertise is in the blockchain space."
)

CONVERSATION_PATTERNS: Tuple[Tuple[str, Tuple[re.Pattern, ...]], ...] = (
    ("greeting", (
        re.compile(r"^(?:hi|hello|hey|howdy|greetings|good\s+(?:morning|afternoon|evening)|what'?s\s+up)", re.IGNORECASE),
    )),
    ("farewell", (
        re.compile(r"^(?:bye|goodbye|see\s+you|farewell|later|have\s+a\s+(?:good|nice|great)\s+(?:day|night|evening))", re.IGNORECASE),
    )),
    ("thanks", (
        re.compile(r"^(?:thanks|thank\s+you|thx|ty|appreciate\s+(?:it|you))", re.IGNORECASE),
    )),
    ("identity", (
        re.compile(r"(?:who|what)\s+are\s+you", re.IGNORECASE),
        re.compile(r"tell\s+(?:me\s+)?about\s+yourself", re.IGNORECASE),
    )),
    ("capabilities", (
        re.compile(r"what\s+can\s+you\s+do", re.IGNORECASE),
        re.compile(r"help\s+me\s+with", re.IGNORECASE),
        re.compile(r"how\s+does\s+this\s+(?:work|app\s+work)", re.IGNORECASE),
    )),
    ("joke", (
        re.compile(r"tell\s+(?:me\s+)?a\s+(?:joke|crypto\s+joke)", re.IGNORECASE),
    )),
)

_RESPONSES: Dict[str, Sequence[str]] = {
    "greeting": GENERAL_KNOWLEDGE["greetings"],
    "farewell": (FAREWELL_MESSAGE,),
    "thanks": GENERAL_KNOWLEDGE["thanks"],
    "identity": GENERAL_KNOWLEDGE["identity"],
    "capabilities": GENERAL_KNOWLEDGE["capabilities"],
    "joke": CRYPTO_JOKES,
}


def _pick(options: Sequence[str], rng: random.Random) -> str:
    return options[min(int(rng.random() * len(options)), len(options) - 1)]


def respond_to_conversation(text: str, rng: random.Random) -> IntentResult:
    for kind, patterns in CONVERSATION_PATTERNS:
        if any(pattern.search(text) for pattern in patterns):
            return IntentResult(message=_pick(_RESPONSES[kind], rng))
    return IntentResult(message=FALLBACK_MESSAGE)
