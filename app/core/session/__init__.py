"""
Session and profile memory.

Each session keeps a bounded message history and a user profile inferred
from what the user says (expertise, favourite tokens, interests, last intent).
"""

from .models import ChatMessage, ExpertiseLevel, Session, UserProfile
from .store import SessionStore, detect_intent, session_store

__all__ = [
    "ChatMessage",
    "ExpertiseLevel",
    "Session",
    "UserProfile",
    "SessionStore",
    "detect_intent",
    "session_store",
]
