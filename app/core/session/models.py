"""Session and profile models"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ExpertiseLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ChatMessage(BaseModel):
    """Individual message in a conversation"""

    role: str = Field(description="Message role: user, assistant, or system")
    content: str = Field(description="Message content")
    timestamp: datetime = Field(default_factory=datetime.now)


class UserProfile(BaseModel):
    """What the assistant has inferred about the user so far"""

    expertise_level: ExpertiseLevel = ExpertiseLevel.BEGINNER
    preferred_tokens: List[str] = Field(default_factory=lambda: ["SOL", "USDC"])
    interests: List[str] = Field(default_factory=list)
    last_intent: Optional[str] = None


class Session(BaseModel):
    session_id: str
    messages: List[ChatMessage] = Field(default_factory=list)
    profile: UserProfile = Field(default_factory=UserProfile)
    wallet_address: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    last_activity: datetime = Field(default_factory=datetime.now)
