from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class IntentMatchResponse(BaseModel):
    message: str = Field(description="Assistant reply")
    intent: Optional[Dict[str, Any]] = Field(default=None, description="Structured action, if any")
    suggestions: Optional[List[str]] = Field(default=None, description="Suggested follow-up prompts")


class SwapExecutionResponse(BaseModel):
    success: bool = Field(description="Whether the swap request is valid")
    message: str = Field(description="Validation outcome")
    estimate: Optional[Dict[str, Any]] = Field(default=None, description="Expected swap result")
    intent: Optional[Dict[str, Any]] = Field(default=None, description="Echo of the validated intent")


class TokenDataResponse(BaseModel):
    address: str = Field(description="Token contract address")
    chain: str = Field(description="Chain the address was resolved on")
    markdown: str = Field(description="Formatted token report")
    found: bool = Field(description="Whether any source had data for the token")
