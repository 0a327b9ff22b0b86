from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..wallet.models import TokenBalance


@dataclass
class MatchContext:
    """What the matcher knows about the caller's wallet"""

    wallet_connected: bool = False
    wallet_address: Optional[str] = None
    balance: float = 0.0
    token_balances: List[TokenBalance] = field(default_factory=list)

    def token_balance(self, symbol: str) -> Optional[TokenBalance]:
        for token in self.token_balances:
            if token.symbol == symbol:
                return token
        return None


class SwapIntent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["swap"] = "swap"
    amount: str
    from_token: str = Field(alias="fromToken")
    to_token: str = Field(alias="toToken")
    estimated_value: Optional[str] = Field(default=None, alias="estimatedValue")
    percentage: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class IntentResult(BaseModel):
    message: str
    intent: Optional[Dict[str, Any]] = None
    suggestions: Optional[List[str]] = None

    def to_wire(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message, "intent": self.intent}
        if self.suggestions is not None:
            payload["suggestions"] = self.suggestions
        return payload
