from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class WalletContextFields(BaseModel):
    """Wallet fields the browser sends along with a prompt"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    prompt: Any = Field(default=None, description="User's natural-language command")
    wallet_connected: bool = Field(default=False, alias="walletConnected", description="Whether a wallet is connected")
    wallet_address: Optional[str] = Field(default=None, alias="walletAddress", description="Connected wallet address")
    balance: Any = Field(default=None, description="Client-side SOL balance")
    token_balances: Optional[List[Dict[str, Any]]] = Field(default=None, alias="tokenBalances", description="Client-side token balances")
    session_id: Optional[str] = Field(default="default", alias="sessionId", description="Conversation identifier for memory continuity")

    @field_validator("session_id", mode="before")
    @classmethod
    def _default_session(cls, value: Any) -> Any:
        return "default" if value is None else value

    @property
    def valid_balance(self) -> float:
        """Client balance when it is a real number, otherwise 0"""
        value = self.balance
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        if value != value:  # NaN
            return 0.0
        return float(value)


class IntentParserRequest(WalletContextFields):
    recent_transactions: Optional[List[Dict[str, Any]]] = Field(default=None, alias="recentTransactions", description="Client-side recent transactions")


class IntentMatchRequest(WalletContextFields):
    pass


class SwapExecutionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    intent: Optional[Dict[str, Any]] = Field(default=None, description="Swap intent produced by the assistant")
    wallet_data: Optional[Dict[str, Any]] = Field(default=None, alias="walletData", description="Wallet snapshot used for balance checks")
