"""
Wallet data models.

Field names are snake_case in Python and camelCase on the wire, the way the
browser client sends and reads them.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WalletModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class TokenBalance(WalletModel):
    symbol: str
    balance: float = 0.0
    usd_value: Optional[float] = Field(default=None, alias="usdValue")
    decimals: Optional[int] = None
    mint: Optional[str] = None
    name: Optional[str] = None


class WalletBalances(WalletModel):
    sol_balance: float = Field(default=0.0, alias="solBalance")
    token_balances: List[TokenBalance] = Field(default_factory=list, alias="tokenBalances")


class WalletBalanceCacheEntry(WalletBalances):
    """Balance snapshot for one address and the clock reading it was taken at"""

    address: str
    timestamp: float


class WalletTransaction(WalletModel):
    signature: str
    timestamp: Optional[int] = None
    type: str = "transaction"
    amount: Optional[str] = None
    from_token: Optional[str] = Field(default=None, alias="fromToken")
    to_token: Optional[str] = Field(default=None, alias="toToken")
    status: str = "confirmed"
    description: Optional[str] = None


class WalletOverview(WalletModel):
    address: str
    sol_balance: float = Field(alias="solBalance")
    tokens: List[TokenBalance] = Field(default_factory=list)
    total_value_usd: Optional[float] = Field(default=None, alias="totalValueUsd")
    explorer_url: str = Field(alias="explorerUrl")
