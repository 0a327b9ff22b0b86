"""
Wallet data: balances, recent transactions and the balance cache.

Usage:
    from app.core.wallet import wallet_balance_cache

    balances = await wallet_balance_cache.get_wallet_balances(address)
"""

from .models import (
    TokenBalance,
    WalletBalances,
    WalletBalanceCacheEntry,
    WalletTransaction,
    WalletOverview,
)
from .data_provider import WalletDataProvider, wallet_data_provider
from .cache import WalletBalanceCache, wallet_balance_cache

__all__ = [
    # Models
    "TokenBalance",
    "WalletBalances",
    "WalletBalanceCacheEntry",
    "WalletTransaction",
    "WalletOverview",
    # Data access
    "WalletDataProvider",
    "wallet_data_provider",
    "WalletBalanceCache",
    "wallet_balance_cache",
]
