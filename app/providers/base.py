from abc import ABC, abstractmethod
from typing import Any, Dict, List


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class IndexerProvider(Provider):
    """Provider for on-chain wallet data (balances, transactions)"""

    @abstractmethod
    async def get_native_balance(self, address: str) -> Dict[str, Any]:
        """Get the native SOL balance"""
        pass

    @abstractmethod
    async def get_token_balances(self, address: str) -> Dict[str, Any]:
        """Get SPL token balances"""
        pass

    @abstractmethod
    async def get_recent_transactions(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent transactions, newest first"""
        pass


class PriceProvider(Provider):
    """Provider for token price data"""

    @abstractmethod
    async def get_token_prices(self, coin_ids: List[str], vs_currency: str = "usd") -> Dict[str, Any]:
        """Get current prices (and 24h change) keyed by coin id"""
        pass
