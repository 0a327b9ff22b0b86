"""
Read-through cache of wallet balances.

A snapshot younger than the TTL is served without touching the provider.
When a refresh fails the last snapshot is served even if it has expired,
and with no snapshot at all a zero balance is returned. Failures are never
cached, so a failing address is retried on the next read.
"""

import logging
import time
from typing import Callable, Dict, Optional

from ...config import settings
from .data_provider import WalletDataProvider, wallet_data_provider
from .models import WalletBalanceCacheEntry, WalletBalances

logger = logging.getLogger(__name__)


class WalletBalanceCache:
    def __init__(
        self,
        provider: Optional[WalletDataProvider] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider or wallet_data_provider
        self.ttl_seconds = settings.wallet_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: Dict[str, WalletBalanceCacheEntry] = {}

    def _is_fresh(self, entry: WalletBalanceCacheEntry) -> bool:
        return self._clock() - entry.timestamp < self.ttl_seconds

    async def get(self, address: str) -> WalletBalanceCacheEntry:
        cached = self._entries.get(address)
        if cached is not None and self._is_fresh(cached):
            return cached

        try:
            balances = await self.provider.get_wallet_balances(address)
        except Exception as exc:
            if cached is not None:
                logger.warning("Balance refresh for %s failed, serving stale snapshot: %s", address, exc)
                return cached
            logger.warning("Balance refresh for %s failed with nothing cached: %s", address, exc)
            return WalletBalanceCacheEntry(address=address, timestamp=self._clock())

        entry = WalletBalanceCacheEntry(
            address=address,
            sol_balance=balances.sol_balance,
            token_balances=balances.token_balances,
            timestamp=self._clock(),
        )
        self._entries[address] = entry
        return entry

    async def get_wallet_balances(self, address: Optional[str]) -> WalletBalances:
        if not address:
            return WalletBalances()
        entry = await self.get(address)
        return WalletBalances(sol_balance=entry.sol_balance, token_balances=entry.token_balances)

    def invalidate(self, address: Optional[str]) -> None:
        if address:
            self._entries.pop(address, None)

    async def prefetch(self, address: str) -> None:
        """Warm the cache; failures are only logged"""
        try:
            await self.get(address)
        except Exception as exc:
            logger.warning("Prefetch for %s failed: %s", address, exc)

    def clear(self) -> None:
        self._entries.clear()


wallet_balance_cache = WalletBalanceCache()
