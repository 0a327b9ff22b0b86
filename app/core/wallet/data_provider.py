"""
Wallet reads backed by the Solana RPC provider.

The chat flow calls the single-attempt methods and falls back to cached or
client-supplied data on failure; the wallet overview route goes through
``get_wallet_overview_with_retry``.
"""

import asyncio
import logging
from decimal import Decimal
from typing import List, Optional

from ...config import settings
from ...providers.base import IndexerProvider
from ...providers.solana import SolanaProvider
from ...services.price_oracle import PriceOracle, price_oracle as default_price_oracle
from ..recovery import RetryConfig, RetryPolicy
from .models import TokenBalance, WalletBalances, WalletOverview, WalletTransaction

logger = logging.getLogger(__name__)


class WalletDataProvider:
    def __init__(
        self,
        indexer: Optional[IndexerProvider] = None,
        price_oracle: Optional[PriceOracle] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.indexer = indexer or SolanaProvider()
        self.price_oracle = price_oracle or default_price_oracle
        self.retry_policy = retry_policy or RetryPolicy(
            RetryConfig(
                max_attempts=settings.wallet_fetch_max_attempts,
                initial_delay_seconds=settings.wallet_fetch_initial_delay_seconds,
                max_delay_seconds=settings.wallet_fetch_max_delay_seconds,
            ),
            logger=logger,
        )

    async def get_wallet_balances(self, address: str) -> WalletBalances:
        """SOL balance plus SPL token balances (SOL itself excluded from the token list)"""
        native, tokens = await asyncio.gather(
            self.indexer.get_native_balance(address),
            self.indexer.get_token_balances(address),
        )

        token_balances: List[TokenBalance] = []
        for token in tokens.get("tokens") or []:
            symbol = token.get("symbol") or ""
            if symbol.upper() == "SOL":
                continue
            token_balances.append(
                TokenBalance(
                    symbol=symbol,
                    balance=float(token.get("balance") or 0),
                    decimals=token.get("decimals"),
                    mint=token.get("mint"),
                    name=token.get("name"),
                )
            )

        return WalletBalances(
            sol_balance=float(native.get("balance") or 0),
            token_balances=token_balances,
        )

    async def get_recent_transactions(self, address: str, limit: int = 10) -> List[WalletTransaction]:
        raw = await self.indexer.get_recent_transactions(address, limit=limit)
        return [WalletTransaction.model_validate(tx) for tx in raw]

    async def get_wallet_overview(self, address: str) -> WalletOverview:
        """Balances valued in USD where a price is known"""
        balances = await self.get_wallet_balances(address)

        total = Decimal(0)
        sol_price = await self.price_oracle.get_price("SOL")
        total += Decimal(str(balances.sol_balance)) * sol_price

        symbols = [token.symbol for token in balances.token_balances]
        prices = await self.price_oracle.get_prices(symbols)
        for token in balances.token_balances:
            price = prices.get(token.symbol.upper())
            if price is None:
                continue
            value = Decimal(str(token.balance)) * price
            token.usd_value = float(round(value, 2))
            total += value

        return WalletOverview(
            address=address,
            sol_balance=balances.sol_balance,
            tokens=balances.token_balances,
            total_value_usd=float(round(total, 2)),
            explorer_url=settings.explorer_url(address),
        )

    async def get_wallet_overview_with_retry(self, address: str) -> WalletOverview:
        return await self.retry_policy.execute(lambda: self.get_wallet_overview(address))


wallet_data_provider = WalletDataProvider()
