"""
Static registry of the Solana tokens the assistant understands.

Each entry carries display metadata for token info replies, the SPL mint used
to label on-chain balances, the CoinGecko id used for live prices, and a
reference USD price used when live pricing is unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional


NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"
LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    name: str
    decimals: int
    description: str
    use_cases: str
    category: str
    coingecko_id: str
    reference_price_usd: Decimal
    mint: Optional[str] = None
    price_range: Optional[str] = None
    year_launched: Optional[int] = None
    market_sentiment: Optional[str] = None
    issuer: Optional[str] = None
    trend_indicators: List[str] = field(default_factory=list)

    @property
    def price_precision(self) -> int:
        """Decimal places used when quoting this token's USD price."""
        return 8 if self.reference_price_usd < Decimal("0.01") else 2


TOKEN_INFO: Dict[str, TokenInfo] = {
    "SOL": TokenInfo(
        symbol="SOL",
        name="Solana",
        decimals=9,
        description="Native token of the Solana blockchain, known for high throughput and low fees",
        use_cases="Transaction fees, staking, governance, DeFi collateral",
        category="L1 blockchain",
        coingecko_id="solana",
        reference_price_usd=Decimal("150"),
        mint=NATIVE_SOL_MINT,
        price_range="$20-$100 historically",
        year_launched=2020,
        market_sentiment="Bullish after 2023 recovery",
        trend_indicators=["Ecosystem growth", "Developer activity", "DeFi TVL"],
    ),
    "USDC": TokenInfo(
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        description="A regulated stablecoin pegged to the US dollar issued by Circle",
        use_cases="Store of value, trading pairs, cross-border payments, yield farming",
        category="Stablecoin",
        coingecko_id="usd-coin",
        reference_price_usd=Decimal("1"),
        mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        price_range="~$1.00 (stablecoin)",
        year_launched=2018,
        issuer="Circle",
        trend_indicators=["Regulatory compliance", "Corporate adoption"],
    ),
    "USDT": TokenInfo(
        symbol="USDT",
        name="Tether",
        decimals=6,
        description="The largest stablecoin by market cap, pegged to the US dollar",
        use_cases="Trading pairs, store of value, global payments",
        category="Stablecoin",
        coingecko_id="tether",
        reference_price_usd=Decimal("1"),
        mint="Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
        price_range="~$1.00 (stablecoin)",
        year_launched=2014,
        issuer="Tether Limited",
        trend_indicators=["Exchange reserves", "Regulatory scrutiny"],
    ),
    "BONK": TokenInfo(
        symbol="BONK",
        name="Bonk",
        decimals=5,
        description="A community-focused Solana meme coin with the Shiba Inu dog mascot",
        use_cases="Community engagement, tipping, NFT purchases on Solana",
        category="Meme coin",
        coingecko_id="bonk",
        reference_price_usd=Decimal("0.00002"),
        mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        price_range="High volatility meme token",
        year_launched=2022,
        market_sentiment="Cyclical hype patterns",
        trend_indicators=["Social media mentions", "Community engagement", "Whale movements"],
    ),
    "JUP": TokenInfo(
        symbol="JUP",
        name="Jupiter",
        decimals=6,
        description="Governance token for Jupiter, Solana's leading DEX aggregator",
        use_cases="Governance, fee sharing, liquidity provision incentives",
        category="DEX token",
        coingecko_id="jupiter-exchange-solana",
        reference_price_usd=Decimal("0.8"),
        mint="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
        price_range="Trending upward since 2024 launch",
        year_launched=2024,
        market_sentiment="Strong as leading Solana DEX",
        trend_indicators=["Trading volume", "TVL growth", "Protocol revenue"],
    ),
    "JTO": TokenInfo(
        symbol="JTO",
        name="Jito",
        decimals=9,
        description="Governance token for Jito's MEV infrastructure on Solana",
        use_cases="Governance, staking, revenue sharing",
        category="Infrastructure token",
        coingecko_id="jito-governance-token",
        reference_price_usd=Decimal("2.5"),
        mint="jtojtomepa8beP8AuQc6eXt5FriJwfFMwQx2v2f9mCL",
        price_range="Stable with growth potential",
        year_launched=2023,
        market_sentiment="Technical adoption focus",
        trend_indicators=["Validator adoption", "Solana block production stats"],
    ),
    "RAY": TokenInfo(
        symbol="RAY",
        name="Raydium",
        decimals=6,
        description="AMM and liquidity provider on Solana with concentrated liquidity features",
        use_cases="Trading, liquidity provision, yield farming",
        category="DEX token",
        coingecko_id="raydium",
        reference_price_usd=Decimal("2"),
        mint="4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
        price_range="DeFi token with moderate volatility",
        year_launched=2021,
        market_sentiment="Recovering alongside Solana DeFi ecosystem",
        trend_indicators=["TVL", "Trading fees generated", "New pool launches"],
    ),
    "PYTH": TokenInfo(
        symbol="PYTH",
        name="Pyth Network",
        decimals=6,
        description="Oracle protocol providing real-time market data across blockchains",
        use_cases="Governance, staking for data validation",
        category="Oracle token",
        coingecko_id="pyth-network",
        reference_price_usd=Decimal("0.35"),
        mint="HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3",
        year_launched=2023,
        market_sentiment="Growth with DeFi adoption",
        trend_indicators=["Cross-chain integrations", "Data provider partnerships"],
    ),
    "MEME": TokenInfo(
        symbol="MEME",
        name="Memecoin",
        decimals=6,
        description="Multi-chain meme token focused on internet culture and humor",
        use_cases="Community engagement, memetic value",
        category="Meme coin",
        coingecko_id="memecoin-2",
        reference_price_usd=Decimal("0.01"),
        price_range="Highly volatile, follows meme cycles",
        year_launched=2023,
        market_sentiment="Follows broader meme coin trends",
        trend_indicators=["Social media virality", "Celebrity mentions", "New exchange listings"],
    ),
    "WIF": TokenInfo(
        symbol="WIF",
        name="Dogwifhat",
        decimals=6,
        description="Solana meme coin featuring a dog wearing a pink hat, went viral in 2023",
        use_cases="Community status, NFT integration",
        category="Meme coin",
        coingecko_id="dogwifcoin",
        reference_price_usd=Decimal("1.5"),
        mint="EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
        price_range="Extremely volatile, reached major peaks in 2023-2024",
        year_launched=2023,
        market_sentiment="One of Solana's most successful meme coins",
        trend_indicators=["Twitter mentions", "Influencer activity", "New listings"],
    ),
}

SUPPORTED_SYMBOLS: List[str] = list(TOKEN_INFO.keys())

_MINT_INDEX: Dict[str, TokenInfo] = {info.mint: info for info in TOKEN_INFO.values() if info.mint}


def get_token_info(symbol: Optional[str]) -> Optional[TokenInfo]:
    if not symbol:
        return None
    return TOKEN_INFO.get(symbol.strip().upper())


def is_supported(symbol: Optional[str]) -> bool:
    return get_token_info(symbol) is not None


def token_by_mint(mint: Optional[str]) -> Optional[TokenInfo]:
    if not mint:
        return None
    return _MINT_INDEX.get(mint)


def supported_list() -> str:
    return ", ".join(SUPPORTED_SYMBOLS)


def shorten_address(address: Optional[str]) -> str:
    """Render ``abcd...wxyz`` the way the chat replies show wallet addresses."""
    if not address:
        return "unknown"
    return f"{address[:4]}...{address[-4:]}"
