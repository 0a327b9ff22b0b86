"""
Token contract lookups.

Combines DexScreener pair data with Coingecko contract details into a short
markdown report with market commentary.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..providers.coingecko import CoingeckoProvider
from ..providers.dexscreener import DexScreenerProvider

logger = logging.getLogger(__name__)

SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

CHAIN_NAMES: Dict[str, str] = {
    "ethereum": "Ethereum",
    "bsc": "Binance Smart Chain",
    "solana": "Solana",
}

NOT_FOUND_RESPONSES: List[str] = [
    "This token is so underground even my AI circuits can't detect it. Either it's ultra-degen or doesn't exist! 🕵️",
    "Hmm, this token is playing hide and seek with my algorithms. Too degen or just imaginary? You decide! 🤔",
    "My digital neurons are buzzing but this token is nowhere to be found. It might be too new, too obscure, "
    "or from the crypto twilight zone! 👻",
    "I've searched the deepest corners of the blockchain and came up empty-handed. This might be the rarest "
    "token ever or... not real? 🧐",
]

LOOKUP_FAILED = (
    "Sorry, I couldn't fetch information for this token contract. The API might be rate-limited "
    "or the contract might not be valid."
)


def detect_chain(address: str) -> Optional[str]:
    """``solana`` or ``ethereum`` from the address format, else None"""
    if EVM_ADDRESS_RE.match(address):
        return "ethereum"
    if SOLANA_ADDRESS_RE.match(address):
        return "solana"
    return None


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def market_commentary(price_change: float, volume: float, liquidity: float) -> str:
    comments: List[str] = []

    if price_change > 15:
        comments.append(
            "🚀 This token is on an absolute tear right now! Extremely bullish price action, but be "
            "cautious of potential pullbacks after such rapid gains."
        )
    elif price_change > 5:
        comments.append(
            "📈 Showing strong bullish momentum. The positive price action suggests growing interest, "
            "but always consider market cycles."
        )
    elif price_change > 0:
        comments.append(
            "👍 Modest positive momentum. The token is performing relatively well in current market conditions."
        )
    elif price_change > -5:
        comments.append(
            "😐 Price is relatively stable. Could be consolidating before the next move, or facing "
            "resistance at current levels."
        )
    elif price_change > -15:
        comments.append("📉 Currently in a downtrend. May be looking for support, or facing selling pressure.")
    else:
        comments.append(
            "🔻 Experiencing significant selling pressure. Could indicate broader concerns or just "
            "temporary market dynamics."
        )

    if volume > 1_000_000:
        comments.append(
            "Trading volume is substantial, indicating strong interest and liquidity, which is positive for traders."
        )
    elif volume > 100_000:
        comments.append(
            "Decent trading volume shows reasonable market participation. Not the highest, but sufficient "
            "for most trades."
        )
    else:
        comments.append(
            "Volume is on the lower side, which could result in higher slippage when trading and indicates "
            "limited current interest."
        )

    if liquidity > 500_000:
        comments.append(
            "Liquidity looks healthy, which reduces potential slippage and generally makes for a more "
            "stable trading environment."
        )
    elif liquidity > 50_000:
        comments.append(
            "Has reasonable liquidity for its size, but larger trades might still experience some slippage."
        )
    else:
        comments.append(
            "Low liquidity means potentially high slippage and volatility. Exercise caution with larger positions."
        )

    return " ".join(comments)


def _format_price(price: float) -> str:
    if price < 0.01:
        return f"{price:.8f}"
    if price < 1:
        return f"{price:.4f}"
    return f"{price:.2f}"


def _gecko_section(gecko: Optional[Dict[str, Any]]) -> str:
    if not gecko or not isinstance(gecko.get("market_data"), dict):
        return ""
    market = gecko["market_data"]
    market_cap = (market.get("market_cap") or {}).get("usd")
    ath = (market.get("ath") or {}).get("usd")
    description = (gecko.get("description") or {}).get("en") or ""

    lines = [
        "**Additional Info:**",
        f"- Market Cap: ${f'{market_cap / 1_000_000:.2f}M' if market_cap else 'N/A'}",
        f"- Market Cap Rank: {gecko.get('market_cap_rank') or 'N/A'}",
        f"- All Time High: ${f'{ath:.6f}' if ath else 'N/A'}",
    ]
    if description:
        lines.append(f"- Description: {description[:150]}...")
    return "\n".join(lines) + "\n"


def format_token_report(
    dex_data: Optional[Dict[str, Any]],
    chain: str,
    gecko: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """Markdown report for the deepest-liquidity pair, or None without pairs"""
    pairs = (dex_data or {}).get("pairs") or []
    if not pairs:
        return None

    main = max(pairs, key=lambda pair: _as_float((pair.get("liquidity") or {}).get("usd")))
    base = main.get("baseToken") or {}
    price = _as_float(main.get("priceUsd"))
    change = _as_float((main.get("priceChange") or {}).get("h24"))
    volume = _as_float((main.get("volume") or {}).get("h24"))
    liquidity = _as_float((main.get("liquidity") or {}).get("usd"))
    pair_address = main.get("pairAddress")

    report = (
        f"\n## {base.get('name')} ({base.get('symbol')})\n\n"
        f"**Chain:** {CHAIN_NAMES.get(chain, 'Unknown Chain')}\n"
        f"**Contract:** `{base.get('address')}`\n\n"
        "**Current Stats:**\n"
        f"- 💰 Price: ${_format_price(price)}\n"
        f"- {'📈' if change >= 0 else '📉'} 24h Change: {'+' if change >= 0 else ''}{change:.2f}%\n"
        f"- 📊 24h Volume: ${volume / 1_000_000:.2f}M\n"
        f"- 💧 Liquidity: ${liquidity / 1_000_000:.2f}M\n\n"
        "**Trading Info:**\n"
        f"- DEX: {main.get('dexId')}\n"
        f"- Pair Address: `{pair_address}`\n"
        f"{_gecko_section(gecko)}"
        "**Market Analysis:**\n"
        f"{market_commentary(change, volume, liquidity)}\n\n"
        f"[View on DexScreener](https://dexscreener.com/{main.get('chainId')}/{pair_address})\n"
    )
    if gecko and gecko.get("id"):
        report += f"[View on CoinGecko](https://www.coingecko.com/en/coins/{gecko['id']})\n"
    return report


@dataclass
class TokenReport:
    address: str
    chain: str
    markdown: str
    found: bool


class TokenDataService:
    def __init__(
        self,
        dexscreener: Optional[DexScreenerProvider] = None,
        coingecko: Optional[CoingeckoProvider] = None,
        rng: Optional[random.Random] = None,
    ):
        self.dexscreener = dexscreener or DexScreenerProvider()
        self.coingecko = coingecko or CoingeckoProvider()
        self.rng = rng or random.Random()

    async def _dex_pairs(self, address: str, chain: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.dexscreener.get_token_pairs(address, chain)
        except Exception as exc:
            logger.warning("DexScreener lookup for %s failed: %s", address, exc)
            return None

    async def _gecko_info(self, address: str, chain: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.coingecko.get_contract_info(address, chain)
        except Exception as exc:
            logger.info("Coingecko contract lookup for %s failed: %s", address, exc)
            return None

    async def fetch_token_data(self, address: str, chain: Optional[str] = None) -> TokenReport:
        """Look up ``address`` on DexScreener and Coingecko

        Raises:
            ValueError: ``chain`` omitted and the address format is not recognised
        """
        resolved = chain or detect_chain(address)
        if resolved is None:
            raise ValueError(f"Unrecognised token address: {address}")

        try:
            dex_data, gecko = await asyncio.gather(
                self._dex_pairs(address, resolved),
                self._gecko_info(address, resolved),
            )
            report = format_token_report(dex_data, resolved, gecko)
        except Exception:
            logger.exception("Token report for %s failed", address)
            return TokenReport(address=address, chain=resolved, markdown=LOOKUP_FAILED, found=False)

        if report is None:
            index = min(int(self.rng.random() * len(NOT_FOUND_RESPONSES)), len(NOT_FOUND_RESPONSES) - 1)
            message = NOT_FOUND_RESPONSES[index]
            return TokenReport(address=address, chain=resolved, markdown=message, found=False)
        return TokenReport(address=address, chain=resolved, markdown=report, found=True)


token_data_service = TokenDataService()
