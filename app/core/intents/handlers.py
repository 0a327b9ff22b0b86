"""
Handlers for the operations the intent matcher recognises.

Each handler takes the regex match, the caller's wallet context and the
shared collaborators, and returns an ``IntentResult``.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ...config import settings
from ...services.price_oracle import PriceOracle
from ...services.tokens import get_token_info, shorten_address, supported_list
from ..wallet.models import WalletTransaction
from .models import IntentResult, MatchContext, SwapIntent

logger = logging.getLogger(__name__)

SOL_FEE_RESERVE = 0.01
HISTORY_LIMIT = 5

TransactionSource = Callable[[str, int], Awaitable[List[WalletTransaction]]]
MarketSource = Callable[[], Awaitable[List[Dict[str, Any]]]]

_SWAP_ALL_PATTERN = re.compile(
    r"(?:all|everything|all\s+my)\s+(\w+)\s+(?:to|into|for)\s+(\w+)", re.IGNORECASE
)


@dataclass
class HandlerDeps:
    price_oracle: PriceOracle
    transactions: Optional[TransactionSource] = None
    markets: Optional[MarketSource] = None


def _unknown_token(token: str) -> IntentResult:
    return IntentResult(
        message=f'I don\'t recognize "{token}" as a supported token. Currently I support: {supported_list()}',
    )


def _format_amount(value: float) -> str:
    return format(Decimal(str(value)).normalize(), "f")


def _swap_all(match: re.Match, context: MatchContext) -> IntentResult:
    from_raw, to_raw = match.group(1), match.group(2)
    from_token, to_token = from_raw.upper(), to_raw.upper()

    if get_token_info(from_token) is None:
        return _unknown_token(from_raw)
    if get_token_info(to_token) is None:
        return _unknown_token(to_raw)

    amount = "0"
    if context.wallet_connected:
        if from_token == "SOL":
            # Keep some SOL behind for fees
            amount = f"{max(0.0, context.balance - SOL_FEE_RESERVE):.4f}"
        else:
            holding = context.token_balance(from_token)
            amount = _format_amount(holding.balance) if holding else "0"

    return IntentResult(
        message=(
            f"I'll help you swap all your {from_token} ({amount}) to {to_token}. "
            "I'll prepare this transaction for your approval."
        ),
        intent=SwapIntent(
            amount=amount, from_token=from_token, to_token=to_token, percentage="100%"
        ).to_wire(),
    )


async def handle_swap(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    all_match = _SWAP_ALL_PATTERN.search(match.group(0))
    if all_match:
        return _swap_all(all_match, context)

    amount, from_raw, to_raw = match.group(1), match.group(2), match.group(3)
    from_token, to_token = from_raw.upper(), to_raw.upper()

    if get_token_info(from_token) is None:
        return _unknown_token(from_raw)
    if get_token_info(to_token) is None:
        return _unknown_token(to_raw)

    if from_token == "SOL" and context.wallet_connected and float(amount) > context.balance:
        return IntentResult(
            message=(
                f"I notice you want to swap {amount} SOL, but your current balance is only "
                f"{context.balance:.4f} SOL. Would you like to try a smaller amount?"
            ),
        )

    base_message = f"I'll help you swap {amount} {from_token} to {to_token}."
    try:
        estimate = await deps.price_oracle.estimate_swap_value(from_token, to_token, amount)
    except Exception as exc:
        logger.warning("Swap estimate for %s -> %s failed: %s", from_token, to_token, exc)
        return IntentResult(
            message=f"{base_message} I'll prepare this transaction for your approval.",
            intent=SwapIntent(amount=amount, from_token=from_token, to_token=to_token).to_wire(),
        )

    price_message = (
        f"Based on current rates, {amount} {from_token} (≈${estimate.usd_value:.2f}) should get you "
        f"approximately {estimate.estimated_value:.6f} {to_token}"
    )
    if estimate.trend == "up":
        price_message += f". {to_token} has been trending upward recently."
    elif estimate.trend == "down":
        price_message += f". {to_token} has been trending downward recently."
    else:
        price_message += f". {to_token} price has been stable recently."
    if estimate.price_impact > 0:
        price_message += (
            f" Note: This swap may have a price impact of approximately {estimate.price_impact:.1f}%."
        )

    return IntentResult(
        message=f"{base_message} {price_message} I'll prepare this transaction for your approval.",
        intent=SwapIntent(
            amount=amount,
            from_token=from_token,
            to_token=to_token,
            estimated_value=f"{estimate.estimated_value:.6f}",
        ).to_wire(),
    )


async def handle_balance(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    if not context.wallet_connected:
        return IntentResult(message="Please connect your wallet first to check your balance.")

    price_info = ""
    try:
        sol_price = await deps.price_oracle.get_price("SOL")
        if sol_price:
            price_info = f" (≈${context.balance * float(sol_price):.2f})"
    except Exception as exc:
        logger.warning("SOL price lookup failed: %s", exc)

    return IntentResult(
        message=(
            f"Your current wallet balance is {context.balance:.4f} SOL{price_info} "
            f"({shorten_address(context.wallet_address)}). "
            "You can use this balance to swap tokens or perform other operations."
        ),
        intent={"action": "balance", "address": context.wallet_address},
    )


async def handle_token_info(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    raw = match.group(1)
    info = get_token_info(raw)
    if info is None:
        return IntentResult(
            message=f"I don't have information about {raw}. Currently I have data on: {supported_list()}",
        )

    price_info = ""
    try:
        price = await deps.price_oracle.get_price(info.symbol)
        if price:
            price_info = f"\n\nCurrent price: ${price:.{info.price_precision}f}"
    except Exception as exc:
        logger.warning("Price lookup for %s failed: %s", info.symbol, exc)

    message = (
        f"{info.symbol} ({info.name}): {info.description}. It has {info.decimals} decimals "
        f"and is commonly used for {info.use_cases}."
    )
    message += f"\n\nCategory: {info.category}"
    if info.year_launched:
        message += f", Launched: {info.year_launched}"
    if info.price_range:
        message += f"\nPrice history: {info.price_range}"
    if info.market_sentiment:
        message += f"\nMarket sentiment: {info.market_sentiment}"
    message += price_info
    if info.trend_indicators:
        message += f"\n\nKey trend indicators: {', '.join(info.trend_indicators)}"

    return IntentResult(message=message, intent={"action": "tokenInfo", "token": info.symbol})


async def handle_price(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    raw = match.group(1)
    info = get_token_info(raw)
    if info is None:
        return IntentResult(
            message=f"I don't have price information for {raw}. Currently I track: {supported_list()}",
        )

    price = await deps.price_oracle.get_price(info.symbol)
    return IntentResult(
        message=(
            f"The current price of {info.symbol} ({info.name}) is approximately "
            f"${price:.{info.price_precision}f} USD."
        ),
        intent={"action": "price", "token": info.symbol, "price": float(price)},
    )


def _format_timestamp(timestamp: Optional[int]) -> str:
    if not timestamp:
        return "unknown date"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


async def handle_history(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    if not context.wallet_connected or not context.wallet_address:
        return IntentResult(message="Please connect your wallet first to view your transaction history.")

    try:
        if deps.transactions is None:
            raise RuntimeError("No transaction source configured")
        history = await deps.transactions(context.wallet_address, HISTORY_LIMIT)
    except Exception as exc:
        logger.warning("Transaction history for %s failed: %s", shorten_address(context.wallet_address), exc)
        return IntentResult(
            message=(
                "I encountered an error while trying to fetch your transaction history. "
                "Please try again later."
            ),
            intent={"action": "history", "success": False},
        )

    if not history:
        return IntentResult(
            message=(
                "I couldn't find any recent transactions for your wallet. This could be because your "
                "wallet is new or the transaction history is not available through the API."
            ),
            intent={"action": "history", "success": False},
        )

    latest = history[:HISTORY_LIMIT]
    lines = [
        f"{index}. {tx.description or 'Unknown transaction'} - {_format_timestamp(tx.timestamp)}"
        for index, tx in enumerate(latest, start=1)
    ]
    message = (
        "Here are your most recent transactions:\n\n"
        + "\n".join(lines)
        + f"\n\nYou can see your full transaction history on Solana Explorer: "
        f"{settings.explorer_url(context.wallet_address)}"
    )
    return IntentResult(
        message=message,
        intent={
            "action": "history",
            "success": True,
            "transactions": [tx.to_wire() for tx in latest],
        },
    )


_STATIC_TRENDS = {
    "overall": "The crypto market is showing a bullish pattern in the last 24 hours with most major assets gaining value.",
    "gainers": ["SOL (+8.2%)", "JUP (+15.4%)", "WIF (+23.1%)"],
    "losers": ["Some Token (-3.2%)", "Another Token (-2.1%)"],
    "solana": "The Solana ecosystem is outperforming the broader market with increased DeFi activity.",
}


def _summarize_listing(listing: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Gainers, losers and overall direction from a market-cap ordered listing"""
    changes = [
        coin for coin in listing
        if isinstance(coin.get("price_change_percentage_24h"), (int, float))
    ]
    if not changes:
        raise ValueError("Market listing has no 24h changes")

    def _label(coin: Dict[str, Any]) -> str:
        return f"{str(coin.get('symbol', '?')).upper()} ({coin['price_change_percentage_24h']:+.1f}%)"

    ordered = sorted(changes, key=lambda coin: coin["price_change_percentage_24h"], reverse=True)
    gainers = [_label(coin) for coin in ordered[:3] if coin["price_change_percentage_24h"] > 0]
    losers = [_label(coin) for coin in reversed(ordered[-3:]) if coin["price_change_percentage_24h"] < 0]

    average = sum(coin["price_change_percentage_24h"] for coin in changes) / len(changes)
    if average > 1:
        overall = f"The crypto market is bullish over the last 24 hours, with an average move of {average:+.1f}% across the top assets."
    elif average < -1:
        overall = f"The crypto market is bearish over the last 24 hours, with an average move of {average:+.1f}% across the top assets."
    else:
        overall = f"The crypto market is moving sideways over the last 24 hours ({average:+.1f}% on average)."

    sol = next((coin for coin in changes if str(coin.get("symbol", "")).lower() == "sol"), None)
    if sol is None:
        solana = "Solana is not in the current top listing."
    else:
        sol_change = sol["price_change_percentage_24h"]
        relation = "outperforming" if sol_change > average else "trailing"
        solana = f"SOL is {relation} the broader market at {sol_change:+.1f}% over 24 hours."

    return {
        "overall": overall,
        "gainers": gainers or ["None in the top listing"],
        "losers": losers or ["None in the top listing"],
        "solana": solana,
    }


async def handle_market_trends(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    trends = _STATIC_TRENDS
    if deps.markets is not None:
        try:
            trends = _summarize_listing(await deps.markets())
        except Exception as exc:
            logger.warning("Market listing unavailable, using static summary: %s", exc)

    personal = (
        "Based on your wallet holdings, you might be interested in keeping an eye on SOL price movements."
        if context.wallet_connected
        else "Connect your wallet for personalized market insights based on your holdings."
    )
    message = (
        "\n## Current Market Trends\n\n"
        f"{trends['overall']}\n\n"
        f"**Top gainers:**\n{', '.join(trends['gainers'])}\n\n"
        f"**Top losers:**\n{', '.join(trends['losers'])}\n\n"
        f"**Solana ecosystem:**\n{trends['solana']}\n\n"
        f"{personal}\n"
    )
    return IntentResult(message=message, intent={"action": "marketTrends"})


async def handle_help(match: re.Match, context: MatchContext, deps: HandlerDeps) -> IntentResult:
    if context.wallet_connected:
        status = (
            f"Your wallet ({shorten_address(context.wallet_address)}) is connected with "
            f"{context.balance:.4f} SOL."
        )
    else:
        status = "Please connect your wallet to access all features."

    message = (
        f"I'm your advanced Web3 AI assistant. {status}\n\n"
        "Here's what I can help you with:\n\n"
        '1. **Token Swaps** - Example: "Swap 1 SOL to USDC"\n'
        '2. **Balance Check** - Example: "Check my balance"\n'
        '3. **Transaction History** - Example: "Show my recent transactions"\n'
        '4. **Token Information** - Example: "Tell me about SOL"\n'
        '5. **Market Trends** - Example: "What are the market trends?"\n'
        '6. **Help** - Example: "What can you do?"\n\n'
        f"I support many tokens including {supported_list()}. "
        "I can also provide real-time price estimates when performing swaps."
    )
    return IntentResult(message=message, intent={"action": "help"})
