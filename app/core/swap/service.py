"""
Swap request validation and estimation.

Nothing is signed or submitted here; the browser wallet executes the swap
after the user approves it.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from ...services.price_oracle import PriceOracle, price_oracle as default_price_oracle
from ...services.tokens import get_token_info
from .models import SwapEstimate, SwapValidation

logger = logging.getLogger(__name__)

NETWORK_FEE_SOL = Decimal("0.000005")


def _to_decimal(raw: Any) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None


def _field(data: Dict[str, Any], camel: str, snake: str) -> Any:
    return data.get(camel, data.get(snake))


class SwapService:
    def __init__(self, price_oracle: Optional[PriceOracle] = None):
        self.price_oracle = price_oracle or default_price_oracle

    def validate_swap_request(
        self,
        intent: Dict[str, Any],
        wallet_data: Optional[Dict[str, Any]] = None,
    ) -> SwapValidation:
        from_token = str(_field(intent, "fromToken", "from_token") or "").upper()
        to_token = str(_field(intent, "toToken", "to_token") or "").upper()

        if get_token_info(from_token) is None:
            return SwapValidation(False, f"Unsupported token: {from_token or 'missing'}")
        if get_token_info(to_token) is None:
            return SwapValidation(False, f"Unsupported token: {to_token or 'missing'}")
        if from_token == to_token:
            return SwapValidation(False, "Cannot swap a token for itself")

        amount = _to_decimal(intent.get("amount"))
        if amount is None or not amount.is_finite() or amount <= 0:
            return SwapValidation(False, "Swap amount must be a positive number")

        if not wallet_data:
            return SwapValidation(True)

        sol_balance = _to_decimal(_field(wallet_data, "solBalance", "sol_balance"))
        if from_token == "SOL" and sol_balance is not None:
            required = amount + NETWORK_FEE_SOL
            if required > sol_balance:
                return SwapValidation(
                    False,
                    f"Insufficient SOL balance. Required: {required} SOL (including fees), "
                    f"available: {sol_balance} SOL",
                )
        elif sol_balance is not None and sol_balance < NETWORK_FEE_SOL:
            return SwapValidation(False, "Insufficient SOL to cover network fees")

        token_balances = _field(wallet_data, "tokenBalances", "token_balances")
        if from_token != "SOL" and token_balances is not None:
            holding = next(
                (t for t in token_balances if str(t.get("symbol", "")).upper() == from_token),
                None,
            )
            available = _to_decimal(holding.get("balance")) if holding else Decimal(0)
            if available is None or amount > available:
                return SwapValidation(
                    False,
                    f"Insufficient {from_token} balance. Required: {amount}, available: {available or 0}",
                )

        return SwapValidation(True)

    async def get_swap_estimate(self, intent: Dict[str, Any]) -> SwapEstimate:
        from_token = str(_field(intent, "fromToken", "from_token")).upper()
        to_token = str(_field(intent, "toToken", "to_token")).upper()
        amount = str(intent.get("amount"))

        estimate = await self.price_oracle.estimate_swap_value(from_token, to_token, amount)
        rate = estimate.estimated_value / Decimal(amount)

        return SwapEstimate(
            input_amount=amount,
            input_token=from_token,
            output_token=to_token,
            estimated_output=f"{estimate.estimated_value:.6f}",
            rate=f"{rate:.6f}",
            usd_value=f"{estimate.usd_value:.2f}",
            price_impact_pct=estimate.price_impact,
            network_fee_sol=str(NETWORK_FEE_SOL),
            trend=estimate.trend,
        )


swap_service = SwapService()
