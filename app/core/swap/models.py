"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SwapValidation:
    """Outcome of checking a swap request before it is handed to the wallet."""

    valid: bool
    reason: Optional[str] = None


@dataclass
class SwapEstimate:
    """Expected result of a swap at current prices."""

    input_amount: str
    input_token: str
    output_token: str
    estimated_output: str
    rate: str
    usd_value: str
    price_impact_pct: float
    network_fee_sol: str
    trend: str

    def to_wire(self) -> Dict[str, Any]:
        return {
            "inputAmount": self.input_amount,
            "inputToken": self.input_token,
            "outputToken": self.output_token,
            "estimatedOutput": self.estimated_output,
            "rate": self.rate,
            "usdValue": self.usd_value,
            "priceImpact": self.price_impact_pct,
            "networkFee": self.network_fee_sol,
            "trend": self.trend,
        }
