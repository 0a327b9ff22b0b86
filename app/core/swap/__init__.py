from .models import SwapEstimate, SwapValidation
from .service import NETWORK_FEE_SOL, SwapService, swap_service

__all__ = ["SwapEstimate", "SwapValidation", "SwapService", "swap_service", "NETWORK_FEE_SOL"]
