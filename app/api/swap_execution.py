import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.swap import swap_service
from ..types import SwapExecutionRequest, SwapExecutionResponse

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("fromToken", "toToken", "amount")


@router.post("/swap-execution", response_model=SwapExecutionResponse)
async def execute_swap(request: SwapExecutionRequest):
    """Validate a swap intent and price it; signing happens in the browser wallet"""
    intent = request.intent
    if not intent or any(not intent.get(field) for field in REQUIRED_FIELDS):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid swap request. Missing required parameters."},
        )

    try:
        validation = swap_service.validate_swap_request(intent, request.wallet_data)
        if not validation.valid:
            return JSONResponse(status_code=400, content={"success": False, "message": validation.reason})

        estimate = await swap_service.get_swap_estimate(intent)
    except Exception as exc:
        logger.exception("Error processing swap request")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": f"Error processing swap request: {exc}"},
        )

    return SwapExecutionResponse(
        success=True,
        message="Swap request is valid and ready for execution",
        estimate=estimate.to_wire(),
        intent=intent,
    )
