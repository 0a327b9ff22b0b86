import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.chat import chat_service, client_token_balances
from ..core.intents import MatchContext
from ..types import IntentMatchRequest, IntentMatchResponse, IntentParserRequest

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

PROMPT_REQUIRED = {"error": "Invalid request. Prompt is required."}


def _has_prompt(prompt: object) -> bool:
    return isinstance(prompt, str) and bool(prompt)


@router.post("/intent-parser")
async def parse_intent(request: IntentParserRequest):
    """Answer a chat prompt with wallet-aware context, LLM first, local matcher as fallback"""
    if not _has_prompt(request.prompt):
        return JSONResponse(status_code=400, content=PROMPT_REQUIRED)

    logger.info(
        "Intent request session=%s wallet_connected=%s tokens=%d transactions=%d",
        request.session_id,
        request.wallet_connected,
        len(request.token_balances or []),
        len(request.recent_transactions or []),
    )

    try:
        result = await chat_service.process(request)
    except Exception as exc:
        logger.exception("Error in intent parser")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process intent", "details": str(exc) or exc.__class__.__name__},
        )

    return {"result": result, "status": "success"}


@router.post("/intent-match", response_model=IntentMatchResponse)
async def match_intent(request: IntentMatchRequest):
    """Run only the local regex intent matcher"""
    if not _has_prompt(request.prompt):
        return JSONResponse(status_code=400, content=PROMPT_REQUIRED)

    context = MatchContext(
        wallet_connected=bool(request.wallet_connected and request.wallet_address),
        wallet_address=request.wallet_address,
        balance=request.valid_balance,
        token_balances=client_token_balances(request.token_balances),
    )
    result = await chat_service.matcher.match(request.prompt, context, request.session_id)
    return IntentMatchResponse(**result.model_dump())
