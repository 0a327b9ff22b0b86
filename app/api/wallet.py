import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.wallet import wallet_data_provider
from ..services.token_data import SOLANA_ADDRESS_RE
from ..services.tokens import shorten_address

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/wallet/{address}")
async def get_wallet(address: str):
    """Balances and USD value for a wallet, retried with backoff on upstream failures"""
    if not SOLANA_ADDRESS_RE.match(address):
        return JSONResponse(status_code=400, content={"error": "Invalid Solana address"})

    try:
        overview = await wallet_data_provider.get_wallet_overview_with_retry(address)
    except Exception as exc:
        logger.error("Wallet fetch for %s failed after retries: %s", shorten_address(address), exc)
        return JSONResponse(status_code=502, content={"error": f"Failed to fetch wallet data: {exc}"})

    return overview.to_wire()
