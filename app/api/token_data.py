from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ..services.token_data import CHAIN_NAMES, token_data_service
from ..types import TokenDataResponse

router = APIRouter(prefix="/api")


@router.get("/token-data", response_model=TokenDataResponse)
async def get_token_data(
    address: str = Query(..., min_length=1, description="Token contract address"),
    chain: Optional[str] = Query(default=None, description="ethereum, bsc or solana; detected when omitted"),
):
    if chain is not None and chain not in CHAIN_NAMES:
        return JSONResponse(status_code=400, content={"error": f"Unsupported chain: {chain}"})

    try:
        report = await token_data_service.fetch_token_data(address.strip(), chain)
    except ValueError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return TokenDataResponse(
        address=report.address,
        chain=report.chain,
        markdown=report.markdown,
        found=report.found,
    )
