"""Solana JSON-RPC wallet data provider."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..services.tokens import LAMPORTS_PER_SOL, NATIVE_SOL_MINT, token_by_mint
from .base import IndexerProvider

logger = logging.getLogger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGCPFhdVjauHNXuVcKWUmr9H1B"


class SolanaRPCError(Exception):
    """Raised when the RPC endpoint returns an error object."""

    def __init__(self, method: str, error: Any):
        self.method = method
        self.error = error
        code = error.get("code") if isinstance(error, dict) else None
        message = error.get("message") if isinstance(error, dict) else str(error)
        self.code = code
        super().__init__(f"Solana RPC {method} failed: {message}")


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


def classify_transaction(log_messages: List[str]) -> str:
    """Label a transaction from its program logs."""
    if any("Swap" in message for message in log_messages):
        return "swap"
    if any("Transfer" in message for message in log_messages):
        return "transfer"
    return "transaction"


class SolanaProvider(IndexerProvider):
    """Read wallet balances and history straight from a Solana RPC node."""

    name = "solana-rpc"
    timeout_s = 15

    def __init__(self, rpc_url: Optional[str] = None, timeout_s: Optional[int] = None) -> None:
        self.rpc_url = rpc_url or settings.resolved_solana_rpc_url
        self.timeout_s = timeout_s or settings.solana_rpc_timeout_seconds
        self._request_id = 0

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC endpoint not configured"}

        try:
            result = await self._rpc_call("getHealth", [])
            return {"status": "healthy" if result == "ok" else "degraded", "network": settings.normalized_network}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            response = await client.post(
                self.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        if "error" in data:
            raise SolanaRPCError(method, data["error"])
        return data.get("result")

    async def get_native_balance(self, address: str) -> Dict[str, Any]:
        """Get the SOL balance for ``address``"""
        result = await self._rpc_call("getBalance", [address, {"commitment": "confirmed"}])
        lamports = int((result or {}).get("value") or 0)
        sol = Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)

        return {
            "symbol": "SOL",
            "name": "Solana",
            "mint": NATIVE_SOL_MINT,
            "decimals": 9,
            "lamports": lamports,
            "balance": sol,
            "_source": {"name": self.name, "url": self.rpc_url},
        }

    async def get_token_balances(self, address: str) -> Dict[str, Any]:
        """Get SPL token balances owned by ``address`` (zero balances skipped)"""
        result = await self._rpc_call(
            "getTokenAccountsByOwner",
            [
                address,
                {"programId": TOKEN_PROGRAM_ID},
                {"encoding": "jsonParsed", "commitment": "confirmed"},
            ],
        )

        tokens: List[Dict[str, Any]] = []
        for account in (result or {}).get("value") or []:
            info = (
                ((account.get("account") or {}).get("data") or {}).get("parsed") or {}
            ).get("info") or {}
            mint = info.get("mint")
            amount = info.get("tokenAmount") or {}
            if not mint:
                continue

            balance = _to_decimal(amount.get("uiAmountString") or amount.get("uiAmount"))
            if balance is None:
                raw = _to_decimal(amount.get("amount"))
                decimals = int(amount.get("decimals") or 0)
                balance = raw / (Decimal(10) ** decimals) if raw is not None else Decimal(0)
            if balance <= 0:
                continue

            known = token_by_mint(mint)
            tokens.append(
                {
                    "mint": mint,
                    "symbol": known.symbol if known else f"{mint[:4]}...",
                    "name": known.name if known else "Unknown Token",
                    "decimals": int(amount.get("decimals") or (known.decimals if known else 0)),
                    "balance": balance,
                    "_source": {"name": self.name, "url": self.rpc_url},
                }
            )

        return {"tokens": tokens}

    async def get_signatures(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        result = await self._rpc_call("getSignaturesForAddress", [address, {"limit": limit}])
        return list(result or [])

    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        return await self._rpc_call(
            "getTransaction",
            [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0}],
        )

    async def get_recent_transactions(self, address: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Fetch and summarise the latest successful transactions for ``address``"""
        if limit <= 0:
            return []

        signatures = await self.get_signatures(address, limit)

        async def _describe(entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
            signature = entry.get("signature")
            if not signature or entry.get("err"):
                return None
            try:
                tx = await self.get_transaction(signature)
            except (httpx.HTTPError, SolanaRPCError) as exc:
                logger.warning("Skipping transaction %s: %s", signature, exc)
                return None
            if not tx:
                return None

            meta = tx.get("meta") or {}
            if meta.get("err"):
                return None

            tx_type = classify_transaction(meta.get("logMessages") or [])
            pre = meta.get("preBalances") or [0]
            post = meta.get("postBalances") or [0]
            change = abs((post[0] if post else 0) - (pre[0] if pre else 0))
            amount = f"{Decimal(change) / Decimal(LAMPORTS_PER_SOL):.4f}"
            block_time = tx.get("blockTime") or entry.get("blockTime")

            if tx_type == "swap":
                description = f"Swapped {amount} SOL"
            elif tx_type == "transfer":
                description = f"Transferred {amount} SOL"
            else:
                description = f"Transaction of {amount} SOL"

            return {
                "signature": signature,
                "timestamp": block_time,
                "type": tx_type,
                "amount": amount,
                "from_token": "SOL",
                "to_token": None,
                "status": entry.get("confirmationStatus") or "confirmed",
                "description": description,
            }

        described = await asyncio.gather(*(_describe(entry) for entry in signatures))
        return [tx for tx in described if tx is not None]
