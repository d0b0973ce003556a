"""Async Solana JSON-RPC client bound to one credentialed endpoint.

Errors are raised as ``RpcError`` subclasses rather than swallowed: callers
decide whether a failure is isolated (one transaction in a batch), degraded
(token balances, metadata) or terminal (the curve listing).
"""

import asyncio
import base64
from typing import Any
from urllib.parse import urlsplit

import base58
import httpx
from loguru import logger

from src.parsers.rate_limiter import RateLimiter
from src.parsers.rpc.exceptions import (
    RpcError,
    RpcHttpError,
    RpcRateLimitError,
    RpcResponseError,
    RpcTransportError,
)
from src.parsers.rpc.models import RawAccount, SignatureInfo, TransactionLogs

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
MAX_SIGNATURES_PER_CALL = 1000
RETRY_DELAYS = [1.0, 3.0]
PARSE_ERROR_CODE = -32700


def redact_url(url: str) -> str:
    """Drop the query string (API key) so endpoints can be logged."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}".rstrip("/")


def _retry_delay(attempt: int) -> float:
    return RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]


def _raw_account(item: dict) -> RawAccount:
    account = item.get("account") or {}
    data = account.get("data")
    b64 = data[0] if isinstance(data, list) else (data or "")
    return RawAccount(
        pubkey=item.get("pubkey", ""),
        data=base64.b64decode(b64),
        lamports=account.get("lamports", 0),
        owner=account.get("owner", ""),
    )


class SolanaRpcClient:
    """Async HTTP client for one Solana RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        *,
        max_rps: float = 10.0,
        timeout: float = 15.0,
        max_retries: int = 0,
        label: str = "",
    ) -> None:
        self._rpc_url = rpc_url
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)
        self._max_retries = max_retries
        self.label = label or redact_url(rpc_url)

    def __repr__(self) -> str:
        return f"SolanaRpcClient({self.label})"

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any] | dict[str, Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        for attempt in range(self._max_retries + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.post(self._rpc_url, json=payload)
            except httpx.TransportError as e:
                if attempt < self._max_retries:
                    await asyncio.sleep(_retry_delay(attempt))
                    continue
                raise RpcTransportError(f"{method} via {self.label}: {e}") from e

            if resp.status_code == 429:
                if attempt < self._max_retries:
                    delay = _retry_delay(attempt)
                    logger.debug(f"[RPC] {self.label} rate limited on {method}, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise RpcRateLimitError(method)
            if resp.status_code != 200:
                raise RpcHttpError(resp.status_code, method)

            try:
                data = resp.json()
            except ValueError as e:
                raise RpcResponseError(PARSE_ERROR_CODE, "invalid JSON body", method) from e
            if not isinstance(data, dict):
                raise RpcResponseError(PARSE_ERROR_CODE, "unexpected response shape", method)

            error = data.get("error")
            if error:
                raise RpcResponseError(
                    int(error.get("code", 0)), str(error.get("message", "")), method
                )
            return data.get("result")

        raise RpcError(f"{method}: retries exhausted")

    async def get_signatures_for_address(
        self, address: str, *, limit: int = 100, before: str | None = None
    ) -> list[SignatureInfo]:
        """One page of signatures for an address, newest-first."""
        opts: dict[str, Any] = {"limit": min(limit, MAX_SIGNATURES_PER_CALL)}
        if before:
            opts["before"] = before

        result = await self._call("getSignaturesForAddress", [address, opts]) or []
        return [
            SignatureInfo(
                signature=sig.get("signature", ""),
                slot=sig.get("slot", 0),
                block_time=sig.get("blockTime"),
                err=sig.get("err"),
            )
            for sig in result
        ]

    async def get_transaction(self, signature: str) -> TransactionLogs | None:
        """Fetch a transaction's log lines. None if unknown or log-less."""
        result = await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "json",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": "confirmed",
                },
            ],
        )
        if not result:
            return None
        logs = (result.get("meta") or {}).get("logMessages")
        if logs is None:
            return None
        return TransactionLogs(
            signature=signature,
            log_lines=logs,
            block_time=result.get("blockTime") or 0,
        )

    async def get_token_accounts_by_owner(
        self, owner: str, *, program_id: str = TOKEN_PROGRAM_ID
    ) -> list[RawAccount]:
        """All SPL token accounts of an owner as raw account blobs."""
        result = await self._call(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, {"encoding": "base64"}],
        )
        return [_raw_account(item) for item in (result or {}).get("value", [])]

    async def get_balance(self, address: str) -> int:
        """Native balance in lamports."""
        result = await self._call("getBalance", [address, {"commitment": "confirmed"}])
        if isinstance(result, dict):
            return int(result.get("value", 0))
        return int(result or 0)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = await self._call("getMinimumBalanceForRentExemption", [size])
        return int(result or 0)

    async def get_program_accounts(
        self,
        program_id: str,
        *,
        discriminator: bytes | None = None,
        data_size: int | None = None,
    ) -> list[RawAccount]:
        """Program-owned accounts, optionally filtered by 8-byte account discriminator."""
        filters: list[dict[str, Any]] = []
        if discriminator:
            filters.append(
                {"memcmp": {"offset": 0, "bytes": base58.b58encode(discriminator).decode()}}
            )
        if data_size:
            filters.append({"dataSize": data_size})

        config: dict[str, Any] = {"encoding": "base64"}
        if filters:
            config["filters"] = filters

        result = await self._call("getProgramAccounts", [program_id, config]) or []
        return [_raw_account(item) for item in result]

    async def get_account_info(self, address: str) -> RawAccount | None:
        result = await self._call("getAccountInfo", [address, {"encoding": "base64"}])
        value = (result or {}).get("value")
        if not value:
            return None
        return _raw_account({"pubkey": address, "account": value})

    async def get_asset(self, asset_id: str) -> dict[str, Any] | None:
        """Helius DAS ``getAsset``: name/symbol/image for a mint."""
        return await self._call("getAsset", {"id": asset_id})
