"""Token metadata (name / symbol / image) via Helius DAS ``getAsset``.

Metadata is cosmetic: any per-mint failure leaves that mint out of the map
and display falls back to an address-derived name.
"""

import asyncio
from collections.abc import Iterable
from typing import Any

from loguru import logger

from src.parsers.launchpad.models import TokenMetadata
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import TaskContext


def display_name(mint: str, meta: TokenMetadata | None) -> str:
    if meta is not None and meta.name:
        return meta.name
    return f"Token {mint[:6]}"


def display_symbol(mint: str, meta: TokenMetadata | None) -> str:
    if meta is not None and meta.symbol:
        return meta.symbol
    return mint[:4].upper()


def parse_asset(asset: dict[str, Any]) -> TokenMetadata:
    """Extract display fields from a DAS asset object."""
    content = asset.get("content") or {}
    metadata = content.get("metadata") or {}
    links = content.get("links") or {}
    return TokenMetadata(
        name=(metadata.get("name") or "").strip(),
        symbol=(metadata.get("symbol") or "").strip(),
        image=links.get("image") or None,
        uri=content.get("json_uri") or "",
    )


async def fetch_batch_metadata(
    pool: RpcPool,
    mints: Iterable[str],
    *,
    max_concurrent: int = 10,
    ctx: TaskContext | None = None,
) -> dict[str, TokenMetadata]:
    unique = list(dict.fromkeys(mints))
    if not unique:
        return {}

    semaphore = asyncio.Semaphore(max_concurrent)

    async def _fetch_one(mint: str) -> TokenMetadata | None:
        async with semaphore:
            asset = await pool.next().get_asset(mint)
        if not asset:
            return None
        return parse_asset(asset)

    results = await asyncio.gather(*[_fetch_one(m) for m in unique], return_exceptions=True)
    if ctx is not None:
        ctx.check()

    metadata: dict[str, TokenMetadata] = {}
    for mint, result in zip(unique, results):
        if isinstance(result, TokenMetadata):
            metadata[mint] = result
        elif isinstance(result, BaseException):
            logger.debug(f"[METADATA] {mint[:12]} unavailable: {result}")

    logger.debug(f"[METADATA] {len(metadata)}/{len(unique)} mints resolved")
    return metadata
