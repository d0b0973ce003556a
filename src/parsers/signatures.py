"""Signature pagination per address and cross-address deduplication.

Each address is walked backward with a ``before`` cursor, strictly in order.
Different addresses are walked concurrently, each page drawing the next
endpoint from the pool.
"""

import asyncio
from collections.abc import Iterable, Sequence

from loguru import logger

from src.parsers.rpc.models import SignatureInfo
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import TaskContext


async def paginate(
    pool: RpcPool,
    address: str,
    *,
    page_size: int = 100,
    max_pages: int = 20,
    ctx: TaskContext | None = None,
) -> list[SignatureInfo]:
    """Walk one address's history newest-first, at most ``max_pages`` pages.

    Stops on an empty page or a short page (history exhausted).
    """
    signatures: list[SignatureInfo] = []
    before: str | None = None

    for _page in range(max_pages):
        if ctx is not None:
            ctx.check()

        page = await pool.next().get_signatures_for_address(
            address, limit=page_size, before=before
        )
        if ctx is not None:
            ctx.check()

        if not page:
            break
        signatures.extend(page)
        before = page[-1].signature
        if len(page) < page_size:
            break

    return signatures


def merge_signatures(lists: Iterable[Sequence[SignatureInfo]]) -> list[SignatureInfo]:
    """Concatenate in the given order, keeping the first occurrence of each signature."""
    seen: set[str] = set()
    merged: list[SignatureInfo] = []
    for sigs in lists:
        for sig in sigs:
            if sig.signature in seen:
                continue
            seen.add(sig.signature)
            merged.append(sig)
    return merged


async def collect_signatures(
    pool: RpcPool,
    addresses: Sequence[str],
    *,
    page_size: int = 100,
    max_pages: int = 20,
    ctx: TaskContext | None = None,
) -> list[SignatureInfo]:
    """Paginate every address concurrently, then merge in address order.

    A pagination failure on any address propagates.
    """
    per_address = await asyncio.gather(
        *[
            paginate(pool, addr, page_size=page_size, max_pages=max_pages, ctx=ctx)
            for addr in addresses
        ]
    )
    if ctx is not None:
        ctx.check()

    merged = merge_signatures(per_address)
    total = sum(len(s) for s in per_address)
    logger.debug(
        f"[PAGINATE] {len(addresses)} addresses, {total} signatures, "
        f"{len(merged)} unique"
    )
    return merged
