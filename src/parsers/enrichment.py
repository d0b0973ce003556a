"""Throttled, cancellable enrichment pass over an already-published list.

Runs after a bulk fetch: waits ``warmup_sec`` so the upstream rate window can
recover, then enriches items strictly one at a time on a rotating endpoint,
sleeping ``item_delay_sec`` between items. A failed item yields None and the
loop continues. Cancellation is polled before every item and after every
await; a cancelled pass returns None and nothing is merged.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from loguru import logger

from src.parsers.rpc.client import SolanaRpcClient
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import CycleCancelled, TaskContext


def merge_positional(
    previous: Sequence[Any],
    results: Sequence[Any],
    merge: Callable[[Any, Any], Any],
) -> list[Any]:
    """Apply results index-by-index; items with no result keep their old fields."""
    merged: list[Any] = []
    for i, item in enumerate(previous):
        result = results[i] if i < len(results) else None
        merged.append(item if result is None else merge(item, result))
    return merged


class EnrichmentScheduler:
    def __init__(
        self,
        pool: RpcPool,
        *,
        warmup_sec: float = 2.0,
        item_delay_sec: float = 0.4,
    ) -> None:
        self._pool = pool
        self._warmup_sec = warmup_sec
        self._item_delay_sec = item_delay_sec

    async def enrich(
        self,
        items: Sequence[Any],
        fetch: Callable[[SolanaRpcClient, Any], Awaitable[Any]],
        ctx: TaskContext,
    ) -> list[Any] | None:
        """Per-item results in input order, or None if cancelled."""
        logger.debug(f"[ENRICH] Waiting {self._warmup_sec}s before enriching {len(items)} items")
        results: list[Any] = []
        try:
            await ctx.sleep(self._warmup_sec)
            for i, item in enumerate(items):
                ctx.check()

                client = self._pool.next()
                try:
                    results.append(await fetch(client, item))
                except Exception as e:
                    logger.warning(
                        f"[ENRICH] Item {i + 1}/{len(items)} failed via {client.label}: {e}"
                    )
                    results.append(None)
                ctx.check()

                if i < len(items) - 1:
                    await ctx.sleep(self._item_delay_sec)
        except CycleCancelled:
            logger.debug(f"[ENRICH] Cancelled after {len(results)}/{len(items)} items")
            return None

        return results

    async def run(
        self,
        items: Sequence[Any],
        fetch: Callable[[SolanaRpcClient, Any], Awaitable[Any]],
        merge: Callable[[Any, Any], Any],
        ctx: TaskContext,
    ) -> list[Any] | None:
        """Enrich then merge positionally into ``items``. None if cancelled."""
        results = await self.enrich(items, fetch, ctx)
        if results is None or ctx.cancelled:
            return None

        enriched = sum(1 for r in results if r is not None)
        logger.info(f"[ENRICH] {enriched}/{len(items)} items enriched")
        return merge_positional(items, results, merge)
