"""Batched transaction fetch with per-item failure isolation.

Batches run one after another; fetches inside a batch run concurrently,
each on the next pooled endpoint. A failed or missing transaction is left
out of the result, never aborting its batch.
"""

import asyncio
from collections.abc import Sequence

from loguru import logger

from src.parsers.rpc.models import SignatureInfo, TransactionLogs
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import TaskContext

DEFAULT_BATCH_SIZE = 10


async def fetch_all(
    pool: RpcPool,
    signatures: Sequence[SignatureInfo | str],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    ctx: TaskContext | None = None,
) -> list[TransactionLogs]:
    """Fetch transaction logs for every signature, in signature order, with gaps."""
    sigs = [s.signature if isinstance(s, SignatureInfo) else s for s in signatures]
    fetched: list[TransactionLogs] = []
    failed = 0

    for start in range(0, len(sigs), batch_size):
        if ctx is not None:
            ctx.check()

        batch = sigs[start : start + batch_size]
        results = await asyncio.gather(
            *[pool.next().get_transaction(sig) for sig in batch],
            return_exceptions=True,
        )
        if ctx is not None:
            ctx.check()

        for sig, result in zip(batch, results):
            if isinstance(result, TransactionLogs):
                fetched.append(result)
                continue
            if isinstance(result, BaseException):
                failed += 1
                logger.debug(f"[FETCH] {sig[:16]} skipped: {type(result).__name__}: {result}")

    if failed:
        logger.info(f"[FETCH] {len(fetched)}/{len(sigs)} transactions fetched, {failed} failed")
    return fetched
