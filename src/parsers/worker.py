"""Indexer worker: builds the RPC pool and services, then runs them.

1. Token board refresh loop, re-reading curves every ``token_refresh_interval_sec``
2. API server (same event loop), serving profiles, tokens and referrals
"""

import asyncio

from loguru import logger

from config.settings import settings
from src.parsers.profile import ProfileFetcher
from src.parsers.rpc.pool import RpcPool
from src.parsers.token_board import TokenBoard


async def _board_refresh_loop(board: TokenBoard, interval: float) -> None:
    """Refresh the token board now, then periodically."""
    while True:
        try:
            listings = await board.refresh()
            logger.info(f"[TOKENS] Board refreshed: {len(listings)} tokens")
        except Exception as e:
            logger.error(f"[TOKENS] Refresh loop error: {e}")
        if interval <= 0:
            return
        await asyncio.sleep(interval)


async def run_worker() -> None:
    """Entry point: starts the board refresher and the API server."""
    pool = RpcPool.from_settings(settings)
    profiles = ProfileFetcher(pool, settings)
    board = TokenBoard(pool, settings)

    from src.api.registry import registry
    from src.api.server import run_api_server

    registry.bind(pool, profiles, board)

    tasks = [
        asyncio.create_task(
            _board_refresh_loop(board, settings.token_refresh_interval_sec),
            name="board_refresh",
        ),
        asyncio.create_task(run_api_server(), name="api_server"),
    ]
    logger.info(f"API on port {settings.dashboard_port}, {len(pool)} RPC endpoints")

    try:
        await asyncio.gather(*tasks)
    except asyncio.CancelledError:
        logger.info("Worker tasks cancelled")
    finally:
        for task in tasks:
            task.cancel()
        await board.close()
        registry.clear()
        await pool.close()
