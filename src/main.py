"""Launchpad indexer process.

Runs the worker (token board refresher + API server) until SIGINT/SIGTERM.
Shutdown cancels the worker task; its cleanup stops board enrichment, unbinds
the API services and closes every pooled RPC connection before we exit.
"""

import asyncio
import signal

from loguru import logger

from config.settings import settings
from src.parsers.worker import run_worker
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info(f"Starting launchpad indexer (program {settings.launchpad_program_id[:8]})")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    worker = asyncio.create_task(run_worker(), name="worker")
    stopper = asyncio.create_task(stop.wait(), name="stop_signal")
    await asyncio.wait([worker, stopper], return_when=asyncio.FIRST_COMPLETED)

    if stop.is_set():
        logger.info("Shutdown signal received, closing board and RPC pool")
    elif not worker.cancelled() and worker.exception() is not None:
        logger.opt(exception=worker.exception()).error("Worker exited with an error")
    else:
        logger.warning("Worker exited on its own")

    for task in (worker, stopper):
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
