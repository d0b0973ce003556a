"""API server: runs uvicorn inside the existing asyncio event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server() -> None:
    """Serve the FastAPI app until cancelled.

    Runs as an asyncio task next to the token board refresher, so the
    services in ``src.api.registry`` are shared without locking.
    """
    from src.api.app import create_app

    app = create_app()
    config = uvicorn.Config(
        app=app,
        host="0.0.0.0",
        port=settings.dashboard_port,
        log_level="debug" if settings.dashboard_debug else "warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"API starting on http://0.0.0.0:{settings.dashboard_port}")
    await server.serve()
